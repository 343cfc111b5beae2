from datetime import datetime, timedelta

from models import WalletInvitation
from sqlalchemy_db import DatabaseEngine


def test_create_wallet_makes_creator_owner(client, owner, wallet):
    assert wallet["balance"] == 0
    assert wallet["type"] == "shared"

    response = client.get(f"/api/wallets/{wallet['id']}/members", headers=owner["headers"])
    members = response.json()
    assert len(members) == 1
    assert members[0]["role"] == "owner"
    assert members[0]["user"]["id"] == owner["user"]["id"]


def test_list_wallets_includes_members_and_counts(client, owner, wallet, create_transaction):
    create_transaction(wallet["id"], 12.5)
    response = client.get("/api/wallets", headers=owner["headers"])
    assert response.status_code == 200
    wallets = response.json()
    assert len(wallets) == 1
    assert wallets[0]["counts"] == {"transactions": 1, "members": 1}
    assert wallets[0]["members"][0]["role"] == "owner"


def test_get_wallet_missing_then_forbidden(client, register, wallet):
    stranger = register()
    assert client.get("/api/wallets/nope", headers=stranger["headers"]).status_code == 404
    assert client.get(f"/api/wallets/{wallet['id']}", headers=stranger["headers"]).status_code == 403


def test_update_wallet_requires_editor(client, owner, wallet, add_member):
    contributor = add_member(wallet["id"], "contributor")
    response = client.put(
        f"/api/wallets/{wallet['id']}", json={"name": "Renamed"}, headers=contributor["headers"]
    )
    assert response.status_code == 403

    response = client.put(
        f"/api/wallets/{wallet['id']}", json={"name": "Renamed"}, headers=owner["headers"]
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"


def test_delete_wallet_owner_only(client, owner, wallet, add_member, create_transaction):
    manager = add_member(wallet["id"], "manager")
    create_transaction(wallet["id"], 20)
    assert client.delete(f"/api/wallets/{wallet['id']}", headers=manager["headers"]).status_code == 403

    assert client.delete(f"/api/wallets/{wallet['id']}", headers=owner["headers"]).status_code == 204
    assert client.get(f"/api/wallets/{wallet['id']}", headers=owner["headers"]).status_code == 404
    assert client.get("/api/transactions", headers=owner["headers"]).json() == []


def test_invitation_accept_adds_member(client, register, owner, wallet):
    invitee = register(email="Friend@Example.com")
    response = client.post(
        f"/api/wallets/{wallet['id']}/invitations",
        json={"email": "friend@example.com", "role": "contributor"},
        headers=owner["headers"],
    )
    assert response.status_code == 201
    invitation = response.json()
    assert invitation["status"] == "pending"

    pending = client.get("/api/invitations", headers=invitee["headers"]).json()
    assert [item["id"] for item in pending] == [invitation["id"]]
    assert pending[0]["wallet"]["name"] == "Household"

    response = client.post(f"/api/invitations/{invitation['id']}/accept", headers=invitee["headers"])
    assert response.status_code == 200
    assert response.json()["status"] == "accepted"

    members = client.get(f"/api/wallets/{wallet['id']}/members", headers=invitee["headers"]).json()
    roles = {member["user"]["email"]: member["role"] for member in members}
    assert roles["friend@example.com"] == "contributor"

    again = client.post(f"/api/invitations/{invitation['id']}/accept", headers=invitee["headers"])
    assert again.status_code == 400


def test_invitation_for_someone_else(client, register, owner, wallet):
    register(email="invited@example.com")
    intruder = register(email="intruder@example.com")
    invitation = client.post(
        f"/api/wallets/{wallet['id']}/invitations",
        json={"email": "invited@example.com", "role": "viewer"},
        headers=owner["headers"],
    ).json()
    response = client.post(f"/api/invitations/{invitation['id']}/accept", headers=intruder["headers"])
    assert response.status_code == 403


def test_duplicate_pending_invitation(client, owner, wallet):
    payload = {"email": "twice@example.com", "role": "viewer"}
    url = f"/api/wallets/{wallet['id']}/invitations"
    assert client.post(url, json=payload, headers=owner["headers"]).status_code == 201
    assert client.post(url, json=payload, headers=owner["headers"]).status_code == 400


def test_expired_invitation_is_marked_expired(client, register, owner, wallet):
    invitee = register(email="late@example.com")
    invitation = client.post(
        f"/api/wallets/{wallet['id']}/invitations",
        json={"email": "late@example.com", "role": "viewer"},
        headers=owner["headers"],
    ).json()

    with DatabaseEngine().session_scope() as session:
        row = session.get(WalletInvitation, invitation["id"])
        row.expires_at = datetime.now() - timedelta(days=1)
        session.add(row)
        session.commit()

    assert client.get("/api/invitations", headers=invitee["headers"]).json() == []
    response = client.post(f"/api/invitations/{invitation['id']}/accept", headers=invitee["headers"])
    assert response.status_code == 400

    invitations = client.get(
        f"/api/wallets/{wallet['id']}/invitations", headers=owner["headers"]
    ).json()
    assert invitations[0]["status"] == "expired"


def test_decline_invitation(client, register, owner, wallet):
    invitee = register(email="no@example.com")
    invitation = client.post(
        f"/api/wallets/{wallet['id']}/invitations",
        json={"email": "no@example.com", "role": "viewer"},
        headers=owner["headers"],
    ).json()
    response = client.post(f"/api/invitations/{invitation['id']}/decline", headers=invitee["headers"])
    assert response.status_code == 200
    assert response.json()["status"] == "declined"
    assert client.get(f"/api/wallets/{wallet['id']}", headers=invitee["headers"]).status_code == 403


def test_update_member_role(client, owner, wallet, add_member):
    viewer = add_member(wallet["id"], "viewer")
    url = f"/api/wallets/{wallet['id']}/members/{viewer['user']['id']}/role"

    response = client.put(url, json={"role": "superuser"}, headers=owner["headers"])
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid role"

    response = client.put(url, json={"role": "manager"}, headers=owner["headers"])
    assert response.status_code == 200
    assert response.json()["role"] == "manager"


def test_manager_cannot_grant_owner(client, owner, wallet, add_member):
    manager = add_member(wallet["id"], "manager")
    viewer = add_member(wallet["id"], "viewer")
    url = f"/api/wallets/{wallet['id']}/members/{viewer['user']['id']}/role"
    response = client.put(url, json={"role": "owner"}, headers=manager["headers"])
    assert response.status_code == 403

    response = client.post(
        f"/api/wallets/{wallet['id']}/invitations",
        json={"email": "boss@example.com", "role": "owner"},
        headers=manager["headers"],
    )
    assert response.status_code == 403


def test_last_owner_is_protected(client, owner, wallet):
    url = f"/api/wallets/{wallet['id']}/members/{owner['user']['id']}"
    response = client.put(f"{url}/role", json={"role": "viewer"}, headers=owner["headers"])
    assert response.status_code == 400
    assert client.delete(url, headers=owner["headers"]).status_code == 400


def test_remove_member(client, owner, wallet, add_member):
    viewer = add_member(wallet["id"], "viewer")
    url = f"/api/wallets/{wallet['id']}/members/{viewer['user']['id']}"

    assert client.delete(url, headers=viewer["headers"]).status_code == 403
    assert client.delete(url, headers=owner["headers"]).status_code == 204
    assert client.get(f"/api/wallets/{wallet['id']}", headers=viewer["headers"]).status_code == 403


def test_registered_invitee_is_notified(client, register, owner, wallet):
    invitee = register(email="known@example.com")
    client.post(
        f"/api/wallets/{wallet['id']}/invitations",
        json={"email": "known@example.com", "role": "manager"},
        headers=owner["headers"],
    )
    notifications = client.get("/api/notifications", headers=invitee["headers"]).json()["notifications"]
    assert [n["type"] for n in notifications] == ["invitation"]
    assert "Household" in notifications[0]["message"]


def test_update_wallet_rejects_null_fields(client, owner, wallet):
    for field in ("name", "type", "currency", "is_archived"):
        response = client.put(
            f"/api/wallets/{wallet['id']}", json={field: None}, headers=owner["headers"]
        )
        assert response.status_code == 400
        assert response.json()["detail"] == f"{field} cannot be null"
    assert client.get(f"/api/wallets/{wallet['id']}", headers=owner["headers"]).json()["name"] == "Household"


def test_wallet_sub_routes_missing_wallet(client, owner):
    assert client.get("/api/wallets/nope/members", headers=owner["headers"]).status_code == 404
    assert client.get("/api/wallets/nope/invitations", headers=owner["headers"]).status_code == 404
    response = client.post(
        "/api/transactions",
        json={"wallet_id": "nope", "category_id": "any", "type": "expense", "amount": 5},
        headers=owner["headers"],
    )
    assert response.status_code == 404
