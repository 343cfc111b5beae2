from models import Alert
from sqlalchemy_db import DatabaseEngine


def create_alert(client, headers, **fields):
    payload = {
        "name": "Monthly cap",
        "type": "spending_limit",
        "conditions": {"amount": 100, "period_days": 30},
        **fields,
    }
    return client.post("/api/alerts", json=payload, headers=headers)


def test_alert_crud(client, owner):
    response = create_alert(client, owner["headers"])
    assert response.status_code == 201
    alert = response.json()
    assert alert["conditions"]["amount"] == 100

    assert [a["id"] for a in client.get("/api/alerts", headers=owner["headers"]).json()] == [alert["id"]]

    response = client.put(
        f"/api/alerts/{alert['id']}", json={"is_active": False}, headers=owner["headers"]
    )
    assert response.json()["is_active"] is False

    assert client.delete(f"/api/alerts/{alert['id']}", headers=owner["headers"]).status_code == 204
    assert client.get("/api/alerts", headers=owner["headers"]).json() == []


def test_spending_limit_requires_amount(client, owner):
    response = create_alert(client, owner["headers"], conditions={"period_days": 7})
    assert response.status_code == 400


def test_alert_wallet_must_belong_to_user(client, register, wallet):
    other = register()
    response = create_alert(client, other["headers"], wallet_id=wallet["id"])
    assert response.status_code == 403


def test_alerts_are_private(client, owner, register):
    alert = create_alert(client, owner["headers"]).json()
    other = register()
    assert client.put(
        f"/api/alerts/{alert['id']}", json={"name": "Mine"}, headers=other["headers"]
    ).status_code == 404


def test_spending_limit_fires_notification(client, owner, wallet, create_transaction):
    alert = create_alert(client, owner["headers"], wallet_id=wallet["id"]).json()

    create_transaction(wallet["id"], 60)
    body = client.get("/api/notifications", headers=owner["headers"]).json()
    assert body["total"] == 0

    create_transaction(wallet["id"], 50)
    notifications = client.get("/api/notifications", headers=owner["headers"]).json()["notifications"]
    assert [n["type"] for n in notifications] == ["budget_alert"]
    assert notifications[0]["priority"] == "high"
    assert notifications[0]["data"]["alert_id"] == alert["id"]

    alerts = client.get("/api/alerts", headers=owner["headers"]).json()
    assert alerts[0]["last_triggered"] is not None


def test_income_does_not_fire_alert(client, owner, wallet, create_transaction):
    create_alert(client, owner["headers"])
    create_transaction(wallet["id"], 500, type="income", category="Salary")
    assert client.get("/api/notifications", headers=owner["headers"]).json()["total"] == 0


def test_inactive_alert_does_not_fire(client, owner, wallet, create_transaction):
    create_alert(client, owner["headers"], is_active=False)
    create_transaction(wallet["id"], 500)
    assert client.get("/api/notifications", headers=owner["headers"]).json()["total"] == 0


def test_period_days_must_be_bounded_whole_number(client, owner):
    for period_days in ("abc", 0, 10**9, 7.5):
        response = create_alert(
            client, owner["headers"], conditions={"amount": 10, "period_days": period_days}
        )
        assert response.status_code == 400

    alert = create_alert(client, owner["headers"]).json()
    response = client.put(
        f"/api/alerts/{alert['id']}",
        json={"conditions": {"amount": 10, "period_days": "abc"}},
        headers=owner["headers"],
    )
    assert response.status_code == 400


def test_malformed_stored_alert_is_skipped(client, owner, wallet, create_transaction):
    broken = create_alert(client, owner["headers"], name="Broken").json()
    working = create_alert(client, owner["headers"], conditions={"amount": 10}).json()
    with DatabaseEngine().session_scope() as session:
        row = session.get(Alert, broken["id"])
        row.conditions = {"amount": 10, "period_days": "abc"}
        session.add(row)
        session.commit()

    create_transaction(wallet["id"], 50)
    balance = client.get(f"/api/wallets/{wallet['id']}", headers=owner["headers"]).json()["balance"]
    assert balance == -50

    notifications = client.get("/api/notifications", headers=owner["headers"]).json()["notifications"]
    assert [n["data"]["alert_id"] for n in notifications] == [working["id"]]


def test_update_rejects_null_for_required_fields(client, owner):
    alert = create_alert(client, owner["headers"]).json()
    for field in ("name", "is_active"):
        response = client.put(
            f"/api/alerts/{alert['id']}", json={field: None}, headers=owner["headers"]
        )
        assert response.status_code == 400
        assert response.json()["detail"] == f"{field} cannot be null"
