def create_goal(client, headers, **fields):
    payload = {"name": "Vacation", "target_amount": 1000, **fields}
    response = client.post("/api/goals", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def notification_types(client, headers):
    body = client.get("/api/notifications", headers=headers).json()
    return [notification["type"] for notification in body["notifications"]]


def test_create_goal_notifies(client, owner):
    goal = create_goal(client, owner["headers"])
    assert goal["current_amount"] == 0
    assert goal["progress"] == 0
    assert goal["is_active"] is True
    assert notification_types(client, owner["headers"]) == ["goal_created"]


def test_contribute_until_achieved(client, owner):
    goal = create_goal(client, owner["headers"])
    url = f"/api/goals/{goal['id']}/contribute"

    partial = client.post(url, json={"amount": 400}, headers=owner["headers"]).json()
    assert partial["current_amount"] == 400
    assert partial["progress"] == 40
    assert partial["achieved_at"] is None

    done = client.post(url, json={"amount": 600}, headers=owner["headers"]).json()
    assert done["current_amount"] == 1000
    assert done["achieved_at"] is not None
    assert done["is_active"] is False

    body = client.get("/api/notifications", headers=owner["headers"]).json()
    achieved = [n for n in body["notifications"] if n["type"] == "goal_achieved"]
    assert len(achieved) == 1
    assert achieved[0]["priority"] == "high"

    client.post(url, json={"amount": 50}, headers=owner["headers"])
    assert notification_types(client, owner["headers"]).count("goal_achieved") == 1


def test_invalid_contribution(client, owner):
    goal = create_goal(client, owner["headers"])
    for payload in ({"amount": 0}, {"amount": -5}, {}):
        response = client.post(
            f"/api/goals/{goal['id']}/contribute", json=payload, headers=owner["headers"]
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid contribution amount"


def test_goals_are_private(client, owner, register):
    goal = create_goal(client, owner["headers"])
    other = register()
    assert client.get(f"/api/goals/{goal['id']}", headers=other["headers"]).status_code == 404
    assert client.delete(f"/api/goals/{goal['id']}", headers=other["headers"]).status_code == 404
    assert client.get("/api/goals", headers=other["headers"]).json() == []


def test_update_and_delete_goal(client, owner):
    goal = create_goal(client, owner["headers"])
    response = client.patch(
        f"/api/goals/{goal['id']}", json={"name": "Trip", "priority": "high"}, headers=owner["headers"]
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Trip"
    assert response.json()["priority"] == "high"

    response = client.put(
        f"/api/goals/{goal['id']}", json={"target_amount": 500}, headers=owner["headers"]
    )
    assert response.json()["target_amount"] == 500

    response = client.delete(f"/api/goals/{goal['id']}", headers=owner["headers"])
    assert response.json() == {"message": "Goal deleted successfully"}
    assert client.get("/api/goals", headers=owner["headers"]).json() == []


def test_goal_wallet_must_be_visible(client, owner, register, wallet):
    other = register()
    response = client.post(
        "/api/goals",
        json={"name": "Car", "target_amount": 100, "wallet_id": wallet["id"]},
        headers=other["headers"],
    )
    assert response.status_code == 403
