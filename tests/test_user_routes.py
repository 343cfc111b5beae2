def test_profile_includes_default_preferences(client, owner):
    response = client.get("/api/users/me", headers=owner["headers"])
    assert response.status_code == 200
    preferences = response.json()["preferences"]
    assert preferences["currency"] == "USD"
    assert preferences["timezone"] == "UTC"
    assert preferences["language"] == "en"
    assert preferences["theme"] == "light"


def test_update_profile(client, owner, register):
    response = client.patch(
        "/api/users/me", json={"first_name": "Ana", "last_name": "Silva"}, headers=owner["headers"]
    )
    assert response.status_code == 200
    assert response.json()["first_name"] == "Ana"

    register(email="taken@example.com")
    response = client.patch(
        "/api/users/me", json={"email": "taken@example.com"}, headers=owner["headers"]
    )
    assert response.status_code == 400


def test_preferences_defaults_and_upsert(client, owner):
    defaults = client.get("/api/users/me/preferences", headers=owner["headers"]).json()
    assert defaults["ai_preferences"] == {"categorization": True, "insights": True}
    assert defaults["notification_preferences"] == {"email": True, "push": True}
    assert defaults["privacy_settings"] == {"analytics": True, "data_sharing": False}

    response = client.patch(
        "/api/users/me/preferences",
        json={"currency": "eur", "theme": "dark", "ai_preferences": {"insights": False}},
        headers=owner["headers"],
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["currency"] == "EUR"
    assert updated["theme"] == "dark"
    assert updated["ai_preferences"]["insights"] is False

    stored = client.get("/api/users/me/preferences", headers=owner["headers"]).json()
    assert stored["theme"] == "dark"
    assert stored["language"] == "en"


def test_empty_preferences_update(client, owner):
    response = client.patch("/api/users/me/preferences", json={}, headers=owner["headers"])
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid preferences data"


def test_reset_requires_confirmation(client, owner):
    response = client.post(
        "/api/users/me/reset", json={"confirmation_text": "yes"}, headers=owner["headers"]
    )
    assert response.status_code == 400


def test_reset_deletes_financial_data(client, owner, wallet, create_transaction):
    create_transaction(wallet["id"], 25)
    client.post("/api/goals", json={"name": "Bike", "target_amount": 300}, headers=owner["headers"])
    client.post(
        "/api/categories", json={"name": "Pets", "type": "expense"}, headers=owner["headers"]
    )
    client.patch("/api/users/me/preferences", json={"theme": "dark"}, headers=owner["headers"])

    response = client.post(
        "/api/users/me/reset",
        json={"confirmation_text": "delete-all-data"},
        headers=owner["headers"],
    )
    assert response.status_code == 200
    assert response.json()["reset_at"]

    headers = owner["headers"]
    assert client.get("/api/wallets", headers=headers).json() == []
    assert client.get("/api/transactions", headers=headers).json() == []
    assert client.get("/api/goals", headers=headers).json() == []
    assert client.get("/api/notifications", headers=headers).json()["total"] == 0
    names = [c["name"] for c in client.get("/api/categories", headers=headers).json()]
    assert "Pets" not in names
    assert "Salary" in names
    assert client.get("/api/users/me/preferences", headers=headers).json()["theme"] == "light"
    assert client.get("/api/auth/user", headers=headers).status_code == 200
