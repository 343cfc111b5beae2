from constants import DEFAULT_EXPENSE_CATEGORIES, DEFAULT_INCOME_CATEGORIES


def test_defaults_are_seeded_on_startup(client, owner):
    categories = client.get("/api/categories", headers=owner["headers"]).json()
    assert len(categories) == len(DEFAULT_INCOME_CATEGORIES) + len(DEFAULT_EXPENSE_CATEGORIES)
    names = [category["name"] for category in categories]
    assert names == sorted(names)

    income = client.get("/api/categories?type=income", headers=owner["headers"]).json()
    assert {category["name"] for category in income} == {
        name for name, _, _ in DEFAULT_INCOME_CATEGORIES
    }


def test_seed_is_idempotent(client, owner):
    response = client.post("/api/categories/seed", headers=owner["headers"])
    assert response.status_code == 200
    assert response.json()["created"] == 0


def test_custom_category_visibility(client, owner, register):
    response = client.post(
        "/api/categories", json={"name": "Pets", "type": "expense"}, headers=owner["headers"]
    )
    assert response.status_code == 201
    assert response.json()["is_default"] is False

    other = register()
    names = [c["name"] for c in client.get("/api/categories", headers=other["headers"]).json()]
    assert "Pets" not in names


def test_update_and_delete_own_category(client, owner):
    category = client.post(
        "/api/categories", json={"name": "Pets", "type": "expense"}, headers=owner["headers"]
    ).json()
    response = client.put(
        f"/api/categories/{category['id']}", json={"name": "Pet care"}, headers=owner["headers"]
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Pet care"

    assert client.delete(f"/api/categories/{category['id']}", headers=owner["headers"]).status_code == 204


def test_category_in_use_cannot_be_deleted(client, owner, wallet):
    category = client.post(
        "/api/categories", json={"name": "Pets", "type": "expense"}, headers=owner["headers"]
    ).json()
    client.post(
        "/api/transactions",
        json={"wallet_id": wallet["id"], "category_id": category["id"], "type": "expense", "amount": 9},
        headers=owner["headers"],
    )
    response = client.delete(f"/api/categories/{category['id']}", headers=owner["headers"])
    assert response.status_code == 400


def test_default_categories_are_read_only(client, owner, category_id):
    salary = category_id("Salary")
    response = client.put(f"/api/categories/{salary}", json={"name": "Wages"}, headers=owner["headers"])
    assert response.status_code == 403
    assert client.delete(f"/api/categories/{salary}", headers=owner["headers"]).status_code == 403


def test_other_users_category_is_not_found(client, owner, register):
    category = client.post(
        "/api/categories", json={"name": "Pets", "type": "expense"}, headers=owner["headers"]
    ).json()
    other = register()
    response = client.put(
        f"/api/categories/{category['id']}", json={"name": "Mine"}, headers=other["headers"]
    )
    assert response.status_code == 404


def test_update_rejects_null_name(client, owner):
    category = client.post(
        "/api/categories", json={"name": "Pets", "type": "expense"}, headers=owner["headers"]
    ).json()
    response = client.put(
        f"/api/categories/{category['id']}", json={"name": None}, headers=owner["headers"]
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "name cannot be null"
