def wallet_balance(client, wallet_id, headers):
    return client.get(f"/api/wallets/{wallet_id}", headers=headers).json()["balance"]


def test_create_transaction_updates_balance(client, owner, wallet, create_transaction):
    income = create_transaction(wallet["id"], 1000, type="income", category="Salary")
    assert income["amount"] == 1000
    assert income["category"]["name"] == "Salary"
    assert income["wallet"]["id"] == wallet["id"]
    assert income["creator"]["id"] == owner["user"]["id"]

    create_transaction(wallet["id"], 250.75, description="Groceries")
    assert wallet_balance(client, wallet["id"], owner["headers"]) == 749.25


def test_update_transaction_reconciles_balance(client, owner, wallet, create_transaction):
    expense = create_transaction(wallet["id"], 100)
    assert wallet_balance(client, wallet["id"], owner["headers"]) == -100

    response = client.put(
        f"/api/transactions/{expense['id']}", json={"amount": 40}, headers=owner["headers"]
    )
    assert response.status_code == 200
    assert response.json()["amount"] == 40
    assert wallet_balance(client, wallet["id"], owner["headers"]) == -40

    response = client.put(
        f"/api/transactions/{expense['id']}", json={"type": "income"}, headers=owner["headers"]
    )
    assert response.status_code == 200
    assert wallet_balance(client, wallet["id"], owner["headers"]) == 40


def test_delete_transaction_reverses_balance(client, owner, wallet, create_transaction):
    expense = create_transaction(wallet["id"], 60)
    create_transaction(wallet["id"], 10)
    response = client.delete(f"/api/transactions/{expense['id']}", headers=owner["headers"])
    assert response.status_code == 204
    assert wallet_balance(client, wallet["id"], owner["headers"]) == -10
    assert client.get(f"/api/transactions/{expense['id']}", headers=owner["headers"]).status_code == 404


def test_viewer_cannot_create_transaction(client, wallet, add_member, category_id):
    viewer = add_member(wallet["id"], "viewer")
    response = client.post(
        "/api/transactions",
        json={
            "wallet_id": wallet["id"],
            "category_id": category_id("Shopping"),
            "type": "expense",
            "amount": 5,
        },
        headers=viewer["headers"],
    )
    assert response.status_code == 403


def test_contributor_can_create_but_not_delete(client, owner, wallet, add_member, create_transaction):
    contributor = add_member(wallet["id"], "contributor")
    created = create_transaction(wallet["id"], 15, headers=contributor["headers"])
    response = client.delete(f"/api/transactions/{created['id']}", headers=contributor["headers"])
    assert response.status_code == 403
    assert wallet_balance(client, wallet["id"], owner["headers"]) == -15


def test_get_transaction_not_found_before_forbidden(client, register, wallet, create_transaction):
    created = create_transaction(wallet["id"], 5)
    stranger = register()
    assert client.get("/api/transactions/missing", headers=stranger["headers"]).status_code == 404
    assert client.get(f"/api/transactions/{created['id']}", headers=stranger["headers"]).status_code == 403


def test_invalid_amount_and_unknown_category(client, owner, wallet, category_id):
    payload = {
        "wallet_id": wallet["id"],
        "category_id": category_id("Travel"),
        "type": "expense",
        "amount": 0,
    }
    assert client.post("/api/transactions", json=payload, headers=owner["headers"]).status_code == 400

    payload.update(amount=10, category_id="unknown")
    response = client.post("/api/transactions", json=payload, headers=owner["headers"])
    assert response.status_code == 400
    assert response.json()["detail"] == "Category not found"


def test_wallet_transactions_are_newest_first(client, owner, wallet, create_transaction):
    create_transaction(wallet["id"], 1, date="2024-01-01T10:00:00")
    create_transaction(wallet["id"], 2, date="2024-03-01T10:00:00")
    create_transaction(wallet["id"], 3, date="2024-02-01T10:00:00")

    response = client.get(f"/api/wallets/{wallet['id']}/transactions", headers=owner["headers"])
    assert [item["amount"] for item in response.json()] == [2, 3, 1]

    page = client.get(
        f"/api/wallets/{wallet['id']}/transactions?limit=1&offset=1", headers=owner["headers"]
    ).json()
    assert [item["amount"] for item in page] == [3]

    recent = client.get(
        f"/api/wallets/{wallet['id']}/transactions?days=7", headers=owner["headers"]
    ).json()
    assert recent == []


def test_my_transactions(client, owner, wallet, add_member, create_transaction):
    contributor = add_member(wallet["id"], "contributor")
    create_transaction(wallet["id"], 5)
    create_transaction(wallet["id"], 7, headers=contributor["headers"])
    mine = client.get("/api/transactions", headers=contributor["headers"]).json()
    assert [item["amount"] for item in mine] == [7]


def test_wallet_summary_and_category_spending(client, owner, wallet, create_transaction):
    create_transaction(wallet["id"], 500, type="income", category="Salary")
    create_transaction(wallet["id"], 120, category="Food & Dining")
    create_transaction(wallet["id"], 30, category="Travel")
    create_transaction(wallet["id"], 80, category="Food & Dining")

    summary = client.get(f"/api/wallets/{wallet['id']}/summary", headers=owner["headers"]).json()
    assert summary["total_income"] == 500
    assert summary["total_expenses"] == 230
    assert summary["balance"] == 270
    assert summary["transaction_count"] == 4

    spending = client.get(
        f"/api/wallets/{wallet['id']}/category-spending", headers=owner["headers"]
    ).json()
    assert [(row["category"]["name"], row["total"]) for row in spending] == [
        ("Food & Dining", 200),
        ("Travel", 30),
    ]


def test_summary_rejects_inverted_range(client, owner, wallet):
    response = client.get(
        f"/api/wallets/{wallet['id']}/summary?start_date=2024-02-01T00:00:00&end_date=2024-01-01T00:00:00",
        headers=owner["headers"],
    )
    assert response.status_code == 400
