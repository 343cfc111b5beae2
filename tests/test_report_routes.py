from datetime import datetime


def seed(wallet_id, create_transaction):
    create_transaction(wallet_id, 2000, type="income", category="Salary")
    create_transaction(wallet_id, 300, category="Food & Dining")
    create_transaction(wallet_id, 100, category="Travel")
    create_transaction(wallet_id, 100, category="Food & Dining")


def test_financial_summary_across_wallets(client, owner, wallet, create_transaction):
    second = client.post("/api/wallets", json={"name": "Savings"}, headers=owner["headers"]).json()
    seed(wallet["id"], create_transaction)
    create_transaction(second["id"], 50, category="Shopping")

    summary = client.get("/api/reports/financial-summary", headers=owner["headers"]).json()
    assert summary["total_income"] == 2000
    assert summary["total_expenses"] == 550
    assert summary["net_cash_flow"] == 1450
    assert summary["transaction_count"] == 5
    assert summary["wallet_count"] == 2


def test_financial_summary_excludes_other_users(client, owner, register, wallet, create_transaction):
    seed(wallet["id"], create_transaction)
    other = register()
    summary = client.get("/api/reports/financial-summary", headers=other["headers"]).json()
    assert summary["transaction_count"] == 0
    assert summary["wallet_count"] == 0


def test_spending_analysis(client, owner, wallet, create_transaction):
    seed(wallet["id"], create_transaction)
    analysis = client.get("/api/reports/spending-analysis", headers=owner["headers"]).json()
    assert analysis["total_expenses"] == 500
    top = analysis["top_categories"]
    assert top[0]["category"] == "Food & Dining"
    assert top[0]["percentage"] == 80


def test_category_breakdown_by_type(client, owner, wallet, create_transaction):
    seed(wallet["id"], create_transaction)
    income = client.get(
        "/api/reports/category-breakdown?type=income", headers=owner["headers"]
    ).json()
    assert income["type"] == "income"
    assert [item["category"] for item in income["categories"]] == ["Salary"]


def test_trends(client, owner, wallet, create_transaction):
    seed(wallet["id"], create_transaction)
    body = client.get("/api/reports/trends?months=3", headers=owner["headers"]).json()
    trends = body["trends"]
    assert len(trends) == 3
    assert trends[-1]["month"] == datetime.now().strftime("%Y-%m")
    assert trends[-1]["income"] == 2000
    assert trends[-1]["net"] == 1500
    assert trends[0]["expenses"] == 0


def test_trends_rejects_out_of_range_months(client, owner):
    response = client.get("/api/reports/trends?months=0", headers=owner["headers"])
    assert response.status_code == 400


def test_saved_reports(client, owner, register):
    response = client.post(
        "/api/reports/saved",
        json={"name": "Monthly", "type": "financial_summary", "config": {"months": 1}},
        headers=owner["headers"],
    )
    assert response.status_code == 201
    report = response.json()

    public = client.post(
        "/api/reports/saved",
        json={"name": "Shared", "type": "trends", "is_public": True},
        headers=owner["headers"],
    ).json()

    other = register()
    visible = [r["id"] for r in client.get("/api/reports/saved", headers=other["headers"]).json()]
    assert visible == [public["id"]]
    assert client.delete(f"/api/reports/saved/{report['id']}", headers=other["headers"]).status_code == 404

    assert client.delete(f"/api/reports/saved/{report['id']}", headers=owner["headers"]).status_code == 204
    remaining = [r["id"] for r in client.get("/api/reports/saved", headers=owner["headers"]).json()]
    assert remaining == [public["id"]]
