import pytest
from sqlalchemy.exc import OperationalError

TODAY = "2026-10-15"


async def create(client, amount="12.50", description="Lunch at cafe", category="Food", day=TODAY):
    response = await client.post("/api/expenses", json={
        "amount": amount,
        "description": description,
        "category": category,
        "date": day,
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_converts_dollar_string_to_cents(client):
    created = await create(client, amount="12.50")
    assert created["amount"] == 1250
    assert created["createdAt"]

    response = await client.get(f"/api/expenses/{created['id']}")
    assert response.status_code == 200
    assert response.json()["amount"] == 1250
    assert response.json()["date"] == TODAY


@pytest.mark.asyncio
async def test_create_accepts_cents_number(client):
    created = await create(client, amount=5500)
    assert created["amount"] == 5500


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["0", "-1.00", 0, -100, "abc"])
async def test_create_rejects_bad_amount(client, amount):
    response = await client.post("/api/expenses", json={
        "amount": amount, "description": "x", "category": "Food", "date": TODAY,
    })
    assert response.status_code == 400
    assert response.json()["field"] == "amount"
    assert response.json()["message"]


@pytest.mark.asyncio
async def test_create_requires_description(client):
    response = await client.post("/api/expenses", json={
        "amount": "3.00", "category": "Food", "date": TODAY,
    })
    assert response.status_code == 400
    assert response.json()["field"] == "description"


@pytest.mark.asyncio
async def test_list_is_newest_first_and_searchable(client):
    old = await create(client, description="Groceries", day="2026-10-01")
    new = await create(client, description="Movie tickets", category="Entertainment")

    response = await client.get("/api/expenses")
    assert [e["id"] for e in response.json()] == [new["id"], old["id"]]

    response = await client.get("/api/expenses", params={"search": "MOVIE"})
    assert [e["id"] for e in response.json()] == [new["id"]]


@pytest.mark.asyncio
async def test_get_missing_expense(client):
    response = await client.get("/api/expenses/999")
    assert response.status_code == 404
    assert response.json() == {"message": "Expense not found"}


@pytest.mark.asyncio
async def test_update_partial(client):
    created = await create(client)

    response = await client.put(f"/api/expenses/{created['id']}", json={"category": "Miscellaneous"})
    assert response.status_code == 200
    body = response.json()
    assert body["category"] == "Miscellaneous"
    assert body["amount"] == 1250
    assert body["description"] == "Lunch at cafe"
    assert body["createdAt"] == created["createdAt"]


@pytest.mark.asyncio
async def test_update_validation_and_missing(client):
    created = await create(client)

    response = await client.put(f"/api/expenses/{created['id']}", json={"amount": "-5"})
    assert response.status_code == 400
    assert response.json()["field"] == "amount"

    response = await client.put(f"/api/expenses/{created['id']}", json={"description": None})
    assert response.status_code == 400

    response = await client.put("/api/expenses/999", json={"description": "Dinner"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_existing_and_missing(client):
    created = await create(client)

    response = await client.delete(f"/api/expenses/{created['id']}")
    assert response.status_code == 204
    assert (await client.get(f"/api/expenses/{created['id']}")).status_code == 404

    response = await client.delete("/api/expenses/424242")
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_duplicate_expense(client):
    created = await create(client, day="2026-10-01")

    response = await client.post(f"/api/expenses/{created['id']}/duplicate", params={"now": TODAY})
    assert response.status_code == 201
    copy = response.json()
    assert copy["id"] != created["id"]
    assert copy["date"] == TODAY
    assert copy["amount"] == created["amount"]

    response = await client.post("/api/expenses/999/duplicate")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_budget_upsert(client):
    response = await client.get("/api/budgets/2026-10")
    assert response.status_code == 404
    assert response.json() == {"message": "Budget not found"}

    first = await client.post("/api/budgets", json={"month": "2026-10", "amount": 5000})
    second = await client.post("/api/budgets", json={"month": "2026-10", "amount": 7000})
    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]

    response = await client.get("/api/budgets/2026-10")
    assert response.json()["amount"] == 7000


@pytest.mark.asyncio
async def test_budget_accepts_dollar_string(client):
    response = await client.post("/api/budgets", json={"month": "2026-11", "amount": "250.00"})
    assert response.json()["amount"] == 25000


@pytest.mark.asyncio
async def test_budget_rejects_bad_month(client):
    response = await client.post("/api/budgets", json={"month": "2026-13", "amount": 5000})
    assert response.status_code == 400
    assert response.json()["field"] == "month"


@pytest.mark.asyncio
async def test_dashboard_scenario(client):
    await create(client, amount=1250, category="Food")
    await create(client, amount=5500, description="Movie tickets", category="Entertainment")

    response = await client.get("/api/dashboard", params={"now": TODAY})
    assert response.status_code == 200
    board = response.json()

    assert board["totals"] == {"today": 6750, "week": 6750, "month": 6750}
    assert board["category_breakdown"] == {"Food": 1250, "Entertainment": 5500}
    assert {"name": "Food", "value": 12.5} in board["category_chart"]
    assert board["monthly_insights"]["top_category"] == {"name": "Entertainment", "amount": 5500}
    assert board["monthly_insights"]["daily_average"] == 450.0
    assert len(board["weekly_trend"]) == 43
    assert board["weekly_trend"][-1] == {"label": "Thu", "key": TODAY, "total": 67.5}
    assert [p["key"] for p in board["monthly_trend"]][-1] == "2026-10"
    assert board["budget"]["budget"] == 0
    assert board["budget"]["progress_fraction"] == 0


@pytest.mark.asyncio
async def test_dashboard_over_budget(client):
    await client.post("/api/budgets", json={"month": "2026-10", "amount": 10000})
    await create(client, amount=12000, category="Amenities", description="Rent share")

    board = (await client.get("/api/dashboard", params={"now": TODAY})).json()

    assert board["budget"]["month"] == "2026-10"
    assert board["budget"]["remaining"] == -2000
    assert board["budget"]["label"] == "Over by: $20.00"
    assert board["budget"]["progress_fraction"] == 1.0
    assert board["budget"]["over_budget"] is True


@pytest.mark.asyncio
async def test_history_groups_by_month(client):
    await create(client, amount=1000, day="2026-09-20", description="Groceries")
    await create(client, amount=500, day=TODAY)
    await create(client, amount=700, day="2026-10-02", description="Snacks")

    groups = (await client.get("/api/history")).json()

    assert [g["key"] for g in groups] == ["2026-10", "2026-09"]
    assert groups[0]["label"] == "October 2026"
    assert groups[0]["total"] == 1200
    assert [e["date"] for e in groups[0]["expenses"]] == [TODAY, "2026-10-02"]
    assert groups[0]["expenses"][0]["createdAt"]

    groups = (await client.get("/api/history", params={"search": "groc"})).json()
    assert [g["key"] for g in groups] == ["2026-09"]


@pytest.mark.asyncio
async def test_grouped_by_day(client):
    await create(client, amount=500, day=TODAY)
    await create(client, amount=700, day="2026-10-14")
    await create(client, amount=900, day="2026-10-12")

    groups = (await client.get("/api/expenses/grouped", params={"now": TODAY})).json()

    assert [g["label"] for g in groups] == ["Today", "Yesterday", "Monday, Oct 12"]


@pytest.mark.asyncio
async def test_export_csv(client):
    await create(client, amount="12.50")

    response = await client.get("/api/expenses/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=\"expenses_" in response.headers["content-disposition"]

    lines = response.text.splitlines()
    assert lines[0] == "Date,Amount,Category,Description"
    assert lines[1] == f"{TODAY},12.50,Food,Lunch at cafe"


@pytest.mark.asyncio
async def test_health_and_root(client):
    health = (await client.get("/health")).json()
    assert health["status"] == "healthy"
    assert health["expenses"] == 0

    root = (await client.get("/api")).json()
    assert "Food" in root["categories"]


@pytest.mark.asyncio
async def test_database_errors_become_500(app, client, monkeypatch):
    async def broken_list():
        raise OperationalError("SELECT", {}, Exception("database is gone"))

    monkeypatch.setattr(app.state.expense_store, "list", broken_list)

    response = await client.get("/api/expenses")
    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


@pytest.mark.asyncio
async def test_create_rejects_amount_too_large(client):
    response = await client.post("/api/expenses", json={
        "amount": "100000000000000000000", "description": "x", "category": "Food", "date": TODAY,
    })
    assert response.status_code == 400
    assert response.json() == {"message": "Amount is too large", "field": "amount"}

    response = await client.post("/api/budgets", json={"month": "2026-10", "amount": 2**40})
    assert response.status_code == 400
    assert response.json()["field"] == "amount"


@pytest.mark.asyncio
async def test_expense_id_out_of_range(client):
    for method in ("GET", "DELETE"):
        response = await client.request(method, f"/api/expenses/{2**70}")
        assert response.status_code == 400
        assert response.json()["field"] == "expense_id"

    response = await client.put(f"/api/expenses/{2**70}", json={"description": "Dinner"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_long_category_is_accepted(client):
    category = "Home improvement and garden supplies " * 5
    created = await create(client, category=category)
    assert created["category"] == category.strip()


@pytest.mark.asyncio
async def test_dashboard_in_first_month_of_calendar(client):
    response = await client.get("/api/dashboard", params={"now": "0001-01-15"})
    assert response.status_code == 200
    board = response.json()

    assert board["weekly_trend"][0]["key"] == "0001-01-01"
    assert len(board["weekly_trend"]) == 15
    assert [p["key"] for p in board["monthly_trend"]] == ["0001-01"]
