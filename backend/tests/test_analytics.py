"""Analytics API tests."""

from decimal import Decimal

import pytest


async def _add(client, on, amount, txn_type="EXPENSE", category_id=None, description="txn"):
    response = await client.post(
        "/api/v1/transactions",
        json={
            "date": on,
            "description": description,
            "amount": amount,
            "type": txn_type,
            "category_id": category_id,
        },
    )
    assert response.status_code == 201, response.text


@pytest.mark.asyncio
async def test_monthly_overview(client, category_ids):
    await _add(client, "2026-10-05", "100", category_id=category_ids["Food"])
    await _add(client, "2026-10-01", "500", txn_type="INCOME")
    await _add(client, "2026-08-20", "50", category_id=category_ids["Food"])
    await _add(client, "2026-07-31", "75")  # before the window

    response = await client.get("/api/v1/analytics/monthly", params={"months": 3, "as_of": "2026-10-19"})

    assert response.status_code == 200
    body = response.json()
    assert body["months"] == 3
    assert body["as_of"] == "2026-10-19"
    assert [m["period"] for m in body["data"]] == ["2026-08", "2026-09", "2026-10"]
    assert [m["month"] for m in body["data"]] == ["Aug", "Sep", "Oct"]

    august, september, october = body["data"]
    assert Decimal(october["income"]) == 500
    assert Decimal(october["expense"]) == 100
    assert Decimal(october["balance"]) == 400
    assert Decimal(august["expense"]) == 50
    assert Decimal(august["balance"]) == -50
    assert Decimal(september["balance"]) == 0


@pytest.mark.asyncio
async def test_monthly_overview_without_transactions(client):
    response = await client.get("/api/v1/analytics/monthly", params={"as_of": "2026-10-19"})

    data = response.json()["data"]
    assert len(data) == 6
    assert all(Decimal(m["income"]) == Decimal(m["expense"]) == 0 for m in data)


@pytest.mark.asyncio
@pytest.mark.parametrize("months", [0, 61])
async def test_monthly_overview_rejects_out_of_range_window(client, months):
    response = await client.get("/api/v1/analytics/monthly", params={"months": months})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_monthly_overview_rejects_window_before_year_one(client):
    response = await client.get("/api/v1/analytics/monthly", params={"months": 2, "as_of": "0001-01-15"})
    assert response.status_code == 422

    first_month = await client.get("/api/v1/analytics/monthly", params={"months": 1, "as_of": "0001-01-15"})
    assert first_month.status_code == 200
    assert [m["period"] for m in first_month.json()["data"]] == ["0001-01"]


@pytest.mark.asyncio
async def test_by_category(client, category_ids):
    await _add(client, "2026-10-05", "100", category_id=category_ids["Food"])
    await _add(client, "2026-08-20", "50", category_id=category_ids["Food"])
    await _add(client, "2026-10-02", "700", category_id=category_ids["Housing"])
    await _add(client, "2026-10-03", "9")
    await _add(client, "2026-10-01", "500", txn_type="INCOME")

    response = await client.get("/api/v1/analytics/by-category")

    assert response.status_code == 200
    body = response.json()
    assert [(c["name"], Decimal(c["value"])) for c in body["data"]] == [
        ("Housing", Decimal("700")),
        ("Food", Decimal("150")),
        ("Uncategorized", Decimal("9")),
    ]
    assert body["data"][0]["color"] == "#FF5722"
    assert body["data"][2]["category_id"] is None
    assert Decimal(body["total"]) == Decimal("859")

    october_only = await client.get(
        "/api/v1/analytics/by-category",
        params={"date_from": "2026-10-01", "date_to": "2026-10-31"},
    )
    food = next(c for c in october_only.json()["data"] if c["name"] == "Food")
    assert Decimal(food["value"]) == Decimal("100")


@pytest.mark.asyncio
async def test_by_category_empty(client):
    await _add(client, "2026-10-01", "500", txn_type="INCOME")

    body = (await client.get("/api/v1/analytics/by-category")).json()

    assert body["data"] == []
    assert Decimal(body["total"]) == 0


@pytest.mark.asyncio
async def test_summary(client):
    await _add(client, "2026-10-01", "1500", txn_type="INCOME")
    await _add(client, "2026-10-10", "200.25")
    await _add(client, "2026-09-30", "999")

    response = await client.get(
        "/api/v1/analytics/summary", params={"date_from": "2026-10-01", "date_to": "2026-10-31"}
    )

    body = response.json()
    assert Decimal(body["income"]) == Decimal("1500")
    assert Decimal(body["expense"]) == Decimal("200.25")
    assert Decimal(body["balance"]) == Decimal("1299.75")
    assert body["transaction_count"] == 2


@pytest.mark.asyncio
async def test_recent_transactions(client):
    for day in range(1, 8):
        await _add(client, f"2026-10-0{day}", "1", description=f"day {day}")

    default = (await client.get("/api/v1/analytics/recent")).json()["data"]
    assert [t["description"] for t in default] == ["day 7", "day 6", "day 5", "day 4", "day 3"]

    two = (await client.get("/api/v1/analytics/recent", params={"limit": 2})).json()["data"]
    assert len(two) == 2
