"""Transaction API tests."""

from datetime import date
from decimal import Decimal

import pytest

from app.models import Transaction


async def _create(client, **overrides):
    payload = {
        "date": "2026-10-05",
        "description": "Groceries",
        "amount": "42.10",
        "type": "EXPENSE",
    }
    payload.update(overrides)
    response = await client.post("/api/v1/transactions", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_transaction_assigns_id_and_timestamps(client, category_ids):
    data = await _create(client, category_id=category_ids["Food"])

    assert data["id"] > 0
    assert data["created_at"]
    assert data["type"] == "EXPENSE"
    assert Decimal(data["amount"]) == Decimal("42.10")
    assert data["category_name"] == "Food"
    assert data["category_color"] == "#4CAF50"


@pytest.mark.asyncio
async def test_create_income_without_category(client):
    data = await _create(client, description="Salary", amount="2500", type="INCOME")

    assert data["type"] == "INCOME"
    assert data["category_id"] is None
    assert data["category_name"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"amount": "-5"},
        {"amount": "0"},
        {"type": "TRANSFER"},
        {"description": ""},
        {"description": "   "},
        {"date": "not-a-date"},
    ],
)
async def test_create_transaction_rejects_invalid_payload(client, overrides):
    payload = {"date": "2026-10-05", "description": "x", "amount": "1", "type": "EXPENSE", **overrides}
    response = await client.post("/api/v1/transactions", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_description_is_trimmed(client):
    data = await _create(client, description="  Groceries \n")
    assert data["description"] == "Groceries"


@pytest.mark.asyncio
async def test_create_with_unknown_category_is_404(client):
    response = await client.post(
        "/api/v1/transactions",
        json={"date": "2026-10-05", "description": "x", "amount": "1", "category_id": 9999},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_is_sorted_newest_first(client):
    await _create(client, date="2026-09-01", description="old")
    await _create(client, date="2026-10-10", description="new")
    await _create(client, date="2026-09-15", description="mid")

    response = await client.get("/api/v1/transactions")

    assert response.status_code == 200
    assert [t["description"] for t in response.json()] == ["new", "mid", "old"]


@pytest.mark.asyncio
async def test_list_filters(client, category_ids):
    await _create(client, date="2026-08-31", description="before")
    await _create(client, date="2026-09-01", description="food", category_id=category_ids["Food"])
    await _create(client, date="2026-09-30", description="pay", type="INCOME")
    await _create(client, date="2026-10-01", description="after")

    in_range = await client.get(
        "/api/v1/transactions", params={"date_from": "2026-09-01", "date_to": "2026-09-30"}
    )
    assert {t["description"] for t in in_range.json()} == {"food", "pay"}

    incomes = await client.get("/api/v1/transactions", params={"type": "INCOME"})
    assert [t["description"] for t in incomes.json()] == ["pay"]

    food = await client.get("/api/v1/transactions", params={"category_id": category_ids["Food"]})
    assert [t["description"] for t in food.json()] == ["food"]

    limited = await client.get("/api/v1/transactions", params={"limit": 2})
    assert [t["description"] for t in limited.json()] == ["after", "pay"]


@pytest.mark.asyncio
async def test_list_rejects_inverted_range(client):
    response = await client.get(
        "/api/v1/transactions", params={"date_from": "2026-10-01", "date_to": "2026-09-01"}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_other_users_transactions_are_invisible(client, session_factory, other_user_id):
    async with session_factory() as session:
        session.add(
            Transaction(
                user_id=other_user_id,
                date=date(2026, 10, 1),
                description="not yours",
                amount=Decimal("9.99"),
                type="EXPENSE",
            )
        )
        await session.commit()

    listing = await client.get("/api/v1/transactions")
    assert listing.json() == []


@pytest.mark.asyncio
async def test_get_and_delete_transaction(client):
    created = await _create(client)

    fetched = await client.get(f"/api/v1/transactions/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["description"] == "Groceries"

    deleted = await client.delete(f"/api/v1/transactions/{created['id']}")
    assert deleted.status_code == 204

    assert (await client.get(f"/api/v1/transactions/{created['id']}")).status_code == 404
    assert (await client.get("/api/v1/transactions")).json() == []


@pytest.mark.asyncio
async def test_get_missing_transaction_is_404(client):
    response = await client.get("/api/v1/transactions/12345")
    assert response.status_code == 404
    assert response.json()["detail"] == "Transaction not found"
