"""Profile and settings API tests."""

import pytest


@pytest.mark.asyncio
async def test_get_profile(client, user_id):
    response = await client.get("/api/v1/users/me")

    assert response.status_code == 200
    assert response.json()["id"] == user_id
    assert response.json()["email"] == "jane@example.com"


@pytest.mark.asyncio
async def test_update_profile(client):
    response = await client.patch("/api/v1/users/me", json={"full_name": "  Jane Smith "})

    assert response.status_code == 200
    assert response.json()["full_name"] == "Jane Smith"


@pytest.mark.asyncio
async def test_update_profile_rejects_short_name(client):
    response = await client.patch("/api/v1/users/me", json={"full_name": "J"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_default_settings(client):
    response = await client.get("/api/v1/users/me/settings")

    assert response.status_code == 200
    assert response.json() == {"theme": "light", "currency": "USD", "notifications_enabled": True}


@pytest.mark.asyncio
async def test_partial_settings_update(client):
    response = await client.patch("/api/v1/users/me/settings", json={"theme": "dark"})
    assert response.status_code == 200

    settings = (await client.get("/api/v1/users/me/settings")).json()
    assert settings == {"theme": "dark", "currency": "USD", "notifications_enabled": True}


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"theme": "neon"}, {"currency": "usd"}, {"currency": "EURO"}])
async def test_invalid_settings_rejected(client, payload):
    response = await client.patch("/api/v1/users/me/settings", json=payload)
    assert response.status_code == 422
