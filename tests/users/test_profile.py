"""Tests for the profile endpoint: balance and level come from the ledger."""

from httpx import AsyncClient


class TestProfile:
    async def test_get_own_profile(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/v1/me")
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "recycler@wastewise.io"
        assert data["balance"] == 0
        assert data["level"] == 1
        assert data["level_title"] == "Eco Starter"
        assert data["points_to_next"] == 100

    async def test_level_follows_lifetime_earned(self, authed_client: AsyncClient, user, grant_points):
        await grant_points(user.id, 600, kind="earned")
        response = await authed_client.get("/api/v1/me")
        data = response.json()
        assert data["balance"] == 600
        assert data["lifetime_earned"] == 600
        assert data["level"] == 3
        assert data["level_title"] == "Recycling Ranger"
        assert data["next_title"] == "Eco Warrior"

    async def test_update_contact_details(self, authed_client: AsyncClient):
        response = await authed_client.patch("/api/v1/me", json={
            "phone": "+254700000000",
            "city": "Mombasa",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["phone"] == "+254700000000"
        assert data["city"] == "Mombasa"
        assert data["full_name"] == "Test Recycler"

    async def test_null_full_name_ignored(self, authed_client: AsyncClient):
        response = await authed_client.patch("/api/v1/me", json={"full_name": None})
        assert response.status_code == 200
        assert response.json()["full_name"] == "Test Recycler"

    async def test_profile_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/v1/me")
        assert response.status_code in (401, 403)
