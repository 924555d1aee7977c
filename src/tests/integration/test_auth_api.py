"""Integration tests for authentication and the error envelope."""

import pytest
from httpx import AsyncClient

from core.security import AuthenticatedUser
from schemas.user import UserProfile
from services.user_service import profile_from_claims


class TestAuthentication:
    """Token checks run before anything else."""

    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient, services):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized", "message": "Authentication required"}
        services.users.get_profile.assert_not_called()

    @pytest.mark.asyncio
    async def test_expired_token(self, client: AsyncClient, token_factory):
        headers = {"Authorization": f"Bearer {token_factory(expires_in=-30)}"}

        response = await client.get("/api/auth/me", headers=headers)

        assert response.status_code == 401
        assert response.json()["message"] == "Session expired"

    @pytest.mark.asyncio
    async def test_token_signed_with_other_secret(self, client: AsyncClient, token_factory):
        headers = {"Authorization": f"Bearer {token_factory(secret='not-our-secret')}"}

        response = await client.get("/api/auth/me", headers=headers)

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid authentication token"

    @pytest.mark.asyncio
    async def test_cookie_session(self, client: AsyncClient, services, token_factory, ids):
        services.users.get_profile.return_value = UserProfile(id=ids.user, email="owner@example.com")
        headers = {"Cookie": f"sb-access-token={token_factory()}"}

        response = await client.get("/api/auth/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["id"] == ids.user


class TestGetMe:

    @pytest.mark.asyncio
    async def test_profile_row(self, client: AsyncClient, services, auth_headers, ids):
        services.users.get_profile.return_value = UserProfile(
            id=ids.user, email="owner@example.com", name="Pat Owner", source="database"
        )

        response = await client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Pat Owner"
        assert data["source"] == "database"
        user = services.users.get_profile.call_args.args[0]
        assert user.id == ids.user
        assert user.email == "owner@example.com"

    def test_claims_fallback(self, ids):
        user = AuthenticatedUser(
            id=ids.user,
            email="owner@example.com",
            claims={"sub": ids.user, "user_metadata": {"name": "Pat", "avatar_url": "https://img/p.png"}},
        )

        profile = profile_from_claims(user)

        assert profile.source == "auth"
        assert profile.name == "Pat"
        assert profile.avatar_url == "https://img/p.png"


class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient):
        response = await client.get("/api/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found", "message": "Not Found"}

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/api/docs"
        assert "X-Process-Time" in response.headers
