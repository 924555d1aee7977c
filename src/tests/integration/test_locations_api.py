"""Integration tests for location endpoints."""

import pytest
from httpx import AsyncClient

LOCATION = {
    "name": "Downtown",
    "address": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
}


class TestListLocations:

    @pytest.mark.asyncio
    async def test_bad_status(self, client: AsyncClient, services, auth_headers):
        response = await client.get("/api/locations?status=archived", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "status must be one of: active, inactive"
        services.memberships.get_actor.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_membership_is_empty(self, client: AsyncClient, services, auth_headers, no_membership):
        response = await client.get("/api/locations", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"data": []}
        services.locations.list_locations.assert_not_called()

    @pytest.mark.asyncio
    async def test_lists_tenant_locations(
        self, client: AsyncClient, services, auth_headers, as_actor, make_location, ids
    ):
        as_actor("franchise_staff", [ids.location_a])
        services.locations.list_locations.return_value = [make_location()]

        response = await client.get("/api/locations?status=active", headers=auth_headers)

        assert response.status_code == 200
        assert [row["id"] for row in response.json()["data"]] == [ids.location_a]
        filters = services.locations.list_locations.call_args.args[0]
        assert filters.tenant_id == ids.tenant
        assert filters.status == "active"


class TestCreateLocation:

    @pytest.mark.asyncio
    async def test_missing_field(self, client: AsyncClient, auth_headers, as_actor):
        as_actor()
        payload = {k: v for k, v in LOCATION.items() if k != "zip_code"}

        response = await client.post("/api/locations", json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "zip_code is required"

    @pytest.mark.asyncio
    async def test_requires_membership(self, client: AsyncClient, auth_headers, no_membership):
        response = await client.post("/api/locations", json=LOCATION, headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "No active membership found"

    @pytest.mark.asyncio
    async def test_role_denied(self, client: AsyncClient, services, auth_headers, as_actor):
        as_actor("franchise_staff")

        response = await client.post("/api/locations", json=LOCATION, headers=auth_headers)

        assert response.status_code == 403
        services.locations.create_location.assert_not_called()

    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient, services, auth_headers, as_actor, make_location):
        actor = as_actor("franchise_owner")
        services.locations.create_location.return_value = make_location(phone="555-0100")

        response = await client.post(
            "/api/locations", json={**LOCATION, "phone": "555-0100"}, headers=auth_headers
        )

        assert response.status_code == 201
        assert response.json()["phone"] == "555-0100"
        called_actor, data = services.locations.create_location.call_args.args
        assert called_actor == actor
        assert data.zip_code == "62701"
        assert data.email is None
