"""Tests for the user address endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

URL = "/api/v1/user/address"

ADDRESS = {
    "street": "15 Admiralty Way",
    "city": "Lekki",
    "state": "Lagos",
    "postcode": "106104",
}


class TestUpdateAddress:
    async def test_requires_auth(self, client: AsyncClient):
        resp = await client.put(URL, json={"address": ADDRESS})
        assert resp.status_code == 401

    async def test_with_coordinates(self, client: AsyncClient, auth_headers):
        resp = await client.put(
            URL,
            json={"address": ADDRESS, "coordinates": {"lat": 6.4474, "lon": 3.4720}},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["message"] == "Address updated successfully"
        address = data["address"]
        assert address["fullAddress"] == "15 Admiralty Way, Lekki, Lagos, Nigeria"
        assert address["country"] == "Nigeria"
        assert address["hasCoordinates"] is True
        assert address["source"] == "user_input"
        assert address["accuracy"] == "exact"

    async def test_geocodes_when_coordinates_missing(self, client: AsyncClient, auth_headers):
        match = {"lat": 6.44, "lon": 3.47, "display_name": "Lekki", "confidence": 0.6}
        with patch(
            "app.services.geocoding.forward_geocode", AsyncMock(return_value=match)
        ) as geocode:
            resp = await client.put(URL, json={"address": ADDRESS}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["address"]["hasCoordinates"] is True
        geocode.assert_awaited_once_with("15 Admiralty Way, Lekki, Lagos, Nigeria")

    async def test_geocoding_failure_still_saves(self, client: AsyncClient, auth_headers):
        # forward_geocode is offline by default in the API tests
        resp = await client.put(URL, json={"address": ADDRESS}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["address"]["hasCoordinates"] is False

        resp = await client.get(URL, headers=auth_headers)
        assert resp.json()["hasAddress"] is True

    @pytest.mark.parametrize("missing", ["street", "city", "state"])
    async def test_missing_required_field(self, client: AsyncClient, auth_headers, missing):
        body = {k: v for k, v in ADDRESS.items() if k != missing}
        resp = await client.put(URL, json={"address": body}, headers=auth_headers)
        assert resp.status_code == 400
        data = resp.json()
        assert data["success"] is False
        assert data["required"] == ["street", "city", "state"]
        assert f"Missing field: {missing}" in data["errors"]

    async def test_missing_address_object(self, client: AsyncClient, auth_headers):
        resp = await client.put(URL, json={}, headers=auth_headers)
        assert resp.status_code == 400


class TestGetAddress:
    async def test_no_address(self, client: AsyncClient, auth_headers):
        resp = await client.get(URL, headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["hasAddress"] is False
        assert data["address"] is None

    async def test_round_trip(self, client: AsyncClient, auth_headers):
        await client.put(
            URL,
            json={"address": {**ADDRESS, "country": "Ghana"}, "coordinates": {"lat": 5.6, "lon": -0.19}},
            headers=auth_headers,
        )
        resp = await client.get(URL, headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["hasAddress"] is True
        assert data["address"]["country"] == "Ghana"
        assert data["address"]["postcode"] == "106104"
        assert data["address"]["updatedAt"] is not None
