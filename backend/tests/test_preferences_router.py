"""Tests for the preference matching endpoints."""
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient, ASGITransport

from app.errors import FetchError, NotFoundError, ValidationError
from app.main import app
from app.services.listing_store import JsonListingStore
from app.services.matching_service import MatchingService
from app.services.preference_store import JsonPreferenceStore


def _client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_health():
    async with _client() as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_get_matches_success():
    """Bundled buy preference matches the two approved Lagos sales listings."""
    async with _client() as client:
        response = await client.get("/api/preferences/pref-buy-lagos/matches")
    assert response.status_code == 200
    data = response.json()

    assert {m["listing"]["id"] for m in data["data"]} == {"lst-001", "lst-002"}
    assert data["pagination"] == {"total": 2, "page": 1, "limit": 10, "totalPages": 1}
    for match in data["data"]:
        assert 50 <= match["matchScore"] <= 100
        assert match["isPriority"] is True
        assert match["scoreBreakdown"] is None


@pytest.mark.asyncio
async def test_get_matches_placeholder_image():
    async with _client() as client:
        response = await client.get("/api/preferences/pref-buy-lagos/matches")
    listing = next(m["listing"] for m in response.json()["data"] if m["listing"]["id"] == "lst-002")
    assert listing["image"].startswith("https://placehold.co/")


@pytest.mark.asyncio
async def test_get_matches_with_breakdown():
    async with _client() as client:
        response = await client.get("/api/preferences/pref-buy-lagos/matches", params={"explain": True})
    assert response.status_code == 200
    breakdown = response.json()["data"][0]["scoreBreakdown"]
    assert breakdown["base"] == 50
    assert breakdown["total"] == response.json()["data"][0]["matchScore"]


@pytest.mark.asyncio
async def test_shortlet_matches_exclude_booked_listing():
    async with _client() as client:
        response = await client.get("/api/preferences/pref-shortlet-june/matches")
    assert response.status_code == 200
    ids = [m["listing"]["id"] for m in response.json()["data"]]
    assert "lst-011" not in ids
    assert "lst-010" not in ids


@pytest.mark.asyncio
async def test_get_matches_not_found():
    async with _client() as client:
        response = await client.get("/api/preferences/nonexistent-id/matches")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_matches_invalid_page():
    """Query validation rejects non-positive pages before matching runs."""
    async with _client() as client:
        response = await client.get("/api/preferences/pref-buy-lagos/matches", params={"page": 0})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_matches_limit_too_large():
    async with _client() as client:
        response = await client.get("/api/preferences/pref-buy-lagos/matches", params={"limit": 101})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_matches_page_beyond_results():
    async with _client() as client:
        response = await client.get("/api/preferences/pref-buy-lagos/matches", params={"page": 4})
    assert response.status_code == 200
    assert response.json()["data"] == []
    assert response.json()["pagination"]["total"] == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("error,status", [
    (NotFoundError("missing"), 404),
    (ValidationError("bad preference"), 400),
    (FetchError("store down"), 503),
    (RuntimeError("boom"), 500),
])
async def test_error_mapping(error, status):
    service = AsyncMock()
    service.match_preference.side_effect = error
    with patch("app.routers.preferences._matching_service", service):
        async with _client() as client:
            response = await client.get("/api/preferences/pref-1/matches")
    assert response.status_code == status
    if status == 500:
        assert "boom" not in response.json()["detail"]


@pytest.mark.asyncio
async def test_get_criteria():
    async with _client() as client:
        response = await client.get("/api/preferences/pref-jv-ibeju/criteria")
    assert response.status_code == 200
    data = response.json()

    assert data["criteria"]["mode"] == "developer"
    assert data["criteria"]["required_documents"] == ["C of O", "Survey Plan"]
    names = {clause["name"] for clause in data["hard_filters"]}
    assert "joint_venture.documents" in names
    assert "location.area" in names


@pytest.mark.asyncio
async def test_get_criteria_not_found():
    async with _client() as client:
        response = await client.get("/api/preferences/nonexistent-id/criteria")
    assert response.status_code == 404


LOOSE_PREFERENCE = {
    "id": "pref-loose",
    "preference_type": "buy",
    "preference_mode": "buy",
    "location": {"state": "Lagos"},
    "budget": {"min_price": 50000000, "max_price": 80000000},
}

LOOSE_LISTING = {
    "brief_type": "Outright Sales",
    "status": "approved",
    "is_available": True,
    "is_deleted": False,
    "is_rejected": False,
    "state": "Lagos",
}


def _loose_service(listings):
    return MatchingService(
        preference_store=JsonPreferenceStore(preferences=[LOOSE_PREFERENCE]),
        listing_store=JsonListingStore(listings=listings),
    )


@pytest.mark.asyncio
async def test_string_price_listing_serializes():
    """Comma-formatted prices and string room counts come back as numbers."""
    listing = {**LOOSE_LISTING, "id": 501, "price": "65,000,000", "bedrooms": "3", "bathrooms": "2.0"}
    with patch("app.routers.preferences._matching_service", _loose_service([listing])):
        async with _client() as client:
            response = await client.get("/api/preferences/pref-loose/matches")
    assert response.status_code == 200
    summary = response.json()["data"][0]["listing"]
    assert summary["id"] == "501"
    assert summary["price"] == 65000000
    assert summary["bedrooms"] == 3
    assert summary["bathrooms"] == 2


@pytest.mark.asyncio
async def test_listing_without_id_serializes():
    listing = {**LOOSE_LISTING, "price": 60000000, "pictures": None}
    with patch("app.routers.preferences._matching_service", _loose_service([listing])):
        async with _client() as client:
            response = await client.get("/api/preferences/pref-loose/matches")
    assert response.status_code == 200
    data = response.json()
    assert data["pagination"]["total"] == 1
    assert data["data"][0]["listing"]["id"] is None
    assert data["data"][0]["listing"]["image"].startswith("https://placehold.co/")


@pytest.mark.asyncio
async def test_get_criteria_unexpected_error():
    service = AsyncMock()
    service.load_criteria.side_effect = RuntimeError("boom")
    with patch("app.routers.preferences._matching_service", service):
        async with _client() as client:
            response = await client.get("/api/preferences/pref-1/criteria")
    assert response.status_code == 500
    assert "boom" not in response.json()["detail"]
