"""Tests for pipeline orchestration and response assembly."""

from __future__ import annotations

import asyncio
import re
import uuid
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.models.user import User
from app.services.recommendation_service import (
    assemble_response,
    make_request_id,
    recommend,
    run_pipeline,
)
from engine.errors import (
    ApplianceValidationError,
    RecommendationInvalid,
    RecommendationUnavailable,
    ResponseParseError,
)
from engine.load.appliances import compute_load, parse_appliances
from engine.location.profile import default_location
from engine.weather.solar_conditions import static_conditions
from tests.factories import FakeCompletionClient, make_reply

pytestmark = pytest.mark.asyncio

_SETTINGS = "app.services.recommendation_service.settings"


@pytest.fixture(autouse=True)
def offline():
    down = AsyncMock(side_effect=httpx.ConnectError("network disabled in tests"))
    with patch("app.services.geocoding.reverse_geocode", down), \
         patch("app.services.geocoding.lookup_ip", down), \
         patch("app.services.weather_service.settings.weather_api_key", None):
        yield


@pytest.fixture
def profile(household_items):
    return compute_load(parse_appliances(household_items))


class TestRecommend:
    async def test_first_attempt(self, profile):
        client = FakeCompletionClient()
        rec, attempts = await recommend(profile, default_location(), static_conditions("Lagos"), client)
        assert attempts == 1
        assert rec.pricing.total_amount == 6_450_000
        assert "3000W" in client.prompts[0]

    async def test_single_attempt_by_default(self, profile):
        client = FakeCompletionClient(["garbage", make_reply()])
        with pytest.raises(ResponseParseError):
            await recommend(profile, default_location(), static_conditions("Lagos"), client)
        assert len(client.prompts) == 1

    async def test_retries_invalid_output(self, profile):
        client = FakeCompletionClient([make_reply(panels=40), make_reply()])
        rec, attempts = await recommend(
            profile, default_location(), static_conditions("Lagos"), client, max_attempts=3
        )
        assert attempts == 2
        assert rec.solar_panels.quantity == 12

    async def test_last_error_surfaces(self, profile):
        client = FakeCompletionClient([make_reply(panels=40)])
        with pytest.raises(RecommendationInvalid):
            await recommend(
                profile, default_location(), static_conditions("Lagos"), client, max_attempts=2
            )
        assert len(client.prompts) == 2

    async def test_non_positive_attempts_still_tries_once(self, profile):
        client = FakeCompletionClient(["garbage"])
        with pytest.raises(ResponseParseError):
            await recommend(
                profile, default_location(), static_conditions("Lagos"), client, max_attempts=0
            )
        assert len(client.prompts) == 1

    async def test_unavailable_is_not_retried(self, profile):
        client = FakeCompletionClient()
        client.error = RecommendationUnavailable("AI service is not configured")
        with pytest.raises(RecommendationUnavailable):
            await recommend(
                profile, default_location(), static_conditions("Lagos"), client, max_attempts=3
            )
        assert len(client.prompts) == 1

    async def test_unexpected_client_error_is_unavailable(self, profile):
        client = FakeCompletionClient()
        client.error = RuntimeError("socket closed")
        with pytest.raises(RecommendationUnavailable) as exc_info:
            await recommend(profile, default_location(), static_conditions("Lagos"), client)
        assert exc_info.value.errors == ["AI service error: RuntimeError"]


class TestRunPipeline:
    async def test_success(self, household_items):
        result = await run_pipeline(household_items, None, None, "127.0.0.1", FakeCompletionClient())
        assert result.location.city == "Lagos"
        assert result.conditions.source == "static"
        assert result.profile.daily_consumption_label == "18.00 kWh"
        assert result.ai_model == "test-model"
        assert result.attempts == 1
        assert result.processing_time_ms >= 0

    async def test_invalid_items_fail_before_any_lookup(self):
        client = FakeCompletionClient()
        with patch("app.services.recommendation_service.resolve_location") as resolve:
            with pytest.raises(ApplianceValidationError):
                await run_pipeline([{"nameOfItem": "TV"}], None, None, "127.0.0.1", client)
        resolve.assert_not_called()
        assert client.prompts == []

    async def test_deadline(self, household_items):
        class SlowClient(FakeCompletionClient):
            async def complete(self, prompt: str) -> str:
                await asyncio.sleep(5)
                return make_reply()

        with patch(f"{_SETTINGS}.pipeline_deadline_seconds", 0.05):
            with pytest.raises(RecommendationUnavailable) as exc_info:
                await run_pipeline(household_items, None, None, "127.0.0.1", SlowClient())
        assert exc_info.value.errors == ["Recommendation pipeline timed out"]


class TestAssembleResponse:
    async def test_anonymous(self, household_items):
        result = await run_pipeline(household_items, None, None, "127.0.0.1", FakeCompletionClient())
        payload = assemble_response(result, None)
        assert payload["success"] is True
        assert payload["customer_info"]["username"] == "Anonymous User"
        assert payload["metadata"]["token_type"] == "anonymous"
        assert payload["metadata"]["price_per_watt"] == 2150
        assert payload["power_requirements"]["usage_pattern"]["day_usage"] == "66.7%"
        assert payload["power_requirements"]["usage_pattern"]["recommendation"] == (
            "Smaller battery capacity needed"
        )
        assert payload["location_profile"]["location"]["fullAddress"] == "Lagos, Lagos, Nigeria"

    async def test_authenticated(self, household_items):
        user = User(
            id=uuid.uuid4(), email="ada@solarwise.ng", username="ada",
            auth_method="oauth", is_verified=True,
        )
        result = await run_pipeline(household_items, None, user, "127.0.0.1", FakeCompletionClient())
        payload = assemble_response(result, user)
        info = payload["customer_info"]
        assert info["user_id"] == str(user.id)
        assert info["auth_method"] == "oauth"
        assert payload["metadata"]["token_type"] == "jwt"


class TestRequestId:
    async def test_anonymous_format(self):
        assert re.fullmatch(r"REQ_\d{13}_ANON_[0-9a-f]{4}", make_request_id(None))

    async def test_user_suffix(self):
        user = User(id=uuid.UUID("12345678-1234-5678-1234-567812abcdef"), email="x", username="x")
        assert re.fullmatch(r"REQ_\d{13}_abcdef_[0-9a-f]{4}", make_request_id(user))

    async def test_unique_within_same_millisecond(self):
        ids = {make_request_id(None) for _ in range(50)}
        assert len(ids) > 1
