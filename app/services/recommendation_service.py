"""Recommendation pipeline orchestration.

Stages run strictly in sequence: input validation and load calculation,
location, solar conditions, prompt and AI call, reply parsing, validation.
Location and weather failures are absorbed by their services; AI-side
failures surface as retryable ``RecommendationError`` subclasses.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from app.config import settings
from app.models.user import User
from app.services.ai_client import CompletionClient
from app.services.location_service import resolve_location
from app.services.weather_service import get_solar_conditions
from engine.errors import (
    RecommendationError,
    RecommendationInvalid,
    RecommendationUnavailable,
    ResponseParseError,
)
from engine.load.appliances import PowerProfile, compute_load, parse_appliances
from engine.location.profile import LocationProfile
from engine.recommendation.parser import Recommendation, require_recommendation
from engine.recommendation.prompt import build_prompt
from engine.recommendation.sizing import compute_sizing_guidance
from engine.recommendation.validator import ensure_valid, price_per_watt
from engine.weather.solar_conditions import SolarConditions, climate_optimizations

logger = logging.getLogger(__name__)

VALIDATIONS = ["pricing", "components"]


@dataclass
class PipelineResult:
    profile: PowerProfile
    location: LocationProfile
    conditions: SolarConditions
    recommendation: Recommendation
    attempts: int
    ai_model: str
    processing_time_ms: int


async def generate_recommendation(
    profile: PowerProfile,
    location: LocationProfile,
    conditions: SolarConditions,
    client: CompletionClient,
) -> Recommendation:
    """One prompt, one model call, one parse. Raises ``ResponseParseError``."""
    guidance = compute_sizing_guidance(profile.total_wattage, profile.daily_consumption_kwh)
    prompt = build_prompt(profile, location, conditions, guidance)

    try:
        reply = await client.complete(prompt)
    except RecommendationError:
        raise
    except Exception as exc:
        logger.exception("AI completion raised unexpectedly")
        raise RecommendationUnavailable(f"AI service error: {type(exc).__name__}") from exc

    try:
        return require_recommendation(reply)
    except ResponseParseError as exc:
        logger.warning("Unparseable AI response (%s): %.500s", exc.kind, reply)
        raise


async def recommend(
    profile: PowerProfile,
    location: LocationProfile,
    conditions: SolarConditions,
    client: CompletionClient,
    max_attempts: int = 1,
) -> tuple[Recommendation, int]:
    """Generate and validate, retrying rejected output up to *max_attempts* times."""
    last_error: RecommendationError | None = None
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            recommendation = await generate_recommendation(profile, location, conditions, client)
            ensure_valid(recommendation, profile.total_wattage, profile.daily_consumption_kwh)
            return recommendation, attempt
        except (ResponseParseError, RecommendationInvalid) as exc:
            logger.warning(
                "Attempt %d/%d rejected: %s", attempt, attempts, exc.errors,
                extra={"attempt": attempt},
            )
            last_error = exc
    raise last_error


async def run_pipeline(
    raw_items: Any,
    body_location: dict[str, Any] | None,
    user: User | None,
    client_ip: str | None,
    client: CompletionClient,
) -> PipelineResult:
    start = time.perf_counter()

    # Input problems are reported before any network work
    profile = compute_load(parse_appliances(raw_items))

    async def _stages() -> tuple[LocationProfile, SolarConditions, Recommendation, int]:
        location = await resolve_location(body_location, user, client_ip)
        conditions = await get_solar_conditions(location)
        recommendation, attempts = await recommend(
            profile, location, conditions, client, settings.ai_max_attempts
        )
        return location, conditions, recommendation, attempts

    try:
        location, conditions, recommendation, attempts = await asyncio.wait_for(
            _stages(), timeout=settings.pipeline_deadline_seconds
        )
    except asyncio.TimeoutError:
        logger.error("Recommendation pipeline exceeded %.0fs", settings.pipeline_deadline_seconds)
        raise RecommendationUnavailable("Recommendation pipeline timed out")

    return PipelineResult(
        profile=profile,
        location=location,
        conditions=conditions,
        recommendation=recommendation,
        attempts=attempts,
        ai_model=client.model,
        processing_time_ms=int((time.perf_counter() - start) * 1000),
    )


# ---------------------------------------------------------------------------
# Response assembly
# ---------------------------------------------------------------------------

def make_request_id(user: User | None, now: datetime | None = None) -> str:
    """``REQ_<epoch ms>_<last 6 of user id | ANON>_<random>``."""
    now = now or datetime.now(timezone.utc)
    owner = str(user.id)[-6:] if user is not None else "ANON"
    return f"REQ_{int(now.timestamp() * 1000)}_{owner}_{secrets.token_hex(2)}"


def customer_info(user: User | None, request_id: str) -> dict[str, Any]:
    if user is None:
        return {
            "user_id": None,
            "username": "Anonymous User",
            "email": None,
            "auth_method": "none",
            "is_verified": False,
            "request_id": request_id,
        }
    return {
        "user_id": str(user.id),
        "username": user.username,
        "email": user.email,
        "auth_method": user.auth_method,
        "is_verified": user.is_verified,
        "request_id": request_id,
    }


def assemble_response(result: PipelineResult, user: User | None) -> dict[str, Any]:
    """Success payload (snake_case; the schema layer renders camelCase)."""
    now = datetime.now(timezone.utc)
    profile = result.profile
    pattern = profile.usage_pattern
    recommendation = result.recommendation

    return {
        "success": True,
        "customer_info": customer_info(user, make_request_id(user, now)),
        "location_profile": {
            "location": result.location.to_dict(),
            "solar_conditions": {
                "average_sunlight_hours": result.conditions.average_sunlight_hours,
                "cloud_cover": result.conditions.cloud_cover,
                "humidity": result.conditions.humidity,
                "temperature": result.conditions.temperature,
                "source": result.conditions.source,
            },
            "climate_optimizations": climate_optimizations(result.location.city, result.conditions),
        },
        "power_requirements": {
            "total_wattage": profile.total_wattage,
            "daily_consumption": profile.daily_consumption_label,
            "daily_consumption_kwh": profile.daily_consumption_kwh,
            "total_day_hours": profile.total_day_hours,
            "total_night_hours": profile.total_night_hours,
            "appliances": [a.to_dict() for a in profile.appliances],
            "usage_pattern": {
                "pattern": pattern.pattern,
                "day_usage": f"{pattern.day_usage_pct:.1f}%",
                "night_usage": f"{pattern.night_usage_pct:.1f}%",
                "total_hours": pattern.total_hours,
                "recommendation": pattern.battery_advice,
            },
        },
        "recommendation": recommendation.to_dict(),
        "metadata": {
            "generated_at": now,
            "ai_model": result.ai_model,
            "confidence": "high",
            "token_type": "jwt" if user is not None else "anonymous",
            "processing_time": result.processing_time_ms,
            "validations_passed": list(VALIDATIONS),
            "price_per_watt": round(
                price_per_watt(recommendation.pricing.total_amount, profile.total_wattage)
            ),
            "attempts": result.attempts,
        },
    }
