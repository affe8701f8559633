"""Solar conditions for a resolved location.

Live weatherapi.com readings when a key is configured and coordinates are
known, else the static per-city table, else hardcoded defaults. Never
raises.
"""

import logging

import httpx

from app.config import settings
from engine.location.profile import LocationProfile
from engine.weather.solar_conditions import (
    SolarConditions,
    default_conditions,
    estimate_sunlight_hours,
    static_conditions,
)

logger = logging.getLogger(__name__)


async def fetch_live_conditions(lat: float, lon: float) -> SolarConditions:
    """Current cloud cover, humidity and temperature from weatherapi.com."""
    params = {"key": settings.weather_api_key, "q": f"{lat},{lon}"}

    async with httpx.AsyncClient(timeout=settings.weather_timeout_seconds) as client:
        response = await client.get(settings.weather_api_url, params=params)
        response.raise_for_status()

    current = response.json()["current"]
    return SolarConditions(
        average_sunlight_hours=estimate_sunlight_hours(lat),
        cloud_cover=float(current["cloud"]),
        humidity=float(current["humidity"]),
        temperature=float(current["temp_c"]) if current.get("temp_c") is not None else None,
        source="live",
    )


async def get_solar_conditions(location: LocationProfile) -> SolarConditions:
    if settings.weather_api_key and location.has_coordinates:
        try:
            return await fetch_live_conditions(location.lat, location.lon)
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Weather API failed, using static data: %s", exc)

    try:
        conditions = static_conditions(location.city)
        logger.info("Using static weather data for %s", location.city or "unknown city")
        return conditions
    except Exception as exc:
        logger.warning("Static weather lookup failed, using defaults: %s", exc)
        return default_conditions()
