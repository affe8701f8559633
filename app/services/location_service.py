"""Location resolution for recommendation requests.

Sources, first satisfied wins:

1. ``location`` object in the request body (trusted, enriched with an address)
2. the authenticated user's stored address, if it has coordinates (verbatim)
3. IP geolocation of the caller (loopback short-circuits to the default city)
4. the hardcoded default location

Failures at any step are logged and absorbed; this module never raises.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.models.user import User
from app.services import geocoding
from engine.location.profile import (
    LocationProfile,
    default_location,
    is_loopback,
    location_from_ip_payload,
    location_from_payload,
    location_from_stored_address,
    with_estimated_address,
    with_reverse_geocoded_address,
)

logger = logging.getLogger(__name__)


async def enrich_with_address(location: LocationProfile) -> LocationProfile:
    """Attach a human-readable address; degrade to a city-level estimate."""
    if location.full_address:
        return location

    try:
        if location.has_coordinates:
            try:
                payload = await geocoding.reverse_geocode(location.lat, location.lon)
            except (httpx.HTTPError, ValueError) as exc:
                logger.info("Reverse geocoding failed, estimating address: %s", exc)
            else:
                enriched = with_reverse_geocoded_address(location, payload)
                if enriched is not None:
                    return enriched
        return with_estimated_address(location)
    except Exception:
        logger.exception("Address enrichment failed, estimating address")
        return with_estimated_address(location)


async def _locate_ip(ip: str) -> LocationProfile | None:
    try:
        payload = await geocoding.lookup_ip(ip)
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("IP geolocation request failed for %s: %s", ip, exc)
        return None

    location = location_from_ip_payload(payload)
    if location is None:
        logger.warning("IP geolocation failed for %s: %s", ip, payload.get("message"))
    return location


async def resolve_location(
    body_location: dict[str, Any] | None,
    user: User | None,
    client_ip: str | None,
) -> LocationProfile:
    """Determine where the requester is. Always returns a profile."""
    try:
        if body_location:
            logger.info("Using location from request body")
            return await enrich_with_address(location_from_payload(body_location))

        if user is not None:
            stored = location_from_stored_address(user.address)
            if stored is not None:
                logger.info("Using stored address for user %s", user.id)
                return stored
            logger.info("User %s has no stored address with coordinates", user.id)

        if is_loopback(client_ip):
            logger.info("Loopback client, using default location")
            return await enrich_with_address(default_location())

        located = await _locate_ip(client_ip)
        if located is not None:
            logger.info("Using IP-based location for %s", client_ip)
            return await enrich_with_address(located)
    except Exception:
        logger.exception("Location detection failed")

    logger.info("Using fallback location")
    return await enrich_with_address(default_location())
