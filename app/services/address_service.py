"""User-entered delivery addresses."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from app.schemas.address import AddressFields, Coordinates
from app.services import geocoding
from engine.location.profile import ACCURACY_EXACT, compose_full_address

logger = logging.getLogger(__name__)

SOURCE_USER_INPUT = "user_input"


async def build_user_address(
    fields: AddressFields, coordinates: Coordinates | None
) -> dict[str, Any]:
    """Stored address document; geocodes when no coordinates are given.

    Geocoding failure leaves ``coordinates`` empty, the address is still
    usable for display.
    """
    address: dict[str, Any] = {
        "street": fields.street,
        "neighbourhood": fields.neighbourhood,
        "city": fields.city,
        "state": fields.state,
        "country": fields.country or "Nigeria",
        "postcode": fields.postcode,
    }
    address["fullAddress"] = compose_full_address(address)
    address["coordinates"] = (
        {"lat": coordinates.lat, "lon": coordinates.lon} if coordinates else None
    )
    address["source"] = SOURCE_USER_INPUT
    address["accuracy"] = ACCURACY_EXACT
    address["updatedAt"] = datetime.now(timezone.utc).isoformat()

    if address["coordinates"] is None:
        try:
            match = await geocoding.forward_geocode(address["fullAddress"])
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.warning("Forward geocoding failed for %r: %s", address["fullAddress"], exc)
            match = None
        if match:
            address["coordinates"] = {"lat": match["lat"], "lon": match["lon"]}
            logger.info("Geocoded user address to %.4f, %.4f", match["lat"], match["lon"])

    return address


def address_view(address: dict[str, Any]) -> dict[str, Any]:
    return {
        "street": address.get("street") or "",
        "neighbourhood": address.get("neighbourhood"),
        "city": address.get("city") or "",
        "state": address.get("state") or "",
        "country": address.get("country") or "Nigeria",
        "postcode": address.get("postcode"),
        "full_address": address.get("fullAddress") or "",
        "has_coordinates": bool(address.get("coordinates")),
        "source": address.get("source") or SOURCE_USER_INPUT,
        "accuracy": address.get("accuracy") or ACCURACY_EXACT,
        "updated_at": address.get("updatedAt"),
    }
