"""Location profiles and address synthesis.

Pure helpers used by the location service: building a ``LocationProfile``
from each supported source (request body, stored user address, IP lookup,
hardcoded default) and attaching a human-readable address, either from a
reverse-geocoding payload or synthesized from the fields already known.
No network access happens here.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field, replace
from typing import Any

# Address provenance
SOURCE_USER_STORED = "user_stored"
SOURCE_NOMINATIM = "nominatim"
SOURCE_ESTIMATED = "estimated"
SOURCE_IP = "ip"

# Address accuracy
ACCURACY_EXACT = "exact"
ACCURACY_APPROXIMATE = "approximate"
ACCURACY_CITY = "city-level"

DEFAULT_TIMEZONE = "Africa/Lagos"
NO_ADDRESS = "Address not available"


@dataclass
class LocationProfile:
    country: str
    region: str
    city: str
    lat: float | None = None
    lon: float | None = None
    timezone: str = DEFAULT_TIMEZONE
    full_address: str | None = None
    address_components: dict[str, Any] | None = None
    address_source: str | None = None
    address_accuracy: str | None = None
    district: str | None = None
    isp: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.extra,
            "country": self.country,
            "region": self.region,
            "city": self.city,
            "lat": self.lat,
            "lon": self.lon,
            "timezone": self.timezone,
            "fullAddress": self.full_address,
            "addressComponents": self.address_components,
            "addressSource": self.address_source,
            "addressAccuracy": self.address_accuracy,
            "district": self.district,
            "isp": self.isp,
        }


def default_location() -> LocationProfile:
    """The fixed fallback location (Lagos, Nigeria)."""
    return LocationProfile(
        country="Nigeria",
        region="Lagos",
        city="Lagos",
        lat=6.5244,
        lon=3.3792,
        timezone=DEFAULT_TIMEZONE,
    )


def is_loopback(ip: str | None) -> bool:
    """True for loopback (or unknown/unparseable) client addresses."""
    if not ip:
        return True
    candidate = ip.strip()
    if candidate.startswith("::ffff:"):
        candidate = candidate[len("::ffff:"):]
    try:
        return ipaddress.ip_address(candidate).is_loopback
    except ValueError:
        return True


def _float_or_none(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Source adapters
# ---------------------------------------------------------------------------

_KNOWN_KEYS = {
    "country", "region", "city", "lat", "lon", "timezone", "fullAddress",
    "full_address", "addressComponents", "address_components", "addressSource",
    "address_source", "addressAccuracy", "address_accuracy", "district", "isp",
}


def location_from_payload(payload: dict[str, Any]) -> LocationProfile:
    """Build a profile from a caller-supplied ``location`` object.

    Caller values are trusted as-is; unknown keys are carried through.
    """
    return LocationProfile(
        country=payload.get("country") or "",
        region=payload.get("region") or "",
        city=payload.get("city") or "",
        lat=_float_or_none(payload.get("lat")),
        lon=_float_or_none(payload.get("lon")),
        timezone=payload.get("timezone") or DEFAULT_TIMEZONE,
        full_address=payload.get("fullAddress") or payload.get("full_address"),
        address_components=payload.get("addressComponents") or payload.get("address_components"),
        address_source=(
            payload.get("addressSource") or payload.get("address_source") or None
        ),
        address_accuracy=payload.get("addressAccuracy") or payload.get("address_accuracy"),
        district=payload.get("district"),
        isp=payload.get("isp"),
        extra={k: v for k, v in payload.items() if k not in _KNOWN_KEYS},
    )


def location_from_stored_address(address: dict[str, Any] | None) -> LocationProfile | None:
    """Profile from a user's stored address, or None if it has no coordinates."""
    if not address:
        return None
    coords = address.get("coordinates") or {}
    lat = _float_or_none(coords.get("lat"))
    lon = _float_or_none(coords.get("lon"))
    if lat is None or lon is None:
        return None

    return LocationProfile(
        country=address.get("country") or "",
        region=address.get("state") or "",
        city=address.get("city") or "",
        lat=lat,
        lon=lon,
        timezone=DEFAULT_TIMEZONE,
        full_address=address.get("fullAddress"),
        address_components={
            "street": address.get("street"),
            "neighbourhood": address.get("neighbourhood"),
            "city": address.get("city"),
            "state": address.get("state"),
            "country": address.get("country"),
            "postcode": address.get("postcode"),
        },
        address_source=SOURCE_USER_STORED,
        address_accuracy=ACCURACY_EXACT,
    )


def location_from_ip_payload(payload: dict[str, Any]) -> LocationProfile | None:
    """Profile from an ip-api.com response, or None if the lookup failed."""
    if payload.get("status") != "success":
        return None
    return LocationProfile(
        country=payload.get("country") or "",
        region=payload.get("regionName") or "",
        city=payload.get("city") or "",
        lat=_float_or_none(payload.get("lat")),
        lon=_float_or_none(payload.get("lon")),
        timezone=payload.get("timezone") or DEFAULT_TIMEZONE,
        district=payload.get("district") or None,
        isp=payload.get("isp") or None,
        address_source=SOURCE_IP,
    )


# ---------------------------------------------------------------------------
# Address enrichment
# ---------------------------------------------------------------------------

def build_fallback_address(location: LocationProfile) -> str:
    """Join district, city, region and country into an approximate address."""
    parts = [
        p for p in (location.district, location.city, location.region, location.country)
        if p
    ]
    return ", ".join(parts) or NO_ADDRESS


def with_estimated_address(location: LocationProfile) -> LocationProfile:
    """Attach a city-level address synthesized from known fields."""
    return replace(
        location,
        full_address=build_fallback_address(location),
        address_components={
            "street": None,
            "neighbourhood": None,
            "city": location.city,
            "state": location.region,
            "country": location.country,
            "postcode": None,
        },
        address_source=SOURCE_ESTIMATED,
        address_accuracy=ACCURACY_CITY,
    )


def with_reverse_geocoded_address(
    location: LocationProfile, payload: dict[str, Any]
) -> LocationProfile | None:
    """Attach an address from a Nominatim ``/reverse`` payload.

    Returns None when the payload has no ``address`` block.
    """
    addr = payload.get("address") if isinstance(payload, dict) else None
    if not addr:
        return None

    settlement = addr.get("city") or addr.get("town") or addr.get("village")
    parts = [
        addr.get("house_number"),
        addr.get("road"),
        addr.get("neighbourhood"),
        addr.get("suburb"),
        settlement,
        addr.get("state"),
    ]
    full_address = ", ".join(p for p in parts if p)

    return replace(
        location,
        full_address=full_address or build_fallback_address(location),
        address_components={
            "street": addr.get("road"),
            "neighbourhood": addr.get("neighbourhood") or addr.get("suburb"),
            "city": settlement or location.city,
            "state": addr.get("state") or location.region,
            "country": addr.get("country") or location.country,
            "postcode": addr.get("postcode"),
        },
        address_source=SOURCE_NOMINATIM,
        address_accuracy=ACCURACY_APPROXIMATE,
    )


def compose_full_address(address: dict[str, Any]) -> str:
    """Format a user-entered address for display and forward geocoding."""
    country = address.get("country") or "Nigeria"
    return f"{address['street']}, {address['city']}, {address['state']}, {country}"
