"""Nominatim (OpenStreetMap) and ip-api.com clients."""

import httpx

from app.config import settings


def _nominatim_headers() -> dict[str, str]:
    # Nominatim's usage policy requires an identifying User-Agent
    return {"User-Agent": settings.nominatim_user_agent}


async def reverse_geocode(lat: float, lon: float) -> dict:
    """Raw Nominatim ``/reverse`` payload for a coordinate pair."""
    url = f"{settings.nominatim_base_url}/reverse"
    params = {
        "format": "json",
        "lat": lat,
        "lon": lon,
        "zoom": 18,
        "addressdetails": 1,
    }

    async with httpx.AsyncClient(timeout=settings.reverse_geocode_timeout_seconds) as client:
        response = await client.get(url, params=params, headers=_nominatim_headers())
        response.raise_for_status()

    return response.json()


async def forward_geocode(address: str) -> dict | None:
    """Best Nominatim ``/search`` match for an address string, or None."""
    url = f"{settings.nominatim_base_url}/search"
    params = {
        "format": "json",
        "q": address,
        "countrycodes": settings.geocode_country_codes,
        "limit": 1,
        "addressdetails": 1,
    }

    async with httpx.AsyncClient(timeout=settings.forward_geocode_timeout_seconds) as client:
        response = await client.get(url, params=params, headers=_nominatim_headers())
        response.raise_for_status()

    results = response.json()
    if not results:
        return None

    best = results[0]
    return {
        "lat": float(best["lat"]),
        "lon": float(best["lon"]),
        "display_name": best.get("display_name"),
        "confidence": best.get("importance") or 0.5,
    }


async def lookup_ip(ip: str) -> dict:
    """Raw ip-api.com payload for a client address."""
    url = f"{settings.ip_lookup_url}/{ip}"
    params = {"fields": "status,message,country,regionName,city,lat,lon,timezone,isp,district"}

    async with httpx.AsyncClient(timeout=settings.ip_lookup_timeout_seconds) as client:
        response = await client.get(url, params=params)
        response.raise_for_status()

    return response.json()
