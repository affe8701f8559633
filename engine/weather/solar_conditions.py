"""Solar-relevant weather conditions for a location.

Live readings come from the weather service; this module holds the
latitude-based sunlight estimate, the static per-city table used when no
live provider is configured, and the climate advice derived from both.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SolarConditions:
    average_sunlight_hours: float
    cloud_cover: float        # %
    humidity: float           # %
    temperature: float | None = None   # °C, live readings only
    source: str = "static"    # "live" | "static" | "default"


# Reference city used when the requested city is not in the table.
REFERENCE_CITY = "Abuja"

CITY_SOLAR_DATA: dict[str, tuple[float, float, float]] = {
    # city: (average sunlight hours, cloud cover %, humidity %)
    "Lagos": (5.5, 65, 85),
    "Abuja": (6.5, 45, 70),
    "Kano": (7.5, 25, 45),
    "Port Harcourt": (5.0, 75, 90),
    "Ibadan": (6.0, 55, 75),
    "Kaduna": (7.0, 35, 55),
    "Jos": (6.8, 40, 60),
}


def default_conditions() -> SolarConditions:
    """Last-resort metrics when even the static lookup fails."""
    return SolarConditions(
        average_sunlight_hours=6.5, cloud_cover=30, humidity=70, source="default"
    )


def estimate_sunlight_hours(latitude: float) -> float:
    """Average daily sunlight hours from latitude.

    Linear around the centre of Nigeria (9°N), clamped to 5.0-8.0 h.
    """
    hours = 6.5 + (latitude - 9) * 0.1
    return max(5.0, min(8.0, hours))


def static_conditions(city: str | None) -> SolarConditions:
    """Table lookup by city name, falling back to the reference city."""
    sunlight, cloud, humidity = CITY_SOLAR_DATA.get(
        city or "", CITY_SOLAR_DATA[REFERENCE_CITY]
    )
    return SolarConditions(
        average_sunlight_hours=sunlight,
        cloud_cover=cloud,
        humidity=humidity,
        source="static",
    )


def climate_optimizations(city: str | None, conditions: SolarConditions) -> list[str]:
    """Installation advice for the local climate."""
    advice: list[str] = []
    if conditions.humidity > 80:
        advice.append("Anti-corrosion coating recommended for high humidity")
    if conditions.cloud_cover > 60:
        advice.append("Consider additional panels for frequent cloud cover")
    if city == "Lagos":
        advice.append("Marine-grade components recommended for coastal location")
    if conditions.average_sunlight_hours < 6:
        advice.append("Enhanced battery storage for limited sunlight hours")
    return advice or ["Standard configuration suitable for location"]
