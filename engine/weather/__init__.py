"""Solar conditions: static per-city table, latitude estimate and climate advice."""

from .solar_conditions import (
    CITY_SOLAR_DATA,
    SolarConditions,
    climate_optimizations,
    default_conditions,
    estimate_sunlight_hours,
    static_conditions,
)

__all__ = [
    "CITY_SOLAR_DATA",
    "SolarConditions",
    "climate_optimizations",
    "default_conditions",
    "estimate_sunlight_hours",
    "static_conditions",
]
