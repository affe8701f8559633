"""Tests for static solar conditions and climate advice."""

import pytest

from engine.weather.solar_conditions import (
    SolarConditions,
    climate_optimizations,
    default_conditions,
    estimate_sunlight_hours,
    static_conditions,
)


class TestStaticConditions:
    @pytest.mark.parametrize(
        "city,expected",
        [
            ("Lagos", (5.5, 65, 85)),
            ("Kano", (7.5, 25, 45)),
            ("Port Harcourt", (5.0, 75, 90)),
            ("Jos", (6.8, 40, 60)),
        ],
    )
    def test_known_city(self, city, expected):
        conditions = static_conditions(city)
        assert (
            conditions.average_sunlight_hours, conditions.cloud_cover, conditions.humidity
        ) == expected
        assert conditions.source == "static"

    @pytest.mark.parametrize("city", ["Enugu", "", None])
    def test_unknown_city_uses_abuja(self, city):
        conditions = static_conditions(city)
        assert conditions.average_sunlight_hours == 6.5
        assert conditions.cloud_cover == 45

    def test_defaults(self):
        conditions = default_conditions()
        assert (conditions.average_sunlight_hours, conditions.cloud_cover, conditions.humidity) == (
            6.5, 30, 70,
        )
        assert conditions.source == "default"


class TestSunlightEstimate:
    def test_centre_of_nigeria(self):
        assert estimate_sunlight_hours(9) == 6.5

    def test_north(self):
        assert estimate_sunlight_hours(12) == pytest.approx(6.8)

    def test_clamped(self):
        assert estimate_sunlight_hours(-60) == 5.0
        assert estimate_sunlight_hours(60) == 8.0


class TestClimateOptimizations:
    def test_lagos(self):
        advice = climate_optimizations("Lagos", static_conditions("Lagos"))
        assert advice == [
            "Anti-corrosion coating recommended for high humidity",
            "Consider additional panels for frequent cloud cover",
            "Marine-grade components recommended for coastal location",
            "Enhanced battery storage for limited sunlight hours",
        ]

    def test_kano(self):
        assert climate_optimizations("Kano", static_conditions("Kano")) == [
            "Standard configuration suitable for location"
        ]

    def test_live_readings(self):
        conditions = SolarConditions(
            average_sunlight_hours=6.2, cloud_cover=80, humidity=50, source="live"
        )
        assert climate_optimizations("Abuja", conditions) == [
            "Consider additional panels for frequent cloud cover"
        ]
