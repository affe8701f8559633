"""Tests for appliance validation and load aggregation."""

import pytest

from engine.errors import ApplianceValidationError
from engine.load.appliances import (
    classify_usage,
    compute_load,
    daily_consumption_kwh,
    parse_appliance,
    parse_appliances,
)


class TestParseAppliance:
    def test_valid_item(self, fridge_item):
        entry = parse_appliance(fridge_item)
        assert entry.name_of_item == "Fridge"
        assert entry.quantity == 1
        assert entry.wattage == 150
        assert entry.total_wattage == 150

    def test_numeric_strings_are_coerced(self):
        entry = parse_appliance({
            "nameOfItem": "TV", "quantity": "2", "wattage": "120.5",
            "dayHours": "3", "nightHours": "4",
        })
        assert entry.quantity == 2
        assert entry.wattage == 120.5
        assert entry.total_wattage == 241

    def test_zero_hours_allowed(self, fridge_item):
        fridge_item["dayHours"] = 0
        entry = parse_appliance(fridge_item)
        assert entry.day_hours == 0

    @pytest.mark.parametrize("field", ["nameOfItem", "quantity", "wattage", "dayHours", "nightHours"])
    def test_missing_field(self, fridge_item, field):
        del fridge_item[field]
        with pytest.raises(ApplianceValidationError) as exc_info:
            parse_appliance(fridge_item)
        assert field in exc_info.value.errors[0]
        assert exc_info.value.can_retry is False

    @pytest.mark.parametrize(
        "field,value",
        [
            ("quantity", 0),
            ("quantity", 1.5),
            ("wattage", -10),
            ("wattage", 0),
            ("dayHours", -1),
            ("nightHours", 24.5),
            ("wattage", "lots"),
            ("quantity", True),
        ],
    )
    def test_out_of_range(self, fridge_item, field, value):
        fridge_item[field] = value
        with pytest.raises(ApplianceValidationError):
            parse_appliance(fridge_item)

    def test_not_an_object(self):
        with pytest.raises(ApplianceValidationError, match="Each item must have"):
            parse_appliance(["Fridge", 1, 150])


class TestParseAppliances:
    @pytest.mark.parametrize("raw", [None, [], {}])
    def test_empty(self, raw):
        with pytest.raises(ApplianceValidationError, match="Items are required"):
            parse_appliances(raw)

    def test_single_object_becomes_list(self, fridge_item):
        assert len(parse_appliances(fridge_item)) == 1

    def test_error_points_at_item_index(self, fridge_item):
        bad = dict(fridge_item, wattage=-5)
        with pytest.raises(ApplianceValidationError) as exc_info:
            parse_appliances([fridge_item, bad])
        assert exc_info.value.errors == ["items[1].wattage must be positive"]


class TestClassifyUsage:
    def test_day_heavy(self):
        pattern = classify_usage(10, 2)
        assert pattern.pattern == "Day-heavy"
        assert pattern.battery_advice == "Smaller battery capacity needed"
        assert pattern.day_usage_pct == 83.3
        assert pattern.night_usage_pct == 16.7

    def test_night_heavy(self):
        pattern = classify_usage(2, 10)
        assert pattern.pattern == "Night-heavy"
        assert pattern.battery_advice == "Larger battery capacity recommended"

    def test_ratio_boundary_is_balanced(self):
        # Exactly 1.5x is not strictly greater
        assert classify_usage(9, 6).pattern == "Balanced"

    def test_zero_hours(self):
        pattern = classify_usage(0, 0)
        assert pattern.pattern == "Balanced"
        assert pattern.day_usage_pct == 0
        assert pattern.total_hours == 0


class TestComputeLoad:
    def test_fridge(self, fridge_item):
        profile = compute_load(parse_appliances([fridge_item]))
        assert profile.total_wattage == 150
        assert profile.daily_consumption_kwh == 3.6
        assert profile.daily_consumption_label == "3.60 kWh"
        assert profile.usage_pattern.pattern == "Balanced"

    def test_household(self, household_items):
        profile = compute_load(parse_appliances(household_items))
        assert profile.total_wattage == 3000
        assert profile.total_day_hours == 4
        assert profile.total_night_hours == 2
        assert profile.daily_consumption_label == "18.00 kWh"

    def test_uses_summed_hours_across_items(self):
        # 100 W x 2h plus 100 W x 2h is reported as 200 W x 4h
        items = [
            {"nameOfItem": "A", "quantity": 1, "wattage": 100, "dayHours": 2, "nightHours": 0},
            {"nameOfItem": "B", "quantity": 1, "wattage": 100, "dayHours": 0, "nightHours": 2},
        ]
        assert compute_load(parse_appliances(items)).daily_consumption_kwh == 0.8

    def test_rounding(self):
        assert daily_consumption_kwh(333, 1, 0) == 0.33
