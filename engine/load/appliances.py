"""Appliance load aggregation.

Turns a caller-supplied list of appliance entries into the totals the
sizing and pricing rules work from: connected wattage, summed day/night
usage hours, daily energy, and a coarse day/night usage classification.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from engine.errors import ApplianceValidationError

MAX_HOURS_PER_PERIOD = 24.0

_ITEM_MESSAGE = "Each item must have nameOfItem, quantity, wattage, dayHours, and nightHours"

# A period counts as dominant when it exceeds the other by this factor.
DOMINANCE_RATIO = 1.5


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ApplianceEntry:
    name_of_item: str
    quantity: int
    wattage: float
    day_hours: float
    night_hours: float

    @property
    def total_wattage(self) -> float:
        return self.wattage * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "nameOfItem": self.name_of_item,
            "quantity": self.quantity,
            "wattage": self.wattage,
            "dayHours": self.day_hours,
            "nightHours": self.night_hours,
        }


@dataclass
class UsagePattern:
    pattern: str              # "Day-heavy" | "Night-heavy" | "Balanced"
    day_usage_pct: float
    night_usage_pct: float
    total_hours: float
    battery_advice: str


@dataclass
class PowerProfile:
    total_wattage: float
    total_day_hours: float
    total_night_hours: float
    daily_consumption_kwh: float
    usage_pattern: UsagePattern
    appliances: list[ApplianceEntry]

    @property
    def daily_consumption_label(self) -> str:
        return f"{self.daily_consumption_kwh:.2f} kWh"


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def _number(raw: Any, field: str, index: int) -> float:
    if isinstance(raw, bool):
        raise ApplianceValidationError(
            _ITEM_MESSAGE,
            [f"items[{index}].{field} must be a number"],
        )
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ApplianceValidationError(
            _ITEM_MESSAGE,
            [f"items[{index}].{field} must be a number"],
        )
    if not math.isfinite(value):
        raise ApplianceValidationError(
            _ITEM_MESSAGE,
            [f"items[{index}].{field} must be finite"],
        )
    return value


def parse_appliance(raw: Any, index: int = 0) -> ApplianceEntry:
    """Validate one raw appliance mapping and build an ``ApplianceEntry``."""
    if not isinstance(raw, dict):
        raise ApplianceValidationError(_ITEM_MESSAGE, [f"items[{index}] must be an object"])

    missing = [
        f for f in ApplianceValidationError.REQUIRED_FIELDS
        if raw.get(f) is None or raw.get(f) == ""
    ]
    if missing:
        raise ApplianceValidationError(
            _ITEM_MESSAGE, [f"items[{index}] is missing {', '.join(missing)}"]
        )

    name = str(raw["nameOfItem"]).strip()
    if not name:
        raise ApplianceValidationError(_ITEM_MESSAGE, [f"items[{index}].nameOfItem is empty"])

    quantity = _number(raw["quantity"], "quantity", index)
    wattage = _number(raw["wattage"], "wattage", index)
    day_hours = _number(raw["dayHours"], "dayHours", index)
    night_hours = _number(raw["nightHours"], "nightHours", index)

    problems: list[str] = []
    if quantity <= 0 or quantity != int(quantity):
        problems.append(f"items[{index}].quantity must be a positive integer")
    if wattage <= 0:
        problems.append(f"items[{index}].wattage must be positive")
    for field, hours in (("dayHours", day_hours), ("nightHours", night_hours)):
        if not 0 <= hours <= MAX_HOURS_PER_PERIOD:
            problems.append(f"items[{index}].{field} must be between 0 and 24")
    if problems:
        raise ApplianceValidationError(_ITEM_MESSAGE, problems)

    return ApplianceEntry(
        name_of_item=name,
        quantity=int(quantity),
        wattage=wattage,
        day_hours=day_hours,
        night_hours=night_hours,
    )


def parse_appliances(raw_items: Any) -> list[ApplianceEntry]:
    """Validate the ``items`` payload. A single object is treated as a list of one."""
    if raw_items is None or raw_items == [] or raw_items == {}:
        raise ApplianceValidationError("Items are required")
    if not isinstance(raw_items, list):
        raw_items = [raw_items]
    return [parse_appliance(item, i) for i, item in enumerate(raw_items)]


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def classify_usage(total_day_hours: float, total_night_hours: float) -> UsagePattern:
    """Classify usage as Day-heavy, Night-heavy or Balanced."""
    total_hours = total_day_hours + total_night_hours
    if total_hours > 0:
        day_pct = round(total_day_hours / total_hours * 100, 1)
        night_pct = round(total_night_hours / total_hours * 100, 1)
    else:
        day_pct = night_pct = 0.0

    if total_day_hours > total_night_hours * DOMINANCE_RATIO:
        pattern, advice = "Day-heavy", "Smaller battery capacity needed"
    elif total_night_hours > total_day_hours * DOMINANCE_RATIO:
        pattern, advice = "Night-heavy", "Larger battery capacity recommended"
    else:
        pattern, advice = "Balanced", "Standard battery configuration suitable"

    return UsagePattern(
        pattern=pattern,
        day_usage_pct=day_pct,
        night_usage_pct=night_pct,
        total_hours=total_hours,
        battery_advice=advice,
    )


def daily_consumption_kwh(
    total_wattage: float, total_day_hours: float, total_night_hours: float
) -> float:
    """Daily energy in kWh, rounded to 2 decimals."""
    return round(total_wattage * (total_day_hours + total_night_hours) / 1000, 2)


def compute_load(appliances: list[ApplianceEntry]) -> PowerProfile:
    """Aggregate appliance entries into a ``PowerProfile``."""
    if not appliances:
        raise ApplianceValidationError("Items are required")

    total_wattage = sum(a.total_wattage for a in appliances)
    total_day = sum(a.day_hours for a in appliances)
    total_night = sum(a.night_hours for a in appliances)

    return PowerProfile(
        total_wattage=total_wattage,
        total_day_hours=total_day,
        total_night_hours=total_night,
        daily_consumption_kwh=daily_consumption_kwh(total_wattage, total_day, total_night),
        usage_pattern=classify_usage(total_day, total_night),
        appliances=list(appliances),
    )
