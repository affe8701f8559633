"""Component sizing guidance handed to the model alongside the load.

The model is steered towards these figures so its output lands inside
the envelope the validator accepts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Inverter headroom over connected load
INVERTER_HEADROOM = 1.3
# Battery bank: daily energy × reserve / unit capacity
BATTERY_RESERVE = 1.2
BATTERY_UNIT_KWH = 3.5
# Panels: daily energy × weather buffer / panel rating
PANEL_WEATHER_BUFFER = 1.5
PANEL_RATING_W = 450

SUGGESTED_MAX_BATTERIES = 16
SUGGESTED_MAX_PANELS = 20

ABSOLUTE_MAX_BATTERIES = 25
ABSOLUTE_MAX_PANELS = 30
ABSOLUTE_MAX_INVERTER_KW = 15


@dataclass
class SizingGuidance:
    inverter_kw: int
    battery_count: int
    panel_count: int
    suggested_battery_quantity: int
    suggested_panel_quantity: int


def compute_sizing_guidance(total_wattage: float, daily_consumption_kwh: float) -> SizingGuidance:
    """Pre-compute inverter, battery and panel targets for the prompt."""
    inverter_kw = math.ceil(total_wattage * INVERTER_HEADROOM / 1000)
    battery_count = math.ceil(daily_consumption_kwh * BATTERY_RESERVE / BATTERY_UNIT_KWH)
    panel_count = math.ceil(daily_consumption_kwh * PANEL_WEATHER_BUFFER * 1000 / PANEL_RATING_W)

    inverter_kw = max(1, min(inverter_kw, ABSOLUTE_MAX_INVERTER_KW))
    battery_count = max(1, min(battery_count, ABSOLUTE_MAX_BATTERIES))
    panel_count = max(1, min(panel_count, ABSOLUTE_MAX_PANELS))

    return SizingGuidance(
        inverter_kw=inverter_kw,
        battery_count=battery_count,
        panel_count=panel_count,
        suggested_battery_quantity=min(battery_count, SUGGESTED_MAX_BATTERIES),
        suggested_panel_quantity=min(panel_count, SUGGESTED_MAX_PANELS),
    )
