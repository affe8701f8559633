"""Rule-based sanity checks on a generated recommendation.

Two independent checks, pricing and component sizing. Each collects every
violation it finds instead of stopping at the first one. Any violation
makes the recommendation invalid; nothing here repairs figures.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field

from engine.errors import RecommendationInvalid
from engine.recommendation.parser import Pricing, Recommendation
from engine.recommendation.sizing import ABSOLUTE_MAX_BATTERIES, ABSOLUTE_MAX_PANELS

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pricing bounds (NGN)
# ---------------------------------------------------------------------------
MIN_PRICE_PER_WATT = 1_000
QUALITY_PRICE_PER_WATT = 1_200      # floor once daily consumption > 30 kWh
MAX_PRICE_PER_WATT = 3_000
QUALITY_CONSUMPTION_KWH = 30

MIN_SYSTEM_COST = 1_500_000
MIN_COST_PER_WATT = 1_000
MAX_SYSTEM_COST = 12_000_000
LARGE_LOAD_MIN_COST = 2_000_000     # floor once daily consumption > 25 kWh
LARGE_LOAD_KWH = 25

VAT_RATE = 0.075
ARITHMETIC_TOLERANCE = 1_000

# ---------------------------------------------------------------------------
# Sizing ratios
# ---------------------------------------------------------------------------
INVERTER_MIN_RATIO = 1.2
INVERTER_MAX_RATIO = 2.0
BATTERY_RESERVE = 1.5
BATTERY_AVG_KWH = 2.5
PANEL_BUFFER = 1.8
PANEL_AVG_W = 400

_INVERTER_KW = re.compile(r"(\d+(?:\.\d+)?)\s*kw", re.IGNORECASE)


@dataclass
class ValidationResult:
    valid: bool
    issues: list[str] = field(default_factory=list)
    failed_checks: list[str] = field(default_factory=list)


def _naira(amount: float) -> str:
    return f"₦{amount:,.0f}"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def price_per_watt(total_amount: float, total_wattage: float) -> float:
    return total_amount / total_wattage if total_wattage > 0 else math.inf


def check_pricing(pricing: Pricing, total_wattage: float, daily_consumption: float) -> list[str]:
    """Price-per-watt, total-cost and VAT arithmetic checks."""
    issues: list[str] = []
    total = pricing.total_amount
    ppw = price_per_watt(total, total_wattage)

    if ppw > MAX_PRICE_PER_WATT:
        issues.append(
            f"Price per watt too high: ₦{ppw:,.0f}/watt (recommended: ₦1,200-₦2,800/watt)"
        )
    if ppw < MIN_PRICE_PER_WATT:
        issues.append(
            f"Price per watt too low: ₦{ppw:,.0f}/watt "
            f"(minimum quality threshold: ₦{MIN_PRICE_PER_WATT:,}/watt)"
        )
    if ppw < QUALITY_PRICE_PER_WATT and daily_consumption > QUALITY_CONSUMPTION_KWH:
        issues.append(
            f"System price may be too low for {daily_consumption:.2f} kWh daily consumption "
            "- quality components needed"
        )

    if total > MAX_SYSTEM_COST:
        issues.append(
            f"System cost very high: {_naira(total)} (typical residential: ₦2.5M-₦12M)"
        )
    if total < LARGE_LOAD_MIN_COST and daily_consumption > LARGE_LOAD_KWH:
        issues.append(
            f"System cost seems too low: {_naira(total)} "
            f"for {daily_consumption:.2f} kWh daily consumption"
        )
    minimum_viable = max(MIN_SYSTEM_COST, total_wattage * MIN_COST_PER_WATT)
    if total < minimum_viable:
        issues.append(
            f"System cost too low: {_naira(total)} (minimum viable: {_naira(minimum_viable)})"
        )

    expected_vat = round_half_up(pricing.subtotal * VAT_RATE)
    if abs(pricing.vat - expected_vat) > ARITHMETIC_TOLERANCE:
        issues.append(
            f"VAT calculation incorrect: {_naira(pricing.vat)} (expected: {_naira(expected_vat)})"
        )
    expected_total = pricing.subtotal + pricing.vat
    if abs(total - expected_total) > ARITHMETIC_TOLERANCE:
        issues.append(
            f"Total amount calculation incorrect: {_naira(total)} "
            f"(expected: {_naira(expected_total)})"
        )
    return issues


def inverter_capacity_w(name: str) -> float | None:
    """Inverter rating in watts parsed from a name such as ``"Luminous 5kW"``."""
    match = _INVERTER_KW.search(name)
    if not match:
        return None
    return float(match.group(1)) * 1000


def check_components(
    recommendation: Recommendation, total_wattage: float, daily_consumption: float
) -> list[str]:
    """Inverter, battery and panel sizing checks."""
    issues: list[str] = []

    capacity = inverter_capacity_w(recommendation.inverter.name)
    if capacity is not None:
        min_required = total_wattage * INVERTER_MIN_RATIO
        max_reasonable = total_wattage * INVERTER_MAX_RATIO
        if capacity < min_required:
            issues.append(f"Inverter undersized: {capacity:g}W for {total_wattage:g}W load")
        elif capacity > max_reasonable:
            issues.append(f"Inverter oversized: {capacity:g}W for {total_wattage:g}W load")

    batteries = recommendation.battery.quantity
    max_batteries = math.ceil(daily_consumption * BATTERY_RESERVE / BATTERY_AVG_KWH)
    if batteries > max_batteries:
        issues.append(
            f"Too many batteries: {batteries} (reasonable max: {max_batteries} "
            f"for {daily_consumption:.2f} kWh daily)"
        )
    if batteries > ABSOLUTE_MAX_BATTERIES:
        issues.append(f"Excessive battery count: {batteries} batteries")

    panels = recommendation.solar_panels.quantity
    max_panels = math.ceil(daily_consumption * PANEL_BUFFER * 1000 / PANEL_AVG_W)
    if panels > max_panels:
        issues.append(
            f"Too many panels: {panels} (reasonable max: {max_panels} "
            f"for {daily_consumption:.2f} kWh daily)"
        )
    if panels > ABSOLUTE_MAX_PANELS:
        issues.append(f"Excessive panel count: {panels} panels")

    return issues


def validate(
    recommendation: Recommendation, total_wattage: float, daily_consumption: float
) -> ValidationResult:
    """Run both checks and report every issue found."""
    result = ValidationResult(valid=True)

    pricing_issues = check_pricing(recommendation.pricing, total_wattage, daily_consumption)
    if pricing_issues:
        result.failed_checks.append(RecommendationInvalid.PRICING)
        result.issues.extend(pricing_issues)

    component_issues = check_components(recommendation, total_wattage, daily_consumption)
    if component_issues:
        result.failed_checks.append(RecommendationInvalid.COMPONENTS)
        result.issues.extend(component_issues)

    result.valid = not result.issues
    if result.valid:
        logger.info(
            "Recommendation validated: ₦%.0f/watt, total %s",
            price_per_watt(recommendation.pricing.total_amount, total_wattage),
            _naira(recommendation.pricing.total_amount),
        )
    else:
        logger.warning("Recommendation failed %s checks: %s", result.failed_checks, result.issues)
    return result


def ensure_valid(
    recommendation: Recommendation, total_wattage: float, daily_consumption: float
) -> Recommendation:
    """Return *recommendation* unchanged or raise ``RecommendationInvalid``."""
    result = validate(recommendation, total_wattage, daily_consumption)
    if not result.valid:
        raise RecommendationInvalid(result.failed_checks, result.issues)
    return recommendation
