"""Prompt construction for the recommendation model."""

from __future__ import annotations

from engine.load.appliances import PowerProfile
from engine.location.profile import LocationProfile
from engine.recommendation.sizing import (
    ABSOLUTE_MAX_BATTERIES,
    ABSOLUTE_MAX_INVERTER_KW,
    ABSOLUTE_MAX_PANELS,
    SizingGuidance,
)
from engine.weather.solar_conditions import SolarConditions

VAT_RATE = 0.075

_PRICING_GUIDELINES = """\
PRICING GUIDELINES for the Nigerian market - realistic quality pricing:
- Inverters: N200,000 - N800,000 depending on capacity (2kVA-10kVA range)
- Quality deep-cycle batteries: N80,000 - N200,000 per unit (100Ah-200Ah range)
- Solar panels: N80,000 - N150,000 per 400-500W panel
- Installation and accessories: 15-20% of equipment cost
- VAT: 7.5% of subtotal

TARGET SYSTEM COST: typically N2.5M - N8M for residential systems
MINIMUM QUALITY THRESHOLD: N1,200 per watt
MAXIMUM ACCEPTABLE TOTAL: N12M (only for very large installations)"""


def _appliance_lines(profile: PowerProfile) -> str:
    return "\n".join(
        f"- {a.name_of_item}: {a.quantity} units, {a.wattage:g}W each, "
        f"{a.day_hours:g}h day + {a.night_hours:g}h night"
        for a in profile.appliances
    )


def build_prompt(
    profile: PowerProfile,
    location: LocationProfile,
    conditions: SolarConditions,
    guidance: SizingGuidance,
) -> str:
    """Single-turn instruction asking for exactly one priced system as JSON."""
    daily = profile.daily_consumption_label
    wattage = f"{profile.total_wattage:g}"
    where = ", ".join(p for p in (location.city, location.region, location.country) if p)

    return f"""You are an expert solar energy consultant for Nigeria with deep knowledge of \
solar installations and current market products. Always return valid JSON.

Based on the following information, provide EXACTLY 1 OPTIMAL solar system recommendation.

LOCATION: {where}
ADDRESS: {location.full_address or "unknown"}
SOLAR CONDITIONS: {conditions.average_sunlight_hours:g} hours average sunlight, \
{conditions.cloud_cover:g}% cloud cover, {conditions.humidity:g}% humidity

POWER REQUIREMENTS:
- Total wattage needed: {wattage}W
- Daily consumption: {daily}
- Day usage hours: {profile.total_day_hours:g}
- Night usage hours: {profile.total_night_hours:g}
- Usage pattern: {profile.usage_pattern.pattern}

APPLIANCES:
{_appliance_lines(profile)}

{_PRICING_GUIDELINES}

COMPONENT SIZING:
- Inverter capacity: about {guidance.inverter_kw}kW (1.2-1.5x total wattage)
- Battery bank: about {guidance.battery_count} units for {daily} daily consumption plus backup
- Solar panels: about {guidance.panel_count} x 450W panels (1.3-1.8x daily consumption for weather buffer)
- NEVER exceed {ABSOLUTE_MAX_BATTERIES} batteries, {ABSOLUTE_MAX_PANELS} panels, \
or a {ABSOLUTE_MAX_INVERTER_KW}kW inverter for residential systems
- State inverter capacity in kW in the inverter name (e.g. "5kW")

REQUIREMENTS:
1. Recommend the SINGLE MOST OPTIMAL system, not multiple options
2. Use specific brand names and models available in Nigeria
3. Include product image URLs from manufacturers or trusted Nigerian retailers
4. Consider the climate conditions in {location.city or "the area"}

Return the response in this EXACT JSON format:
{{
  "recommendation": {{
    "systemName": "Optimal Solar System for Your Needs",
    "components": {{
      "inverter": {{"name": "Brand Model 5kW Pure Sine Wave Inverter", "quantity": 1, \
"warranty": "2 years warranty", "imageUrl": "PRODUCT_IMAGE_URL"}},
      "battery": {{"name": "Brand Model 150Ah Deep Cycle Battery", \
"quantity": {guidance.suggested_battery_quantity}, "warranty": "5 years warranty", \
"imageUrl": "PRODUCT_IMAGE_URL"}},
      "solarPanels": {{"name": "Brand Model 450W Monocrystalline Panel", \
"quantity": {guidance.suggested_panel_quantity}, "warranty": "25 years warranty", \
"imageUrl": "PRODUCT_IMAGE_URL"}}
    }},
    "pricing": {{
      "subtotal": 0,
      "vat": 0,
      "totalAmount": 0,
      "currency": "NGN"
    }},
    "performance": {{
      "dailyConsumption": "{daily}",
      "backupDuration": "12-16 hours",
      "efficiency": "95%"
    }},
    "suitability": {{
      "reason": "Why this system matches {daily} daily consumption",
      "climateConsiderations": ["..."]
    }}
  }}
}}

CRITICAL PRICING RULES:
- Price per watt must be N1,000-N3,000 (total cost divided by {wattage}W)
- Total system cost MUST be under N12,000,000
- vat must be exactly {VAT_RATE * 100:g}% of subtotal, rounded to the nearest naira
- totalAmount must equal subtotal + vat
- If unsure about pricing, err on the lower side rather than overpricing"""
