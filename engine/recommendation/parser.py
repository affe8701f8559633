"""Parsing of the model's free-form reply into a ``Recommendation``.

The reply is untrusted text that should contain one JSON object, possibly
wrapped in prose or a code fence. The first decodable brace-delimited
object is taken; anything else is reported as a tagged failure rather than
raised as a generic exception.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any

from engine.errors import ResponseParseError

COMPONENT_KEYS = ("inverter", "battery", "solarPanels")
PRICING_KEYS = ("subtotal", "vat", "totalAmount")

# Parse outcome tags
OK = "ok"
PARSE_FAILED = ResponseParseError.PARSE_FAILED
SCHEMA_INVALID = ResponseParseError.SCHEMA_INVALID


@dataclass
class Component:
    name: str
    quantity: int
    warranty: str | None = None
    image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "warranty": self.warranty,
            "imageUrl": self.image_url,
        }


@dataclass
class Pricing:
    subtotal: float
    vat: float
    total_amount: float
    currency: str = "NGN"

    def to_dict(self) -> dict[str, Any]:
        return {
            "subtotal": self.subtotal,
            "vat": self.vat,
            "totalAmount": self.total_amount,
            "currency": self.currency,
        }


@dataclass
class Recommendation:
    system_name: str
    inverter: Component
    battery: Component
    solar_panels: Component
    pricing: Pricing
    performance: dict[str, Any] = field(default_factory=dict)
    suitability: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "systemName": self.system_name,
            "components": {
                "inverter": self.inverter.to_dict(),
                "battery": self.battery.to_dict(),
                "solarPanels": self.solar_panels.to_dict(),
            },
            "pricing": self.pricing.to_dict(),
            "performance": self.performance,
            "suitability": self.suitability,
        }


@dataclass
class ParseResult:
    status: str                                   # OK | PARSE_FAILED | SCHEMA_INVALID
    recommendation: Recommendation | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status == OK


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------

def extract_json_object(text: str) -> dict[str, Any] | None:
    """Return the first balanced ``{...}`` in *text* that decodes to an object."""
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            obj, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(obj, dict):
                return obj
        start = text.find("{", start + 1)
    return None


# ---------------------------------------------------------------------------
# Schema coercion
# ---------------------------------------------------------------------------

class _SchemaError(Exception):
    pass


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.replace(",", "").replace("₦", "").replace("NGN", "").strip()
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None


def _as_number(value: Any, path: str) -> float:
    # json and float() both accept NaN and Infinity
    number = _to_float(value)
    if number is None or not math.isfinite(number):
        raise _SchemaError(f"{path} must be a number")
    return number


def _as_count(value: Any, path: str) -> int:
    number = _as_number(value, path)
    if number < 1 or number != int(number):
        raise _SchemaError(f"{path} must be a positive whole number")
    return int(number)


def _component(raw: Any, key: str) -> Component:
    if not isinstance(raw, dict):
        raise _SchemaError(f"recommendation.components.{key} is missing")
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise _SchemaError(f"recommendation.components.{key}.name is missing")
    quantity = _as_count(raw.get("quantity", 1), f"recommendation.components.{key}.quantity")
    return Component(
        name=name.strip(),
        quantity=quantity,
        warranty=raw.get("warranty"),
        image_url=raw.get("imageUrl"),
    )


def _pricing(raw: Any) -> Pricing:
    if not isinstance(raw, dict):
        raise _SchemaError("recommendation.pricing is missing")
    values = {
        key: _as_number(raw.get(key), f"recommendation.pricing.{key}")
        for key in PRICING_KEYS
    }
    return Pricing(
        subtotal=values["subtotal"],
        vat=values["vat"],
        total_amount=values["totalAmount"],
        currency=raw.get("currency") or "NGN",
    )


def _recommendation(data: dict[str, Any]) -> Recommendation:
    rec = data.get("recommendation")
    if not isinstance(rec, dict):
        raise _SchemaError("recommendation is missing")
    components = rec.get("components")
    if not isinstance(components, dict):
        raise _SchemaError("recommendation.components is missing")

    return Recommendation(
        system_name=rec.get("systemName") or "Recommended Solar System",
        inverter=_component(components.get("inverter"), "inverter"),
        battery=_component(components.get("battery"), "battery"),
        solar_panels=_component(components.get("solarPanels"), "solarPanels"),
        pricing=_pricing(rec.get("pricing")),
        performance=rec.get("performance") if isinstance(rec.get("performance"), dict) else {},
        suitability=rec.get("suitability") if isinstance(rec.get("suitability"), dict) else {},
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_recommendation(text: str) -> ParseResult:
    """Parse a model reply into a tagged ``ParseResult``. Never raises."""
    data = extract_json_object(text or "")
    if data is None:
        return ParseResult(status=PARSE_FAILED, detail="No valid JSON object in AI response")
    try:
        recommendation = _recommendation(data)
    except _SchemaError as exc:
        return ParseResult(status=SCHEMA_INVALID, detail=f"Invalid AI response structure: {exc}")
    return ParseResult(status=OK, recommendation=recommendation)


def require_recommendation(text: str) -> Recommendation:
    """Like ``parse_recommendation`` but raises ``ResponseParseError`` on failure."""
    result = parse_recommendation(text)
    if not result.ok:
        raise ResponseParseError(result.status, result.detail)
    return result.recommendation
