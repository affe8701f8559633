"""Recommendation engine: sizing guidance, prompt, reply parsing and validation."""

from engine.errors import (
    ApplianceValidationError,
    RecommendationError,
    RecommendationInvalid,
    RecommendationUnavailable,
    ResponseParseError,
)
from .parser import Recommendation, parse_recommendation, require_recommendation
from .prompt import build_prompt
from .sizing import compute_sizing_guidance
from .validator import ensure_valid, validate

__all__ = [
    "ApplianceValidationError",
    "RecommendationError",
    "RecommendationInvalid",
    "RecommendationUnavailable",
    "ResponseParseError",
    "Recommendation",
    "parse_recommendation",
    "require_recommendation",
    "build_prompt",
    "compute_sizing_guidance",
    "ensure_valid",
    "validate",
]
