"""Error taxonomy for the recommendation pipeline.

These are pure domain exceptions; the web layer maps them onto HTTP status
codes and JSON bodies (see ``app.core.errors``).
"""

from __future__ import annotations

RETRY_SUGGESTION = "Please try again - our AI will generate a new recommendation"


class RecommendationError(Exception):
    """Base class for failures surfaced to the caller."""

    can_retry: bool = True
    suggestion: str = RETRY_SUGGESTION

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])


class ApplianceValidationError(RecommendationError):
    """Malformed or incomplete appliance input. The caller must fix it."""

    can_retry = False
    suggestion = "Check the appliance list and submit again"

    REQUIRED_FIELDS = ("nameOfItem", "quantity", "wattage", "dayHours", "nightHours")


class ResponseParseError(RecommendationError):
    """The model's reply held no usable recommendation.

    ``kind`` is ``"parse_failed"`` when no JSON object could be decoded and
    ``"schema_invalid"`` when JSON was found but required fields are missing.
    """

    PARSE_FAILED = "parse_failed"
    SCHEMA_INVALID = "schema_invalid"

    suggestion = "Please try again in a few moments"

    def __init__(self, kind: str, detail: str):
        super().__init__("Unable to generate recommendations at this time", [detail])
        self.kind = kind
        self.detail = detail


class RecommendationInvalid(RecommendationError):
    """The model's numbers failed the pricing or component-sizing checks."""

    PRICING = "pricing"
    COMPONENTS = "components"

    _LABELS = {PRICING: "pricing", COMPONENTS: "component sizing"}

    def __init__(self, failed_checks: list[str], issues: list[str]):
        label = " and ".join(self._LABELS.get(c, c) for c in failed_checks)
        super().__init__(f"Generated recommendation has {label} issues", issues)
        self.failed_checks = list(failed_checks)
        self.issues = list(issues)


class RecommendationUnavailable(RecommendationError):
    """The AI provider could not be reached or the pipeline ran out of time."""

    suggestion = (
        "Please try again in a few moments. "
        "Our AI system will be back online shortly."
    )

    def __init__(self, detail: str):
        super().__init__("Recommendation service is temporarily unavailable", [detail])
        self.detail = detail
