from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from app.schemas.common import CamelModel


class RecommendationRequest(BaseModel):
    # Item shape is checked by the load calculator so that problems are
    # reported per field with the 400 contract rather than a 422.
    items: Any = None
    location: dict[str, Any] | None = None

    model_config = ConfigDict(extra="ignore")


class CustomerInfo(CamelModel):
    user_id: str | None
    username: str
    email: str | None
    auth_method: str
    is_verified: bool
    request_id: str


class SolarConditionsOut(CamelModel):
    average_sunlight_hours: float
    cloud_cover: float
    humidity: float
    temperature: float | None = None
    source: str


class LocationProfileOut(CamelModel):
    location: dict[str, Any]
    solar_conditions: SolarConditionsOut
    climate_optimizations: list[str]


class UsagePatternOut(CamelModel):
    pattern: str
    day_usage: str
    night_usage: str
    total_hours: float
    recommendation: str


class PowerRequirements(CamelModel):
    total_wattage: float
    daily_consumption: str
    daily_consumption_kwh: float
    total_day_hours: float
    total_night_hours: float
    appliances: list[dict[str, Any]]
    usage_pattern: UsagePatternOut


class RecommendationMetadata(CamelModel):
    generated_at: datetime
    ai_model: str
    confidence: str
    token_type: str
    processing_time: int
    validations_passed: list[str]
    price_per_watt: int
    attempts: int


class RecommendationResponse(CamelModel):
    success: bool = True
    customer_info: CustomerInfo
    location_profile: LocationProfileOut
    power_requirements: PowerRequirements
    recommendation: dict[str, Any]
    metadata: RecommendationMetadata


class AIProbeResponse(CamelModel):
    success: bool
    message: str
    ai_model: str
    reply: str | None = None
    error: str | None = None
