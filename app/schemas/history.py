from datetime import datetime
from typing import Any

from pydantic import ConfigDict

from app.schemas.common import CamelModel


class HistoryEntryResponse(CamelModel):
    request_id: str
    total_wattage: float
    daily_consumption: str
    appliances: list[dict[str, Any]]
    location: dict[str, Any]
    solar_conditions: dict[str, Any]
    recommended_system: dict[str, Any]
    ai_model: str
    processing_time_ms: int
    price_per_watt: float | None
    requested_at: datetime

    model_config = ConfigDict(from_attributes=True)


class HistoryResponse(CamelModel):
    success: bool = True
    count: int
    history: list[HistoryEntryResponse]
