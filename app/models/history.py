import uuid
from datetime import datetime

from sqlalchemy import Float, ForeignKey, Integer, String, DateTime, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.database import Base


class RecommendationHistory(Base):
    """One accepted recommendation in a user's bounded history log.

    ``id`` increases with insertion order; trimming keeps the highest ids.
    """

    __tablename__ = "recommendation_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    request_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    total_wattage: Mapped[float] = mapped_column(Float, nullable=False)
    daily_consumption: Mapped[str] = mapped_column(String(32), nullable=False)  # "3.60 kWh"
    appliances: Mapped[list] = mapped_column(JSONB, nullable=False)
    location: Mapped[dict] = mapped_column(JSONB, nullable=False)
    solar_conditions: Mapped[dict] = mapped_column(JSONB, nullable=False)
    recommended_system: Mapped[dict] = mapped_column(JSONB, nullable=False)
    ai_model: Mapped[str] = mapped_column(String(100), nullable=False)
    processing_time_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_watt: Mapped[float | None] = mapped_column(Float)
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped["User"] = relationship(back_populates="recommendation_history")  # noqa: F821
