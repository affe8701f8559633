"""Per-user recommendation history.

Writes happen off the request path: the API enqueues
``record_recommendation_history`` and the worker calls ``append_history``
with a synchronous session. Append and trim share one transaction, with the
owning user row locked so concurrent writers for the same user serialize.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.history import RecommendationHistory
from app.models.user import User

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """History write failed; never surfaced to API callers."""


def build_history_entry(response: dict[str, Any]) -> dict[str, Any]:
    """Flatten a success payload into a JSON-serializable history row."""
    power = response["power_requirements"]
    location_profile = response["location_profile"]
    metadata = response["metadata"]
    requested_at = metadata["generated_at"]
    if isinstance(requested_at, datetime):
        requested_at = requested_at.isoformat()

    return {
        "request_id": response["customer_info"]["request_id"],
        "total_wattage": power["total_wattage"],
        "daily_consumption": power["daily_consumption"],
        "appliances": power["appliances"],
        "location": location_profile["location"],
        "solar_conditions": location_profile["solar_conditions"],
        "recommended_system": response["recommendation"],
        "ai_model": metadata["ai_model"],
        "processing_time_ms": metadata["processing_time"],
        "price_per_watt": metadata.get("price_per_watt"),
        "requested_at": requested_at,
    }


def append_history(
    db: Session, user_id: uuid.UUID, entry: dict[str, Any], limit: int
) -> int:
    """Append one entry and keep only the newest *limit* for the user.

    Returns the number of entries retained. Raises ``PersistenceError``.
    """
    row = dict(entry)
    if isinstance(row.get("requested_at"), str):
        row["requested_at"] = datetime.fromisoformat(row["requested_at"])
    row.setdefault("requested_at", datetime.now(timezone.utc))

    try:
        owner = db.execute(
            select(User.id).where(User.id == user_id).with_for_update()
        ).scalar_one_or_none()
        if owner is None:
            raise PersistenceError(f"User {user_id} does not exist")

        db.add(RecommendationHistory(user_id=user_id, **row))
        db.flush()

        newest = (
            select(RecommendationHistory.id)
            .where(RecommendationHistory.user_id == user_id)
            .order_by(RecommendationHistory.id.desc())
            .limit(limit)
        )
        trimmed = db.execute(
            delete(RecommendationHistory)
            .where(
                RecommendationHistory.user_id == user_id,
                RecommendationHistory.id.not_in(newest.scalar_subquery()),
            )
            .execution_options(synchronize_session=False)
        ).rowcount
        retained = db.execute(
            select(func.count())
            .select_from(RecommendationHistory)
            .where(RecommendationHistory.user_id == user_id)
        ).scalar_one()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    except PersistenceError:
        db.rollback()
        raise

    if trimmed:
        logger.info("Trimmed %d old history entries for user %s", trimmed, user_id)
    return retained


def record_history(user_id: uuid.UUID, response: dict[str, Any]) -> None:
    """Enqueue the history write. Broker failures are logged, not raised."""
    from app.worker.tasks import record_recommendation_history

    entry = build_history_entry(response)
    try:
        record_recommendation_history.apply_async(args=[str(user_id), entry], retry=False)
    except Exception:
        logger.exception(
            "Could not enqueue history for request %s", entry["request_id"],
            extra={"user_id": str(user_id)},
        )
