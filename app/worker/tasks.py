import logging
import uuid

from app.config import settings
from app.models.database import get_sync_session_factory
from app.services.history_service import PersistenceError, append_history
from app.worker import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="record_recommendation_history")
def record_recommendation_history(user_id: str, entry: dict) -> int | None:
    """Persist one recommendation for a user, keeping the newest entries only."""
    with get_sync_session_factory()() as db:
        try:
            retained = append_history(db, uuid.UUID(user_id), entry, settings.history_limit)
        except PersistenceError:
            logger.exception(
                "History write failed for request %s", entry.get("request_id"),
                extra={"user_id": user_id},
            )
            return None
    logger.info("History recorded for request %s", entry.get("request_id"), extra={"user_id": user_id})
    return retained
