from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.deps import get_current_user, get_optional_user
from app.core.rate_limit import client_ip, recommendation_limiter
from app.models.database import get_db
from app.models.history import RecommendationHistory
from app.models.user import User
from app.schemas.history import HistoryEntryResponse, HistoryResponse
from app.schemas.recommendation import (
    AIProbeResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from app.services.ai_client import CompletionClient, get_ai_client
from app.services.history_service import record_history
from app.services.recommendation_service import assemble_response, run_pipeline
from engine.errors import RecommendationError

router = APIRouter()

PROBE_PROMPT = "Reply with the single word: OK"


@router.post(
    "",
    response_model=RecommendationResponse,
    summary="Recommend a solar system",
    description=(
        "Size and price an inverter, battery bank and panel array for the "
        "submitted appliances. Authentication is optional; authenticated "
        "requests are added to the caller's history."
    ),
)
async def create_recommendation(
    body: RecommendationRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    user: User | None = Depends(get_optional_user),
    ai_client: CompletionClient = Depends(get_ai_client),
):
    recommendation_limiter.check(request)

    result = await run_pipeline(
        body.items, body.location, user, client_ip(request), ai_client
    )
    payload = assemble_response(result, user)

    if user is not None:
        background_tasks.add_task(record_history, user.id, payload)

    return payload


@router.get(
    "/history",
    response_model=HistoryResponse,
    summary="Recommendation history",
    description="The caller's most recent recommendations, newest first.",
)
async def list_history(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(RecommendationHistory)
        .where(RecommendationHistory.user_id == user.id)
        .order_by(RecommendationHistory.id.desc())
        .limit(settings.history_limit)
    )
    entries = [HistoryEntryResponse.model_validate(e) for e in result.scalars().all()]
    return HistoryResponse(count=len(entries), history=entries)


@router.get(
    "/test",
    response_model=AIProbeResponse,
    summary="AI connectivity check",
)
async def probe_ai(
    response: Response,
    user: User = Depends(get_current_user),
    ai_client: CompletionClient = Depends(get_ai_client),
):
    try:
        reply = await ai_client.complete(PROBE_PROMPT)
    except RecommendationError as exc:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return AIProbeResponse(
            success=False,
            message="AI service test failed",
            ai_model=ai_client.model,
            error="; ".join(exc.errors) or exc.message,
        )
    return AIProbeResponse(
        success=True,
        message="AI service is working",
        ai_model=ai_client.model,
        reply=reply.strip(),
    )
