import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI
from sqlalchemy import text
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api.v1 import address, recommendations
from app.core.errors import register_exception_handlers
from app.core.logging import RequestLoggingMiddleware, setup_logging
from app.models.database import get_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    logger.info(
        "%s starting (environment=%s, ai_model=%s)",
        settings.app_name, settings.environment, settings.ai_model,
    )
    yield
    await get_engine().dispose()


def create_app() -> FastAPI:
    setup_logging(
        json_format=settings.environment == "production",
        level=logging.DEBUG if settings.debug else logging.INFO,
    )

    application = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)

    application.include_router(
        recommendations.router, prefix="/api/v1/recommendations", tags=["recommendations"]
    )
    application.include_router(address.router, prefix="/api/v1/user", tags=["address"])

    @application.get("/health")
    async def health_check() -> dict:
        from app.models.database import get_session_factory

        result: dict = {
            "status": "ok",
            "services": {},
            "providers": {
                "ai": "configured" if settings.ai_api_key else "not configured",
                "weather": "configured" if settings.weather_api_key else "not configured",
            },
        }

        # Check database
        try:
            async with get_session_factory()() as session:
                await session.execute(text("SELECT 1"))
            result["services"]["database"] = "ok"
        except Exception as e:
            result["services"]["database"] = f"error: {e}"
            result["status"] = "degraded"

        # Check Redis
        try:
            import redis

            r = redis.from_url(settings.redis_url, socket_connect_timeout=2)
            r.ping()
            result["services"]["redis"] = "ok"
        except Exception as e:
            result["services"]["redis"] = f"error: {e}"
            result["status"] = "degraded"

        return result

    return application


app = create_app()
