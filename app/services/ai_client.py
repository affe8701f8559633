"""Process-wide client for the generative-AI completion service.

The pipeline depends on the small ``CompletionClient`` interface so tests
(and alternative providers) can be swapped in through FastAPI's dependency
overrides.
"""

from __future__ import annotations

import logging
from typing import Protocol

from openai import AsyncOpenAI, OpenAIError

from app.config import settings
from engine.errors import RecommendationUnavailable

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    model: str

    async def complete(self, prompt: str) -> str:
        """Send one single-turn prompt and return the reply text."""
        ...


class OpenAICompletionClient:
    """Chat-completions client for any OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        temperature: float = 0.2,
        max_tokens: int = 2000,
        timeout: float = 60.0,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )

    async def complete(self, prompt: str) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as exc:
            logger.error("AI completion failed: %s", exc)
            raise RecommendationUnavailable(f"AI service error: {type(exc).__name__}") from exc

        content = response.choices[0].message.content if response.choices else None
        return content or ""


class UnconfiguredCompletionClient:
    """Stand-in used when no API key is configured; every call fails retryably."""

    def __init__(self, model: str):
        self.model = model

    async def complete(self, prompt: str) -> str:
        raise RecommendationUnavailable("AI service is not configured")


_client: CompletionClient | None = None


def get_ai_client() -> CompletionClient:
    """Lazily build the singleton client from settings."""
    global _client
    if _client is None:
        if settings.ai_api_key:
            _client = OpenAICompletionClient(
                api_key=settings.ai_api_key,
                model=settings.ai_model,
                base_url=settings.ai_base_url,
                temperature=settings.ai_temperature,
                max_tokens=settings.ai_max_tokens,
                timeout=settings.ai_timeout_seconds,
            )
        else:
            logger.warning("AI_API_KEY not set; recommendations will be unavailable")
            _client = UnconfiguredCompletionClient(settings.ai_model)
    return _client
