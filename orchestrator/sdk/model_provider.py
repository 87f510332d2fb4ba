"""LLM provider access: streaming chat completions and the model catalog.

The provider is any OpenAI-compatible endpoint (OpenRouter by default).
Credentials and the model name are resolved on every call so the settings
page takes effect immediately.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any

import httpx
import openai

from orchestrator.errors import ConfigurationError, UpstreamError
from orchestrator.models.provider_model import ProviderModel
from orchestrator.utils.settings import AI_API_KEY, AI_BASE_URL, AI_MODEL, SettingsResolver

logger = logging.getLogger(__name__)

APP_TITLE = "n8n AI Orchestrator"
DEFAULT_APP_URL = "http://localhost:8000"


def _attribution_headers() -> dict[str, str]:
    # OpenRouter uses these to attribute traffic to the app
    return {
        "HTTP-Referer": os.getenv("APP_URL", DEFAULT_APP_URL),
        "X-Title": APP_TITLE,
    }


def _upstream_error(e: openai.APIError) -> UpstreamError:
    status_code = getattr(e, "status_code", None)
    return UpstreamError(status_code, f"Model provider error: {e.message}")


class ChatModelClient:
    """Chat completions against the configured provider."""

    def __init__(self, settings: SettingsResolver) -> None:
        self.settings = settings

    def _build_client(self) -> tuple[openai.AsyncOpenAI, str]:
        api_key = self.settings.get(AI_API_KEY)
        if not api_key:
            raise ConfigurationError(AI_API_KEY, "AI API key not configured. Set AI_API_KEY on the settings page.")
        client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=self.settings.get(AI_BASE_URL),
            default_headers=_attribution_headers(),
        )
        return client, self.settings.get(AI_MODEL)

    async def open_stream(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
    ) -> AsyncIterator[str]:
        """Start a streaming completion and return an iterator of text deltas.

        The request is sent before this returns, so a bad key or model name
        raises here instead of in the middle of a streamed response.
        """
        client, model = self._build_client()
        try:
            stream = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                stream=True,
            )
        except openai.APIError as e:
            logger.error("Streaming completion with %s failed: %s", model, e)
            raise _upstream_error(e) from e
        return self._iter_deltas(stream)

    async def _iter_deltas(self, stream: Any) -> AsyncIterator[str]:
        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        except openai.APIError as e:
            raise _upstream_error(e) from e
        finally:
            await stream.close()

    async def complete(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.2,
    ) -> str:
        """Non-streaming completion, returns the message text."""
        client, model = self._build_client()
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
            )
        except openai.APIError as e:
            logger.error("Completion with %s failed: %s", model, e)
            raise _upstream_error(e) from e
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


@dataclass
class CachedModelList:
    """A model listing and the monotonic time it was fetched at."""

    fetched_at: float
    models: list[ProviderModel]


class ModelCatalog:
    """Provider model listing with a time-bounded cache.

    Refresh is check-then-set without a lock: two concurrent refreshes both
    hit the provider and the last one wins, which is harmless.
    """

    CACHE_TTL_SECONDS = 60 * 60

    def __init__(
        self,
        settings: SettingsResolver,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.timeout = timeout
        self._transport = transport
        self._clock = clock
        self._cache: CachedModelList | None = None

    async def list_models(self) -> list[ProviderModel]:
        cached = self._cache
        if cached is not None and self._clock() - cached.fetched_at < self.CACHE_TTL_SECONDS:
            return cached.models

        models = await self._fetch_models()
        self._cache = CachedModelList(fetched_at=self._clock(), models=models)
        return models

    def clear_cache(self) -> None:
        self._cache = None

    async def _fetch_models(self) -> list[ProviderModel]:
        base_url = (self.settings.get(AI_BASE_URL) or "").rstrip("/")
        url = f"{base_url}/models"
        headers = _attribution_headers()
        api_key = self.settings.get(AI_API_KEY)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Fetching models from %s failed: %s", url, e)
            raise UpstreamError(e.response.status_code, f"Failed to fetch models: {e.response.reason_phrase}") from e
        except httpx.RequestError as e:
            logger.error("Fetching models from %s failed: %s", url, e)
            raise UpstreamError(None, f"Failed to connect to model provider at {base_url}: {e}") from e
        except ValueError as e:
            raise UpstreamError(response.status_code, "Model provider returned invalid JSON") from e

        models = [ProviderModel.model_validate(item) for item in data.get("data", [])]
        models.sort(key=lambda m: m.display_name.lower())
        return models
