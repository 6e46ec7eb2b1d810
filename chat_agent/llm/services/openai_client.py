"""OpenAI chat-completion client used for streamed agent turns."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from openai import NOT_GIVEN, AsyncOpenAI
from openai import OpenAIError

from ...core.config import AgentSettings
from ...core.exceptions import ExternalServiceError
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class OpenAIClient:
    """Thin wrapper around the OpenAI streaming chat completions API.

    The SDK client is built on first use so a missing API key only fails the
    model call, not service startup.
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self.model = model
        self._api_key = api_key
        self._base_url = base_url
        self._client: AsyncOpenAI | None = None

    @classmethod
    def from_settings(cls, settings: AgentSettings) -> OpenAIClient:
        api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
        base_url = str(settings.openai_api_base).rstrip("/") if settings.openai_api_base else None
        return cls(settings.openai_model, api_key=api_key or None, base_url=base_url)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            masked_key = f"{self._api_key[:4]}***{self._api_key[-4:]}" if self._api_key else None
            logger.info(
                "openai_client_init",
                model=self.model,
                base_url=self._base_url or "default",
                api_key_masked=masked_key or "from-environment",
            )
            self._client = AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client

    async def stream_chat_completion(
        self,
        messages: list[dict[str, Any]],
        *,
        tools: list[dict[str, Any]] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield streamed chat completion chunks as plain dictionaries."""

        logger.info(
            "openai_chat_request",
            model=self.model,
            message_count=len(messages),
            tool_count=len(tools or []),
        )

        try:
            stream = await self._get_client().chat.completions.create(
                model=self.model,
                messages=messages,
                tools=tools or NOT_GIVEN,
                stream=True,
            )
            async for chunk in stream:
                yield chunk.model_dump()
        except OpenAIError as exc:
            logger.error(
                "openai_sdk_error",
                error_type=type(exc).__name__,
                message=str(exc),
            )
            raise ExternalServiceError(f"OpenAI SDK error: {exc}") from exc
