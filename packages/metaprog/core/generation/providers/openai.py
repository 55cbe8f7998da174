"""OpenAI provider implementation."""

from __future__ import annotations

import logging
import threading
from typing import Any

from openai import AsyncOpenAI

from metaprog.core.generation.providers.base import (
    LLMResponse,
    ProviderType,
    ResponseMetadata,
    TokenUsage,
)
from metaprog.core.generation.providers.errors import LLMProviderError

logger = logging.getLogger(__name__)


class OpenAIProvider:
    """OpenAI provider on the Responses API.

    Network errors, rate limits and 5xx responses are retried by the client
    itself (``max_retries``); whatever is left surfaces as ``LLMProviderError``.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 120.0,
        max_retries: int = 3,
        client: AsyncOpenAI | None = None,
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (uses env var if not provided)
            base_url: Alternate API base URL
            timeout: Request timeout in seconds
            max_retries: Client-level retry count
            client: Preconfigured client (overrides the other arguments)
        """
        self._client_kwargs: dict[str, Any] = {
            "api_key": api_key,
            "base_url": base_url,
            "timeout": timeout,
            "max_retries": max_retries,
        }
        self._async_client = client

        self._token_lock = threading.Lock()
        self._total_tokens = TokenUsage()

    @property
    def client(self) -> AsyncOpenAI:
        """Async client, created on first use (a missing API key only fails on a real call)."""
        if self._async_client is None:
            self._async_client = AsyncOpenAI(**self._client_kwargs)
        return self._async_client

    @property
    def provider_type(self) -> ProviderType:
        """Provider type identifier."""
        return ProviderType.OPENAI

    def get_token_usage(self) -> TokenUsage:
        """Get cumulative token usage (thread-safe)."""
        with self._token_lock:
            return self._total_tokens

    def reset_token_tracking(self) -> None:
        """Reset token tracking (thread-safe)."""
        with self._token_lock:
            self._total_tokens = TokenUsage()

    def _update_token_usage(self, usage: TokenUsage) -> None:
        with self._token_lock:
            self._total_tokens = self._total_tokens + usage

    async def generate_text_async(
        self,
        messages: list[dict[str, str]],
        model: str,
        temperature: float | None = None,
    ) -> LLMResponse:
        """Generate a text response asynchronously.

        Raises:
            LLMProviderError: On API failure or empty output
        """
        request_params: dict[str, Any] = {"model": model, "input": messages}
        if temperature is not None:
            request_params["temperature"] = temperature

        try:
            response = await self.client.responses.create(**request_params)
        except Exception as e:
            logger.error(f"OpenAI provider error: {e}")
            raise LLMProviderError(f"Provider error: {e}") from e

        content = response.output_text
        if not content:
            raise LLMProviderError("Empty response from OpenAI API")

        token_usage = TokenUsage()
        usage = getattr(response, "usage", None)
        if usage:
            token_usage = TokenUsage(
                prompt_tokens=getattr(usage, "input_tokens", 0) or 0,
                completion_tokens=getattr(usage, "output_tokens", 0) or 0,
                total_tokens=getattr(usage, "total_tokens", 0) or 0,
            )
            self._update_token_usage(token_usage)

        return LLMResponse(
            content=content,
            metadata=ResponseMetadata(
                response_id=getattr(response, "id", None),
                token_usage=token_usage,
                model=model,
            ),
        )
