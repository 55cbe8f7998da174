"""Base types and protocol for LLM providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class ProviderType(str, Enum):
    """Supported provider types."""

    OPENAI = "openai"


@dataclass(frozen=True)
class TokenUsage:
    """Standardized token usage."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


@dataclass(frozen=True)
class ResponseMetadata:
    """Standardized response metadata."""

    response_id: str | None = None
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    model: str | None = None


@dataclass(frozen=True)
class LLMResponse:
    """Standardized LLM response."""

    content: str
    metadata: ResponseMetadata


class LLMProvider(Protocol):
    """Generic protocol for text-generating LLM providers.

    Implementations must handle:
    - Provider-level retries (network errors, rate limits, 5xx)
    - Token usage tracking
    """

    @property
    def provider_type(self) -> ProviderType:
        """Provider type identifier."""
        ...

    async def generate_text_async(
        self,
        messages: list[dict[str, str]],
        model: str,
        temperature: float | None = None,
    ) -> LLMResponse:
        """Generate a raw text completion for a chat transcript.

        Higher-level failures (unusable output) are NOT retried here.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model identifier
            temperature: Sampling temperature (provider default if None)

        Returns:
            LLMResponse with the text content and metadata

        Raises:
            LLMProviderError: On unrecoverable errors after retries
        """
        ...

    def get_token_usage(self) -> TokenUsage:
        """Cumulative token usage across all calls."""
        ...

    def reset_token_tracking(self) -> None:
        """Reset token usage tracking."""
        ...
