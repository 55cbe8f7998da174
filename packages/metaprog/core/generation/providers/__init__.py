"""LLM provider abstraction."""

from metaprog.core.generation.providers.base import (
    LLMProvider,
    LLMResponse,
    ProviderType,
    ResponseMetadata,
    TokenUsage,
)
from metaprog.core.generation.providers.errors import LLMProviderError
from metaprog.core.generation.providers.factory import create_llm_provider
from metaprog.core.generation.providers.openai import OpenAIProvider

__all__ = [
    "LLMProvider",
    "LLMProviderError",
    "LLMResponse",
    "OpenAIProvider",
    "ProviderType",
    "ResponseMetadata",
    "TokenUsage",
    "create_llm_provider",
]
