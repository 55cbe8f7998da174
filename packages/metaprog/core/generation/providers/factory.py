"""Provider factory for LLM provider dispatch."""

from __future__ import annotations

from metaprog.core.config.models import AppConfig
from metaprog.core.generation.providers.base import LLMProvider
from metaprog.core.generation.providers.openai import OpenAIProvider


def create_llm_provider(app_config: AppConfig) -> LLMProvider:
    """Create the configured LLM provider."""
    settings = app_config.generator
    provider_name = settings.provider.lower().strip()

    if provider_name == "openai":
        return OpenAIProvider(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
        )

    raise ValueError(f"Unknown LLM provider configured: {settings.provider}")
