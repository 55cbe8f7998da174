"""Source generation: prompt packs, LLM providers and the generator adapter."""

from metaprog.core.generation.generator import FunctionGenerator
from metaprog.core.generation.models import FailureEvidence
from metaprog.core.generation.prompts import PromptLoadError, RenderError
from metaprog.core.generation.protocols import Generator
from metaprog.core.generation.providers import (
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    OpenAIProvider,
    create_llm_provider,
)
from metaprog.core.generation.schemas import (
    describe_output_schema,
    describe_schema,
    describe_schemas,
)

__all__ = [
    "FailureEvidence",
    "FunctionGenerator",
    "Generator",
    "LLMProvider",
    "LLMProviderError",
    "LLMResponse",
    "OpenAIProvider",
    "PromptLoadError",
    "RenderError",
    "create_llm_provider",
    "describe_output_schema",
    "describe_schema",
    "describe_schemas",
]
