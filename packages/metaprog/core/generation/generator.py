"""LLM-backed source generator."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from metaprog.core.errors import GenerationError
from metaprog.core.generation.models import FailureEvidence
from metaprog.core.generation.prompts import PROMPTS_DIR, PromptPackLoader
from metaprog.core.generation.providers.base import LLMProvider
from metaprog.core.generation.schemas import describe_output_schema, describe_schemas
from metaprog.core.utils.text import strip_code_fences

logger = logging.getLogger(__name__)

SYNTHESIZE_PACK = "synthesize"
REPAIR_PACK = "repair"


class FunctionGenerator:
    """Renders a prompt pack, calls the provider, and cleans up the reply.

    Stateless between calls; safe to share across pipelines.
    """

    def __init__(
        self,
        provider: LLMProvider,
        model: str,
        temperature: float | None = None,
        prompt_base_path: str | Path = PROMPTS_DIR,
    ) -> None:
        """
        Args:
            provider: LLM provider used for every request
            model: Model identifier passed to the provider
            temperature: Sampling temperature (provider default if None)
            prompt_base_path: Directory holding the ``synthesize`` and ``repair`` packs
        """
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.prompt_loader = PromptPackLoader(prompt_base_path)

    def build_messages(self, pack_name: str, variables: dict[str, Any]) -> list[dict[str, str]]:
        rendered = self.prompt_loader.load_and_render(pack_name, variables)
        return [
            {"role": "system", "content": rendered["system"]},
            {"role": "user", "content": rendered["user"]},
        ]

    async def synthesize(
        self,
        description: str,
        input_schemas: Sequence[Any] | None = None,
        output_schema: Any | None = None,
    ) -> str:
        messages = self.build_messages(
            SYNTHESIZE_PACK,
            {
                "description": description,
                "input_schemas": describe_schemas(input_schemas),
                "output_schema": describe_output_schema(output_schema),
            },
        )
        logger.debug(f"Synthesizing {description!r} with {self.model}")
        return await self._complete(messages, description)

    async def repair(
        self,
        description: str,
        prior_source: str,
        evidence: FailureEvidence,
        input_schemas: Sequence[Any] | None = None,
        output_schema: Any | None = None,
    ) -> str:
        messages = self.build_messages(
            REPAIR_PACK,
            {
                "description": description,
                "prior_source": prior_source,
                "evidence": evidence,
                "input_schemas": describe_schemas(input_schemas),
                "output_schema": describe_output_schema(output_schema),
            },
        )
        logger.debug(f"Repairing {description!r} ({evidence.case_label}) with {self.model}")
        return await self._complete(messages, description)

    async def _complete(self, messages: list[dict[str, str]], description: str) -> str:
        response = await self.provider.generate_text_async(
            messages, model=self.model, temperature=self.temperature
        )
        source = strip_code_fences(response.content)
        if not source:
            raise GenerationError(f"Generator returned no source for {description!r}")

        usage = response.metadata.token_usage
        logger.debug(
            f"Generated {len(source)} chars for {description!r} "
            f"(tokens: {usage.prompt_tokens} in / {usage.completion_tokens} out)"
        )
        return source
