"""Fluent builder surface.

Example:
    >>> add = await (
    ...     FunctionBuilder("add two numbers", input_schemas=[int, int], output_schema=int)
    ...     .test(1, 2, expected=3)
    ...     .build()
    ... )
    >>> add(2, 5)
    7
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from metaprog.core.building.cases import ExampleCase, PredicateCase
from metaprog.core.building.pipeline import BuildPipeline
from metaprog.core.building.state import BuildReport
from metaprog.core.caching.backends.fs import FSCacheHandler
from metaprog.core.caching.protocols import CacheHandler
from metaprog.core.config.loader import load_app_config
from metaprog.core.config.models import AppConfig
from metaprog.core.generation.generator import FunctionGenerator
from metaprog.core.generation.protocols import Generator
from metaprog.core.generation.providers.base import LLMProvider
from metaprog.core.generation.providers.factory import create_llm_provider
from metaprog.core.io import RealFileSystem

logger = logging.getLogger(__name__)


def default_cache_handler(config: AppConfig) -> FSCacheHandler:
    """Filesystem cache at the configured locations."""
    return FSCacheHandler(
        RealFileSystem(),
        index_path=config.cache.resolved_index_path(),
        generated_dir=config.cache.resolved_generated_dir(),
    )


class FunctionBuilder:
    """Mutable builder that accumulates schemas and tests, then builds.

    Every fluent method returns ``self``. Omitted collaborators come from
    ``AppConfig``: the cache location, the model, the provider and the retry
    bound.
    """

    def __init__(
        self,
        description: str,
        *,
        provider: LLMProvider | None = None,
        model: str | None = None,
        generator: Generator | None = None,
        input_schemas: list[Any] | None = None,
        output_schema: Any | None = None,
        cache_handler: CacheHandler | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self.description = description
        self.config = config or load_app_config()
        self._provider = provider
        self._model = model
        self._generator = generator
        self._input_schemas = list(input_schemas) if input_schemas else None
        self._output_schema = output_schema
        self._cache_handler = cache_handler
        self._retries = self.config.build.retries
        self._pipeline: BuildPipeline | None = None
        self._pending: list[ExampleCase | PredicateCase] = []

    def input(self, *schemas: Any) -> FunctionBuilder:
        """Declare one schema per positional argument."""
        self._input_schemas = list(schemas) or None
        self._pipeline = None
        return self

    def output(self, schema: Any) -> FunctionBuilder:
        self._output_schema = schema
        self._pipeline = None
        return self

    def test(self, *args: Any, expected: Any, **kwargs: Any) -> FunctionBuilder:
        """Require ``f(*args, **kwargs)`` to return exactly ``expected``."""
        return self._declare(ExampleCase(args=args, expected=expected, kwargs=kwargs))

    def check(self, predicate: Callable[[Callable[..., Any]], Any]) -> FunctionBuilder:
        """Require ``predicate(f)`` to be truthy (may be async)."""
        return self._declare(PredicateCase(predicate))

    def retries(self, retries: int) -> FunctionBuilder:
        if retries < 0:
            raise ValueError(f"retries must be >= 0, got {retries}")
        self._retries = retries
        if self._pipeline is not None:
            self._pipeline.retries = retries
        return self

    def _declare(self, case: ExampleCase | PredicateCase) -> FunctionBuilder:
        self._pending.append(case)
        if self._pipeline is not None:
            self._pipeline.declare_test(case)
        return self

    @property
    def cache_handler(self) -> CacheHandler:
        if self._cache_handler is None:
            self._cache_handler = default_cache_handler(self.config)
        return self._cache_handler

    @property
    def generator(self) -> Generator:
        if self._generator is None:
            settings = self.config.generator
            provider = self._provider or create_llm_provider(self.config)
            self._generator = FunctionGenerator(
                provider,
                model=self._model or settings.model,
                temperature=settings.temperature,
            )
        return self._generator

    @property
    def pipeline(self) -> BuildPipeline:
        if self._pipeline is None:
            self._pipeline = BuildPipeline(
                self.description,
                self.generator,
                self.cache_handler,
                input_schemas=self._input_schemas,
                output_schema=self._output_schema,
                retries=self._retries,
                verify_cached=self.config.build.verify_cached,
            )
            for case in self._pending:
                self._pipeline.declare_test(case)
        return self._pipeline

    @property
    def last_report(self) -> BuildReport | None:
        return self._pipeline.last_report if self._pipeline else None

    async def build(self) -> Callable[..., Any]:
        return await self.pipeline.build()

    def build_sync(self) -> Callable[..., Any]:
        """Blocking ``build()``; not for use inside a running event loop.

        The returned callable may be async if the generated code is.
        """
        return asyncio.run(self.build())

    async def fetch_code(self) -> str:
        return await self.pipeline.fetch_code()
