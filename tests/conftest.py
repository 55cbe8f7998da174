"""Shared pytest fixtures for metaprog tests."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from types import SimpleNamespace
from typing import Any

import pytest

from metaprog.core.caching import FSCacheHandler
from metaprog.core.config import AppConfig
from metaprog.core.generation import FailureEvidence
from metaprog.core.io import FakeFileSystem, absolute_path

# ============================================================================
# Generated sources
# ============================================================================

MULTIPLY_SOURCE = """\
def multiply(a, b):
    return a * b


default = multiply
"""

# Concatenates string inputs: add("1", "2") == "12"
ADD_CONCAT_SOURCE = """\
def add(a, b):
    return a + b


default = add
"""

ADD_NUMERIC_SOURCE = """\
def add(a, b):
    return int(a) + int(b)


default = add
"""

BROKEN_SOURCE = "def add(a, b)\n    return a + b\n"


class ScriptedGenerator:
    """Generator double that replays queued sources and records every call.

    When a queue runs dry the last source is repeated.
    """

    def __init__(self, synthesized: Sequence[str] = (), repaired: Sequence[str] = ()) -> None:
        self.synthesized = list(synthesized)
        self.repaired = list(repaired)
        self.synthesize_calls: list[dict[str, Any]] = []
        self.repair_calls: list[dict[str, Any]] = []

    @property
    def call_count(self) -> int:
        return len(self.synthesize_calls) + len(self.repair_calls)

    @staticmethod
    def _next(queue: list[str]) -> str:
        if not queue:
            raise AssertionError("ScriptedGenerator ran out of sources")
        return queue.pop(0) if len(queue) > 1 else queue[0]

    async def synthesize(
        self,
        description: str,
        input_schemas: Sequence[Any] | None = None,
        output_schema: Any | None = None,
    ) -> str:
        self.synthesize_calls.append(
            {
                "description": description,
                "input_schemas": input_schemas,
                "output_schema": output_schema,
            }
        )
        return self._next(self.synthesized)

    async def repair(
        self,
        description: str,
        prior_source: str,
        evidence: FailureEvidence,
        input_schemas: Sequence[Any] | None = None,
        output_schema: Any | None = None,
    ) -> str:
        self.repair_calls.append(
            {
                "description": description,
                "prior_source": prior_source,
                "evidence": evidence,
                "input_schemas": input_schemas,
                "output_schema": output_schema,
            }
        )
        return self._next(self.repaired)


# ============================================================================
# Cache fixtures
# ============================================================================


@pytest.fixture
def fs() -> FakeFileSystem:
    """Provide fresh FakeFileSystem instance."""
    return FakeFileSystem()


@pytest.fixture
def cache_handler(fs: FakeFileSystem) -> FSCacheHandler:
    """Provide FSCacheHandler backed by the in-memory filesystem."""
    return FSCacheHandler(
        fs,
        index_path=absolute_path("/cache/metaprog-cache.json"),
        generated_dir=absolute_path("/cache/generated"),
    )


@pytest.fixture
def sources() -> SimpleNamespace:
    """Sample generated modules."""
    return SimpleNamespace(
        multiply=MULTIPLY_SOURCE,
        add_concat=ADD_CONCAT_SOURCE,
        add_numeric=ADD_NUMERIC_SOURCE,
        broken=BROKEN_SOURCE,
    )


@pytest.fixture
def make_generator():
    """Factory for ScriptedGenerator instances."""
    return ScriptedGenerator


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    """AppConfig with the cache under a temporary directory."""
    return AppConfig.model_validate(
        {"cache": {"dir": str(tmp_path / ".metaprog")}, "generator": {"api_key": "test-key"}}
    )


@pytest.fixture
def restore_root_logger():
    """Undo configure_logging() side effects on the root logger."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
