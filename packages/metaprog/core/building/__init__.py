"""Build pipeline, test cases and the fluent builder."""

from metaprog.core.building.builder import FunctionBuilder, default_cache_handler
from metaprog.core.building.cases import ExampleCase, PredicateCase, strict_equal
from metaprog.core.building.locks import description_lock
from metaprog.core.building.pipeline import DEFAULT_RETRIES, BuildPipeline
from metaprog.core.building.state import BuildReport, BuildState

__all__ = [
    "DEFAULT_RETRIES",
    "BuildPipeline",
    "BuildReport",
    "BuildState",
    "ExampleCase",
    "FunctionBuilder",
    "PredicateCase",
    "default_cache_handler",
    "description_lock",
    "strict_equal",
]
