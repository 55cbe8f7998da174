"""Shared utilities for metaprog."""

from metaprog.core.utils.json import dumps_value, read_json
from metaprog.core.utils.text import strip_code_fences

__all__ = [
    "dumps_value",
    "read_json",
    "strip_code_fences",
]
