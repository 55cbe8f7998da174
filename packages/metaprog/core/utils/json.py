"""JSON helpers for config files and prompt evidence."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def _json_default(obj: Any) -> Any:
    """JSON serializer for types not supported by default.

    Handles:
    - pathlib.Path -> str
    - pydantic models -> dict
    - sets/tuples -> list
    - anything else -> repr()
    """
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=repr)
    return repr(obj)


def dumps_value(obj: Any, indent: int | None = None) -> str:
    """Serialize an arbitrary value for display in a prompt.

    Never raises for unserializable values; they fall back to ``repr()``.
    """
    try:
        return json.dumps(obj, indent=indent, ensure_ascii=False, default=_json_default)
    except (TypeError, ValueError):
        # Circular references, non-string dict keys
        return repr(obj)


def read_json(path: str | Path) -> dict[str, Any]:
    """Read and parse JSON file.

    Args:
        path: Input file path

    Returns:
        Parsed JSON as dictionary
    """
    data: Any = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected JSON object, got {type(data).__name__}")
    return data
