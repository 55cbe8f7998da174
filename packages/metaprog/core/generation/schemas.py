"""Convert declared type schemas into JSON-schema text for prompts.

A schema may be any type accepted by ``pydantic.TypeAdapter`` (builtins,
``list[int]``, ``TypedDict``, ``BaseModel`` subclasses, ...) or a JSON-schema
``dict`` that is passed through unchanged.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, TypeAdapter


def describe_schema(schema: Any) -> dict[str, Any]:
    if isinstance(schema, dict):
        return schema
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return schema.model_json_schema()
    return TypeAdapter(schema).json_schema()


def describe_schemas(schemas: Sequence[Any] | None) -> str | None:
    """Render input schemas as JSON, one per argument, separated by blank lines."""
    if not schemas:
        return None
    return "\n\n".join(json.dumps(describe_schema(s), indent=2) for s in schemas)


def describe_output_schema(schema: Any | None) -> str | None:
    if schema is None:
        return None
    return json.dumps(describe_schema(schema), indent=2)
