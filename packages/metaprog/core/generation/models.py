"""Generator-facing data models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FailureEvidence(BaseModel):
    """What the repair prompt is told about a failing test case.

    Values are pre-rendered to text so the generator never needs to
    serialize arbitrary Python objects itself.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["example", "predicate"]
    case_label: str = Field(description="Human-readable label of the failing case")
    arguments: str | None = Field(default=None, description="Positional arguments (JSON)")
    keyword_arguments: str | None = Field(default=None, description="Keyword arguments (JSON)")
    expected: str | None = Field(default=None, description="Expected result (JSON)")
    actual: str | None = Field(default=None, description="Actual result (JSON)")
    error: str | None = Field(default=None, description="'ExceptionType: message' if raised")
    predicate_source: str | None = Field(default=None, description="Source of the predicate")
