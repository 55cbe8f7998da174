"""Protocol for source generators."""

from collections.abc import Sequence
from typing import Any, Protocol

from .models import FailureEvidence


class Generator(Protocol):
    """Turns descriptions (and failure evidence) into Python source text.

    Returned text is already stripped of code fences.
    """

    async def synthesize(
        self,
        description: str,
        input_schemas: Sequence[Any] | None = None,
        output_schema: Any | None = None,
    ) -> str: ...

    async def repair(
        self,
        description: str,
        prior_source: str,
        evidence: FailureEvidence,
        input_schemas: Sequence[Any] | None = None,
        output_schema: Any | None = None,
    ) -> str: ...
