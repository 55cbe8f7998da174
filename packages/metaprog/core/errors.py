"""Exception taxonomy for the build pipeline.

Storage and generation failures outside the test loop propagate to the
``build()`` caller unchanged. ``TestFailure`` only lives inside the repair
loop; once the retry bound is spent it is wrapped in ``GenerationExhausted``.
"""

from __future__ import annotations

from typing import Any


class MetaprogError(Exception):
    """Base class for all metaprog errors."""


class NotFoundError(MetaprogError):
    """The cache has no artifact for a description (or its body is gone)."""

    def __init__(self, description: str | None = None, artifact_id: str | None = None) -> None:
        self.description = description
        self.artifact_id = artifact_id
        if artifact_id is None:
            message = f"No cached function for description: {description!r}"
        elif description is None:
            message = f"Artifact {artifact_id} has no source body"
        else:
            message = f"Artifact {artifact_id} for {description!r} has no source body"
        super().__init__(message)


class LoadError(MetaprogError):
    """Persisted source could not be compiled or bound to a single entry point."""

    def __init__(self, artifact_id: str, reason: str) -> None:
        self.artifact_id = artifact_id
        self.reason = reason
        super().__init__(f"Failed to load artifact {artifact_id}: {reason}")


class GenerationError(MetaprogError):
    """The generator returned nothing usable as source text."""


class TestFailure(MetaprogError):
    """A declared test case did not pass.

    Internal to the repair loop, never raised out of ``build()`` directly.

    Attributes:
        case_label: Human-readable label of the failing case
        expected: Expected value (example cases only)
        actual: Value the function returned, if it returned
        error: Exception raised by the function or predicate, if any
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        case_label: str,
        *,
        expected: Any = None,
        actual: Any = None,
        error: BaseException | None = None,
    ) -> None:
        self.case_label = case_label
        self.expected = expected
        self.actual = actual
        self.error = error
        if error is not None:
            detail = f"raised {type(error).__name__}: {error}"
        else:
            detail = f"returned {actual!r}, expected {expected!r}"
        super().__init__(f"{case_label} {detail}")


class GenerationExhausted(MetaprogError):
    """Every repair attempt for a failing test case was spent without a pass.

    The last underlying failure is chained as ``__cause__`` and kept on
    ``last_error``.
    """

    def __init__(
        self,
        description: str,
        *,
        attempts: int,
        case_label: str,
        last_error: BaseException,
    ) -> None:
        self.description = description
        self.attempts = attempts
        self.case_label = case_label
        self.last_error = last_error
        super().__init__(
            f"Could not repair {description!r} after {attempts} attempt(s); "
            f"{case_label} still failing: {last_error}"
        )


class ConfigError(MetaprogError):
    """Configuration file could not be read or validated."""
