"""Declared test cases and strict result comparison.

Two styles:
- ``ExampleCase``: call with fixed arguments and compare against an expected value
- ``PredicateCase``: hand the function to a predicate that decides pass/fail

Functions and predicates may be sync or async.
"""

from __future__ import annotations

import inspect
import textwrap
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from metaprog.core.errors import TestFailure
from metaprog.core.generation.models import FailureEvidence
from metaprog.core.utils.json import dumps_value


def strict_equal(actual: Any, expected: Any) -> bool:
    """Value equality that also requires identical types.

    ``1 == 1.0`` and ``True == 1`` do not count as matches.
    """
    return type(actual) is type(expected) and bool(actual == expected)


def format_error(error: BaseException) -> str:
    return f"{type(error).__name__}: {error}"


async def call_maybe_async(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


@dataclass(frozen=True)
class ExampleCase:
    """``func(*args, **kwargs)`` must return ``expected`` (strictly)."""

    args: tuple[Any, ...]
    expected: Any
    kwargs: dict[str, Any] = field(default_factory=dict)

    def label(self, index: int) -> str:
        call = ", ".join(
            [repr(a) for a in self.args] + [f"{k}={v!r}" for k, v in self.kwargs.items()]
        )
        return f"test #{index} (f({call}) == {self.expected!r})"

    async def run(self, func: Callable[..., Any], label: str) -> None:
        """
        Raises:
            TestFailure: If the call raises or returns something else
        """
        try:
            actual = await call_maybe_async(func, *self.args, **self.kwargs)
        except Exception as e:
            raise TestFailure(label, expected=self.expected, error=e) from e

        if not strict_equal(actual, self.expected):
            raise TestFailure(label, expected=self.expected, actual=actual)

    def evidence(self, failure: TestFailure) -> FailureEvidence:
        return FailureEvidence(
            kind="example",
            case_label=failure.case_label,
            arguments=dumps_value(list(self.args)),
            keyword_arguments=dumps_value(self.kwargs) if self.kwargs else None,
            expected=dumps_value(self.expected),
            actual=None if failure.error is not None else dumps_value(failure.actual),
            error=format_error(failure.error) if failure.error is not None else None,
        )


@dataclass(frozen=True)
class PredicateCase:
    """``predicate(func)`` must return a truthy value without raising."""

    predicate: Callable[[Callable[..., Any]], Any]

    def label(self, index: int) -> str:
        name = getattr(self.predicate, "__name__", type(self.predicate).__name__)
        return f"test #{index} (predicate {name})"

    def source(self) -> str:
        try:
            return textwrap.dedent(inspect.getsource(self.predicate)).strip()
        except (OSError, TypeError):
            # Builtins, partials, REPL-defined callables
            return getattr(self.predicate, "__qualname__", repr(self.predicate))

    async def run(self, func: Callable[..., Any], label: str) -> None:
        """
        Raises:
            TestFailure: If the predicate raises or returns a falsy value
        """
        try:
            verdict = await call_maybe_async(self.predicate, func)
        except Exception as e:
            raise TestFailure(label, error=e) from e

        if not verdict:
            raise TestFailure(label, expected=True, actual=verdict)

    def evidence(self, failure: TestFailure) -> FailureEvidence:
        return FailureEvidence(
            kind="predicate",
            case_label=failure.case_label,
            predicate_source=self.source(),
            actual=None if failure.error is not None else dumps_value(failure.actual),
            error=format_error(failure.error) if failure.error is not None else None,
        )


TestCase = ExampleCase | PredicateCase
