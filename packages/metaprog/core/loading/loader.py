"""Turn persisted source text into an invocable function.

The source is compiled into a fresh, unregistered module object on every
call, so re-loading after a repair never mutates a callable that was handed
out earlier.

Trust posture: generated code runs in-process with the caller's privileges.
There is no sandbox.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
from collections.abc import Callable
from types import ModuleType
from typing import Any

from metaprog.core.errors import LoadError

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_POINT = "default"
MODULE_PREFIX = "metaprog_generated_"


class SourceLoader:
    """Compiles generated modules and resolves their single entry point.

    Resolution order:
    1. A callable module attribute named ``default`` (``entry_point``).
    2. Otherwise exactly one public function defined by the module itself.
    """

    def __init__(self, entry_point: str = DEFAULT_ENTRY_POINT) -> None:
        self.entry_point = entry_point

    def load(
        self, source: str, artifact_id: str, origin: str | None = None
    ) -> Callable[..., Any]:
        """Compile ``source`` and return its entry point.

        Args:
            source: Python source text of the artifact
            artifact_id: Store-assigned artifact id (used for the module name)
            origin: Optional path the source was read from (for tracebacks)

        Returns:
            The generated function

        Raises:
            LoadError: On syntax errors, import-time exceptions, or an
                ambiguous/missing entry point
        """
        module = self._exec_module(source, artifact_id, origin)
        func = self._resolve_entry_point(module, artifact_id)
        logger.debug(f"Loaded artifact {artifact_id} entry point {func.__name__!r}")
        return func

    def _exec_module(self, source: str, artifact_id: str, origin: str | None) -> ModuleType:
        module_name = f"{MODULE_PREFIX}{artifact_id}"
        filename = origin or f"<{module_name}>"

        try:
            code = compile(source, filename, "exec")
        except SyntaxError as e:
            raise LoadError(artifact_id, f"syntax error at line {e.lineno}: {e.msg}") from e

        spec = importlib.util.spec_from_loader(module_name, loader=None, origin=origin)
        if spec is None:
            raise LoadError(artifact_id, "could not create module spec")
        module = importlib.util.module_from_spec(spec)
        if origin is not None:
            module.__file__ = origin

        try:
            exec(code, module.__dict__)  # noqa: S102
        except Exception as e:
            raise LoadError(
                artifact_id, f"module raised {type(e).__name__} on import: {e}"
            ) from e

        return module

    def _resolve_entry_point(self, module: ModuleType, artifact_id: str) -> Callable[..., Any]:
        explicit = getattr(module, self.entry_point, None)
        if explicit is not None:
            if not callable(explicit):
                raise LoadError(artifact_id, f"{self.entry_point!r} is not callable")
            return explicit

        candidates = [
            obj
            for name, obj in vars(module).items()
            if not name.startswith("_")
            and inspect.isfunction(obj)
            and obj.__module__ == module.__name__
        ]
        if len(candidates) == 1:
            return candidates[0]
        if not candidates:
            raise LoadError(artifact_id, "module defines no public function")

        names = ", ".join(sorted(c.__name__ for c in candidates))
        raise LoadError(
            artifact_id,
            f"module defines several public functions ({names}); "
            f"expose one as {self.entry_point!r}",
        )
