"""Protocol for pluggable artifact stores.

A cache handler is the single source of truth for "has this description been
generated before". The build pipeline never touches artifact text directly; it
only asks the handler to create, replace, fetch and load.
"""

from collections.abc import Callable
from typing import Any, Protocol

from .models import CacheEntry


class CacheHandler(Protocol):
    """Async contract between the build pipeline and a storage backend."""

    @property
    def store_key(self) -> str:
        """Stable identity of the underlying store (used to scope locks)."""
        ...

    async def lookup(self, description: str) -> str | None:
        """Return the current artifact id for ``description``, or None. No side effects."""
        ...

    async def lookup_entry(self, description: str) -> CacheEntry | None:
        """Return the current index record for ``description``, or None."""
        ...

    async def fetch_source(self, description: str) -> str:
        """
        Return the source text of the current artifact for ``description``.

        Raises:
            NotFoundError: If no entry exists (or its body is missing)
        """
        ...

    async def create(
        self, source: str, description: str, artifact_id: str | None = None
    ) -> str:
        """
        Persist a new artifact and append an index entry for it.

        Never removes or alters entries belonging to other descriptions.

        Returns:
            The artifact id (allocated unless ``artifact_id`` is given)
        """
        ...

    async def replace(self, old_artifact_id: str, source: str, description: str) -> str:
        """
        Supersede ``old_artifact_id`` with a new artifact for the same description.

        After the call exactly one entry exists for ``description`` and
        ``lookup(description)`` returns the new id.

        Returns:
            The newly allocated artifact id
        """
        ...

    async def discard(self, description: str) -> list[str]:
        """
        Drop every index entry for ``description`` together with its body.

        Entries belonging to other descriptions are left alone.

        Returns:
            Ids of the removed artifacts (empty if there were none)
        """
        ...

    async def load(self, artifact_id: str) -> Callable[..., Any]:
        """
        Bind the artifact's source to a callable.

        Raises:
            NotFoundError: If the body is missing
            LoadError: If the source does not compile or has no single entry point
        """
        ...

    async def reset(self) -> None:
        """Drop every index entry and artifact body."""
        ...
