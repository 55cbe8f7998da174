"""Filesystem-backed artifact store.

Layout:
    <index_path>                  JSON list of {"id", "description"} records
    <generated_dir>/<id>.<ext>    one source file per artifact

Commit order: the body is written first, the index second. The index write is
the commit marker, so a crash in between leaves at most an unreferenced body
(an orphan) and never an index entry without a body. ``prune_orphans()``
reclaims such leftovers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from metaprog.core.caching.ids import new_artifact_id
from metaprog.core.caching.models import CacheEntry, CacheIndex
from metaprog.core.errors import NotFoundError
from metaprog.core.io import AbsolutePath, FileSystem, absolute_path
from metaprog.core.loading import SourceLoader

logger = logging.getLogger(__name__)


class FSCacheHandler:
    """
    Async cache handler over a ``FileSystem``.

    Index read-modify-write cycles are serialized by an instance lock. The
    handler initializes lazily on first use.
    """

    def __init__(
        self,
        fs: FileSystem,
        index_path: AbsolutePath | str,
        generated_dir: AbsolutePath | str,
        loader: SourceLoader | None = None,
        extension: str = "py",
    ) -> None:
        """
        Initialize the handler.

        Args:
            fs: Async filesystem implementation
            index_path: Path of the JSON index file
            generated_dir: Directory holding one source file per artifact
            loader: Source loader (a default ``SourceLoader`` if omitted)
            extension: File extension for artifact bodies
        """
        self.fs = fs
        self.index_path = absolute_path(index_path)
        self.generated_dir = absolute_path(generated_dir)
        self.loader = loader or SourceLoader()
        self.extension = extension.lstrip(".")
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._index_lock = asyncio.Lock()

    @property
    def store_key(self) -> str:
        return str(self.index_path)

    async def initialize(self) -> None:
        """Ensure the generated directory exists. Safe to call repeatedly."""
        async with self._init_lock:
            if not self._initialized:
                await self.fs.mkdirs(self.generated_dir, exist_ok=True)
                self._initialized = True

    def _body_path(self, artifact_id: str) -> AbsolutePath:
        return self.fs.join(self.generated_dir, f"{artifact_id}.{self.extension}")

    async def _read_index(self) -> list[CacheEntry]:
        if not await self.fs.exists(self.index_path):
            return []
        try:
            raw = await self.fs.read_text(self.index_path)
            return CacheIndex.validate_json(raw) if raw.strip() else []
        except FileNotFoundError:
            return []
        except (ValidationError, ValueError) as e:
            logger.warning(f"Unreadable cache index at {self.index_path}, treating as empty: {e}")
            return []

    async def _write_index(self, entries: list[CacheEntry]) -> None:
        payload = CacheIndex.dump_json(entries, indent=2).decode("utf-8")
        await self.fs.write_text(self.index_path, payload)

    async def _allocate_id(self, entries: list[CacheEntry]) -> str:
        taken = {entry.id for entry in entries}
        artifact_id = new_artifact_id()
        while artifact_id in taken or await self.fs.exists(self._body_path(artifact_id)):
            artifact_id = new_artifact_id()
        return artifact_id

    async def entries(self) -> list[CacheEntry]:
        """Return a snapshot of the index."""
        return await self._read_index()

    async def lookup_entry(self, description: str) -> CacheEntry | None:
        """Return the most recent index record for ``description``."""
        entries = await self._read_index()
        # Latest wins if a cross-process race left duplicates behind
        for entry in reversed(entries):
            if entry.description == description:
                return entry
        return None

    async def lookup(self, description: str) -> str | None:
        entry = await self.lookup_entry(description)
        return entry.id if entry else None

    async def read_body(self, artifact_id: str) -> str:
        """Read the source body of an artifact by id.

        Raises:
            NotFoundError: If the body file does not exist
        """
        try:
            return await self.fs.read_text(self._body_path(artifact_id))
        except FileNotFoundError as e:
            raise NotFoundError(artifact_id=artifact_id) from e

    async def fetch_source(self, description: str) -> str:
        entry = await self.lookup_entry(description)
        if entry is None:
            raise NotFoundError(description)
        try:
            return await self.fs.read_text(self._body_path(entry.id))
        except FileNotFoundError as e:
            raise NotFoundError(description, artifact_id=entry.id) from e

    async def create(
        self, source: str, description: str, artifact_id: str | None = None
    ) -> str:
        await self.initialize()
        async with self._index_lock:
            entries = await self._read_index()
            if artifact_id is None:
                artifact_id = await self._allocate_id(entries)
            elif any(entry.id == artifact_id for entry in entries):
                raise ValueError(f"Artifact id already in use: {artifact_id}")

            # Body first, index second (commit marker)
            await self.fs.write_text(self._body_path(artifact_id), source)
            entries.append(CacheEntry(id=artifact_id, description=description))
            await self._write_index(entries)

        logger.debug(f"Created artifact {artifact_id} for {description!r}")
        return artifact_id

    async def replace(self, old_artifact_id: str, source: str, description: str) -> str:
        await self.initialize()
        async with self._index_lock:
            entries = await self._read_index()
            if not any(entry.id == old_artifact_id for entry in entries):
                logger.warning(
                    f"Replacing artifact {old_artifact_id} that is not in the index "
                    f"(description {description!r})"
                )

            new_id = await self._allocate_id(entries)
            await self.fs.write_text(self._body_path(new_id), source)

            superseded = [
                entry.id
                for entry in entries
                if entry.id == old_artifact_id or entry.description == description
            ]
            kept = [
                entry
                for entry in entries
                if entry.id != old_artifact_id and entry.description != description
            ]
            kept.append(CacheEntry(id=new_id, description=description))
            await self._write_index(kept)

            stale = set(superseded) | {old_artifact_id}
            for stale_id in stale:
                await self._discard_body(stale_id)

        logger.debug(f"Replaced artifact {old_artifact_id} with {new_id} for {description!r}")
        return new_id

    async def discard(self, description: str) -> list[str]:
        await self.initialize()
        async with self._index_lock:
            entries = await self._read_index()
            removed = [entry.id for entry in entries if entry.description == description]
            if not removed:
                return []

            await self._write_index([e for e in entries if e.description != description])
            for artifact_id in removed:
                await self._discard_body(artifact_id)

        logger.debug(f"Discarded artifact(s) {', '.join(removed)} for {description!r}")
        return removed

    async def _discard_body(self, artifact_id: str) -> None:
        try:
            await self.fs.remove(self._body_path(artifact_id))
        except FileNotFoundError:
            pass
        except OSError as e:
            # Index is already committed; an orphan body is harmless
            logger.warning(f"Could not reclaim body of artifact {artifact_id}: {e}")

    async def load(self, artifact_id: str) -> Callable[..., Any]:
        source = await self.read_body(artifact_id)
        return self.loader.load(source, artifact_id, origin=str(self._body_path(artifact_id)))

    async def prune_orphans(self) -> list[str]:
        """Delete bodies that no index entry references.

        Returns:
            Ids of the removed artifacts
        """
        await self.initialize()
        async with self._index_lock:
            live = {entry.id for entry in await self._read_index()}
            suffix = f".{self.extension}"
            removed = []
            for name in await self.fs.listdir(self.generated_dir):
                if name.startswith(".") or not name.endswith(suffix):
                    continue
                artifact_id = name[: -len(suffix)]
                if artifact_id not in live:
                    await self._discard_body(artifact_id)
                    removed.append(artifact_id)

        if removed:
            logger.info(f"Pruned {len(removed)} orphaned artifact(s)")
        return removed

    async def reset(self) -> None:
        async with self._index_lock:
            if await self.fs.exists(self.index_path):
                await self.fs.remove(self.index_path)
            if await self.fs.exists(self.generated_dir):
                await self.fs.rmdir(self.generated_dir, recursive=True)
        async with self._init_lock:
            self._initialized = False
        logger.info(f"Cache reset ({self.index_path})")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.index_path}, {self.generated_dir})"


class FSCacheHandlerSync:
    """
    Blocking wrapper around ``FSCacheHandler``.

    Each call runs in its own ``asyncio.run()``; meant for scripts and the CLI,
    never from inside a running event loop.
    """

    def __init__(
        self,
        fs: FileSystem,
        index_path: AbsolutePath | str,
        generated_dir: AbsolutePath | str,
        loader: SourceLoader | None = None,
    ) -> None:
        self._index_path = index_path
        self._generated_dir = generated_dir
        self._fs = fs
        self._loader = loader

    def _handler(self) -> FSCacheHandler:
        # Fresh handler per call: its asyncio locks must belong to the running loop
        return FSCacheHandler(self._fs, self._index_path, self._generated_dir, self._loader)

    @property
    def index_path(self) -> Path:
        return Path(absolute_path(self._index_path))

    def entries(self) -> list[CacheEntry]:
        return asyncio.run(self._handler().entries())

    def lookup(self, description: str) -> str | None:
        return asyncio.run(self._handler().lookup(description))

    def fetch_source(self, description: str) -> str:
        return asyncio.run(self._handler().fetch_source(description))

    def prune_orphans(self) -> list[str]:
        return asyncio.run(self._handler().prune_orphans())

    def reset(self) -> None:
        asyncio.run(self._handler().reset())
