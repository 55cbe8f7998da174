"""Disk-backed filesystem using aiofiles.

Writes go to a temp file in the target directory and are moved into place
with ``os.replace``, so generated sources and the cache index are never
observed half-written.
"""

import asyncio
import contextlib
import os
import shutil
import time
from pathlib import Path
from tempfile import NamedTemporaryFile

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from .models import AbsolutePath, WriteResult


class RealFileSystem:
    """Async filesystem over the local disk."""

    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        """Join paths, refusing anything that escapes ``base``."""
        base_resolved = Path(base).resolve()
        result = base_resolved.joinpath(*parts).resolve()
        try:
            result.relative_to(base_resolved)
        except ValueError as e:
            raise ValueError(f"Path traversal detected: {result} escapes {base}") from e
        return AbsolutePath(result)

    async def exists(self, path: AbsolutePath) -> bool:
        return bool(await aiofiles.os.path.exists(path))

    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        async with aiofiles.open(path, encoding=encoding) as f:
            content: str = await f.read()
            return content

    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        """Atomically write a text file (temp file + ``os.replace``)."""
        start = time.perf_counter()
        path_obj = Path(path)
        await aiofiles.os.makedirs(path_obj.parent, exist_ok=True)

        loop = asyncio.get_running_loop()

        def create_temp_file() -> str:
            tmp = NamedTemporaryFile(
                mode="w",
                encoding=encoding,
                dir=path_obj.parent,
                prefix=f".{path_obj.name}.",
                suffix=".tmp",
                delete=False,
            )
            tmp.close()
            return tmp.name

        tmp_path = await loop.run_in_executor(None, create_temp_file)

        try:
            async with aiofiles.open(tmp_path, mode="w", encoding=encoding) as f:
                await f.write(content)
            await loop.run_in_executor(None, os.replace, tmp_path, str(path_obj))
        except BaseException:
            with contextlib.suppress(OSError):
                await aiofiles.os.unlink(tmp_path)
            raise

        return WriteResult(
            path=str(path_obj),
            bytes_written=len(content.encode(encoding)),
            duration_ms=(time.perf_counter() - start) * 1000,
        )

    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        await aiofiles.os.makedirs(path, exist_ok=exist_ok)

    async def listdir(self, path: AbsolutePath) -> list[str]:
        entries: list[str] = await aiofiles.os.listdir(path)
        return entries

    async def remove(self, path: AbsolutePath) -> None:
        await aiofiles.os.unlink(path)

    async def rmdir(self, path: AbsolutePath, recursive: bool = False) -> None:
        if recursive:
            # shutil.rmtree blocks
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, shutil.rmtree, str(path))
        else:
            await aiofiles.os.rmdir(path)
