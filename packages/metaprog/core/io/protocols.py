"""Protocol implemented by every filesystem backend."""

from typing import Protocol

from .models import AbsolutePath, WriteResult


class FileSystem(Protocol):
    """
    Async filesystem operations needed by the artifact store.

    Implementations must make ``write_text`` atomic: readers either see the
    previous content or the new content, never a partial file.
    """

    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        """
        Join path components below ``base`` (no I/O).

        Raises:
            ValueError: If the result escapes ``base``
        """
        ...

    async def exists(self, path: AbsolutePath) -> bool:
        """Check whether a file or directory exists."""
        ...

    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        """
        Read a whole text file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        ...

    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        """Atomically replace the file at ``path``, creating parent directories."""
        ...

    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        """Create a directory and its parents."""
        ...

    async def listdir(self, path: AbsolutePath) -> list[str]:
        """
        List entry names in a directory.

        Raises:
            FileNotFoundError: If the directory does not exist
        """
        ...

    async def remove(self, path: AbsolutePath) -> None:
        """
        Remove a file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        ...

    async def rmdir(self, path: AbsolutePath, recursive: bool = False) -> None:
        """
        Remove a directory.

        Raises:
            FileNotFoundError: If the directory does not exist
        """
        ...
