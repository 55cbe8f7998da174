"""Filesystem abstraction used by the artifact store.

Async-first: every I/O method is a coroutine. ``RealFileSystem`` talks to disk
through aiofiles, ``FakeFileSystem`` keeps everything in memory for tests.

Example:
    >>> from metaprog.core.io import RealFileSystem, absolute_path
    >>> fs = RealFileSystem()
    >>> path = fs.join(absolute_path("/tmp"), "generated", "abc.py")
    >>> await fs.write_text(path, "def f(): ...")
"""

from .impl_fake import FakeFileSystem
from .impl_real import RealFileSystem
from .models import AbsolutePath, WriteResult, absolute_path
from .protocols import FileSystem

__all__ = [
    "AbsolutePath",
    "absolute_path",
    "WriteResult",
    "FileSystem",
    "RealFileSystem",
    "FakeFileSystem",
]
