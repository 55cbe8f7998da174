"""In-memory filesystem for isolated tests.

Coroutines complete immediately; state lives in two plain containers.
Not thread-safe, use one instance per test.
"""

from pathlib import Path

from .models import AbsolutePath, WriteResult


class FakeFileSystem:
    """Async in-memory filesystem."""

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.dirs: set[str] = {"/"}
        self.write_count = 0

    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        result = Path(base).joinpath(*parts)
        if not result.is_absolute():
            result = Path("/") / result
        return AbsolutePath(result)

    async def exists(self, path: AbsolutePath) -> bool:
        key = str(Path(path))
        return key in self.files or key in self.dirs

    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        key = str(Path(path))
        if key not in self.files:
            raise FileNotFoundError(f"File not found: {path}")
        return self.files[key]

    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        path_obj = Path(path)
        self._ensure_parents(path_obj.parent)
        self.files[str(path_obj)] = content
        self.write_count += 1
        return WriteResult(
            path=str(path_obj),
            bytes_written=len(content.encode(encoding)),
            duration_ms=0.0,
        )

    def _ensure_parents(self, path: Path) -> None:
        parts = path.parts
        for i in range(1, len(parts) + 1):
            self.dirs.add(str(Path(*parts[:i])))

    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        key = str(Path(path))
        if not exist_ok and key in self.dirs:
            raise FileExistsError(f"Directory exists: {path}")
        self._ensure_parents(Path(path))

    async def listdir(self, path: AbsolutePath) -> list[str]:
        parent = Path(path)
        if str(parent) not in self.dirs:
            raise FileNotFoundError(f"Directory not found: {path}")
        children = {Path(p).name for p in self.files if Path(p).parent == parent}
        children |= {Path(d).name for d in self.dirs if Path(d).parent == parent and d != "/"}
        return sorted(children)

    async def remove(self, path: AbsolutePath) -> None:
        key = str(Path(path))
        if key not in self.files:
            raise FileNotFoundError(f"File not found: {path}")
        del self.files[key]

    async def rmdir(self, path: AbsolutePath, recursive: bool = False) -> None:
        key = str(Path(path))
        if key not in self.dirs:
            raise FileNotFoundError(f"Directory not found: {path}")
        prefix = key.rstrip("/") + "/"
        nested_files = [p for p in self.files if p.startswith(prefix)]
        nested_dirs = [d for d in self.dirs if d.startswith(prefix)]
        if not recursive and (nested_files or nested_dirs):
            raise OSError(f"Directory not empty: {path}")
        for p in nested_files:
            del self.files[p]
        for d in nested_dirs:
            self.dirs.discard(d)
        self.dirs.discard(key)
