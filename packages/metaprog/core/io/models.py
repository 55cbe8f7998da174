"""Path and result types for the filesystem layer."""

from pathlib import Path
from typing import NewType

from pydantic import BaseModel, Field

AbsolutePath = NewType("AbsolutePath", Path)


def absolute_path(path: str | Path) -> AbsolutePath:
    """Resolve ``path`` against the working directory and tag it absolute.

    Relative inputs are accepted (config files usually hold ``.metaprog/...``);
    they are anchored at the current working directory.

    Example:
        >>> p = absolute_path(".metaprog/generated")
        >>> assert Path(p).is_absolute()
    """
    return AbsolutePath(Path(path).expanduser().resolve())


class WriteResult(BaseModel):
    """Outcome of a single text write."""

    path: str = Field(description="Final path written")
    bytes_written: int = Field(ge=0, description="Encoded size of the content")
    duration_ms: float = Field(ge=0.0, description="Wall time spent writing")
