"""Artifact cache: description -> current generated artifact.

- ``CacheHandler`` protocol (lookup / fetch_source / create / replace / discard / load / reset)
- ``FSCacheHandler``: JSON index file plus one source file per artifact
- Collision-free random ids (``new_artifact_id``)
"""

from metaprog.core.caching.backends.fs import FSCacheHandler, FSCacheHandlerSync
from metaprog.core.caching.ids import new_artifact_id
from metaprog.core.caching.models import CacheEntry, CacheIndex
from metaprog.core.caching.protocols import CacheHandler

__all__ = [
    "CacheHandler",
    "CacheEntry",
    "CacheIndex",
    "FSCacheHandler",
    "FSCacheHandlerSync",
    "new_artifact_id",
]
