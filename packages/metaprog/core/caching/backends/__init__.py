"""Cache handler backends."""

from metaprog.core.caching.backends.fs import FSCacheHandler, FSCacheHandlerSync

__all__ = ["FSCacheHandler", "FSCacheHandlerSync"]
