"""Binding of generated source text to callables."""

from metaprog.core.loading.loader import DEFAULT_ENTRY_POINT, SourceLoader

__all__ = ["DEFAULT_ENTRY_POINT", "SourceLoader"]
