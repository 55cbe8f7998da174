"""Index records for the artifact cache.

The index is persisted as a JSON list of ``{"id", "description"}`` records,
independently of the artifact bodies.
"""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class CacheEntry(BaseModel):
    """One index record: a description and the id of its current artifact."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Store-assigned artifact id")
    description: str = Field(description="Natural-language description used as the cache key")

    def __str__(self) -> str:
        return f"{self.id}: {self.description}"


CacheIndex = TypeAdapter(list[CacheEntry])
"""Adapter for (de)serializing the whole index file."""
