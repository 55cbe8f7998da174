"""Tests for FSCacheHandler (async, in-memory filesystem)."""

import json

import pytest

from metaprog.core.caching import CacheEntry, FSCacheHandler
from metaprog.core.errors import LoadError, NotFoundError
from metaprog.core.io import FakeFileSystem, absolute_path

INDEX = "/cache/metaprog-cache.json"


def read_index(fs: FakeFileSystem) -> list[dict]:
    return json.loads(fs.files[INDEX])


class TestLookup:
    """Tests for lookup and lookup_entry."""

    async def test_lookup_on_empty_store_returns_none(self, cache_handler: FSCacheHandler):
        assert await cache_handler.lookup("multiply two numbers") is None

    async def test_lookup_returns_created_id(self, cache_handler: FSCacheHandler, sources):
        artifact_id = await cache_handler.create(sources.multiply, "multiply two numbers")

        assert await cache_handler.lookup("multiply two numbers") == artifact_id
        entry = await cache_handler.lookup_entry("multiply two numbers")
        assert entry == CacheEntry(id=artifact_id, description="multiply two numbers")

    async def test_lookup_is_exact_match(self, cache_handler: FSCacheHandler, sources):
        await cache_handler.create(sources.multiply, "multiply two numbers")

        assert await cache_handler.lookup("Multiply two numbers") is None
        assert await cache_handler.lookup("multiply two numbers ") is None

    async def test_lookup_has_no_side_effects(self, cache_handler: FSCacheHandler, fs):
        await cache_handler.lookup("anything")

        assert fs.write_count == 0
        assert INDEX not in fs.files

    async def test_corrupt_index_is_treated_as_empty(self, cache_handler: FSCacheHandler, fs):
        fs.files[INDEX] = "{not json"

        assert await cache_handler.lookup("anything") is None
        assert await cache_handler.entries() == []

    async def test_latest_duplicate_entry_wins(self, cache_handler: FSCacheHandler, fs):
        fs.files[INDEX] = json.dumps(
            [{"id": "old", "description": "d"}, {"id": "new", "description": "d"}]
        )

        assert await cache_handler.lookup("d") == "new"


class TestCreate:
    """Tests for create."""

    async def test_create_writes_body_and_index(self, cache_handler: FSCacheHandler, fs, sources):
        artifact_id = await cache_handler.create(sources.multiply, "multiply two numbers")

        assert fs.files[f"/cache/generated/{artifact_id}.py"] == sources.multiply
        assert read_index(fs) == [{"id": artifact_id, "description": "multiply two numbers"}]

    async def test_create_writes_body_before_index(self, cache_handler: FSCacheHandler, fs):
        order: list[str] = []
        original = fs.write_text

        async def recording_write(path, content, encoding="utf-8"):
            order.append(str(path))
            return await original(path, content, encoding)

        fs.write_text = recording_write  # type: ignore[method-assign]
        artifact_id = await cache_handler.create("default = len", "length")

        assert order == [f"/cache/generated/{artifact_id}.py", INDEX]

    async def test_create_keeps_other_descriptions(self, cache_handler: FSCacheHandler, sources):
        first = await cache_handler.create(sources.multiply, "multiply two numbers")
        second = await cache_handler.create(sources.add_numeric, "add two numbers")

        assert first != second
        assert await cache_handler.lookup("multiply two numbers") == first
        assert await cache_handler.lookup("add two numbers") == second

    async def test_create_with_explicit_id(self, cache_handler: FSCacheHandler, sources):
        artifact_id = await cache_handler.create(sources.multiply, "m", artifact_id="fixed")

        assert artifact_id == "fixed"
        assert await cache_handler.lookup("m") == "fixed"

    async def test_create_rejects_explicit_id_in_use(self, cache_handler: FSCacheHandler, sources):
        await cache_handler.create(sources.multiply, "m", artifact_id="fixed")

        with pytest.raises(ValueError, match="already in use"):
            await cache_handler.create(sources.add_numeric, "a", artifact_id="fixed")

    async def test_ids_are_unique(self, cache_handler: FSCacheHandler):
        ids = {await cache_handler.create("default = len", f"d{i}") for i in range(20)}

        assert len(ids) == 20


class TestFetchSource:
    """Tests for fetch_source."""

    async def test_fetch_source_without_create_raises_not_found(
        self, cache_handler: FSCacheHandler
    ):
        with pytest.raises(NotFoundError) as exc_info:
            await cache_handler.fetch_source("never built")

        assert exc_info.value.description == "never built"

    async def test_fetch_source_returns_body(self, cache_handler: FSCacheHandler, sources):
        await cache_handler.create(sources.multiply, "multiply two numbers")

        assert await cache_handler.fetch_source("multiply two numbers") == sources.multiply

    async def test_fetch_source_with_missing_body_raises_not_found(
        self, cache_handler: FSCacheHandler, fs, sources
    ):
        artifact_id = await cache_handler.create(sources.multiply, "m")
        del fs.files[f"/cache/generated/{artifact_id}.py"]

        with pytest.raises(NotFoundError) as exc_info:
            await cache_handler.fetch_source("m")

        assert exc_info.value.artifact_id == artifact_id


class TestReplace:
    """Tests for replace."""

    async def test_replace_leaves_exactly_one_entry(
        self, cache_handler: FSCacheHandler, fs, sources
    ):
        old_id = await cache_handler.create(sources.add_concat, "add two numbers")
        new_id = await cache_handler.replace(old_id, sources.add_numeric, "add two numbers")

        assert new_id != old_id
        assert await cache_handler.lookup("add two numbers") == new_id
        entries = [e for e in await cache_handler.entries() if e.description == "add two numbers"]
        assert [e.id for e in entries] == [new_id]

    async def test_replace_reclaims_old_body(self, cache_handler: FSCacheHandler, fs, sources):
        old_id = await cache_handler.create(sources.add_concat, "add two numbers")
        new_id = await cache_handler.replace(old_id, sources.add_numeric, "add two numbers")

        assert f"/cache/generated/{old_id}.py" not in fs.files
        assert fs.files[f"/cache/generated/{new_id}.py"] == sources.add_numeric
        assert await cache_handler.fetch_source("add two numbers") == sources.add_numeric

    async def test_replace_keeps_other_descriptions(self, cache_handler: FSCacheHandler, sources):
        other = await cache_handler.create(sources.multiply, "multiply two numbers")
        old_id = await cache_handler.create(sources.add_concat, "add two numbers")

        await cache_handler.replace(old_id, sources.add_numeric, "add two numbers")

        assert await cache_handler.lookup("multiply two numbers") == other

    async def test_replace_unknown_id_still_commits(self, cache_handler: FSCacheHandler, sources):
        new_id = await cache_handler.replace("ghost", sources.add_numeric, "add two numbers")

        assert await cache_handler.lookup("add two numbers") == new_id


class TestDiscard:
    """Tests for discard."""

    async def test_discard_removes_entry_and_body(
        self, cache_handler: FSCacheHandler, fs, sources
    ):
        artifact_id = await cache_handler.create(sources.add_concat, "add two numbers")

        removed = await cache_handler.discard("add two numbers")

        assert removed == [artifact_id]
        assert await cache_handler.lookup("add two numbers") is None
        assert f"/cache/generated/{artifact_id}.py" not in fs.files
        with pytest.raises(NotFoundError):
            await cache_handler.fetch_source("add two numbers")

    async def test_discard_keeps_other_descriptions(
        self, cache_handler: FSCacheHandler, fs, sources
    ):
        other = await cache_handler.create(sources.multiply, "multiply two numbers")
        await cache_handler.create(sources.add_concat, "add two numbers")

        await cache_handler.discard("add two numbers")

        assert read_index(fs) == [{"id": other, "description": "multiply two numbers"}]
        assert await cache_handler.fetch_source("multiply two numbers") == sources.multiply

    async def test_discard_unknown_description_is_a_no_op(
        self, cache_handler: FSCacheHandler, fs, sources
    ):
        await cache_handler.create(sources.multiply, "m")
        writes = fs.write_count

        assert await cache_handler.discard("never built") == []
        assert fs.write_count == writes


class TestLoad:
    """Tests for load."""

    async def test_load_returns_entry_point(self, cache_handler: FSCacheHandler, sources):
        artifact_id = await cache_handler.create(sources.multiply, "multiply two numbers")

        func = await cache_handler.load(artifact_id)

        assert func(2, 3) == 6

    async def test_load_missing_body_raises_not_found(self, cache_handler: FSCacheHandler):
        with pytest.raises(NotFoundError):
            await cache_handler.load("does-not-exist")

    async def test_load_broken_source_raises_load_error(
        self, cache_handler: FSCacheHandler, sources
    ):
        artifact_id = await cache_handler.create(sources.broken, "add two numbers")

        with pytest.raises(LoadError) as exc_info:
            await cache_handler.load(artifact_id)

        assert exc_info.value.artifact_id == artifact_id


class TestMaintenance:
    """Tests for reset and prune_orphans."""

    async def test_reset_clears_index_and_bodies(self, cache_handler: FSCacheHandler, fs, sources):
        await cache_handler.create(sources.multiply, "multiply two numbers")

        await cache_handler.reset()

        assert fs.files == {}
        assert await cache_handler.lookup("multiply two numbers") is None

    async def test_store_usable_after_reset(self, cache_handler: FSCacheHandler, sources):
        await cache_handler.create(sources.multiply, "m")
        await cache_handler.reset()

        artifact_id = await cache_handler.create(sources.multiply, "m")

        assert await cache_handler.lookup("m") == artifact_id

    async def test_prune_orphans_removes_unreferenced_bodies(
        self, cache_handler: FSCacheHandler, fs, sources
    ):
        kept = await cache_handler.create(sources.multiply, "m")
        fs.files["/cache/generated/orphan.py"] = sources.add_concat

        removed = await cache_handler.prune_orphans()

        assert removed == ["orphan"]
        assert f"/cache/generated/{kept}.py" in fs.files
        assert "/cache/generated/orphan.py" not in fs.files

    def test_store_key_is_index_location(self, cache_handler: FSCacheHandler):
        assert cache_handler.store_key == str(absolute_path(INDEX))
