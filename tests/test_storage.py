"""
Tests for the in-memory storage backends.
"""

import time

import pytest

from arc.storage import Collections, create_local_storage


@pytest.fixture
def store():
    return create_local_storage()


class TestMetadataStorage:

    @pytest.mark.asyncio
    async def test_query_filters_in_insertion_order(self, store):
        for i in range(5):
            post_type = "page" if i % 2 else "post"
            await store.metadata.save(Collections.POSTS, f"p{i}", {"id": f"p{i}", "post_type": post_type})

        rows = await store.metadata.query(Collections.POSTS, {"post_type": "post"})
        assert [r["id"] for r in rows] == ["p0", "p2", "p4"]

        rows = await store.metadata.query(Collections.POSTS, limit=2, offset=1)
        assert [r["id"] for r in rows] == ["p1", "p2"]

    @pytest.mark.asyncio
    async def test_documents_are_copies(self, store):
        await store.metadata.save(Collections.TERMS, "t1", {"meta": {"arc_restricted": True}})

        doc = await store.metadata.get(Collections.TERMS, "t1")
        doc["meta"]["arc_restricted"] = False

        assert (await store.metadata.get(Collections.TERMS, "t1"))["meta"] == {"arc_restricted": True}

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.metadata.save(Collections.COMMENTS, "c1", {})
        assert await store.metadata.delete(Collections.COMMENTS, "c1") is True
        assert await store.metadata.delete(Collections.COMMENTS, "c1") is False
        assert await store.metadata.query("unknown") == []


class TestCacheStorage:

    @pytest.mark.asyncio
    async def test_expired_keys_dropped(self, store, monkeypatch):
        await store.cache.set("revoked:abc", True, ttl=60)
        assert await store.cache.exists("revoked:abc")

        real_time = time.time
        monkeypatch.setattr(time, "time", lambda: real_time() + 61)
        assert not await store.cache.exists("revoked:abc")

    @pytest.mark.asyncio
    async def test_no_ttl_never_expires(self, store):
        await store.cache.set("k", "v")
        assert await store.cache.get("k") == "v"
        assert await store.cache.delete("k") is True
        assert await store.cache.get("k") is None
