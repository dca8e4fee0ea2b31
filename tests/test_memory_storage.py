"""Tests for the in-memory session storage."""

import pytest


class TestMemorySessionStorage:
    """Tests for MemorySessionStorage."""

    @pytest.mark.asyncio
    async def test_store_and_load(self, session_storage, offline_session):
        assert await session_storage.store_session(offline_session) is True

        loaded = await session_storage.load_session(offline_session.id)
        assert loaded == offline_session

    @pytest.mark.asyncio
    async def test_load_returns_fresh_copies(self, session_storage, online_session):
        await session_storage.store_session(online_session)

        first = await session_storage.load_session(online_session.id)
        first.access_token = "mutated"
        second = await session_storage.load_session(online_session.id)

        assert second.access_token == "shpua_online_token"
        assert first is not second

    @pytest.mark.asyncio
    async def test_store_overwrites(self, session_storage, offline_session):
        await session_storage.store_session(offline_session)
        offline_session.access_token = "shpat_new"
        await session_storage.store_session(offline_session)

        loaded = await session_storage.load_session(offline_session.id)
        assert loaded.access_token == "shpat_new"
        assert len(session_storage) == 1

    @pytest.mark.asyncio
    async def test_load_missing(self, session_storage):
        assert await session_storage.load_session("missing") is None

    @pytest.mark.asyncio
    async def test_delete(self, session_storage, offline_session):
        await session_storage.store_session(offline_session)

        assert await session_storage.delete_session(offline_session.id) is True
        assert await session_storage.load_session(offline_session.id) is None

    @pytest.mark.asyncio
    async def test_delete_sessions_and_find_by_shop(
        self, session_storage, offline_session, online_session
    ):
        await session_storage.store_session(offline_session)
        await session_storage.store_session(online_session)

        found = await session_storage.find_sessions_by_shop(offline_session.shop)
        assert sorted(s.id for s in found) == sorted([offline_session.id, online_session.id])
        assert await session_storage.find_sessions_by_shop("other.myshopify.io") == []

        assert await session_storage.delete_sessions([offline_session.id, "unknown"]) is True
        remaining = await session_storage.find_sessions_by_shop(offline_session.shop)
        assert [s.id for s in remaining] == [online_session.id]
