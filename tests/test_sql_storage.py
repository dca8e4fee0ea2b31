"""Tests for the SQLAlchemy session storage and database layer."""

import pathlib
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from shopify_app.db.database import create_db_engine
from shopify_app.db.models import Base, ShopifySessionRecord
from shopify_app.db.repository import SessionRepository
from shopify_app.errors import SessionStorageError
from shopify_app.session.custom import CustomSessionStorage
from shopify_app.session.sql import SQLSessionStorage


@pytest.fixture
def db_engine(monkeypatch):
    """Create in-memory SQLite database for testing."""
    monkeypatch.setenv("SECRET_KEY", "test-secret-key-for-testing")
    monkeypatch.delenv("ENCRYPTION_KEY", raising=False)

    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory bound to the test engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def sql_storage(session_factory):
    """SQL-backed session storage."""
    return SQLSessionStorage(session_factory)


class TestSQLSessionStorage:
    """Tests for SQLSessionStorage."""

    @pytest.mark.asyncio
    async def test_store_and_load_online(self, sql_storage, online_session):
        assert await sql_storage.store_session(online_session) is True

        loaded = await sql_storage.load_session(online_session.id)
        assert loaded == online_session
        assert loaded.expires.tzinfo is not None

    @pytest.mark.asyncio
    async def test_store_and_load_offline(self, sql_storage, offline_session):
        offline_session.extra = {"plan": "plus"}
        await sql_storage.store_session(offline_session)

        loaded = await sql_storage.load_session(offline_session.id)
        assert loaded == offline_session

    @pytest.mark.asyncio
    async def test_access_token_encrypted_at_rest(
        self, sql_storage, session_factory, offline_session
    ):
        await sql_storage.store_session(offline_session)

        db = session_factory()
        try:
            raw = db.execute(
                text("SELECT access_token FROM shopify_sessions WHERE id = :id"),
                {"id": offline_session.id},
            ).scalar_one()
        finally:
            db.close()

        assert raw
        assert raw != offline_session.access_token

    @pytest.mark.asyncio
    async def test_store_overwrites(self, sql_storage, offline_session):
        await sql_storage.store_session(offline_session)
        offline_session.scope = "read_orders"
        await sql_storage.store_session(offline_session)

        loaded = await sql_storage.load_session(offline_session.id)
        assert loaded.scope == "read_orders"

    @pytest.mark.asyncio
    async def test_load_missing(self, sql_storage):
        assert await sql_storage.load_session("missing") is None

    @pytest.mark.asyncio
    async def test_delete_and_find(self, sql_storage, offline_session, online_session):
        await sql_storage.store_session(offline_session)
        await sql_storage.store_session(online_session)

        found = await sql_storage.find_sessions_by_shop(offline_session.shop)
        assert sorted(s.id for s in found) == sorted([offline_session.id, online_session.id])

        assert await sql_storage.delete_session(online_session.id) is True
        assert await sql_storage.load_session(online_session.id) is None

        assert await sql_storage.delete_sessions([offline_session.id]) is True
        assert await sql_storage.find_sessions_by_shop(offline_session.shop) == []

    @pytest.mark.asyncio
    async def test_database_errors_are_wrapped(self, sql_storage, offline_session):
        with patch.object(
            SessionRepository,
            "upsert",
            side_effect=OperationalError("INSERT", {}, Exception("disk I/O error")),
        ):
            with pytest.raises(SessionStorageError, match="failed to store"):
                await sql_storage.store_session(offline_session)

        # Nothing was written
        assert await sql_storage.load_session(offline_session.id) is None

    @pytest.mark.asyncio
    async def test_orm_row_from_custom_load_callback(
        self, sql_storage, session_factory, online_session
    ):
        """A load callback may return the mapped row itself."""
        await sql_storage.store_session(online_session)
        db = session_factory()

        async def load(id):
            record = db.get(ShopifySessionRecord, id)
            # Expires every loaded attribute
            db.commit()
            return record

        storage = CustomSessionStorage(sql_storage.store_session, load, sql_storage.delete_session)
        try:
            loaded = await storage.load_session(online_session.id)
        finally:
            db.close()

        assert loaded.id == online_session.id
        assert loaded.is_online is True
        assert loaded.access_token == "shpua_online_token"
        assert loaded.expires == online_session.expires
        assert loaded.online_access_info == online_session.online_access_info


class TestSessionRepository:
    """Tests for SessionRepository."""

    def test_upsert_and_list(self, session_factory):
        db = session_factory()
        repo = SessionRepository(db)

        repo.upsert({"id": "offline_a", "shop": "a.myshopify.io", "state": "", "is_online": False})
        repo.upsert({"id": "offline_b", "shop": "b.myshopify.io", "state": "", "is_online": False})
        repo.upsert({"id": "offline_a", "shop": "a.myshopify.io", "state": "x", "is_online": False})
        db.commit()

        records = repo.list_by_shop("a.myshopify.io")
        assert [r.id for r in records] == ["offline_a"]
        assert records[0].state == "x"

        assert repo.delete_by_ids(["offline_a", "offline_b"]) == 2
        assert repo.delete_by_ids([]) == 0
        db.commit()
        assert db.query(ShopifySessionRecord).count() == 0
        db.close()


class TestMigrations:
    """Tests for the Alembic migrations."""

    def test_upgrade_creates_table(self, tmp_path):
        from shopify_app.db.migrations import run_migrations, get_current_revision

        url = f"sqlite:///{pathlib.Path(tmp_path) / 'migrations.db'}"
        run_migrations(url)

        assert get_current_revision(url) == "001"

        engine = create_engine(url)
        with engine.connect() as conn:
            tables = conn.execute(
                text("SELECT name FROM sqlite_master WHERE type='table'")
            ).scalars().all()
        engine.dispose()

        assert "shopify_sessions" in tables

    def test_downgrade_to_base(self, tmp_path):
        from shopify_app.db.migrations import (
            downgrade_migrations,
            get_current_revision,
            run_migrations,
        )

        url = f"sqlite:///{pathlib.Path(tmp_path) / 'migrations.db'}"
        run_migrations(url)
        downgrade_migrations("base", database_url=url)

        assert get_current_revision(url) is None

        engine = create_engine(url)
        with engine.connect() as conn:
            tables = conn.execute(
                text("SELECT name FROM sqlite_master WHERE type='table'")
            ).scalars().all()
        engine.dispose()

        assert "shopify_sessions" not in tables


class TestCreateDbEngine:
    """Tests for create_db_engine."""

    def test_sqlite_connection_usable_from_another_thread(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{pathlib.Path(tmp_path) / 'threads.db'}")

        # Returns the connection to the pool for the worker thread to reuse
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        def query():
            with engine.connect() as conn:
                return conn.execute(text("SELECT 1")).scalar_one()

        with ThreadPoolExecutor(max_workers=1) as executor:
            assert executor.submit(query).result() == 1
        engine.dispose()
