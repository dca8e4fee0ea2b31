"""Engine and session factory setup for the session store."""

import os
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from shopify_app.db.models import Base


DEFAULT_DATABASE_URL = "sqlite:///./shopify_sessions.db"


def get_database_url() -> str:
    """DATABASE_URL, or a local SQLite file."""
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def create_db_engine(database_url: str | None = None) -> Engine:
    """Create an engine for `database_url` (DATABASE_URL by default).

    Set SQL_ECHO=true to log emitted SQL.
    """
    url = database_url or get_database_url()
    options: dict[str, Any] = {"echo": os.getenv("SQL_ECHO", "").lower() == "true"}

    if url.startswith("sqlite"):
        # FastAPI runs sync dependencies in its threadpool, so a pooled
        # connection can be picked up by a thread other than its creator
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(pool_size=5, max_overflow=10, pool_pre_ping=True)

    return create_engine(url, **options)


def init_db(database_url: str | None = None) -> tuple[Engine, sessionmaker]:
    """Build the engine and the session factory SQLSessionStorage expects."""
    engine = create_db_engine(database_url)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Yield a database session and always close it.

    Committing or rolling back is left to the caller.
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def create_tables(engine: Engine) -> None:
    """Create the schema without Alembic (tests, local development)."""
    Base.metadata.create_all(bind=engine)


def drop_tables(engine: Engine) -> None:
    Base.metadata.drop_all(bind=engine)
