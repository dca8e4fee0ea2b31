"""Database layer for persisted Shopify sessions."""

from shopify_app.db.database import (
    create_db_engine,
    init_db,
    session_scope,
    create_tables,
    drop_tables,
)
from shopify_app.db.models import Base, ShopifySessionRecord
from shopify_app.db.repository import SessionRepository
from shopify_app.db.migrations import run_migrations, get_current_revision

__all__ = [
    # Database
    "create_db_engine",
    "init_db",
    "session_scope",
    "create_tables",
    "drop_tables",
    # Models
    "Base",
    "ShopifySessionRecord",
    # Repositories
    "SessionRepository",
    # Migrations
    "run_migrations",
    "get_current_revision",
]
