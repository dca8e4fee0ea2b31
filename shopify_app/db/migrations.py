"""Run the session table migrations from code."""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext

from shopify_app.db.database import create_db_engine, get_database_url

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent


def get_alembic_config(database_url: str | None = None) -> Config:
    """Alembic config for the packaged migrations.

    Args:
        database_url: Target database, defaults to DATABASE_URL
    """
    config = Config(str(MIGRATIONS_DIR / "alembic.ini"))
    # Absolute, so migrations run from any working directory
    config.set_main_option("script_location", str(MIGRATIONS_DIR / "alembic"))
    config.set_main_option("sqlalchemy.url", database_url or get_database_url())
    return config


def run_migrations(database_url: str | None = None) -> None:
    """Upgrade the database to the latest revision."""
    config = get_alembic_config(database_url)
    logger.info("Upgrading session schema to head")
    command.upgrade(config, "head")


def downgrade_migrations(revision: str = "-1", database_url: str | None = None) -> None:
    command.downgrade(get_alembic_config(database_url), revision)


def get_current_revision(database_url: str | None = None) -> str | None:
    """Revision the database is at, or None if never migrated."""
    engine = create_db_engine(database_url)
    try:
        with engine.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()
    finally:
        engine.dispose()
