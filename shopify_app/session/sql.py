"""Session storage backed by SQLAlchemy."""

import logging
from typing import Any, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from shopify_app.db.database import session_scope
from shopify_app.db.models import ShopifySessionRecord
from shopify_app.db.repository import SessionRepository
from shopify_app.errors import SessionStorageError
from shopify_app.session.session import OnlineAccessInfo, Session
from shopify_app.session.storage import SessionStorage


logger = logging.getLogger(__name__)


def session_to_row(session: Session) -> dict[str, Any]:
    """Column values for a Session."""
    return {
        "id": session.id,
        "shop": session.shop,
        "state": session.state or "",
        "is_online": bool(session.is_online),
        "scope": session.scope,
        "expires": session.expires,
        "access_token": session.access_token,
        "user_id": session.user_id,
        "online_access_info": (
            session.online_access_info.to_dict()
            if session.online_access_info is not None
            else None
        ),
        "extra": dict(session.extra) or None,
    }


def row_to_session(record: ShopifySessionRecord) -> Session:
    """Build a Session from a stored row."""
    online_access_info = None
    if record.online_access_info:
        online_access_info = OnlineAccessInfo.from_dict(record.online_access_info)

    return Session(
        id=record.id,
        shop=record.shop,
        state=record.state,
        is_online=record.is_online,
        scope=record.scope,
        expires=record.expires,
        access_token=record.access_token,
        online_access_info=online_access_info,
        extra=dict(record.extra or {}),
    )


class SQLSessionStorage(SessionStorage):
    """Stores sessions in the shopify_sessions table.

    Each call runs in its own database session and transaction. Access
    tokens are encrypted at rest (see `shopify_app.auth.crypto`).

    Args:
        session_factory: A configured sqlalchemy `sessionmaker`
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def store_session(self, session: Session) -> bool:
        with session_scope(self.session_factory) as db:
            try:
                SessionRepository(db).upsert(session_to_row(session))
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise SessionStorageError(
                    f"SQLSessionStorage failed to store a session. Error Details: {e}"
                ) from e

        logger.debug("Stored session %s", session.id)
        return True

    async def load_session(self, id: str) -> Optional[Session]:
        with session_scope(self.session_factory) as db:
            try:
                record = SessionRepository(db).get_by_id(id)
                if record is None:
                    return None
                return row_to_session(record)
            except SQLAlchemyError as e:
                raise SessionStorageError(
                    f"SQLSessionStorage failed to load a session. Error Details: {e}"
                ) from e

    async def delete_session(self, id: str) -> bool:
        with session_scope(self.session_factory) as db:
            try:
                SessionRepository(db).delete_by_id(id)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise SessionStorageError(
                    f"SQLSessionStorage failed to delete a session. Error Details: {e}"
                ) from e
        return True

    async def delete_sessions(self, ids: Iterable[str]) -> bool:
        ids = list(ids)
        with session_scope(self.session_factory) as db:
            try:
                deleted = SessionRepository(db).delete_by_ids(ids)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise SessionStorageError(
                    "SQLSessionStorage failed to delete array of sessions. "
                    f"Error Details: {e}"
                ) from e

        logger.debug("Deleted %d of %d sessions", deleted, len(ids))
        return True

    async def find_sessions_by_shop(self, shop: str) -> list[Session]:
        with session_scope(self.session_factory) as db:
            try:
                records = SessionRepository(db).list_by_shop(shop)
                return [row_to_session(record) for record in records]
            except SQLAlchemyError as e:
                raise SessionStorageError(
                    f"SQLSessionStorage failed to find sessions by shop. Error Details: {e}"
                ) from e
