"""In-process session storage for development and tests."""

from typing import Iterable, Optional

from shopify_app.session.session import Session
from shopify_app.session.storage import SessionStorage


class MemorySessionStorage(SessionStorage):
    """Keeps sessions in a dict. Not shared between processes."""

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    async def store_session(self, session: Session) -> bool:
        self._sessions[session.id] = session.copy()
        return True

    async def load_session(self, id: str) -> Optional[Session]:
        session = self._sessions.get(id)
        if session is None:
            return None
        return session.copy()

    async def delete_session(self, id: str) -> bool:
        self._sessions.pop(id, None)
        return True

    async def delete_sessions(self, ids: Iterable[str]) -> bool:
        for id in ids:
            self._sessions.pop(id, None)
        return True

    async def find_sessions_by_shop(self, shop: str) -> list[Session]:
        return [
            session.copy()
            for session in self._sessions.values()
            if session.shop == shop
        ]

    def __len__(self) -> int:
        return len(self._sessions)
