"""Session storage interface."""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from shopify_app.session.session import Session


class SessionStorage(ABC):
    """Interface every session storage backend implements.

    Backends must raise `SessionStorageError` for any failure of the
    underlying store so callers never see driver-specific exceptions.
    """

    @abstractmethod
    async def store_session(self, session: Session) -> bool:
        """Create or replace the session stored under ``session.id``.

        Returns:
            True if the session was stored
        """

    @abstractmethod
    async def load_session(self, id: str) -> Optional[Session]:
        """Load a session by id.

        Returns:
            The session, or None if there is no session with this id
        """

    @abstractmethod
    async def delete_session(self, id: str) -> bool:
        """Delete a single session by id."""

    @abstractmethod
    async def delete_sessions(self, ids: Iterable[str]) -> bool:
        """Delete several sessions by id.

        Returns:
            False if the backend cannot bulk delete
        """

    @abstractmethod
    async def find_sessions_by_shop(self, shop: str) -> list[Any]:
        """Return every session stored for a shop domain.

        Returns:
            A list, empty when nothing is found or the backend cannot search
        """
