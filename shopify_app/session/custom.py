"""Session storage adapter over application-supplied callbacks."""

import dataclasses
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from sqlalchemy import inspect as sa_inspect

from shopify_app.errors import SessionStorageError
from shopify_app.session.session import Session
from shopify_app.session.storage import SessionStorage
from shopify_app.utils import call_maybe_async


logger = logging.getLogger(__name__)

# What a load callback may hand back: a Session, a plain record, a typed
# row with an ``id`` attribute, or nothing.
LoadResult = Union[Session, Mapping[str, Any], Any, None]

StoreCallback = Callable[[Session], Awaitable[bool]]
LoadCallback = Callable[[str], Awaitable[LoadResult]]
DeleteCallback = Callable[[str], Awaitable[bool]]
DeleteManyCallback = Callable[[list[str]], Awaitable[bool]]
FindByShopCallback = Callable[[str], Awaitable[Sequence[Union[Session, Mapping[str, Any]]]]]


def _as_record(obj: Any) -> dict[str, Any]:
    """Field values of a typed row (dataclass, pydantic model, ORM instance)."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if callable(getattr(obj, "model_dump", None)):
        return obj.model_dump()

    state = sa_inspect(obj, raiseerr=False)
    if state is not None and hasattr(state, "mapper"):
        # Reading through the mapper refreshes attributes expired by a commit
        return {attr.key: getattr(obj, attr.key) for attr in state.mapper.column_attrs}

    record = {key: value for key, value in vars(obj).items() if not key.startswith("_")}
    record.setdefault("id", obj.id)
    return record


def normalize_loaded_session(result: LoadResult) -> Optional[Session]:
    """Turn whatever a load callback returned into a Session.

    Records may be mappings or typed objects carrying an ``id``.

    Raises:
        SessionStorageError: If the value is neither a Session nor a record
            with an ``id``
    """
    if result is None:
        return None

    try:
        if isinstance(result, Session):
            return result.copy().normalize()
        if isinstance(result, Mapping) and "id" in result:
            return Session.from_dict(result)
        if not isinstance(result, Mapping) and hasattr(result, "id"):
            return Session.from_dict(_as_record(result))
    except (KeyError, ValueError, TypeError) as e:
        raise SessionStorageError(
            f"CustomSessionStorage could not normalize the loaded session. Error Details: {e}"
        ) from e

    raise SessionStorageError(
        "Expected return to be instance of Session or a session record, "
        f"but received instance of {type(result).__name__}."
    )


class CustomSessionStorage(SessionStorage):
    """Adapts five storage callbacks to the SessionStorage interface.

    Use this to plug in any persistence mechanism (SQL, key-value store,
    remote service) without writing a full backend. Bulk delete and
    find-by-shop are optional.

    Args:
        store_session_callback: Persists a session, returns success
        load_session_callback: Returns a Session, a session record, or None
        delete_session_callback: Deletes one session by id
        delete_sessions_callback: Deletes a list of session ids
        find_sessions_by_shop_callback: Returns sessions for a shop
    """

    def __init__(
        self,
        store_session_callback: StoreCallback,
        load_session_callback: LoadCallback,
        delete_session_callback: DeleteCallback,
        delete_sessions_callback: Optional[DeleteManyCallback] = None,
        find_sessions_by_shop_callback: Optional[FindByShopCallback] = None,
    ):
        self.store_session_callback = store_session_callback
        self.load_session_callback = load_session_callback
        self.delete_session_callback = delete_session_callback
        self.delete_sessions_callback = delete_sessions_callback
        self.find_sessions_by_shop_callback = find_sessions_by_shop_callback

    async def store_session(self, session: Session) -> bool:
        try:
            return await call_maybe_async(self.store_session_callback, session)
        except Exception as e:
            raise SessionStorageError(
                f"CustomSessionStorage failed to store a session. Error Details: {e}"
            ) from e

    async def load_session(self, id: str) -> Optional[Session]:
        try:
            result = await call_maybe_async(self.load_session_callback, id)
        except Exception as e:
            raise SessionStorageError(
                f"CustomSessionStorage failed to load a session. Error Details: {e}"
            ) from e

        return normalize_loaded_session(result)

    async def delete_session(self, id: str) -> bool:
        try:
            return await call_maybe_async(self.delete_session_callback, id)
        except Exception as e:
            raise SessionStorageError(
                f"CustomSessionStorage failed to delete a session. Error Details: {e}"
            ) from e

    async def delete_sessions(self, ids: Iterable[str]) -> bool:
        if self.delete_sessions_callback is None:
            logger.warning(
                "CustomSessionStorage failed to delete array of sessions. "
                "Error Details: delete_sessions_callback not defined."
            )
            return False

        try:
            return await call_maybe_async(self.delete_sessions_callback, list(ids))
        except Exception as e:
            raise SessionStorageError(
                "CustomSessionStorage failed to delete array of sessions. "
                f"Error Details: {e}"
            ) from e

    async def find_sessions_by_shop(self, shop: str) -> list[Union[Session, Mapping[str, Any]]]:
        if self.find_sessions_by_shop_callback is None:
            logger.warning(
                "CustomSessionStorage failed to find sessions by shop. "
                "Error Details: find_sessions_by_shop_callback not defined."
            )
            return []

        try:
            results = await call_maybe_async(self.find_sessions_by_shop_callback, shop)
        except Exception as e:
            raise SessionStorageError(
                f"CustomSessionStorage failed to find sessions by shop. Error Details: {e}"
            ) from e

        if not isinstance(results, Sequence) or isinstance(results, (str, bytes)):
            return []

        # Records are passed through as returned; only load_session normalizes.
        return list(results)
