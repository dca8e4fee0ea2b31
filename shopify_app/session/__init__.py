"""Shopify sessions and the storage backends that persist them."""

from shopify_app.session.session import (
    AssociatedUser,
    OnlineAccessInfo,
    Session,
    get_offline_id,
    get_online_id,
    session_id_for,
)
from shopify_app.session.storage import SessionStorage
from shopify_app.session.custom import CustomSessionStorage
from shopify_app.session.memory import MemorySessionStorage

__all__ = [
    "AssociatedUser",
    "OnlineAccessInfo",
    "Session",
    "get_offline_id",
    "get_online_id",
    "session_id_for",
    "SessionStorage",
    "CustomSessionStorage",
    "MemorySessionStorage",
]
