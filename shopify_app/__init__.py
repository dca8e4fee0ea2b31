"""Session storage, request signing and auth hooks for Shopify apps."""

from shopify_app.config import AppConfig, AppHooks
from shopify_app.errors import (
    InvalidHmacError,
    InvalidSessionTokenError,
    SessionStorageError,
    ShopifyAppError,
)
from shopify_app.session import (
    CustomSessionStorage,
    MemorySessionStorage,
    Session,
    SessionStorage,
)

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "AppHooks",
    "InvalidHmacError",
    "InvalidSessionTokenError",
    "SessionStorageError",
    "ShopifyAppError",
    "CustomSessionStorage",
    "MemorySessionStorage",
    "Session",
    "SessionStorage",
]
