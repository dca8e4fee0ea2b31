"""Exception types raised by the Shopify app layer."""

from typing import Any


class ShopifyAppError(Exception):
    """Base class for all errors raised by this package."""


class SessionStorageError(ShopifyAppError):
    """A session storage backend failed or returned something unusable."""


class InvalidHmacError(ShopifyAppError):
    """A request or webhook signature is missing or does not match."""


class InvalidSessionTokenError(ShopifyAppError):
    """An App Bridge session token could not be decoded or verified."""


class GraphqlQueryError(ShopifyAppError):
    """The Admin GraphQL API answered with top-level errors."""

    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []


class ScopesApiError(ShopifyAppError):
    """A scopes mutation returned user errors."""

    def __init__(self, message: str, user_errors: list[dict] | None = None):
        super().__init__(message)
        self.user_errors = user_errors or []


class RedirectRequired(ShopifyAppError):
    """Raised when an operation must end the request with a redirect.

    The prepared response is attached so the web layer can return it.
    """

    def __init__(self, response: Any):
        super().__init__("Redirect required")
        self.response = response
