"""FastAPI integration: webhook authentication and error handlers."""

from shopify_app.api.errors import ErrorCode, ErrorResponse, register_exception_handlers
from shopify_app.api.query import SignedQueryAuthenticator
from shopify_app.api.webhooks import WebhookAuthenticator, WebhookContext

__all__ = [
    "ErrorCode",
    "ErrorResponse",
    "register_exception_handlers",
    "SignedQueryAuthenticator",
    "WebhookAuthenticator",
    "WebhookContext",
]
