"""Authentication of Shopify-signed query strings for FastAPI routes."""

import logging

from fastapi import Request

from shopify_app.auth.signing import validate_app_query
from shopify_app.config import AppConfig

logger = logging.getLogger(__name__)


class SignedQueryAuthenticator:
    """FastAPI dependency for requests Shopify signs in the query string.

    Covers app loads from the admin and app proxy requests. Returns the
    verified query parameters.

    Usage:
        authenticate_query = SignedQueryAuthenticator(config)

        @router.get("/app")
        async def app_home(params: dict = Depends(authenticate_query)):
            ...
    """

    def __init__(self, config: AppConfig):
        self.config = config

    async def __call__(self, request: Request) -> dict[str, str]:
        params = dict(request.query_params)

        # Raises InvalidHmacError, mapped to 401 by register_exception_handlers
        validate_app_query(params, self.config)

        logger.debug("Verified signed query for shop %s", params.get("shop"))
        return params
