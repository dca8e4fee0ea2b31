"""Error responses for the FastAPI integration."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shopify_app.errors import (
    GraphqlQueryError,
    InvalidHmacError,
    InvalidSessionTokenError,
    RedirectRequired,
    ScopesApiError,
    SessionStorageError,
)

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Consistent error response format for all API errors."""

    error: str  # User-friendly message
    code: str  # Machine-readable error code
    detail: str | None = None  # Optional technical detail


class ErrorCode:
    """Machine-readable error codes."""

    # Auth errors
    INVALID_HMAC = "INVALID_HMAC"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Storage errors
    SESSION_STORAGE_ERROR = "SESSION_STORAGE_ERROR"

    # Shopify Admin API errors
    SHOPIFY_API_ERROR = "SHOPIFY_API_ERROR"
    SCOPES_ERROR = "SCOPES_ERROR"


def create_error_response(
    status_code: int,
    error: str,
    code: str,
    detail: str | None = None,
    endpoint: str | None = None,
    exc: Exception | None = None,
) -> JSONResponse:
    """Create a consistent error response with logging."""
    log_context = {
        "error_code": code,
        "endpoint": endpoint,
    }

    if exc and status_code >= 500:
        logger.error(
            "API error: %s (code=%s, endpoint=%s)",
            error,
            code,
            endpoint,
            exc_info=exc,
            extra=log_context,
        )
    else:
        logger.warning(
            "API error: %s (code=%s, endpoint=%s)",
            error,
            code,
            endpoint,
            extra=log_context,
        )

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, code=code, detail=detail).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map this package's exceptions to HTTP responses."""

    @app.exception_handler(InvalidHmacError)
    async def invalid_hmac_handler(request: Request, exc: InvalidHmacError):
        return create_error_response(
            401,
            "Invalid request signature",
            ErrorCode.INVALID_HMAC,
            detail=str(exc),
            endpoint=request.url.path,
        )

    @app.exception_handler(InvalidSessionTokenError)
    async def invalid_token_handler(request: Request, exc: InvalidSessionTokenError):
        return create_error_response(
            401,
            "Invalid session token",
            ErrorCode.INVALID_TOKEN,
            detail=str(exc),
            endpoint=request.url.path,
        )

    @app.exception_handler(SessionStorageError)
    async def session_storage_handler(request: Request, exc: SessionStorageError):
        return create_error_response(
            500,
            "Session storage is unavailable",
            ErrorCode.SESSION_STORAGE_ERROR,
            endpoint=request.url.path,
            exc=exc,
        )

    @app.exception_handler(RedirectRequired)
    async def redirect_handler(request: Request, exc: RedirectRequired):
        return exc.response

    @app.exception_handler(GraphqlQueryError)
    async def graphql_error_handler(request: Request, exc: GraphqlQueryError):
        return create_error_response(
            502,
            "Shopify Admin API request failed",
            ErrorCode.SHOPIFY_API_ERROR,
            detail=str(exc),
            endpoint=request.url.path,
        )

    @app.exception_handler(ScopesApiError)
    async def scopes_error_handler(request: Request, exc: ScopesApiError):
        return create_error_response(
            422,
            "Could not change access scopes",
            ErrorCode.SCOPES_ERROR,
            detail=str(exc),
            endpoint=request.url.path,
        )
