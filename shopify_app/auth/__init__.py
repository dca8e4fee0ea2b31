"""Request authentication: HMAC signatures, session tokens and auth hooks."""

from .crypto import encrypt_token, decrypt_token
from .jwt import JwtPayload, decode_session_token, session_id_from_token
from .signing import (
    sign_query,
    signed_query_params,
    validate_app_query,
    validate_query_hmac,
    validate_webhook_hmac,
    verify_query_hmac,
    verify_webhook_hmac,
    webhook_headers,
    webhook_hmac,
)
from .hooks import AfterAuthContext, trigger_after_auth_hook

__all__ = [
    "encrypt_token",
    "decrypt_token",
    "JwtPayload",
    "decode_session_token",
    "session_id_from_token",
    "sign_query",
    "signed_query_params",
    "validate_app_query",
    "validate_query_hmac",
    "validate_webhook_hmac",
    "verify_query_hmac",
    "verify_webhook_hmac",
    "webhook_headers",
    "webhook_hmac",
    "AfterAuthContext",
    "trigger_after_auth_hook",
]
