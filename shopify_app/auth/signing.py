"""HMAC signing and verification for Shopify requests and webhooks.

Shopify signs two kinds of inbound traffic with the app's API secret:

- Query strings (OAuth callbacks, app loads, app proxies) carry a
  lowercase hex HMAC-SHA256 of the sorted, unencoded ``key=value`` pairs
  in an ``hmac`` parameter.
- Webhooks carry a base64 HMAC-SHA256 of the raw body in the
  ``X-Shopify-Hmac-Sha256`` header.
"""

import base64
import hashlib
import hmac
import logging
import time
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union
from urllib.parse import urlencode

from shopify_app.errors import InvalidHmacError

if TYPE_CHECKING:
    from shopify_app.config import AppConfig


logger = logging.getLogger(__name__)

HMAC_HEADER = "X-Shopify-Hmac-Sha256"
TOPIC_HEADER = "X-Shopify-Topic"
SHOP_DOMAIN_HEADER = "X-Shopify-Shop-Domain"
WEBHOOK_ID_HEADER = "X-Shopify-Webhook-Id"
API_VERSION_HEADER = "X-Shopify-Api-Version"

# Query parameters that carry a signature and are not themselves signed
SIGNATURE_PARAMS = frozenset({"hmac", "signature"})


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def compute_hmac(
    secret: str,
    message: Union[str, bytes],
    digest: str = "hex",
) -> str:
    """HMAC-SHA256 of `message` keyed by `secret`.

    Args:
        secret: Shopify API secret
        message: Data to sign, str values are UTF-8 encoded
        digest: "hex" for lowercase hex, "base64" for base64

    Returns:
        Encoded digest string
    """
    mac = hmac.new(_to_bytes(secret), _to_bytes(message), hashlib.sha256)
    if digest == "hex":
        return mac.hexdigest()
    if digest == "base64":
        return base64.b64encode(mac.digest()).decode()
    raise ValueError(f"Unsupported digest encoding: {digest}")


def _first(value: Any) -> Any:
    # parse_qs gives lists of values
    if isinstance(value, (list, tuple)):
        return value[0] if value else ""
    return value


def canonical_query(params: Mapping[str, Any]) -> str:
    """The string Shopify signs: sorted, unencoded ``key=value`` pairs.

    Signature parameters are left out.
    """
    pairs = []
    for key in sorted(params):
        if key in SIGNATURE_PARAMS:
            continue
        pairs.append(f"{key}={_first(params[key])}")
    return "&".join(pairs)


def signed_query_params(
    params: Mapping[str, Any],
    secret: str,
    timestamp: Optional[int] = None,
) -> dict[str, str]:
    """Sign query parameters the way Shopify does.

    Adds a ``timestamp`` (current Unix time unless given) when the params
    have none, then appends the ``hmac`` parameter last.
    """
    signed = {key: str(_first(value)) for key, value in params.items()}
    if "timestamp" not in signed:
        signed["timestamp"] = str(timestamp if timestamp is not None else int(time.time()))

    ordered = {key: signed[key] for key in sorted(signed)}
    ordered["hmac"] = compute_hmac(secret, canonical_query(ordered), "hex")
    return ordered


def sign_query(
    params: Mapping[str, Any],
    secret: str,
    timestamp: Optional[int] = None,
) -> str:
    """URL-encoded, signed query string for `params`."""
    return urlencode(signed_query_params(params, secret, timestamp))


def verify_query_hmac(
    query_params: Mapping[str, Any],
    secret: str,
    clock_tolerance: Optional[int] = None,
) -> bool:
    """Verify the ``hmac`` parameter of a Shopify-signed query string.

    Args:
        query_params: Query parameters, values may be lists (from parse_qs)
        secret: Shopify API secret
        clock_tolerance: Reject timestamps further than this many seconds
            from now. None skips the check.

    Returns:
        True if the signature is present and valid, False otherwise
    """
    provided = _first(query_params.get("hmac"))
    if not provided:
        return False

    if clock_tolerance is not None and not _timestamp_is_fresh(
        query_params.get("timestamp"), clock_tolerance
    ):
        return False

    computed = compute_hmac(secret, canonical_query(query_params), "hex")

    # Timing-safe comparison
    return hmac.compare_digest(computed.encode(), str(provided).encode())


def _timestamp_is_fresh(value: Any, tolerance: int) -> bool:
    try:
        timestamp = int(_first(value))
    except (TypeError, ValueError):
        return False
    return abs(time.time() - timestamp) <= tolerance


def validate_query_hmac(
    query_params: Mapping[str, Any],
    secret: str,
    clock_tolerance: Optional[int] = None,
) -> None:
    """Like `verify_query_hmac`, but raises on failure.

    Raises:
        InvalidHmacError: If the signature is missing, stale or wrong
    """
    if not _first(query_params.get("hmac")):
        raise InvalidHmacError("Query string is missing the hmac parameter")
    if not verify_query_hmac(query_params, secret, clock_tolerance):
        logger.warning("Rejected query string with invalid HMAC for shop %s",
                       _first(query_params.get("shop")))
        raise InvalidHmacError("Query string HMAC validation failed")


def validate_app_query(query_params: Mapping[str, Any], config: "AppConfig") -> None:
    """Validate a signed request to the app with the app's own settings.

    Uses ``config.api_secret`` and rejects timestamps more than
    ``config.hmac_clock_tolerance`` seconds from now (unless that is None).

    Raises:
        InvalidHmacError: If the signature is missing, stale or wrong
    """
    validate_query_hmac(query_params, config.api_secret, config.hmac_clock_tolerance)


def webhook_hmac(body: Union[str, bytes], secret: str) -> str:
    """Base64 HMAC-SHA256 of a raw webhook body."""
    return compute_hmac(secret, body, "base64")


def webhook_headers(
    topic: str,
    shop: str,
    body: Union[str, bytes],
    secret: str,
    webhook_id: str,
    api_version: str,
) -> dict[str, str]:
    """Headers Shopify sends with a webhook delivery for `body`."""
    return {
        TOPIC_HEADER: topic,
        SHOP_DOMAIN_HEADER: shop,
        HMAC_HEADER: webhook_hmac(body, secret),
        WEBHOOK_ID_HEADER: webhook_id,
        API_VERSION_HEADER: api_version,
    }


def verify_webhook_hmac(body: Union[str, bytes], hmac_header: Optional[str], secret: str) -> bool:
    """Verify HMAC signature on Shopify webhook.

    Args:
        body: Raw request body
        hmac_header: X-Shopify-Hmac-Sha256 header value
        secret: Shopify API secret (or webhook secret)

    Returns:
        True if HMAC is valid, False otherwise
    """
    if not hmac_header:
        return False

    computed = webhook_hmac(body, secret)
    return hmac.compare_digest(computed.encode(), hmac_header.encode())


def validate_webhook_hmac(body: Union[str, bytes], hmac_header: Optional[str], secret: str) -> None:
    """Like `verify_webhook_hmac`, but raises on failure.

    Raises:
        InvalidHmacError: If the header is missing or does not match
    """
    if not hmac_header:
        raise InvalidHmacError(f"Missing {HMAC_HEADER} header")
    if not verify_webhook_hmac(body, hmac_header, secret):
        raise InvalidHmacError("Webhook HMAC validation failed")
