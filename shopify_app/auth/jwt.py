"""App Bridge session token (JWT) decoding."""

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlparse

import jwt
from jwt.exceptions import InvalidTokenError

from shopify_app.errors import InvalidSessionTokenError
from shopify_app.session.session import get_online_id


# Algorithm Shopify signs session tokens with
ALGORITHM = "HS256"

# Clock skew allowed on exp/nbf checks
DEFAULT_LEEWAY_SECONDS = 5


@dataclass
class JwtPayload:
    """Claims of a verified session token."""

    iss: str
    dest: str
    aud: str
    sub: str
    exp: int
    nbf: int
    iat: int
    jti: str
    sid: Optional[str] = None

    @property
    def shop(self) -> str:
        """Shop domain taken from the ``dest`` claim."""
        return urlparse(self.dest).netloc or self.dest


def encode_session_token(payload: dict[str, Any], api_secret: str) -> str:
    """Sign a session token payload. Used by tooling and tests."""
    return jwt.encode(payload, api_secret, algorithm=ALGORITHM)


def decode_session_token(
    token: str,
    api_key: str,
    api_secret: str,
    leeway: int = DEFAULT_LEEWAY_SECONDS,
) -> JwtPayload:
    """Verify and decode an App Bridge session token.

    Args:
        token: Encoded JWT from the Authorization header
        api_key: App API key, expected as the audience
        api_secret: App API secret the token is signed with
        leeway: Allowed clock skew in seconds

    Returns:
        The verified claims

    Raises:
        InvalidSessionTokenError: If the token is malformed, expired,
            signed with another key or meant for another app
    """
    try:
        claims = jwt.decode(
            token,
            api_secret,
            algorithms=[ALGORITHM],
            audience=api_key,
            leeway=leeway,
            options={"require": ["exp", "nbf", "iss", "dest", "sub"]},
        )
    except InvalidTokenError as e:
        raise InvalidSessionTokenError(f"Failed to parse session token: {e}") from e

    return JwtPayload(
        iss=claims["iss"],
        dest=claims["dest"],
        aud=claims.get("aud", api_key),
        sub=claims["sub"],
        exp=claims["exp"],
        nbf=claims["nbf"],
        iat=claims.get("iat", claims["nbf"]),
        jti=claims.get("jti", ""),
        sid=claims.get("sid"),
    )


def session_id_from_token(payload: JwtPayload) -> str:
    """Online session id for the user the token was issued to."""
    return get_online_id(payload.shop, payload.sub)
