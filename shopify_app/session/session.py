"""Shopify session entity and session id helpers."""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from shopify_app.scopes import AuthScopes


# Record keys (camelCase as written by other platform libraries, or
# snake_case) mapped to Session attributes.
FIELD_ALIASES = {
    "id": "id",
    "shop": "shop",
    "state": "state",
    "isOnline": "is_online",
    "is_online": "is_online",
    "scope": "scope",
    "expires": "expires",
    "accessToken": "access_token",
    "access_token": "access_token",
    "onlineAccessInfo": "online_access_info",
    "online_access_info": "online_access_info",
}

# Consumed by the constructor; never overlaid from a raw record.
IDENTITY_FIELDS = frozenset({"id", "shop", "state", "is_online"})

TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
FALSE_STRINGS = frozenset({"false", "0", "no", "off", ""})


def get_offline_id(shop: str) -> str:
    """Session id of the app-wide (offline) session for a shop."""
    return f"offline_{shop}"


def get_online_id(shop: str, user_id: Any) -> str:
    """Session id of a user-scoped (online) session."""
    return f"{shop}_{user_id}"


def session_id_for(shop: str, is_online: bool, user_id: Any = None) -> str:
    """Derive a session id from the shop, token type and user."""
    if is_online:
        if user_id is None:
            raise ValueError("Online sessions require a user id")
        return get_online_id(shop, user_id)
    return get_offline_id(shop)


def parse_expires(value: Any) -> Any:
    """Parse an ISO-8601 expiry string into an aware datetime.

    Non-string values are returned unchanged. Naive timestamps are taken
    to be UTC.

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp
    """
    if not isinstance(value, str):
        return value

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_is_online(value: Any) -> bool:
    """Read a stored isOnline flag, which text-based stores keep as a string.

    Raises:
        ValueError: If a string is not one of the usual boolean spellings
    """
    if not isinstance(value, str):
        return bool(value)

    text = value.strip().lower()
    if text in TRUE_STRINGS:
        return True
    if text in FALSE_STRINGS:
        return False
    raise ValueError(f"Invalid isOnline value: {value!r}")


@dataclass
class AssociatedUser:
    """Shopify staff member an online token was issued for."""

    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    email_verified: Optional[bool] = None
    account_owner: Optional[bool] = None
    locale: Optional[str] = None
    collaborator: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssociatedUser":
        return cls(
            id=data["id"],
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            email=data.get("email"),
            email_verified=data.get("email_verified"),
            account_owner=data.get("account_owner"),
            locale=data.get("locale"),
            collaborator=data.get("collaborator"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "email_verified": self.email_verified,
            "account_owner": self.account_owner,
            "locale": self.locale,
            "collaborator": self.collaborator,
        }


@dataclass
class OnlineAccessInfo:
    """Extra data returned with online access tokens."""

    expires_in: int
    associated_user_scope: str
    associated_user: AssociatedUser

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OnlineAccessInfo":
        user = data.get("associated_user") or {}
        if not isinstance(user, AssociatedUser):
            user = AssociatedUser.from_dict(user)

        return cls(
            expires_in=data.get("expires_in", 0),
            associated_user_scope=data.get("associated_user_scope", ""),
            associated_user=user,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "expires_in": self.expires_in,
            "associated_user_scope": self.associated_user_scope,
            "associated_user": self.associated_user.to_dict(),
        }


@dataclass
class Session:
    """An authenticated shop (offline) or shop user (online) session.

    Attributes:
        id: Opaque id, see `session_id_for`
        shop: Shop domain (e.g., store.myshopify.com)
        state: OAuth state nonce
        is_online: True for user-scoped tokens, False for app-wide tokens
        scope: Granted scopes as a comma separated string
        expires: Expiry time for online tokens
        access_token: Admin API access token
        online_access_info: User details for online tokens
        extra: Fields from stored records this class does not know about
    """

    id: str
    shop: str
    state: str
    is_online: bool
    scope: Optional[str] = None
    expires: Optional[datetime] = None
    access_token: Optional[str] = None
    online_access_info: Optional[OnlineAccessInfo] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> Optional[int]:
        if self.online_access_info is None:
            return None
        return self.online_access_info.associated_user.id

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> "Session":
        """Build a Session from a stored record.

        The identity fields go through the constructor, then every other
        field of the record is laid over the result. Unknown keys end up in
        `extra`.

        Raises:
            KeyError: If the record has no ``id``
            ValueError: If ``expires`` or ``isOnline`` cannot be parsed
        """
        if "id" not in record:
            raise KeyError("id")

        is_online = record.get("isOnline", record.get("is_online"))
        session = cls(
            id=record["id"],
            shop=record.get("shop"),
            state=record.get("state"),
            is_online=parse_is_online(is_online),
        )

        for key, value in record.items():
            name = FIELD_ALIASES.get(key)
            if name in IDENTITY_FIELDS:
                continue
            if name is None:
                session.extra[key] = value
            else:
                setattr(session, name, value)

        session.normalize()
        return session

    @classmethod
    def from_access_token_response(
        cls,
        shop: str,
        state: str,
        response: Mapping[str, Any],
    ) -> "Session":
        """Create a Session from an OAuth token exchange payload.

        Responses carrying ``associated_user`` produce online sessions.
        """
        associated_user = response.get("associated_user")
        if not associated_user:
            return cls(
                id=get_offline_id(shop),
                shop=shop,
                state=state,
                is_online=False,
                scope=response.get("scope"),
                access_token=response.get("access_token"),
            )

        online_access_info = OnlineAccessInfo.from_dict(response)
        expires = None
        if response.get("expires_in"):
            expires = datetime.now(timezone.utc) + timedelta(
                seconds=int(response["expires_in"])
            )

        return cls(
            id=get_online_id(shop, online_access_info.associated_user.id),
            shop=shop,
            state=state,
            is_online=True,
            scope=response.get("scope"),
            expires=expires,
            access_token=response.get("access_token"),
            online_access_info=online_access_info,
        )

    def normalize(self) -> "Session":
        """Coerce serialized field values back into their Python types."""
        self.expires = parse_expires(self.expires)
        if isinstance(self.online_access_info, Mapping):
            self.online_access_info = OnlineAccessInfo.from_dict(self.online_access_info)
        return self

    def copy(self) -> "Session":
        return copy.deepcopy(self)

    def is_expired(self, within_seconds: int = 0) -> bool:
        """Whether the session is expired, or will be within `within_seconds`."""
        if self.expires is None:
            return False
        expires = self.expires
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        cutoff = datetime.now(timezone.utc) + timedelta(seconds=within_seconds)
        return expires < cutoff

    def is_scope_changed(self, scopes: Any) -> bool:
        return AuthScopes(scopes) != AuthScopes(self.scope)

    def is_active(self, scopes: Any, within_seconds: int = 0) -> bool:
        """Whether the session can be used for API calls with `scopes`."""
        return (
            not self.is_scope_changed(scopes)
            and bool(self.access_token)
            and not self.is_expired(within_seconds)
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the platform's camelCase record shape."""
        record: dict[str, Any] = dict(self.extra)
        record.update({
            "id": self.id,
            "shop": self.shop,
            "state": self.state,
            "isOnline": self.is_online,
        })
        if self.scope is not None:
            record["scope"] = self.scope
        if self.expires is not None:
            record["expires"] = self.expires.isoformat()
        if self.access_token is not None:
            record["accessToken"] = self.access_token
        if self.online_access_info is not None:
            record["onlineAccessInfo"] = self.online_access_info.to_dict()
        return record
