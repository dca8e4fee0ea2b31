"""Access scope handling and the Scopes API.

`AuthScopes` compares granted scope strings the way Shopify does, where a
``write_*`` scope implies the matching ``read_*`` scope. `ScopesApi` lets an
app query, request and revoke optional scopes for the current shop.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterable, Union
from urllib.parse import urlencode

from shopify_app.errors import RedirectRequired, ScopesApiError

if TYPE_CHECKING:
    from shopify_app.admin import AdminApiContext
    from shopify_app.config import AppConfig


logger = logging.getLogger(__name__)

Scope = str

WRITE_SCOPE_PATTERN = re.compile(r"^(unauthenticated_)?write_(.*)$")
SCOPE_SEPARATOR = re.compile(r"[\s,]+")

FETCH_GRANTED_SCOPES_QUERY = """
query FetchAccessScopes {
  appInstallation {
    accessScopes {
      handle
    }
  }
}
"""

REVOKE_SCOPES_MUTATION = """
mutation AppRevokeAccessScopes($scopes: [String!]!) {
  appRevokeAccessScopes(scopes: $scopes) {
    revoked {
      handle
    }
    userErrors {
      field
      message
    }
  }
}
"""


class AuthScopes:
    """A normalized set of access scopes."""

    def __init__(self, scopes: Union[str, Iterable[str], "AuthScopes", None] = None):
        if isinstance(scopes, AuthScopes):
            raw = list(scopes.to_list())
        elif scopes is None:
            raw = []
        elif isinstance(scopes, str):
            raw = SCOPE_SEPARATOR.split(scopes)
        else:
            raw = []
            for scope in scopes:
                raw.extend(SCOPE_SEPARATOR.split(scope))

        scopes_set = {scope.strip() for scope in raw if scope and scope.strip()}
        implied = set()
        for scope in scopes_set:
            match = WRITE_SCOPE_PATTERN.match(scope)
            if match:
                implied.add(f"{match.group(1) or ''}read_{match.group(2)}")

        self._expanded = scopes_set | implied
        self._compressed = scopes_set - implied

    def has(self, scopes: Union[str, Iterable[str], "AuthScopes", None]) -> bool:
        """Return True when every scope in `scopes` is covered by this set."""
        other = scopes if isinstance(scopes, AuthScopes) else AuthScopes(scopes)
        return other._expanded <= self._expanded

    def to_list(self) -> list[str]:
        return sorted(self._compressed)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str) or other is None:
            other = AuthScopes(other)
        if not isinstance(other, AuthScopes):
            return NotImplemented
        return self._compressed == other._compressed

    def __hash__(self) -> int:
        return hash(frozenset(self._compressed))

    def __iter__(self):
        return iter(self.to_list())

    def __len__(self) -> int:
        return len(self._compressed)

    def __str__(self) -> str:
        return ",".join(self.to_list())

    def __repr__(self) -> str:
        return f"AuthScopes({str(self)!r})"


@dataclass
class ScopesDetail:
    """Scopes granted on the shop alongside the ones the app declares."""

    granted: list[Scope] = field(default_factory=list)
    required: list[Scope] = field(default_factory=list)
    optional: list[Scope] = field(default_factory=list)


@dataclass
class ScopesRevokeResponse:
    """Scopes removed by a revoke call."""

    revoked: list[Scope] = field(default_factory=list)


class ScopesApi:
    """Query, request and revoke access scopes for the session's shop."""

    def __init__(
        self,
        admin: "AdminApiContext",
        config: "AppConfig",
        redirect: Callable,
    ):
        self.admin = admin
        self.config = config
        self.redirect = redirect

    async def query(self) -> ScopesDetail:
        """Fetch the scopes currently granted to the app on this shop."""
        data = await self.admin.graphql(FETCH_GRANTED_SCOPES_QUERY)
        installation = data.get("appInstallation") or {}
        granted = [
            scope["handle"] for scope in installation.get("accessScopes", [])
        ]

        return ScopesDetail(
            granted=granted,
            required=AuthScopes(self.config.scopes).to_list(),
            optional=AuthScopes(self.config.optional_scopes).to_list(),
        )

    async def request(self, scopes: list[Scope]) -> None:
        """Send the merchant to the grant screen for `scopes`.

        Returns without redirecting when there is nothing left to grant.

        Raises:
            RedirectRequired: Carrying the response that starts the grant flow
        """
        if not scopes:
            return

        detail = await self.query()
        if AuthScopes(detail.granted).has(scopes):
            logger.info("Scopes already granted for %s: %s", self.admin.session.shop, scopes)
            return

        shop = self.admin.session.shop
        url = f"https://{shop}/admin/oauth/install?" + urlencode(
            {"optional_scopes": ",".join(scopes)}
        )
        logger.info("Requesting optional scopes for %s: %s", shop, scopes)
        raise RedirectRequired(self.redirect(url, target="_top"))

    async def revoke(self, scopes: list[Scope]) -> ScopesRevokeResponse:
        """Revoke optional scopes from the app on this shop.

        Raises:
            ScopesApiError: If the Admin API rejects the request, for example
                when a required scope is included
        """
        data = await self.admin.graphql(
            REVOKE_SCOPES_MUTATION, variables={"scopes": list(scopes)}
        )
        result = data.get("appRevokeAccessScopes") or {}

        user_errors = result.get("userErrors") or []
        if user_errors:
            messages = "; ".join(error.get("message", "") for error in user_errors)
            raise ScopesApiError(f"Failed to revoke scopes: {messages}", user_errors)

        revoked = [scope["handle"] for scope in result.get("revoked") or []]
        return ScopesRevokeResponse(revoked=revoked)
