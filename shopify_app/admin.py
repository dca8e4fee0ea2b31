"""Admin API context bound to an authenticated session."""

import logging
from typing import Any, Optional

import httpx

from shopify_app.errors import GraphqlQueryError
from shopify_app.session.session import Session


logger = logging.getLogger(__name__)

# Shopify Admin API version used when the app config does not set one
DEFAULT_API_VERSION = "2024-10"


class AdminApiContext:
    """Makes Admin GraphQL calls on behalf of a session's shop."""

    def __init__(
        self,
        session: Session,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
    ):
        """Initialize the Admin API context.

        Args:
            session: Session whose shop and access token are used
            api_version: Admin API version (e.g., 2024-10)
            timeout: Request timeout in seconds
        """
        self.session = session
        self.api_version = api_version
        self.timeout = timeout
        self.graphql_url = f"https://{session.shop}/admin/api/{api_version}/graphql.json"

    def _headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        return {
            "X-Shopify-Access-Token": self.session.access_token or "",
            "Content-Type": "application/json",
        }

    async def graphql(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Run a GraphQL query or mutation.

        Returns:
            The ``data`` member of the response

        Raises:
            httpx.HTTPStatusError: If the API call fails
            GraphqlQueryError: If the response carries top-level errors
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.graphql_url, headers=self._headers(), json=payload)
            response.raise_for_status()
            body = response.json()

        errors = body.get("errors")
        if errors:
            logger.warning("GraphQL errors for %s: %s", self.session.shop, errors)
            raise GraphqlQueryError("GraphQL query returned errors", errors)

        return body.get("data") or {}
