"""Redirect helpers for embedded and standalone apps.

An embedded app runs in an iframe inside the Shopify admin, so a plain 302
to another origin would load inside the frame. Embedded redirects instead
go through the app's exit-iframe page, or, for App Bridge fetch requests,
answer with reauthorize headers App Bridge acts on.
"""

import logging
from typing import Callable, Optional
from urllib.parse import urlencode

from fastapi import Request, Response
from fastapi.responses import RedirectResponse

from shopify_app.config import AppConfig


logger = logging.getLogger(__name__)

REAUTHORIZE_HEADER = "X-Shopify-API-Request-Failure-Reauthorize"
REAUTHORIZE_URL_HEADER = "X-Shopify-API-Request-Failure-Reauthorize-Url"

RedirectFunction = Callable[..., Response]


def standalone_redirect(
    url: str,
    status_code: int = 302,
    headers: Optional[dict[str, str]] = None,
    target: Optional[str] = None,
) -> Response:
    """Plain HTTP redirect. `target` is accepted for signature parity."""
    return RedirectResponse(url, status_code=status_code, headers=headers)


def _is_bearer_request(request: Request) -> bool:
    return request.headers.get("authorization", "").lower().startswith("bearer ")


def embedded_redirect_factory(config: AppConfig, request: Request) -> RedirectFunction:
    """Build the redirect function for a request to an embedded app."""

    def redirect(
        url: str,
        status_code: int = 302,
        headers: Optional[dict[str, str]] = None,
        target: Optional[str] = None,
    ) -> Response:
        if _is_bearer_request(request):
            # App Bridge fetch: let the client perform the navigation
            return Response(
                status_code=401,
                headers={
                    **(headers or {}),
                    REAUTHORIZE_HEADER: "1",
                    REAUTHORIZE_URL_HEADER: url,
                },
            )

        if target == "_self":
            return RedirectResponse(url, status_code=status_code, headers=headers)

        params = {"exitIframe": url}
        shop = request.query_params.get("shop")
        host = request.query_params.get("host")
        if shop:
            params["shop"] = shop
        if host:
            params["host"] = host

        exit_url = f"{config.auth_path_prefix}/exit-iframe?" + urlencode(params)
        logger.debug("Redirecting out of iframe to %s", url)
        return RedirectResponse(exit_url, status_code=status_code, headers=headers)

    return redirect
