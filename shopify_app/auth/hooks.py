"""Dispatch of the app's after-auth hook."""

import logging
from dataclasses import dataclass

from fastapi import Request

from shopify_app.admin import AdminApiContext
from shopify_app.auth.redirect import (
    RedirectFunction,
    embedded_redirect_factory,
    standalone_redirect,
)
from shopify_app.config import AppConfig
from shopify_app.session.session import Session
from shopify_app.utils import call_maybe_async


logger = logging.getLogger(__name__)


@dataclass
class AfterAuthContext:
    """What the after-auth hook receives."""

    session: Session
    admin: AdminApiContext
    redirect: RedirectFunction


async def trigger_after_auth_hook(
    config: AppConfig,
    session: Session,
    request: Request,
) -> None:
    """Run the configured after-auth hook, if any, once for `session`.

    Exceptions raised by the hook propagate to the caller.
    """
    hook = config.hooks.after_auth
    if hook is None:
        return

    if config.is_embedded_app:
        redirect = embedded_redirect_factory(config, request)
    else:
        redirect = standalone_redirect

    logger.info("Running afterAuth hook for %s", session.shop)
    await call_maybe_async(
        hook,
        AfterAuthContext(
            session=session,
            admin=AdminApiContext(session, api_version=config.api_version),
            redirect=redirect,
        ),
    )
