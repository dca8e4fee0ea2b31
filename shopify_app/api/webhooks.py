"""Shopify webhook authentication for FastAPI routes."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import HTTPException, Request

from shopify_app.auth.signing import (
    API_VERSION_HEADER,
    HMAC_HEADER,
    SHOP_DOMAIN_HEADER,
    TOPIC_HEADER,
    WEBHOOK_ID_HEADER,
    validate_webhook_hmac,
)
from shopify_app.config import AppConfig
from shopify_app.session.session import Session, get_offline_id

logger = logging.getLogger(__name__)


@dataclass
class WebhookContext:
    """An authenticated webhook delivery."""

    topic: str
    shop: str
    webhook_id: str
    api_version: str
    payload: Any
    session: Optional[Session] = None


class WebhookAuthenticator:
    """FastAPI dependency that authenticates Shopify webhook requests.

    Usage:
        authenticate_webhook = WebhookAuthenticator(config)

        @router.post("/webhooks")
        async def handle(webhook: WebhookContext = Depends(authenticate_webhook)):
            ...
    """

    def __init__(self, config: AppConfig):
        self.config = config

    async def __call__(self, request: Request) -> WebhookContext:
        body = await request.body()

        # Raises InvalidHmacError, mapped to 401 by register_exception_handlers
        validate_webhook_hmac(body, request.headers.get(HMAC_HEADER), self.config.api_secret)

        topic = request.headers.get(TOPIC_HEADER, "")
        shop = request.headers.get(SHOP_DOMAIN_HEADER, "")
        if not topic or not shop:
            logger.warning("Webhook missing topic or shop headers")
            raise HTTPException(status_code=400, detail="Missing webhook topic or shop domain")

        try:
            payload = json.loads(body) if body else {}
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON payload")

        session = None
        if self.config.session_storage is not None:
            session = await self.config.session_storage.load_session(get_offline_id(shop))

        logger.info("Received webhook %s for shop %s", topic, shop)
        return WebhookContext(
            topic=topic,
            shop=shop,
            webhook_id=request.headers.get(WEBHOOK_ID_HEADER, ""),
            api_version=request.headers.get(API_VERSION_HEADER, ""),
            payload=payload,
            session=session,
        )
