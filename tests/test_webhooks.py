"""Tests for webhook authentication and API error handling."""

import asyncio
import json

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from shopify_app.api import WebhookAuthenticator, WebhookContext, register_exception_handlers
from shopify_app.auth.signing import HMAC_HEADER, TOPIC_HEADER, webhook_headers
from shopify_app.errors import SessionStorageError


SHOP = "test-shop.myshopify.io"
API_SECRET = "testApiSecretKey"
WEBHOOK_ID = "1234567890"


@pytest.fixture
def test_client(app_config):
    """App with a single webhook route."""
    app = FastAPI()
    register_exception_handlers(app)
    authenticate_webhook = WebhookAuthenticator(app_config)

    @app.post("/webhooks")
    async def handle(webhook: WebhookContext = Depends(authenticate_webhook)):
        return {
            "topic": webhook.topic,
            "shop": webhook.shop,
            "webhook_id": webhook.webhook_id,
            "payload": webhook.payload,
            "session_id": webhook.session.id if webhook.session else None,
        }

    with TestClient(app) as client:
        yield client


def signed_headers(body, topic="app/uninstalled"):
    headers = webhook_headers(
        topic=topic,
        shop=SHOP,
        body=body,
        secret=API_SECRET,
        webhook_id=WEBHOOK_ID,
        api_version="2024-10",
    )
    headers["Content-Type"] = "application/json"
    return headers


class TestWebhookAuthenticator:
    """Tests for WebhookAuthenticator."""

    def test_valid_webhook(self, test_client):
        body = json.dumps({"id": 1, "domain": SHOP})

        response = test_client.post("/webhooks", content=body, headers=signed_headers(body))

        assert response.status_code == 200
        data = response.json()
        assert data["topic"] == "app/uninstalled"
        assert data["shop"] == SHOP
        assert data["webhook_id"] == WEBHOOK_ID
        assert data["payload"] == {"id": 1, "domain": SHOP}
        assert data["session_id"] is None

    def test_loads_offline_session(self, test_client, session_storage, offline_session):
        asyncio.run(session_storage.store_session(offline_session))
        body = "{}"

        response = test_client.post("/webhooks", content=body, headers=signed_headers(body))

        assert response.status_code == 200
        assert response.json()["session_id"] == f"offline_{SHOP}"

    def test_invalid_hmac(self, test_client):
        body = "{}"
        headers = signed_headers(body)
        headers[HMAC_HEADER] = "bm90LXRoZS1yaWdodC1obWFj"

        response = test_client.post("/webhooks", content=body, headers=headers)

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_HMAC"

    def test_missing_hmac(self, test_client):
        body = "{}"
        headers = signed_headers(body)
        del headers[HMAC_HEADER]

        response = test_client.post("/webhooks", content=body, headers=headers)

        assert response.status_code == 401

    def test_tampered_body(self, test_client):
        headers = signed_headers('{"id": 1}')

        response = test_client.post("/webhooks", content='{"id": 2}', headers=headers)

        assert response.status_code == 401

    def test_missing_topic(self, test_client):
        body = "{}"
        headers = signed_headers(body)
        del headers[TOPIC_HEADER]

        response = test_client.post("/webhooks", content=body, headers=headers)

        assert response.status_code == 400

    def test_invalid_json(self, test_client):
        body = "not json"

        response = test_client.post("/webhooks", content=body, headers=signed_headers(body))

        assert response.status_code == 400

    def test_storage_failure_is_500(self, app_config):
        class BrokenStorage:
            async def load_session(self, id):
                raise SessionStorageError("backend down")

        app_config.session_storage = BrokenStorage()
        app = FastAPI()
        register_exception_handlers(app)

        @app.post("/webhooks")
        async def handle(webhook: WebhookContext = Depends(WebhookAuthenticator(app_config))):
            return {}

        body = "{}"
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post("/webhooks", content=body, headers=signed_headers(body))

        assert response.status_code == 500
        assert response.json()["code"] == "SESSION_STORAGE_ERROR"


class TestExceptionHandlers:
    """Tests for register_exception_handlers."""

    @pytest.fixture
    def client(self):
        from fastapi.responses import RedirectResponse

        from shopify_app.errors import (
            GraphqlQueryError,
            InvalidHmacError,
            InvalidSessionTokenError,
            RedirectRequired,
            ScopesApiError,
        )

        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/redirect")
        async def redirect():
            raise RedirectRequired(RedirectResponse("https://example.com/grant", status_code=302))

        @app.get("/graphql")
        async def graphql():
            raise GraphqlQueryError("GraphQL query returned errors", [{"message": "boom"}])

        @app.get("/scopes")
        async def scopes():
            raise ScopesApiError("Failed to revoke scopes: required scope")

        @app.get("/hmac")
        async def hmac_error():
            raise InvalidHmacError("Webhook HMAC validation failed")

        @app.get("/token")
        async def token_error():
            raise InvalidSessionTokenError("Failed to parse session token")

        @app.get("/storage")
        async def storage_error():
            raise SessionStorageError("backend down")

        with TestClient(app, raise_server_exceptions=False) as client:
            yield client

    def test_redirect_required_returns_attached_response(self, client):
        response = client.get("/redirect", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com/grant"

    def test_graphql_error(self, client):
        response = client.get("/graphql")

        assert response.status_code == 502
        assert response.json() == {
            "error": "Shopify Admin API request failed",
            "code": "SHOPIFY_API_ERROR",
            "detail": "GraphQL query returned errors",
        }

    def test_scopes_error(self, client):
        response = client.get("/scopes")

        assert response.status_code == 422
        assert response.json()["code"] == "SCOPES_ERROR"

    def test_every_error_code_has_a_handler(self, client):
        from shopify_app.api import ErrorCode

        declared = {
            value for name, value in vars(ErrorCode).items() if not name.startswith("_")
        }
        returned = {
            client.get(path).json()["code"]
            for path in ("/hmac", "/token", "/storage", "/graphql", "/scopes")
        }

        assert returned == declared
