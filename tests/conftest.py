"""Shared fixtures. Every test builds its own config and storage."""

from datetime import datetime, timezone

import pytest

from shopify_app.config import AppConfig, AppHooks
from shopify_app.session import MemorySessionStorage, OnlineAccessInfo, AssociatedUser, Session


TEST_SHOP = "test-shop.myshopify.io"
TEST_API_KEY = "testApiKey"
TEST_API_SECRET = "testApiSecretKey"
TEST_WEBHOOK_ID = "1234567890"


@pytest.fixture
def session_storage():
    """Fresh in-memory storage."""
    return MemorySessionStorage()


@pytest.fixture
def app_config(session_storage):
    """App config bound to the in-memory storage."""
    return AppConfig(
        api_key=TEST_API_KEY,
        api_secret=TEST_API_SECRET,
        scopes=["read_orders", "write_products"],
        optional_scopes=["read_customers"],
        app_url="https://my-test-app.example.com",
        api_version="2024-10",
        session_storage=session_storage,
        hooks=AppHooks(),
    )


@pytest.fixture
def offline_session():
    """Offline session for TEST_SHOP."""
    return Session(
        id=f"offline_{TEST_SHOP}",
        shop=TEST_SHOP,
        state="state-123",
        is_online=False,
        scope="read_orders,write_products",
        access_token="shpat_offline_token",
    )


@pytest.fixture
def online_session():
    """Online session for user 42 on TEST_SHOP."""
    return Session(
        id=f"{TEST_SHOP}_42",
        shop=TEST_SHOP,
        state="state-456",
        is_online=True,
        scope="read_orders",
        expires=datetime(2030, 1, 1, tzinfo=timezone.utc),
        access_token="shpua_online_token",
        online_access_info=OnlineAccessInfo(
            expires_in=86399,
            associated_user_scope="read_orders",
            associated_user=AssociatedUser(
                id=42,
                first_name="Jane",
                last_name="Doe",
                email="jane@example.com",
                email_verified=True,
                account_owner=True,
                locale="en",
                collaborator=False,
            ),
        ),
    )
