"""Shopify app configuration."""

import os
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from dotenv import load_dotenv

from shopify_app.admin import DEFAULT_API_VERSION
from shopify_app.session.storage import SessionStorage


AfterAuthHook = Callable[[Any], Optional[Awaitable[None]]]

TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class AppHooks:
    """Callbacks the app registers for auth lifecycle events."""

    after_auth: Optional[AfterAuthHook] = None


@dataclass
class AppConfig:
    """Configuration for a Shopify app.

    Attributes:
        api_key: App client id
        api_secret: App client secret, used for HMACs and session tokens
        scopes: Required access scopes
        optional_scopes: Scopes the app may request later
        app_url: Public base URL of the app
        api_version: Admin API version
        is_embedded_app: Whether the app runs inside the Shopify admin
        session_storage: Backend that persists sessions
        hooks: Auth lifecycle callbacks
        auth_path_prefix: Path prefix of the app's auth routes
        hmac_clock_tolerance: Max clock skew in seconds accepted by
            `validate_app_query`, None to skip the timestamp check
    """

    api_key: str
    api_secret: str
    scopes: list[str] = field(default_factory=list)
    optional_scopes: list[str] = field(default_factory=list)
    app_url: str = "http://localhost:8000"
    api_version: str = DEFAULT_API_VERSION
    is_embedded_app: bool = True
    session_storage: Optional[SessionStorage] = None
    hooks: AppHooks = field(default_factory=AppHooks)
    auth_path_prefix: str = "/auth"
    hmac_clock_tolerance: Optional[int] = 90

    @classmethod
    def from_env(
        cls,
        session_storage: Optional[SessionStorage] = None,
        hooks: Optional[AppHooks] = None,
        env_file: Optional[str] = None,
    ) -> "AppConfig":
        """Load configuration from environment variables.

        Args:
            session_storage: Storage backend to attach
            hooks: Lifecycle hooks to attach
            env_file: Optional .env file loaded first (existing vars win)

        Raises:
            ValueError: If SHOPIFY_API_KEY or SHOPIFY_API_SECRET is unset
        """
        if env_file:
            load_dotenv(env_file)

        api_key = os.getenv("SHOPIFY_API_KEY")
        api_secret = os.getenv("SHOPIFY_API_SECRET")
        if not api_key or not api_secret:
            raise ValueError(
                "SHOPIFY_API_KEY and SHOPIFY_API_SECRET must be set"
            )

        return cls(
            api_key=api_key,
            api_secret=api_secret,
            scopes=_split(os.getenv("SHOPIFY_SCOPES", "")),
            optional_scopes=_split(os.getenv("SHOPIFY_OPTIONAL_SCOPES", "")),
            app_url=os.getenv("APP_URL", "http://localhost:8000").rstrip("/"),
            api_version=os.getenv("SHOPIFY_API_VERSION", DEFAULT_API_VERSION),
            is_embedded_app=os.getenv("SHOPIFY_EMBEDDED", "true").lower() in TRUE_VALUES,
            session_storage=session_storage,
            hooks=hooks or AppHooks(),
        )


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]
