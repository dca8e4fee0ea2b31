"""SQLAlchemy models for persisted Shopify sessions."""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    Boolean,
    BigInteger,
    DateTime,
    Text,
    JSON,
)
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import DeclarativeBase

from shopify_app.auth.crypto import encrypt_token, decrypt_token


class EncryptedText(TypeDecorator):
    """Text column encrypted with the app's Fernet key.

    Values that cannot be decrypted (e.g. after a key rotation) load as None.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return encrypt_token(value) or None

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return decrypt_token(value)


class UTCDateTime(TypeDecorator):
    """DateTime that always comes back timezone-aware (UTC).

    SQLite drops tzinfo on the way in, so values are stored as naive UTC.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class ShopifySessionRecord(Base):
    """One stored Shopify session (online or offline)."""

    __tablename__ = "shopify_sessions"

    id = Column(String(255), primary_key=True)
    shop = Column(String(255), nullable=False, index=True)
    state = Column(String(255), nullable=False, default="")
    is_online = Column(Boolean, nullable=False, default=False)
    scope = Column(Text)
    expires = Column(UTCDateTime())
    access_token = Column(EncryptedText())  # Encrypted at rest
    user_id = Column(BigInteger, index=True)  # Associated user for online sessions
    online_access_info = Column(JSON)
    extra = Column(JSON)  # Unrecognized session fields
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<ShopifySessionRecord {self.id}>"
