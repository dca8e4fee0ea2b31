"""Fernet encryption for Shopify access tokens kept in the database."""

import base64
import hashlib
import logging
import os

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)

# Only for local development; set ENCRYPTION_KEY or SECRET_KEY in production
DEV_SECRET_KEY = "dev-secret-key-change-in-production"


def _fernet() -> Fernet:
    """Fernet for the current key.

    ENCRYPTION_KEY is used as-is when set (it must be a Fernet key).
    Otherwise the key is the SHA-256 of SECRET_KEY, url-safe base64 encoded.
    The environment is read on every call so key rotation needs no restart.
    """
    encryption_key = os.getenv("ENCRYPTION_KEY")
    if encryption_key:
        return Fernet(encryption_key.encode())

    secret = os.getenv("SECRET_KEY", DEV_SECRET_KEY)
    return Fernet(base64.urlsafe_b64encode(hashlib.sha256(secret.encode()).digest()))


def encrypt_token(plaintext: str | None) -> str:
    """Encrypt an access token (``shpat_``/``shpua_``) for storage.

    Returns "" when there is nothing to encrypt.
    """
    if not plaintext:
        return ""
    return _fernet().encrypt(plaintext.encode()).decode()


def decrypt_token(ciphertext: str | None) -> str | None:
    """Decrypt a stored access token.

    Returns None for empty values and for tokens written under another key,
    so a rotated key turns old sessions into sessions without a token.
    """
    if not ciphertext:
        return None

    try:
        return _fernet().decrypt(ciphertext.encode()).decode()
    except InvalidToken:
        logger.warning("Stored access token could not be decrypted with the current key")
        return None


def generate_encryption_key() -> str:
    """New random key suitable for ENCRYPTION_KEY."""
    return Fernet.generate_key().decode()
