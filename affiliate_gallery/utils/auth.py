"""
Password authentication utilities for the admin panel.
Uses bcrypt for secure password hashing.
"""
import hmac
import logging
from typing import Optional

import bcrypt
from affiliate_gallery.config import settings

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes and recent releases reject longer input
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode('utf-8')) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.
    Used for user accounts and for generating ADMIN_PASSWORD_HASH.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hashed password.

    Args:
        password: Plain text password to verify
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    if not password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # Malformed hash (e.g. a legacy plaintext value)
        return False


def constant_time_equals(provided: str, secret: str) -> bool:
    """Compare two secrets without leaking their common prefix length."""
    return hmac.compare_digest(provided.encode('utf-8'), secret.encode('utf-8'))


def admin_secret_configured() -> bool:
    return bool(settings.ADMIN_PASSWORD_HASH.strip() or settings.ADMIN_PASSWORD.strip())


def verify_admin_password(password: Optional[str]) -> bool:
    """
    Verify the shared admin password.

    ADMIN_PASSWORD_HASH (bcrypt) takes precedence over the plain ADMIN_PASSWORD.
    Fails closed: when neither is configured every password is rejected,
    including an empty one.

    Args:
        password: Plain text password to verify

    Returns:
        True if password matches the configured admin secret, False otherwise
    """
    if not admin_secret_configured():
        logger.warning("Admin password check rejected: no admin secret configured")
        return False

    provided = password if isinstance(password, str) else ""

    if settings.ADMIN_PASSWORD_HASH.strip():
        return verify_password(provided, settings.ADMIN_PASSWORD_HASH.strip())

    return constant_time_equals(provided, settings.ADMIN_PASSWORD)
