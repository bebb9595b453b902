"""
JWT Token-based authentication utilities for the admin panel.
Provides signed token generation, verification, and role checks.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import HTTPException, status, Header, Depends
from affiliate_gallery.config import settings


# JWT Configuration
ALGORITHM = "HS256"
TOKEN_TYPE = "access"


class TokenError(Exception):
    """Raised when a token cannot be issued or accepted."""


def _secret_key() -> str:
    secret = settings.JWT_SECRET_KEY.strip()
    if not secret:
        raise TokenError("JWT_SECRET_KEY not configured")
    return secret


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Dictionary of claims to include in token (sub, role, username)
        expires_delta: Optional custom expiration time

    Returns:
        str: Encoded JWT token

    Raises:
        TokenError: If JWT_SECRET_KEY is not configured
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({
        "exp": expire,
        "iat": now,
        "type": TOKEN_TYPE
    })

    return jwt.encode(to_encode, _secret_key(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Verify signature and expiry of a JWT token and return its payload.

    Args:
        token: JWT token string

    Returns:
        dict: Decoded token payload

    Raises:
        TokenError: If token is invalid, expired, unsigned or malformed
    """
    try:
        payload = jwt.decode(token, _secret_key(), algorithms=[ALGORITHM])
    except JWTError as e:
        raise TokenError(f"Invalid token: {e}") from e

    if payload.get("type") != TOKEN_TYPE:
        raise TokenError("Token is not an access token")

    # jose validates exp when present; a token without exp never expires, so refuse it
    if payload.get("exp") is None:
        raise TokenError("Token has no expiry")

    if payload.get("sub") is None or payload.get("role") is None:
        raise TokenError("Token is missing subject or role")

    return payload


def bearer_token_from_header(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def verify_bearer_token(
    authorization: Optional[str] = Header(None, description="Bearer token for authentication")
) -> dict:
    """
    FastAPI dependency for JWT token authentication.

    Args:
        authorization: Authorization header value (e.g., "Bearer <token>")

    Returns:
        dict: Decoded token payload

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    token = bearer_token_from_header(authorization)

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Missing or invalid Authorization header"},
            headers={"WWW-Authenticate": "Bearer"}
        )

    try:
        return decode_access_token(token)
    except TokenError as e:
        message = "Token expired" if "expired" in str(e).lower() else "Invalid token"
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": message},
            headers={"WWW-Authenticate": "Bearer"}
        )


def require_admin(payload: dict = Depends(verify_bearer_token)) -> dict:
    """
    FastAPI dependency that only lets admin tokens through.

    Raises:
        HTTPException: 403 if the token role is not admin
    """
    if payload.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "Forbidden: Admin access required"}
        )
    return payload


def token_user_id(payload: dict) -> int:
    """User id carried in the ``sub`` claim."""
    return int(payload["sub"])
