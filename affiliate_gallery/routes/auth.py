"""
Authentication routes.
Token login for admin panel users, the shared-password probe, and password changes.
"""
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from affiliate_gallery.database import get_db
from affiliate_gallery.models import User
from affiliate_gallery.schemas import (
    AuthCheckResponse,
    LoginRequest,
    MessageResponse,
    PasswordChangeRequest,
    PasswordCheckRequest,
    TokenResponse,
)
from affiliate_gallery.utils.auth import (
    MAX_PASSWORD_BYTES,
    hash_password,
    password_too_long,
    verify_admin_password,
    verify_password,
)
from affiliate_gallery.utils.jwt_auth import TokenError, create_access_token, token_user_id, verify_bearer_token
from affiliate_gallery.utils.rate_limit import RATE_LIMITS, limiter

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_PASSWORD_LENGTH = 6


@router.post("/auth/login", response_model=TokenResponse)
@limiter.limit(RATE_LIMITS["login"])
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Exchange a username and password for a signed access token.

    The token carries the user id (sub), role and username and expires after
    ACCESS_TOKEN_EXPIRE_MINUTES.

    Raises:
        HTTPException: 400 if a field is missing, 401 if the credentials are
            invalid, 500 if token signing is not configured
    """
    if not credentials.username or not credentials.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Username and password are required"}
        )

    result = await db.execute(select(User).where(User.username == credentials.username))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Failed login attempt for username '{credentials.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Invalid credentials"}
        )

    try:
        token = create_access_token({"sub": str(user.id), "role": user.role, "username": user.username})
    except TokenError as e:
        logger.error(f"Cannot issue token: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Authentication not configured"}
        )

    logger.info(f"User {user.username} logged in")
    return TokenResponse(token=token)


@router.post("/auth/check", response_model=AuthCheckResponse)
@limiter.limit(RATE_LIMITS["auth_check"])
async def check_admin_password(
    request: Request,
    body: Optional[PasswordCheckRequest] = None,
    x_admin_password: Optional[str] = Header(None)
):
    """
    Probe the shared admin password without changing anything.
    The password may come in the X-Admin-Password header or the JSON body;
    the header wins when both are sent.

    Raises:
        HTTPException: 401 if the password is wrong or no admin secret is configured
    """
    password = x_admin_password if x_admin_password is not None else (body.password if body else None)
    if not verify_admin_password(password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Unauthorized: Invalid password."}
        )
    return AuthCheckResponse(success=True, message="Authentication successful.")


@router.put("/profile/password", response_model=MessageResponse)
async def change_password(
    body: PasswordChangeRequest,
    token: dict = Depends(verify_bearer_token),
    db: AsyncSession = Depends(get_db)
):
    """
    Change the calling user's password.

    Raises:
        HTTPException: 400 if fields are missing or the new password is too short
            or too long, 403 if the current password is wrong, 404 if the user
            no longer exists
    """
    if not body.old_password or not body.new_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Old and new passwords are required"}
        )

    if len(body.new_password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": f"New password must be at least {MIN_PASSWORD_LENGTH} characters long"}
        )

    if password_too_long(body.new_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": f"New password must be at most {MAX_PASSWORD_BYTES} bytes long"}
        )

    try:
        user = await db.get(User, token_user_id(token))
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"error": "User not found"}
            )

        if not verify_password(body.old_password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"error": "Incorrect current password"}
            )

        user.password_hash = hash_password(body.new_password)
        await db.commit()

        logger.info(f"Password updated for user ID {user.id}")
        return MessageResponse(message="Password updated successfully!")

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating password: {str(e)}", exc_info=True)
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to update password"}
        )
