"""
User management routes for the admin panel.
All endpoints require a bearer token with the admin role.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
from typing import List
import logging

from affiliate_gallery.database import get_db
from affiliate_gallery.models import User
from affiliate_gallery.schemas import MessageResponse, UserCreate, UserMutationResponse, UserResponse
from affiliate_gallery.utils.auth import MAX_PASSWORD_BYTES, hash_password, password_too_long
from affiliate_gallery.utils.jwt_auth import require_admin, token_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", dependencies=[Depends(require_admin)])

ROLES = ("admin", "manager")


@router.get("", response_model=List[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    """Get all users, newest first."""
    try:
        result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
        users = result.scalars().all()
        return [UserResponse.model_validate(user) for user in users]
    except Exception as e:
        logger.error(f"Error fetching users: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to retrieve users"}
        )


@router.post("", response_model=UserMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    """
    Create an admin panel user.

    Raises:
        HTTPException: 400 if fields are missing, the role is invalid or the
            password exceeds bcrypt's 72-byte limit,
            409 if the username is taken, 500 if the insert fails
    """
    if not body.username or not body.password or body.role not in ROLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Missing or invalid fields"}
        )

    if password_too_long(body.password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": f"Password must be at most {MAX_PASSWORD_BYTES} bytes long"}
        )

    try:
        user = User(username=body.username.strip(), password_hash=hash_password(body.password), role=body.role)
        db.add(user)
        await db.commit()
        await db.refresh(user)

        logger.info(f"Created user {user.username} ({user.role})")
        return UserMutationResponse(message="User created successfully", user=UserResponse.model_validate(user))

    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "Username already exists"}
        )
    except Exception as e:
        logger.error(f"Error creating user: {str(e)}", exc_info=True)
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to create user"}
        )


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    token: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a user.

    Raises:
        HTTPException: 400 if admins try to delete themselves, 404 if the user
            does not exist, 500 if the deletion fails
    """
    if token_user_id(token) == user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Admins cannot delete themselves"}
        )

    try:
        user = await db.get(User, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"error": "User not found"}
            )

        await db.delete(user)
        await db.commit()

        logger.info(f"Deleted user ID {user_id}")
        return MessageResponse(message="User deleted successfully!")

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting user: {str(e)}", exc_info=True)
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to delete user"}
        )
