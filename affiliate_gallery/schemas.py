"""
Pydantic schemas for request and response data validation.
Defines data structures for API endpoints with automatic validation and serialization.
JSON payloads use camelCase keys; attributes stay snake_case.
"""
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from typing import Optional, Literal

from affiliate_gallery.config import settings


class CamelModel(BaseModel):
    """Base schema that reads and writes camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,  # Enable conversion from SQLAlchemy models
    )


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class GalleryItemPayload(CamelModel):
    """
    Request body for creating or updating a gallery item.
    Used by POST /api/upload and PUT /api/gallery/{id}.

    Required fields are checked by the route rather than by Pydantic so the
    caller receives the documented 400 message. ``password`` carries the shared
    admin secret for clients that authenticate in the body.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    affiliate_url: Optional[str] = None
    is_featured: bool = False
    password: Optional[str] = None

    def missing_required(self) -> bool:
        return not all(
            value and value.strip()
            for value in (self.name, self.image_url, self.affiliate_url)
        )

    def to_fields(self) -> dict:
        """Normalized column values for the repository."""
        category = (self.category or "").strip()
        return {
            "name": self.name.strip(),
            "description": (self.description or "").strip(),
            "category": category or settings.DEFAULT_CATEGORY,
            "image_url": self.image_url.strip(),
            "affiliate_url": self.affiliate_url.strip(),
            "is_featured": bool(self.is_featured),
        }


class GalleryItemResponse(CamelModel):
    """
    Gallery item as returned by GET /api/gallery.
    Also the item type consumed by the client-side view-model.
    """
    id: int
    name: str
    description: Optional[str] = ""
    category: Optional[str] = None
    image_url: str
    affiliate_url: str
    is_featured: bool = False
    likes: int = 0
    dislikes: int = 0
    user_id: Optional[int] = None
    publisher_name: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        return _as_utc(v)


class ItemMutationResponse(BaseModel):
    """Response for upload and update operations."""
    message: str
    item: GalleryItemResponse


class MessageResponse(BaseModel):
    message: str


class CounterResponse(BaseModel):
    """Counter values after a like/dislike adjustment."""
    message: str
    likes: int
    dislikes: int


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    token: str


class PasswordCheckRequest(BaseModel):
    password: Optional[str] = None


class AuthCheckResponse(BaseModel):
    success: bool
    message: str


class PasswordChangeRequest(CamelModel):
    """Request body for PUT /api/profile/password."""
    old_password: Optional[str] = None
    new_password: Optional[str] = None


class UserCreate(BaseModel):
    """Request body for POST /api/users."""
    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserResponse(CamelModel):
    id: int
    username: str
    role: Literal["admin", "manager"]
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        return _as_utc(v)


class UserMutationResponse(BaseModel):
    message: str
    user: UserResponse


class TelegramAdminCreate(CamelModel):
    chat_id: Optional[str] = None
    name: Optional[str] = None

    @field_validator("chat_id", mode="before")
    @classmethod
    def coerce_chat_id(cls, v):
        # Telegram chat ids arrive as numbers from some clients
        if isinstance(v, int):
            return str(v)
        return v


class TelegramAdminResponse(CamelModel):
    id: int
    chat_id: str
    name: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        return _as_utc(v)


class ContactRequest(CamelModel):
    """Contact form submission, forwarded to the admins."""
    model_config = ConfigDict(protected_namespaces=())

    name: Optional[str] = None
    message: Optional[str] = None
    category: Optional[str] = None
    platform: Optional[str] = None
    model_image: Optional[str] = None


class ReportRequest(CamelModel):
    """Broken-content report for a gallery item, forwarded to the admins."""
    name: Optional[str] = None
    category: Optional[str] = None
    affiliate_url: Optional[str] = None
    image_url: Optional[str] = None
    reason: Optional[str] = None


class TelegramUpdate(BaseModel):
    """Subset of a Telegram Bot API update used by the webhook."""
    update_id: Optional[int] = None
    message: Optional[dict] = None
