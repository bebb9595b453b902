"""
SQLAlchemy models for the application.
All database models inherit from Base (declarative base).
"""
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func
from datetime import datetime, timezone
from affiliate_gallery.config import settings
from affiliate_gallery.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Admin panel account.
    Usernames are unique; passwords are stored as bcrypt hashes.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default="manager")
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'manager')", name="ck_users_role"),
    )


class GalleryItem(Base):
    """
    Affiliate gallery entry.
    Stores the display metadata plus aggregate like/dislike counters.
    """
    __tablename__ = "gallery_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(50), nullable=False, default=lambda: settings.DEFAULT_CATEGORY, index=True)
    image_url = Column(String, nullable=False)
    affiliate_url = Column(String, nullable=False)
    is_featured = Column(Boolean, nullable=False, default=False)
    likes = Column(Integer, nullable=False, default=0)
    dislikes = Column(Integer, nullable=False, default=0)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("likes >= 0", name="ck_gallery_items_likes"),
        CheckConstraint("dislikes >= 0", name="ck_gallery_items_dislikes"),
    )


class TelegramAdmin(Base):
    """Telegram chat that receives contact and report notifications."""
    __tablename__ = "telegram_admins"

    id = Column(Integer, primary_key=True, index=True)
    chat_id = Column(String(64), nullable=False, unique=True)
    name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
