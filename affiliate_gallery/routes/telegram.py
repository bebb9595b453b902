"""
Telegram routes.
Admin-only management of notification chat ids, and the bot webhook that
tells a new admin their chat id.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
from typing import List
import logging

from affiliate_gallery.config import settings
from affiliate_gallery.database import get_db
from affiliate_gallery.models import TelegramAdmin
from affiliate_gallery.schemas import (
    MessageResponse,
    TelegramAdminCreate,
    TelegramAdminResponse,
    TelegramUpdate,
)
from affiliate_gallery.services.notification_service import (
    NotificationError,
    NotificationService,
    get_notification_service,
)
from affiliate_gallery.utils.jwt_auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


async def stored_chat_ids(db: AsyncSession) -> List[str]:
    """Chat ids registered through the admin panel."""
    result = await db.execute(select(TelegramAdmin.chat_id))
    return list(result.scalars().all())


@router.get("/telegram-admins", response_model=List[TelegramAdminResponse], dependencies=[Depends(require_admin)])
async def list_telegram_admins(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(TelegramAdmin).order_by(TelegramAdmin.created_at.desc(), TelegramAdmin.id.desc()))
    return [TelegramAdminResponse.model_validate(row) for row in result.scalars().all()]


@router.post(
    "/telegram-admins",
    response_model=TelegramAdminResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)]
)
async def add_telegram_admin(body: TelegramAdminCreate, db: AsyncSession = Depends(get_db)):
    """
    Register a chat id for contact and report notifications.

    Raises:
        HTTPException: 400 if chat id is missing, 409 if it is already registered
    """
    if not body.chat_id or not body.chat_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Chat ID is required"}
        )

    try:
        admin = TelegramAdmin(chat_id=body.chat_id.strip(), name=body.name)
        db.add(admin)
        await db.commit()
        await db.refresh(admin)
        logger.info(f"Registered Telegram chat ID {admin.chat_id}")
        return TelegramAdminResponse.model_validate(admin)

    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "Chat ID already exists"}
        )


@router.delete("/telegram-admins/{admin_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def remove_telegram_admin(admin_id: int, db: AsyncSession = Depends(get_db)):
    admin = await db.get(TelegramAdmin, admin_id)
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Chat ID not found"}
        )
    await db.delete(admin)
    await db.commit()
    return MessageResponse(message="Chat ID removed")


@router.post("/webhook/telegram")
async def telegram_webhook(
    update: TelegramUpdate,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service)
):
    """
    Answer "/start" with the sender's chat id so they can be registered.
    Always acknowledges the update so Telegram does not redeliver it.
    """
    message = update.message or {}
    if message.get("text") != "/start" or not settings.TELEGRAM_BOT_TOKEN:
        return {"ok": True}

    chat_id = str((message.get("chat") or {}).get("id", "")).strip()
    if not chat_id:
        return {"ok": True}

    known = set(settings.telegram_admin_chat_ids) | set(await stored_chat_ids(db))
    try:
        await notifier.reply_to_start(chat_id, authorized=chat_id in known)
    except NotificationError as e:
        logger.error(f"Telegram webhook reply to {chat_id} failed: {str(e)}")

    return {"ok": True}
