"""
Visitor message routes.
Contact form and broken-content reports are forwarded to the admins and not stored.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from affiliate_gallery.database import get_db
from affiliate_gallery.routes.telegram import stored_chat_ids
from affiliate_gallery.schemas import ContactRequest, MessageResponse, ReportRequest
from affiliate_gallery.services.notification_service import (
    DeliveryNotConfigured,
    NotificationError,
    NotificationService,
    get_notification_service,
)
from affiliate_gallery.utils.rate_limit import RATE_LIMITS, limiter

logger = logging.getLogger(__name__)

router = APIRouter()


async def _extra_chat_ids(db: AsyncSession) -> list:
    try:
        return await stored_chat_ids(db)
    except Exception as e:
        # Environment chat ids still work when the table is unavailable
        logger.warning(f"Could not load Telegram admin chat IDs: {str(e)}")
        return []


def _delivery_error(kind: str, error: NotificationError) -> HTTPException:
    if isinstance(error, DeliveryNotConfigured):
        logger.error(f"{kind} delivery not configured")
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Message delivery is not configured"}
        )
    logger.error(f"{kind} delivery failed: {str(error)}")
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"error": "Failed to send request"}
    )


@router.post("/contact", response_model=MessageResponse)
@limiter.limit(RATE_LIMITS["message"])
async def send_contact(
    request: Request,
    contact: ContactRequest,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service)
):
    """
    Forward a contact form submission.

    Raises:
        HTTPException: 400 if name or message is missing, 502 if delivery fails,
            503 if no delivery channel is configured
    """
    if not contact.name or not contact.message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Missing required fields"}
        )

    try:
        await notifier.forward_contact(contact, await _extra_chat_ids(db))
    except NotificationError as e:
        raise _delivery_error("Contact", e)

    return MessageResponse(message="Request sent successfully")


@router.post("/report", response_model=MessageResponse)
@limiter.limit(RATE_LIMITS["message"])
async def send_report(
    request: Request,
    report: ReportRequest,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service)
):
    """
    Forward a report about a gallery item (dead link, wrong content...).

    Raises:
        HTTPException: 400 if the item name is missing, 502 if delivery fails,
            503 if no delivery channel is configured
    """
    if not report.name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Missing required fields"}
        )

    try:
        await notifier.forward_report(report, await _extra_chat_ids(db))
    except NotificationError as e:
        raise _delivery_error("Report", e)

    return MessageResponse(message="Report sent successfully")
