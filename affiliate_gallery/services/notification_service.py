"""
Outbound notification service.
Posts new-content announcements, contact messages and content reports to
Discord webhooks and the Telegram Bot API, with retry logic for transient failures.
"""
import asyncio
import html
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from affiliate_gallery.config import settings
from affiliate_gallery.schemas import ContactRequest, GalleryItemResponse, ReportRequest

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"

# Embed colours per category, default orange
CATEGORY_COLORS = {"onlyfans": 0x00AFF0}
DEFAULT_COLOR = 0xFF8800


class NotificationError(Exception):
    """Raised when a downstream channel rejects or never receives a message."""


class DeliveryNotConfigured(NotificationError):
    """Raised when no channel is configured for a message kind."""


def _unique(values: Iterable[str]) -> List[str]:
    seen = []
    for value in values:
        value = str(value).strip()
        if value and value not in seen:
            seen.append(value)
    return seen


class NotificationService:
    """
    Thin client for the notification channels.

    Args:
        client: Optional shared httpx.AsyncClient (tests inject one backed by
            httpx.MockTransport); a short-lived client is created per call otherwise
        max_retries: Attempts per request for transport errors and 429/5xx responses
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, max_retries: int = 3):
        self.client = client
        self.max_retries = max_retries

    async def _post(self, client: httpx.AsyncClient, url: str, payload: Dict[str, Any]) -> httpx.Response:
        last_error: Optional[Exception] = None
        for attempt in range(self.max_retries):
            try:
                response = await client.post(url, json=payload)
                response.raise_for_status()
                return response

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                retryable = status_code == 429 or status_code >= 500
                logger.warning(f"Notification endpoint returned {status_code} (attempt {attempt + 1}/{self.max_retries})")
                if not retryable:
                    raise NotificationError(f"Notification rejected with status {status_code}") from e
                last_error = e

            except httpx.TransportError as e:
                logger.warning(f"Notification transport error (attempt {attempt + 1}/{self.max_retries}): {str(e)}")
                last_error = e

            # Retry with exponential backoff for transient failures
            if attempt < self.max_retries - 1:
                await asyncio.sleep(2 ** attempt)  # 1s, 2s, 4s backoff

        logger.error(f"Notification failed after {self.max_retries} attempts: {str(last_error)}")
        raise NotificationError(str(last_error))

    async def post_json(self, url: str, payload: Dict[str, Any]) -> httpx.Response:
        """
        POST a JSON payload, retrying transient failures.

        Raises:
            NotificationError: If the request fails after all retries or is rejected
        """
        if self.client is not None:
            return await self._post(self.client, url, payload)
        async with httpx.AsyncClient(timeout=settings.NOTIFICATION_TIMEOUT_SECONDS) as client:
            return await self._post(client, url, payload)

    async def send_discord(self, webhook_url: str, content: str, embeds: Optional[List[dict]] = None) -> None:
        payload: Dict[str, Any] = {"content": content}
        if embeds:
            payload["embeds"] = embeds
        await self.post_json(webhook_url, payload)

    def _telegram_url(self, method: str) -> str:
        return f"{TELEGRAM_API_URL}/bot{settings.TELEGRAM_BOT_TOKEN}/{method}"

    async def send_telegram_message(self, chat_id: str, text: str) -> None:
        await self.post_json(
            self._telegram_url("sendMessage"),
            {"chat_id": chat_id, "text": text, "parse_mode": "HTML"},
        )

    async def send_telegram_photo(self, chat_id: str, photo_url: str, caption: str, buttons: List[dict]) -> None:
        await self.post_json(
            self._telegram_url("sendPhoto"),
            {
                "chat_id": chat_id,
                "photo": photo_url,
                "caption": caption,
                "parse_mode": "HTML",
                "reply_markup": {"inline_keyboard": [[button] for button in buttons]},
            },
        )

    async def announce_new_item(self, item: GalleryItemResponse) -> None:
        """
        Announce a freshly uploaded item on the public channels.
        Runs as a background task: failures are logged and never raised.
        """
        category = item.category or settings.DEFAULT_CATEGORY
        webhook_url = settings.DISCORD_CATEGORY_WEBHOOKS.get(category) or settings.DISCORD_WEBHOOK_DEFAULT

        if webhook_url:
            try:
                await self.send_discord(
                    webhook_url,
                    "@everyone\nNew exclusive content is live on the website!",
                    embeds=[{
                        "title": item.name,
                        "description": f"{item.description or ''}\n\nWebsite - {settings.SITE_URL}".strip(),
                        "color": CATEGORY_COLORS.get(category, DEFAULT_COLOR),
                        "image": {"url": item.image_url},
                    }],
                )
                logger.info(f"Announced item {item.id} on Discord ({category})")
            except NotificationError as e:
                logger.error(f"Failed to send Discord announcement for item {item.id}: {str(e)}")
        else:
            logger.debug(f"No Discord webhook configured for category '{category}'")

        if settings.TELEGRAM_BOT_TOKEN and settings.TELEGRAM_CHANNEL_ID:
            caption = (
                "New exclusive content is live on the website!\n\n"
                f"<b>{html.escape(category.upper())}</b>\n"
                f"<b>{html.escape(item.name)}</b>\n"
                f"{html.escape(item.description or '')}"
            ).strip()
            try:
                await self.send_telegram_photo(
                    settings.TELEGRAM_CHANNEL_ID,
                    item.image_url,
                    caption,
                    [{"text": "Website", "url": settings.SITE_URL}],
                )
                logger.info(f"Announced item {item.id} on Telegram")
            except NotificationError as e:
                logger.error(f"Failed to send Telegram announcement for item {item.id}: {str(e)}")

    async def _deliver_to_admins(
        self,
        webhook_url: str,
        discord_content: str,
        telegram_text: str,
        extra_chat_ids: Iterable[str] = (),
    ) -> None:
        chat_ids = _unique(list(settings.telegram_admin_chat_ids) + list(extra_chat_ids))
        telegram_ready = bool(settings.TELEGRAM_BOT_TOKEN and chat_ids)

        if not webhook_url and not telegram_ready:
            raise DeliveryNotConfigured("No delivery channel configured")

        telegram_failures = 0
        if telegram_ready:
            results = await asyncio.gather(
                *(self.send_telegram_message(chat_id, telegram_text) for chat_id in chat_ids),
                return_exceptions=True,
            )
            for chat_id, result in zip(chat_ids, results):
                if isinstance(result, Exception):
                    telegram_failures += 1
                    logger.error(f"Telegram admin notification to {chat_id} failed: {str(result)}")

        if webhook_url:
            await self.send_discord(webhook_url, discord_content)
        elif telegram_failures == len(chat_ids):
            raise NotificationError("All Telegram deliveries failed")

    async def forward_contact(self, contact: ContactRequest, extra_chat_ids: Iterable[str] = ()) -> None:
        """
        Forward a contact form submission to the admins.

        Raises:
            DeliveryNotConfigured: If neither Discord nor Telegram is configured
            NotificationError: If delivery fails
        """
        fields = [
            ("Topic", contact.category or "General"),
            ("Platform", contact.platform or "N/A"),
            ("Name", contact.name),
            ("Model Image", contact.model_image or "N/A"),
        ]
        discord_content = "**New Contact Submission**\n" + "\n".join(
            f"**{label}:** {value}" for label, value in fields
        ) + f"\n**Message:**\n{contact.message}"
        telegram_text = "<b>New Contact Submission</b>\n" + "\n".join(
            f"<b>{label}:</b> {html.escape(value)}" for label, value in fields
        ) + f"\n<b>Message:</b>\n{html.escape(contact.message)}"

        await self._deliver_to_admins(settings.DISCORD_WEBHOOK_CONTACT, discord_content, telegram_text, extra_chat_ids)

    async def forward_report(self, report: ReportRequest, extra_chat_ids: Iterable[str] = ()) -> None:
        """
        Forward a broken-content report to the admins.

        Raises:
            DeliveryNotConfigured: If neither Discord nor Telegram is configured
            NotificationError: If delivery fails
        """
        fields = [
            ("Item", report.name),
            ("Category", report.category or settings.DEFAULT_CATEGORY),
            ("Affiliate URL", report.affiliate_url or "N/A"),
            ("Image URL", report.image_url or "N/A"),
            ("Reason", report.reason or "Not specified"),
        ]
        discord_content = "**Content Report**\n" + "\n".join(f"**{label}:** {value}" for label, value in fields)
        telegram_text = "<b>Content Report</b>\n" + "\n".join(
            f"<b>{label}:</b> {html.escape(value)}" for label, value in fields
        )
        webhook_url = settings.DISCORD_WEBHOOK_REPORT or settings.DISCORD_WEBHOOK_CONTACT

        await self._deliver_to_admins(webhook_url, discord_content, telegram_text, extra_chat_ids)

    async def reply_to_start(self, chat_id: str, authorized: bool) -> None:
        """Answer a Telegram /start command with the caller's chat id."""
        if authorized:
            text = "Connected! You are authorized to receive notifications."
        else:
            text = (
                f"Your Chat ID is: <code>{html.escape(chat_id)}</code>\n\n"
                "Ask an admin to add this ID to receive notifications."
            )
        await self.send_telegram_message(chat_id, text)


def get_notification_service() -> NotificationService:
    """FastAPI dependency providing the notification service."""
    return NotificationService()
