import json

import pytest
from httpx import AsyncClient

from affiliate_gallery.config import settings
from affiliate_gallery.models import TelegramAdmin

CONTACT = {"name": "Visitor", "message": "Please add more content", "category": "request", "platform": "onlyfans"}
REPORT = {"name": "Sunset Stream", "category": "onlyfans", "affiliateUrl": "https://aff/1", "reason": "Dead link"}


@pytest.fixture
def discord_contact(monkeypatch: pytest.MonkeyPatch) -> str:
    url = "https://discord.test/api/webhooks/contact"
    monkeypatch.setattr(settings, "DISCORD_WEBHOOK_CONTACT", url)
    return url


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"name": "Visitor"}, {"message": "hi"}])
async def test_contact_requires_name_and_message(client: AsyncClient, discord_contact: str, body: dict):
    response = await client.post("/api/contact", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


@pytest.mark.asyncio
async def test_contact_without_channels_is_unavailable(client: AsyncClient, outbound):
    response = await client.post("/api/contact", json=CONTACT)

    assert response.status_code == 503
    assert outbound == []


@pytest.mark.asyncio
async def test_contact_is_forwarded_to_discord(client: AsyncClient, discord_contact: str, outbound):
    response = await client.post("/api/contact", json=CONTACT)

    assert response.status_code == 200
    assert response.json() == {"message": "Request sent successfully"}
    assert outbound.urls() == [discord_contact]
    content = json.loads(outbound[0].content)["content"]
    assert "Please add more content" in content
    assert "**Name:** Visitor" in content


@pytest.mark.asyncio
async def test_contact_downstream_failure_is_bad_gateway(client: AsyncClient, discord_contact: str, outbound):
    outbound.status_code = 400

    response = await client.post("/api/contact", json=CONTACT)

    assert response.status_code == 502
    assert response.json() == {"error": "Failed to send request"}


@pytest.mark.asyncio
async def test_report_falls_back_to_contact_webhook(client: AsyncClient, discord_contact: str, outbound):
    response = await client.post("/api/report", json=REPORT)

    assert response.status_code == 200
    assert response.json() == {"message": "Report sent successfully"}
    assert outbound.urls() == [discord_contact]
    assert "Dead link" in json.loads(outbound[0].content)["content"]


@pytest.mark.asyncio
async def test_report_requires_item_name(client: AsyncClient, discord_contact: str):
    response = await client.post("/api/report", json={"reason": "Dead link"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_report_reaches_registered_telegram_admins(
    client: AsyncClient, session, outbound, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.setattr(settings, "TELEGRAM_BOT_TOKEN", "bot-token")
    monkeypatch.setattr(settings, "TELEGRAM_ADMIN_CHAT_IDS", "111")
    session.add(TelegramAdmin(chat_id="222", name="Night shift"))
    await session.commit()

    response = await client.post("/api/report", json=REPORT)

    assert response.status_code == 200
    chat_ids = sorted(json.loads(request.content)["chat_id"] for request in outbound)
    assert chat_ids == ["111", "222"]
    assert all(url.endswith("/botbot-token/sendMessage") for url in outbound.urls())
