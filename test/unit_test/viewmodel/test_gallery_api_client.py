import json
from typing import List

import httpx
import pytest

from affiliate_gallery.client import GalleryApiClient

ITEM = {
    "id": 1,
    "name": "Sunset",
    "description": "",
    "category": "omegle",
    "imageUrl": "https://img/1.jpg",
    "affiliateUrl": "https://aff/1",
    "isFeatured": True,
    "likes": 2,
    "dislikes": 0,
    "userId": None,
    "publisherName": None,
    "createdAt": "2026-10-19T10:00:00Z",
}


@pytest.fixture
def requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def api(requests: List[httpx.Request]) -> GalleryApiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/api/gallery":
            return httpx.Response(200, json=[ITEM])
        if request.url.path == "/api/auth/login":
            return httpx.Response(200, json={"token": "tkn"})
        if request.url.path == "/api/upload":
            return httpx.Response(201, json={"message": "Item added successfully!", "item": ITEM})
        if request.url.path.endswith("/like"):
            return httpx.Response(200, json={"message": "Like added.", "likes": 3, "dislikes": 0})
        return httpx.Response(404, json={"error": "Item not found."})

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://gallery.test")
    return GalleryApiClient(client=http)


@pytest.mark.asyncio
async def test_fetch_gallery_parses_items(api: GalleryApiClient, requests):
    items = await api.fetch_gallery(sort="name", order="asc")

    assert items[0].image_url == "https://img/1.jpg"
    assert items[0].is_featured is True
    assert items[0].created_at.tzinfo is not None
    assert requests[0].url.params["sort"] == "name"


@pytest.mark.asyncio
async def test_like_calls(api: GalleryApiClient, requests):
    await api.like(1)
    await api.unlike(1)

    assert [(request.method, request.url.path) for request in requests] == [
        ("POST", "/api/gallery/1/like"),
        ("DELETE", "/api/gallery/1/like"),
    ]


@pytest.mark.asyncio
async def test_errors_raise(api: GalleryApiClient):
    with pytest.raises(httpx.HTTPStatusError):
        await api.dislike(99)


@pytest.mark.asyncio
async def test_admin_calls_send_credentials(api: GalleryApiClient, requests):
    token = await api.login("admin", "pw")
    await api.upload_item({"name": "Sunset"}, token=token)
    with pytest.raises(httpx.HTTPStatusError):
        await api.delete_item(1, password="secret")

    assert json.loads(requests[0].content) == {"username": "admin", "password": "pw"}
    assert requests[1].headers["Authorization"] == "Bearer tkn"
    assert requests[2].headers["X-Admin-Password"] == "secret"
