import pytest
import pytest_asyncio
from httpx import AsyncClient


@pytest_asyncio.fixture
async def item_id(client: AsyncClient, item_payload: dict, password_headers: dict) -> int:
    response = await client.post("/api/upload", json=item_payload, headers=password_headers)
    return response.json()["item"]["id"]


@pytest.mark.asyncio
async def test_like_increments_counter(client: AsyncClient, item_id: int):
    first = await client.post(f"/api/gallery/{item_id}/like")
    second = await client.post(f"/api/gallery/{item_id}/like")

    assert first.status_code == 200
    assert first.json() == {"message": "Like added.", "likes": 1, "dislikes": 0}
    assert second.json()["likes"] == 2


@pytest.mark.asyncio
async def test_unlike_decrements_and_floors_at_zero(client: AsyncClient, item_id: int):
    await client.post(f"/api/gallery/{item_id}/like")

    removed = await client.delete(f"/api/gallery/{item_id}/like")
    floored = await client.delete(f"/api/gallery/{item_id}/like")

    assert removed.json() == {"message": "Like removed.", "likes": 0, "dislikes": 0}
    assert floored.status_code == 200
    assert floored.json()["likes"] == 0


@pytest.mark.asyncio
async def test_dislike_round_trip(client: AsyncClient, item_id: int):
    added = await client.post(f"/api/gallery/{item_id}/dislike")
    removed = await client.delete(f"/api/gallery/{item_id}/dislike")

    assert added.json() == {"message": "Dislike added.", "likes": 0, "dislikes": 1}
    assert removed.json() == {"message": "Dislike removed.", "likes": 0, "dislikes": 0}


@pytest.mark.asyncio
async def test_switching_from_dislike_to_like(client: AsyncClient, item_id: int):
    await client.post(f"/api/gallery/{item_id}/dislike")

    await client.delete(f"/api/gallery/{item_id}/dislike")
    response = await client.post(f"/api/gallery/{item_id}/like")

    assert response.json()["likes"] == 1
    assert response.json()["dislikes"] == 0
    listed = (await client.get("/api/gallery")).json()[0]
    assert (listed["likes"], listed["dislikes"]) == (1, 0)


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path", [
    ("POST", "like"),
    ("DELETE", "like"),
    ("POST", "dislike"),
    ("DELETE", "dislike"),
])
async def test_counters_on_missing_item(client: AsyncClient, method: str, path: str):
    response = await client.request(method, f"/api/gallery/424242/{path}")

    assert response.status_code == 404
    assert response.json() == {"error": "Item not found."}
