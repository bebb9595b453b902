import pytest
from httpx import AsyncClient

from affiliate_gallery.models import User


@pytest.mark.asyncio
async def test_list_users_requires_token(client: AsyncClient):
    response = await client.get("/api/users")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_list_users_requires_admin_role(client: AsyncClient, manager_headers: dict):
    response = await client.get("/api/users", headers=manager_headers)

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden: Admin access required"}


@pytest.mark.asyncio
async def test_create_and_list_users(client: AsyncClient, admin_headers: dict):
    response = await client.post(
        "/api/users",
        json={"username": "editor", "password": "editor-pass", "role": "manager"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    created = response.json()["user"]
    assert created["username"] == "editor"
    assert created["role"] == "manager"
    assert "passwordHash" not in created

    users = (await client.get("/api/users", headers=admin_headers)).json()
    assert [user["username"] for user in users] == ["editor", "admin"]


@pytest.mark.asyncio
async def test_create_user_with_duplicate_username(client: AsyncClient, admin_headers: dict):
    response = await client.post(
        "/api/users",
        json={"username": "admin", "password": "another", "role": "admin"},
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert response.json() == {"error": "Username already exists"}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"username": "x", "password": "y", "role": "owner"},
    {"username": "x", "role": "manager"},
    {"password": "y", "role": "manager"},
])
async def test_create_user_validates_fields(client: AsyncClient, admin_headers: dict, body: dict):
    response = await client.post("/api/users", json=body, headers=admin_headers)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_admin_cannot_delete_themselves(client: AsyncClient, admin_user: User, admin_headers: dict):
    response = await client.delete(f"/api/users/{admin_user.id}", headers=admin_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Admins cannot delete themselves"}


@pytest.mark.asyncio
async def test_delete_user(client: AsyncClient, admin_headers: dict, manager_user: User):
    response = await client.delete(f"/api/users/{manager_user.id}", headers=admin_headers)
    missing = await client.delete(f"/api/users/{manager_user.id}", headers=admin_headers)

    assert response.status_code == 200
    assert missing.status_code == 404
    usernames = [user["username"] for user in (await client.get("/api/users", headers=admin_headers)).json()]
    assert usernames == ["admin"]


@pytest.mark.asyncio
async def test_create_user_rejects_password_over_bcrypt_limit(client: AsyncClient, admin_headers: dict):
    response = await client.post(
        "/api/users",
        json={"username": "longpw", "password": "x" * 80, "role": "manager"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Password must be at most 72 bytes long"}
    users = (await client.get("/api/users", headers=admin_headers)).json()
    assert "longpw" not in [user["username"] for user in users]


@pytest.mark.asyncio
async def test_create_user_counts_password_limit_in_bytes(client: AsyncClient, admin_headers: dict):
    # 40 two-byte characters are 80 bytes
    response = await client.post(
        "/api/users",
        json={"username": "accented", "password": "é" * 40, "role": "manager"},
        headers=admin_headers,
    )

    assert response.status_code == 400
