"""
Async HTTP client for the gallery API.
Used by the view-model to fetch items and send like/dislike adjustments,
and by admin tooling for authenticated writes.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from affiliate_gallery.schemas import GalleryItemResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class GalleryApiClient:
    """
    Client for the /api endpoints.

    Args:
        base_url: Backend root, e.g. "https://gallery.example.com"
        client: Optional httpx.AsyncClient to reuse (tests pass one backed by
            httpx.MockTransport); owned and closed by the caller
        timeout: Request timeout when the client creates its own httpx client
    """

    def __init__(self, base_url: str = "", client: Optional[httpx.AsyncClient] = None,
                 timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "GalleryApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(method, path, **kwargs)
        response.raise_for_status()
        return response.json()

    async def fetch_gallery(self, sort: Optional[str] = None, order: Optional[str] = None) -> List[GalleryItemResponse]:
        """
        Fetch every gallery item.

        Raises:
            httpx.HTTPError: On transport failures and non-2xx responses
        """
        params = {key: value for key, value in (("sort", sort), ("order", order)) if value}
        data = await self._request("GET", "/api/gallery", params=params)
        return [GalleryItemResponse.model_validate(row) for row in data]

    async def like(self, item_id: int) -> Dict[str, Any]:
        return await self._request("POST", f"/api/gallery/{item_id}/like")

    async def unlike(self, item_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/gallery/{item_id}/like")

    async def dislike(self, item_id: int) -> Dict[str, Any]:
        return await self._request("POST", f"/api/gallery/{item_id}/dislike")

    async def undislike(self, item_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/gallery/{item_id}/dislike")

    # Admin operations

    async def login(self, username: str, password: str) -> str:
        data = await self._request("POST", "/api/auth/login", json={"username": username, "password": password})
        return data["token"]

    @staticmethod
    def _auth_headers(token: Optional[str], password: Optional[str]) -> Dict[str, str]:
        if token:
            return {"Authorization": f"Bearer {token}"}
        if password:
            return {"X-Admin-Password": password}
        return {}

    async def upload_item(self, fields: Dict[str, Any], token: Optional[str] = None,
                          password: Optional[str] = None) -> GalleryItemResponse:
        """
        Create an item. ``fields`` uses the camelCase wire names
        (name, imageUrl, affiliateUrl, description, category, isFeatured).
        """
        data = await self._request("POST", "/api/upload", json=fields, headers=self._auth_headers(token, password))
        return GalleryItemResponse.model_validate(data["item"])

    async def update_item(self, item_id: int, fields: Dict[str, Any], token: Optional[str] = None,
                          password: Optional[str] = None) -> GalleryItemResponse:
        data = await self._request(
            "PUT", f"/api/gallery/{item_id}", json=fields, headers=self._auth_headers(token, password)
        )
        return GalleryItemResponse.model_validate(data["item"])

    async def delete_item(self, item_id: int, token: Optional[str] = None, password: Optional[str] = None) -> None:
        await self._request("DELETE", f"/api/gallery/{item_id}", headers=self._auth_headers(token, password))
