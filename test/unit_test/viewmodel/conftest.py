from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from affiliate_gallery.schemas import GalleryItemResponse

BASE_TIME = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_item() -> Callable[..., GalleryItemResponse]:
    def factory(item_id: int, name: str = "", *, age_hours: float = 0, **overrides) -> GalleryItemResponse:
        fields = {
            "id": item_id,
            "name": name or f"Item {item_id}",
            "description": "",
            "category": "omegle",
            "image_url": f"https://img.example.com/{item_id}.jpg",
            "affiliate_url": f"https://aff.example.com/{item_id}",
            "is_featured": False,
            "likes": 0,
            "dislikes": 0,
            "created_at": BASE_TIME - timedelta(hours=age_hours),
        }
        fields.update(overrides)
        return GalleryItemResponse(**fields)

    return factory
