"""Gallery repository contract.

Routes depend on this Protocol instead of a concrete storage backend.

Contract guidelines
-------------------

- All methods are async.
- ``list`` only orders by allow-listed columns; unknown values fall back to
  ``createdAt`` descending and are never interpolated into a query.
- ``update`` and ``delete`` report how many rows changed; ``0`` means the id
  did not exist and nothing was modified.
- ``adjust_counter`` is a single atomic step per call and never takes a
  counter below zero.
"""
from typing import List, Optional, Protocol, Tuple

from affiliate_gallery.schemas import GalleryItemResponse

SORT_FIELDS = ("createdAt", "name")
SORT_ORDERS = ("asc", "desc")
DEFAULT_SORT = "createdAt"
DEFAULT_ORDER = "desc"
COUNTERS = ("likes", "dislikes")


def normalize_sort(sort: Optional[str], order: Optional[str]) -> Tuple[str, str]:
    """Clamp user supplied sort/order onto the allow-list."""
    valid_sort = sort if sort in SORT_FIELDS else DEFAULT_SORT
    lowered = order.lower() if isinstance(order, str) else None
    valid_order = lowered if lowered in SORT_ORDERS else DEFAULT_ORDER
    return valid_sort, valid_order


class GalleryRepository(Protocol):
    """Persist and query gallery items."""

    async def list(self, sort: Optional[str] = None, order: Optional[str] = None) -> List[GalleryItemResponse]:
        """
        Return every item ordered by an allow-listed column.

        Args:
            sort: ``createdAt`` or ``name``; anything else means ``createdAt``.
            order: ``asc`` or ``desc``; anything else means ``desc``.
        """
        ...

    async def get(self, item_id: int) -> Optional[GalleryItemResponse]:
        ...

    async def insert(self, fields: dict, user_id: Optional[int] = None) -> GalleryItemResponse:
        """
        Store a new item.

        Args:
            fields: Normalized column values (see ``GalleryItemPayload.to_fields``).
            user_id: Publishing user, when known.

        Returns:
            The stored item with its generated id and createdAt.
        """
        ...

    async def update(self, item_id: int, fields: dict) -> int:
        ...

    async def delete(self, item_id: int) -> int:
        ...

    async def adjust_counter(self, item_id: int, counter: str, delta: int) -> Optional[GalleryItemResponse]:
        """
        Add ``delta`` (+1 or -1) to ``likes`` or ``dislikes``, flooring at zero.

        Returns:
            The item after the change, or None if no item has that id.
        """
        ...
