"""SQLAlchemy async implementation of ``GalleryRepository``.

Each method runs on the request's ``AsyncSession`` and commits before
returning. Values are always bound parameters; the ORDER BY column comes from
a fixed mapping keyed by the normalized sort name.
"""
import logging
from typing import List, Optional

from sqlalchemy import case, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_gallery.models import GalleryItem, User
from affiliate_gallery.repositories.interfaces import COUNTERS, normalize_sort
from affiliate_gallery.schemas import GalleryItemResponse

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    "createdAt": GalleryItem.created_at,
    "name": GalleryItem.name,
}

_COUNTER_COLUMNS = {
    "likes": GalleryItem.likes,
    "dislikes": GalleryItem.dislikes,
}

_MUTABLE_FIELDS = {"name", "description", "category", "image_url", "affiliate_url", "is_featured"}


def _to_response(item: GalleryItem, publisher_name: Optional[str]) -> GalleryItemResponse:
    response = GalleryItemResponse.model_validate(item)
    response.publisher_name = publisher_name
    return response


class SqlGalleryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _select(self):
        return (
            select(GalleryItem, User.username)
            .outerjoin(User, GalleryItem.user_id == User.id)
            .execution_options(populate_existing=True)
        )

    async def list(self, sort: Optional[str] = None, order: Optional[str] = None) -> List[GalleryItemResponse]:
        sort, order = normalize_sort(sort, order)
        column = _SORT_COLUMNS[sort]
        if order == "asc":
            ordering = (column.asc(), GalleryItem.id.asc())
        else:
            ordering = (column.desc(), GalleryItem.id.desc())

        result = await self.session.execute(self._select().order_by(*ordering))
        rows = result.all()
        logger.info(f"Retrieved {len(rows)} gallery items (sort: {sort}, order: {order})")
        return [_to_response(item, username) for item, username in rows]

    async def get(self, item_id: int) -> Optional[GalleryItemResponse]:
        result = await self.session.execute(self._select().where(GalleryItem.id == item_id))
        row = result.first()
        if row is None:
            return None
        item, username = row
        return _to_response(item, username)

    async def insert(self, fields: dict, user_id: Optional[int] = None) -> GalleryItemResponse:
        item = GalleryItem(**{k: v for k, v in fields.items() if k in _MUTABLE_FIELDS}, user_id=user_id)
        self.session.add(item)
        await self.session.flush()
        item_id = item.id
        await self.session.commit()
        logger.info(f"Inserted gallery item: ID {item_id}")
        return await self.get(item_id)

    async def update(self, item_id: int, fields: dict) -> int:
        values = {k: v for k, v in fields.items() if k in _MUTABLE_FIELDS}
        result = await self.session.execute(
            update(GalleryItem)
            .where(GalleryItem.id == item_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount

    async def delete(self, item_id: int) -> int:
        result = await self.session.execute(
            delete(GalleryItem)
            .where(GalleryItem.id == item_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount

    async def adjust_counter(self, item_id: int, counter: str, delta: int) -> Optional[GalleryItemResponse]:
        if counter not in COUNTERS:
            raise ValueError(f"Unknown counter: {counter}")
        column = _COUNTER_COLUMNS[counter]

        if delta > 0:
            value = column + 1
        else:
            value = case((column > 0, column - 1), else_=0)

        result = await self.session.execute(
            update(GalleryItem)
            .where(GalleryItem.id == item_id)
            .values({column: value})
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()

        if result.rowcount == 0:
            return None
        return await self.get(item_id)
