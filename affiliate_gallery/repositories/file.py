"""JSON-file implementation of ``GalleryRepository``.

Used by the local admin setup, where the gallery is a single JSON document
that can be committed next to the static site. Ids are ``max(id) + 1`` and
new items go to the top of the document. Writes for one path are serialized
with an ``asyncio.Lock``; disk I/O runs in a worker thread.
"""
import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from affiliate_gallery.repositories.interfaces import COUNTERS, normalize_sort
from affiliate_gallery.schemas import GalleryItemResponse

logger = logging.getLogger(__name__)

_locks: Dict[str, asyncio.Lock] = {}


def _lock_for(path: Path) -> asyncio.Lock:
    key = str(path.resolve())
    if key not in _locks:
        _locks[key] = asyncio.Lock()
    return _locks[key]


class FileGalleryRepository:
    def __init__(self, path):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    def _read_sync(self) -> List[dict]:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8")
        return json.loads(text) if text.strip() else []

    def _write_sync(self, items: List[GalleryItemResponse]) -> None:
        data = [item.model_dump(mode="json", by_alias=True) for item in items]
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    async def _load(self) -> List[GalleryItemResponse]:
        raw = await asyncio.to_thread(self._read_sync)
        return [GalleryItemResponse.model_validate(entry) for entry in raw]

    async def _save(self, items: List[GalleryItemResponse]) -> None:
        await asyncio.to_thread(self._write_sync, items)

    async def list(self, sort: Optional[str] = None, order: Optional[str] = None) -> List[GalleryItemResponse]:
        sort, order = normalize_sort(sort, order)
        items = await self._load()
        if sort == "name":
            key = lambda item: (item.name, item.id)  # noqa: E731
        else:
            key = lambda item: (item.created_at, item.id)  # noqa: E731
        return sorted(items, key=key, reverse=(order == "desc"))

    async def get(self, item_id: int) -> Optional[GalleryItemResponse]:
        for item in await self._load():
            if item.id == item_id:
                return item
        return None

    async def insert(self, fields: dict, user_id: Optional[int] = None) -> GalleryItemResponse:
        async with self._lock:
            items = await self._load()
            new_id = max((item.id for item in items), default=0) + 1
            item = GalleryItemResponse(
                **fields,
                id=new_id,
                user_id=user_id,
                created_at=datetime.now(timezone.utc),
            )
            items.insert(0, item)
            await self._save(items)
        logger.info(f"Inserted gallery item into {self.path}: ID {new_id}")
        return item

    async def update(self, item_id: int, fields: dict) -> int:
        async with self._lock:
            items = await self._load()
            for index, item in enumerate(items):
                if item.id == item_id:
                    items[index] = item.model_copy(update=fields)
                    await self._save(items)
                    return 1
        return 0

    async def delete(self, item_id: int) -> int:
        async with self._lock:
            items = await self._load()
            remaining = [item for item in items if item.id != item_id]
            if len(remaining) == len(items):
                return 0
            await self._save(remaining)
        return 1

    async def adjust_counter(self, item_id: int, counter: str, delta: int) -> Optional[GalleryItemResponse]:
        if counter not in COUNTERS:
            raise ValueError(f"Unknown counter: {counter}")
        async with self._lock:
            items = await self._load()
            for index, item in enumerate(items):
                if item.id == item_id:
                    current = getattr(item, counter)
                    value = current + 1 if delta > 0 else max(current - 1, 0)
                    items[index] = item.model_copy(update={counter: value})
                    await self._save(items)
                    return items[index]
        return None
