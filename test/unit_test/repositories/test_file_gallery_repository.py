import asyncio
import json

import pytest

from affiliate_gallery.config import settings
from affiliate_gallery.repositories.factory import build_gallery_repository
from affiliate_gallery.repositories.file import FileGalleryRepository
from affiliate_gallery.repositories.sql import SqlGalleryRepository


def _fields(name: str) -> dict:
    return {
        "name": name,
        "description": "",
        "category": "omegle",
        "image_url": f"https://img/{name}.jpg",
        "affiliate_url": f"https://aff/{name}",
        "is_featured": False,
    }


@pytest.fixture
def repository(tmp_path) -> FileGalleryRepository:
    return FileGalleryRepository(tmp_path / "gallery.json")


@pytest.mark.asyncio
async def test_missing_file_is_an_empty_gallery(repository: FileGalleryRepository):
    assert await repository.list() == []


@pytest.mark.asyncio
async def test_insert_prepends_with_next_id(repository: FileGalleryRepository):
    first = await repository.insert(_fields("first"))
    second = await repository.insert(_fields("second"))

    assert (first.id, second.id) == (1, 2)
    stored = json.loads(repository.path.read_text(encoding="utf-8"))
    assert [entry["name"] for entry in stored] == ["second", "first"]
    assert "imageUrl" in stored[0]


@pytest.mark.asyncio
async def test_ids_continue_after_delete_of_older_item(repository: FileGalleryRepository):
    first = await repository.insert(_fields("first"))
    await repository.insert(_fields("second"))
    await repository.delete(first.id)

    third = await repository.insert(_fields("third"))

    assert third.id == 3


@pytest.mark.asyncio
async def test_update_delete_and_counters(repository: FileGalleryRepository):
    item = await repository.insert(_fields("one"))

    assert await repository.update(item.id, dict(_fields("renamed"), is_featured=True)) == 1
    assert await repository.update(99, _fields("ghost")) == 0
    updated = await repository.get(item.id)
    assert updated.name == "renamed"
    assert updated.is_featured is True
    assert updated.created_at == item.created_at

    assert (await repository.adjust_counter(item.id, "dislikes", 1)).dislikes == 1
    assert (await repository.adjust_counter(item.id, "dislikes", -1)).dislikes == 0
    assert (await repository.adjust_counter(item.id, "dislikes", -1)).dislikes == 0
    assert await repository.adjust_counter(99, "likes", 1) is None

    assert await repository.delete(99) == 0
    assert await repository.delete(item.id) == 1
    assert await repository.list() == []


@pytest.mark.asyncio
async def test_concurrent_inserts_get_distinct_ids(repository: FileGalleryRepository):
    items = await asyncio.gather(*(repository.insert(_fields(f"item-{n}")) for n in range(8)))

    assert sorted(item.id for item in items) == list(range(1, 9))
    assert len(await repository.list()) == 8


@pytest.mark.asyncio
async def test_list_sorting_falls_back_to_newest_first(repository: FileGalleryRepository):
    for name in ("b", "a", "c"):
        await repository.insert(_fields(name))

    assert [item.name for item in await repository.list("name", "asc")] == ["a", "b", "c"]
    assert [item.name for item in await repository.list("bogus", None)] == ["c", "a", "b"]


def test_factory_selects_backend(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "GALLERY_FILE_PATH", str(tmp_path / "g.json"))

    assert isinstance(build_gallery_repository("file"), FileGalleryRepository)
    assert isinstance(build_gallery_repository("sql", session=object()), SqlGalleryRepository)
    with pytest.raises(ValueError):
        build_gallery_repository("mongo")
    with pytest.raises(ValueError):
        build_gallery_repository("sql")
