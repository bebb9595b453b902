"""
List processing for the gallery view.

process_items runs the steps in a fixed order: search filter, category filter,
sort (featured items always first), then pagination. Each step is a plain
function so it can be tested on its own.
"""
import math
import unicodedata
from typing import Iterable, List

from affiliate_gallery.config import settings
from affiliate_gallery.schemas import GalleryItemResponse
from affiliate_gallery.viewmodel.state import ALL_CATEGORIES, PAGE_SIZE, PageResult, ViewState


def filter_by_search(items: Iterable[GalleryItemResponse], search_term: str) -> List[GalleryItemResponse]:
    term = (search_term or "").casefold()
    if not term:
        return list(items)
    return [item for item in items if term in item.name.casefold()]


def filter_by_category(items: Iterable[GalleryItemResponse], category: str) -> List[GalleryItemResponse]:
    if not category or category == ALL_CATEGORIES:
        return list(items)
    # Items saved before categories existed belong to the default one
    return [item for item in items if (item.category or settings.DEFAULT_CATEGORY) == category]


def name_sort_key(name: str) -> str:
    """Case- and accent-insensitive key, so "Émile" sorts with "emile"."""
    decomposed = unicodedata.normalize("NFKD", name or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


SORT_KEY_FUNCS = {
    "date": lambda item: item.created_at,
    "name": lambda item: name_sort_key(item.name),
    "likes": lambda item: item.likes or 0,
}


def sort_items(items: Iterable[GalleryItemResponse], sort_key: str, direction: str) -> List[GalleryItemResponse]:
    # Two stable passes: the active key first, then featured-first on top of it
    ordered = sorted(items, key=SORT_KEY_FUNCS[sort_key], reverse=direction == "desc")
    ordered.sort(key=lambda item: not item.is_featured)
    return ordered


def paginate(items: List[GalleryItemResponse], page: int, page_size: int = PAGE_SIZE) -> PageResult:
    """Slice one page; out-of-range page numbers are clamped."""
    total_pages = math.ceil(len(items) / page_size)
    page = min(max(page, 1), max(total_pages, 1))
    start = (page - 1) * page_size
    return PageResult(
        items=items[start:start + page_size],
        page=page,
        total_pages=total_pages,
        total_items=len(items),
    )


def process_items(items: Iterable[GalleryItemResponse], state: ViewState) -> PageResult:
    filtered = filter_by_search(items, state.search_term)
    filtered = filter_by_category(filtered, state.category)
    ordered = sort_items(filtered, state.sort_key, state.direction)
    return paginate(ordered, state.page)
