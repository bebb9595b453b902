"""View state for the public gallery page."""
from dataclasses import dataclass, field
from typing import Dict, List

from affiliate_gallery.schemas import GalleryItemResponse

PAGE_SIZE = 9
ALL_CATEGORIES = "all"

SORT_KEYS = ("date", "name", "likes")
DEFAULT_SORT_KEY = "date"
# Direction a key starts with when it becomes the active sort
DEFAULT_DIRECTIONS = {"date": "desc", "name": "asc", "likes": "desc"}

EMPTY_MESSAGE = "No items match your search."
LOAD_FAILED_MESSAGE = "Failed to load gallery content."


@dataclass
class ViewState:
    """Search, category, sort and page selection of the gallery view."""
    search_term: str = ""
    category: str = ALL_CATEGORIES
    sort_key: str = DEFAULT_SORT_KEY
    directions: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_DIRECTIONS))
    page: int = 1

    @property
    def direction(self) -> str:
        return self.directions[self.sort_key]

    def select_sort(self, key: str) -> None:
        """
        Clicking the active key flips its direction; clicking another key
        makes it active with its default direction.
        """
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key '{key}'")
        if key == self.sort_key:
            self.directions[key] = "asc" if self.directions[key] == "desc" else "desc"
        else:
            self.sort_key = key
            self.directions[key] = DEFAULT_DIRECTIONS[key]
        self.page = 1


@dataclass
class PageResult:
    """One page of processed items plus the pagination numbers."""
    items: List[GalleryItemResponse]
    page: int
    total_pages: int
    total_items: int

    @property
    def is_empty(self) -> bool:
        return self.total_items == 0

    @property
    def message(self):
        return EMPTY_MESSAGE if self.is_empty else None
