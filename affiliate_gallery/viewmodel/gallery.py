"""
Gallery view-model.

Holds the fetched item list, the view state and the visitor's local flags, and
turns them into the page the browser shows. Like/dislike clicks update the
counters optimistically and send the matching API call in the background.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Set, Tuple

from affiliate_gallery.client import GalleryApiClient
from affiliate_gallery.schemas import GalleryItemResponse
from affiliate_gallery.viewmodel.debounce import RESIZE_DELAY_SECONDS, SEARCH_DELAY_SECONDS, Debouncer
from affiliate_gallery.viewmodel.pipeline import process_items
from affiliate_gallery.viewmodel.state import LOAD_FAILED_MESSAGE, PageResult, ViewState
from affiliate_gallery.viewmodel.storage import (
    SEEN_ANNOUNCEMENT_KEY,
    SEEN_CONTENT_KEY,
    LocalStore,
    MemoryStore,
    disliked_key,
    liked_key,
)

logger = logging.getLogger(__name__)

NEW_CONTENT_WINDOW = timedelta(hours=48)

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Description overflow estimate: three visible lines at ~8px per character
DEFAULT_VIEWPORT_WIDTH = 1280
DESCRIPTION_LINES = 3
AVG_CHAR_WIDTH_PX = 8

NEUTRAL, LIKED, DISLIKED = "neutral", "liked", "disliked"


def format_display_date(value: datetime, tz: timezone = timezone.utc) -> str:
    """Format like "Oct 19, 2026"."""
    local = value.astimezone(tz)
    return f"{MONTH_ABBR[local.month - 1]} {local.day}, {local.year}"


def columns_for_width(width: int) -> int:
    if width >= 1024:
        return 3
    if width >= 640:
        return 2
    return 1


def description_limit(width: int) -> int:
    """Characters that fit in a card's collapsed description at this viewport width."""
    card_width = max(width, 1) // columns_for_width(width)
    return max(card_width // AVG_CHAR_WIDTH_PX, 1) * DESCRIPTION_LINES


@dataclass
class RenderedItem:
    id: int
    name: str
    description: str
    category: Optional[str]
    image_url: str
    affiliate_url: str
    is_featured: bool
    likes: int
    dislikes: int
    display_date: str
    liked: bool
    disliked: bool
    expandable: bool


class GalleryViewModel:
    """
    View-model for the public gallery page.

    Args:
        store: Visitor storage for like flags and seen ids (in memory by default)
        client: API client used by load() and by like/dislike calls
        viewport_width: Initial width used for the description overflow check
        display_tz: Timezone for display dates
    """

    def __init__(self, store: Optional[LocalStore] = None, client: Optional[GalleryApiClient] = None,
                 viewport_width: int = DEFAULT_VIEWPORT_WIDTH, display_tz: timezone = timezone.utc):
        self.state = ViewState()
        self.store = store if store is not None else MemoryStore()
        self.client = client
        self.items: List[GalleryItemResponse] = []
        self.message: Optional[str] = None
        self.viewport_width = viewport_width
        self.display_tz = display_tz
        self.new_content: Optional[GalleryItemResponse] = None
        self.announcement_id: Optional[str] = None
        self._pending: Set[asyncio.Task] = set()
        self.search_debouncer = Debouncer(SEARCH_DELAY_SECONDS, self.set_search)
        self.resize_debouncer = Debouncer(RESIZE_DELAY_SECONDS, self.set_viewport_width)

    # Loading

    async def load(self, client: Optional[GalleryApiClient] = None, now: Optional[datetime] = None) -> bool:
        """
        Fetch the item list once and check for new content.
        On failure the list is emptied and the load-failed message is shown.
        """
        if client is not None:
            self.client = client
        try:
            self.items = await self.client.fetch_gallery()
        except Exception as e:
            logger.error(f"Error fetching gallery: {str(e)}")
            self.items = []
            self.message = LOAD_FAILED_MESSAGE
            return False

        self.message = None
        self.check_new_content(now)
        return True

    # View state

    def current_page(self) -> PageResult:
        result = process_items(self.items, self.state)
        self.state.page = result.page
        return result

    @property
    def status_message(self) -> Optional[str]:
        if self.message:
            return self.message
        return self.current_page().message

    def set_search(self, term: str) -> None:
        self.state.search_term = term or ""
        self.state.page = 1

    def on_search_input(self, term: str) -> None:
        self.search_debouncer(term)

    def set_category(self, category: str) -> None:
        self.state.category = category
        self.state.page = 1

    def select_sort(self, key: str) -> None:
        self.state.select_sort(key)

    def go_to_page(self, page: int) -> None:
        self.state.page = page

    def set_viewport_width(self, width: int) -> None:
        self.viewport_width = width

    def on_resize(self, width: int) -> None:
        self.resize_debouncer(width)

    # Rendering

    def item_state(self, item_id: int) -> str:
        if self.store.has(liked_key(item_id)):
            return LIKED
        if self.store.has(disliked_key(item_id)):
            return DISLIKED
        return NEUTRAL

    def render_page(self) -> List[RenderedItem]:
        limit = description_limit(self.viewport_width)
        rendered = []
        for item in self.current_page().items:
            description = item.description or ""
            rendered.append(RenderedItem(
                id=item.id,
                name=item.name,
                description=description,
                category=item.category,
                image_url=item.image_url,
                affiliate_url=item.affiliate_url,
                is_featured=item.is_featured,
                likes=item.likes,
                dislikes=item.dislikes,
                display_date=format_display_date(item.created_at, self.display_tz),
                liked=self.store.has(liked_key(item.id)),
                disliked=self.store.has(disliked_key(item.id)),
                expandable=len(description) > limit,
            ))
        return rendered

    # Likes and dislikes

    def _find(self, item_id: int) -> Optional[GalleryItemResponse]:
        return next((item for item in self.items if item.id == item_id), None)

    def _api_call(self, counter: str, delta: int) -> Optional[Callable[[int], Awaitable[Dict]]]:
        if self.client is None:
            return None
        calls: Dict[Tuple[str, int], Callable[[int], Awaitable[Dict]]] = {
            ("likes", 1): self.client.like,
            ("likes", -1): self.client.unlike,
            ("dislikes", 1): self.client.dislike,
            ("dislikes", -1): self.client.undislike,
        }
        return calls[(counter, delta)]

    def _adjust(self, item: GalleryItemResponse, counter: str, delta: int) -> None:
        setattr(item, counter, max(getattr(item, counter) + delta, 0))
        call = self._api_call(counter, delta)
        if call is not None:
            self._spawn(call(item.id))

    def _spawn(self, coro: Awaitable) -> None:
        task = asyncio.ensure_future(coro)
        self._pending.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            # The optimistic count stays; the next load shows the server's numbers
            logger.error(f"Failed to sync like/dislike: {str(error)}")

    def _toggle(self, item_id: int, counter: str) -> str:
        if self.client is not None:
            # Fail before touching flags or counters when there is no loop to sync on
            asyncio.get_running_loop()

        item = self._find(item_id)
        if item is None:
            logger.warning(f"Ignoring {counter} toggle for unknown item {item_id}")
            return self.item_state(item_id)

        if counter == "likes":
            own_key, other_key, other = liked_key(item_id), disliked_key(item_id), "dislikes"
        else:
            own_key, other_key, other = disliked_key(item_id), liked_key(item_id), "likes"

        if self.store.has(own_key):
            self.store.remove(own_key)
            self._adjust(item, counter, -1)
        else:
            if self.store.has(other_key):
                self.store.remove(other_key)
                self._adjust(item, other, -1)
            self.store.set(own_key, "true")
            self._adjust(item, counter, 1)

        return self.item_state(item_id)

    def toggle_like(self, item_id: int) -> str:
        """
        Like, or undo a like. Liking a disliked item removes the dislike first.
        Must be called on the event loop when a client is attached.

        Raises:
            RuntimeError: if a client is attached and no event loop is running;
                nothing is changed in that case

        Returns:
            The item's new state: "neutral", "liked" or "disliked"
        """
        return self._toggle(item_id, "likes")

    def toggle_dislike(self, item_id: int) -> str:
        return self._toggle(item_id, "dislikes")

    async def drain(self) -> None:
        """Wait for outstanding like/dislike calls."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # Notifications

    def check_new_content(self, now: Optional[datetime] = None) -> Optional[GalleryItemResponse]:
        """
        Surface the newest item when it is under 48 hours old and the visitor
        has not dismissed it yet.
        """
        self.new_content = None
        if not self.items:
            return None

        now = now or datetime.now(timezone.utc)
        newest = max(self.items, key=lambda item: item.created_at)
        if now - newest.created_at > NEW_CONTENT_WINDOW:
            return None
        if self.store.get(SEEN_CONTENT_KEY) == str(newest.id):
            return None

        self.new_content = newest
        return newest

    def dismiss_new_content(self) -> None:
        if self.new_content is not None:
            self.store.set(SEEN_CONTENT_KEY, str(self.new_content.id))
            self.new_content = None

    def check_announcement(self, announcement_id) -> bool:
        """Whether the announcement with this id should be shown."""
        if announcement_id is None or self.store.get(SEEN_ANNOUNCEMENT_KEY) == str(announcement_id):
            self.announcement_id = None
            return False
        self.announcement_id = str(announcement_id)
        return True

    def dismiss_announcement(self) -> None:
        if self.announcement_id is not None:
            self.store.set(SEEN_ANNOUNCEMENT_KEY, self.announcement_id)
            self.announcement_id = None
