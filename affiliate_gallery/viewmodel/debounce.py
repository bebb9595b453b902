"""Timer-based debouncing on the running asyncio loop."""
import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

SEARCH_DELAY_SECONDS = 0.3
RESIZE_DELAY_SECONDS = 0.25


class Debouncer:
    """
    Call ``callback`` once, ``delay`` seconds after the last trigger,
    with the arguments of that last trigger.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]):
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    def __call__(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def _fire(self, args: tuple) -> None:
        self._handle = None
        try:
            self.callback(*args)
        except Exception as e:
            logger.error(f"Debounced callback failed: {str(e)}", exc_info=True)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
