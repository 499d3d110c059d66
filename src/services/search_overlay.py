# src/services/search_overlay.py

"""Debounced search input and list/search source selection."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from src.config.settings import Settings
from src.services.pagination import PaginationState
from src.storage.query_cache import search_key

logger = logging.getLogger("catalog_admin.search")


class Debouncer:
    """Single-slot trailing-edge timer.

    ``arm()`` cancels any pending handle before scheduling a new one,
    so only the last value armed within the quiet period fires.
    Must be used from inside a running event loop.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[str], None],
    ) -> None:
        self.delay = delay
        self.callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self, value: str) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, value)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, value: str) -> None:
        self._handle = None
        self.callback(value)


@dataclass(frozen=True)
class ActiveSource:
    """Which data set the product table should display."""

    kind: str  # "list" or "search"
    key: str
    query: str = ""
    limit: int = 0
    skip: int = 0

    @property
    def is_search(self) -> bool:
        return self.kind == "search"


class SearchOverlay:
    """Swaps the paginated list for search results while a query is active.

    ``raw_value`` follows every keystroke; ``debounced_value`` only
    changes once input has been quiet for the debounce delay.  Blank
    input selects the list again without touching any cached search
    results, so re-entering a query inside the stale window is served
    from cache.
    """

    def __init__(
        self,
        delay: float | None = None,
        on_change: Callable[[str], None] | None = None,
    ) -> None:
        self.raw_value: str = ""
        self.debounced_value: str = ""
        self.on_change = on_change
        self._debouncer = Debouncer(
            Settings.SEARCH_DEBOUNCE_SECONDS if delay is None else delay,
            self._apply,
        )

    @property
    def is_searching(self) -> bool:
        return bool(self.debounced_value)

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def set_input(self, text: str) -> None:
        """Record a keystroke and restart the quiet period."""
        self.raw_value = text
        self._debouncer.arm(text)

    def flush(self) -> None:
        """Apply the current input immediately (e.g. on Enter)."""
        self._debouncer.cancel()
        self._apply(self.raw_value)

    def cancel(self) -> None:
        self._debouncer.cancel()

    def active_source(self, pagination: PaginationState) -> ActiveSource:
        if self.debounced_value:
            return ActiveSource(
                kind="search",
                key=search_key(self.debounced_value),
                query=self.debounced_value,
            )
        return ActiveSource(
            kind="list",
            key=pagination.list_key,
            limit=pagination.limit,
            skip=pagination.skip,
        )

    def _apply(self, text: str) -> None:
        value = text.strip()
        if value == self.debounced_value:
            return
        self.debounced_value = value
        logger.debug("Debounced search value is now '%s'", value)
        if self.on_change is not None:
            self.on_change(value)
