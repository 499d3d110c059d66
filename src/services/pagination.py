# src/services/pagination.py

"""Session-scoped page index and page size."""

import logging
import math
from dataclasses import dataclass, field

from src.config.settings import Settings
from src.storage.query_cache import list_key

logger = logging.getLogger("catalog_admin.pagination")


@dataclass
class PaginationState:
    """Page position for the product list.

    One instance lives for the whole session and is handed to
    whatever computes list offsets.  Only explicit navigation changes
    it.  Changing the page size does not clamp ``page_index``, so the
    offset may run past the total; the server answers with an empty
    page.
    """

    page_index: int = 0
    page_size: int = field(
        default_factory=lambda: Settings.DEFAULT_PAGE_SIZE
    )

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def skip(self) -> int:
        return self.page_index * self.page_size

    @property
    def list_key(self) -> str:
        """Cache key of the page this state points at."""
        return list_key(self.limit, self.skip)

    def next_page(self) -> None:
        self.page_index += 1
        logger.debug("Moved to page %d", self.page_index)

    def previous_page(self) -> None:
        self.page_index = max(0, self.page_index - 1)
        logger.debug("Moved to page %d", self.page_index)

    def set_page_size(self, page_size: int) -> None:
        """Change the page size, leaving ``page_index`` untouched."""
        if page_size < 1:
            msg = f"page size must be positive, got {page_size}"
            raise ValueError(msg)
        self.page_size = page_size
        logger.debug(
            "Page size set to %d (page %d)", page_size, self.page_index
        )

    def reset(self) -> None:
        self.page_index = 0
        self.page_size = Settings.DEFAULT_PAGE_SIZE

    def page_count(self, total: int) -> int:
        """Number of pages needed for *total* products (at least 1)."""
        return max(1, math.ceil(total / self.page_size))

    def has_next(self, total: int) -> bool:
        return self.skip + self.page_size < total
