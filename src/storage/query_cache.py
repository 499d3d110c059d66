# src/storage/query_cache.py

"""In-memory query cache with stale-while-revalidate reads."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.config.settings import Settings

logger = logging.getLogger("catalog_admin.cache")

LIST_PREFIX = "list:"
PRODUCT_PREFIX = "product:"
SEARCH_PREFIX = "search:"


def list_key(limit: int, skip: int) -> str:
    """Key of one paginated list page, e.g. ``list:limit=10,skip=0``."""
    return f"{LIST_PREFIX}limit={limit},skip={skip}"


def product_key(product_id: int) -> str:
    return f"{PRODUCT_PREFIX}{product_id}"


def search_key(query: str) -> str:
    return f"{SEARCH_PREFIX}{query}"


@dataclass(frozen=True)
class CacheHit:
    """A cached value, flagged stale when it should be refetched."""

    value: Any
    is_stale: bool = False


@dataclass(frozen=True)
class CacheMiss:
    """No entry exists for the key."""


CacheResult = CacheHit | CacheMiss


@dataclass
class CacheEntry:
    """Last fetched value for one key."""

    key: str
    value: Any
    timestamp: float
    invalidated: bool = False


class QueryCache:
    """Key-addressed store of fetched results.

    Reads never block and never evict: an entry older than the stale
    window, or one that was explicitly invalidated, is still returned
    but flagged ``is_stale`` so the caller can schedule a refetch.

    The cache does no cross-key inference.  Keeping a per-product
    entry and the list pages that contain that product in agreement
    is the mutation coordinator's job.
    """

    def __init__(self, stale_time: float | None = None) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._stale_time: float = (
            Settings.QUERY_STALE_TIME if stale_time is None else stale_time
        )

    def read(self, key: str) -> CacheResult:
        """Return ``CacheHit`` (possibly stale) or ``CacheMiss``."""
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("Cache miss for %s", key)
            return CacheMiss()
        return CacheHit(entry.value, self._is_stale(entry, time.time()))

    def write(self, key: str, value: Any) -> None:
        """Replace the entry and reset its fetch timestamp."""
        self._entries[key] = CacheEntry(
            key=key, value=value, timestamp=time.time()
        )
        logger.debug("Cached %s", key)

    def patch(
        self,
        key: str,
        fn: Callable[[CacheResult], Any | None],
    ) -> CacheResult:
        """Rewrite an entry in place from its current read result.

        ``fn`` receives the ``CacheHit`` or ``CacheMiss`` for *key* and
        returns the new value, or ``None`` to leave the cache as it is.
        A patched entry keeps its timestamp and stale flag.  Returns
        the read result after the patch.
        """
        current = self.read(key)
        new_value = fn(current)
        if new_value is None:
            return current

        entry = self._entries.get(key)
        if entry is None:
            self.write(key, new_value)
        else:
            entry.value = new_value
            logger.debug("Patched %s", key)
        return self.read(key)

    def invalidate(self, prefix: str) -> int:
        """Mark every entry whose key starts with *prefix* as stale.

        Returns the number of entries marked.
        """
        count = 0
        for entry in self._entries.values():
            if entry.key.startswith(prefix):
                entry.invalidated = True
                count += 1
        logger.info("Invalidated %d entries under '%s'", count, prefix)
        return count

    def remove(self, key: str) -> bool:
        """Drop an entry entirely.  Returns whether it existed."""
        removed = self._entries.pop(key, None) is not None
        if removed:
            logger.debug("Removed %s", key)
        return removed

    def keys(self, prefix: str = "") -> list[str]:
        return [k for k in self._entries if k.startswith(prefix)]

    def clear(self) -> int:
        """Purge all cached entries.

        Returns the number of entries that were removed.
        """
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cache manually purged (%d entries removed)", count)
        return count

    def _is_stale(self, entry: CacheEntry, now: float) -> bool:
        return entry.invalidated or now - entry.timestamp >= self._stale_time
