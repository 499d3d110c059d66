# src/services/catalog_queries.py

"""Cached reads with background refresh of stale entries."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from src.api.errors import CatalogError
from src.api.products_client import ProductsClient
from src.models.product import Product, ProductList
from src.services.pagination import PaginationState
from src.storage.query_cache import (
    CacheHit,
    QueryCache,
    list_key,
    product_key,
    search_key,
)

logger = logging.getLogger("catalog_admin.queries")


class CatalogQueries:
    """Serves list, detail and search reads through the query cache.

    - Miss: fetch, store, return.  The caller waits.
    - Stale hit: return the cached value now and refresh in the
      background (at most one refresh per key in flight).
    - Fresh hit: return the cached value, no I/O.
    """

    def __init__(
        self,
        client: ProductsClient,
        cache: QueryCache,
        on_refreshed: Callable[[str], None] | None = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.on_refreshed = on_refreshed
        self._refreshing: dict[str, asyncio.Task[None]] = {}

    # --- Public reads ---

    async def fetch_list(self, pagination: PaginationState) -> ProductList:
        return await self.fetch_page(pagination.limit, pagination.skip)

    async def fetch_page(self, limit: int, skip: int) -> ProductList:
        result: ProductList = await self._fetch(
            list_key(limit, skip),
            lambda: self.client.list_products(limit, skip),
        )
        return result

    async def fetch_product(self, product_id: int) -> Product:
        result: Product = await self._fetch(
            product_key(product_id),
            lambda: self.client.get_product(product_id),
        )
        return result

    async def fetch_search(self, query: str) -> ProductList:
        if not query.strip():
            msg = "search query must not be blank"
            raise ValueError(msg)
        result: ProductList = await self._fetch(
            search_key(query),
            lambda: self.client.search_products(query),
        )
        return result

    async def wait_for_refreshes(self) -> None:
        """Await every background refresh currently in flight."""
        if self._refreshing:
            await asyncio.gather(
                *self._refreshing.values(), return_exceptions=True
            )

    # --- Private helpers ---

    async def _fetch(self, key: str, loader: Callable[[], Any]) -> Any:
        cached = self.cache.read(key)
        if isinstance(cached, CacheHit):
            if cached.is_stale:
                self._schedule_refresh(key, loader)
            return cached.value

        value = await asyncio.to_thread(loader)
        self.cache.write(key, value)
        return value

    def _schedule_refresh(self, key: str, loader: Callable[[], Any]) -> None:
        if key in self._refreshing:
            return
        logger.debug("Scheduling background refresh of %s", key)
        task = asyncio.create_task(self._refresh(key, loader))
        self._refreshing[key] = task
        task.add_done_callback(lambda _t: self._refreshing.pop(key, None))

    async def _refresh(self, key: str, loader: Callable[[], Any]) -> None:
        try:
            value = await asyncio.to_thread(loader)
        except CatalogError as exc:
            # The stale value stays in place; the next read retries.
            logger.warning("Background refresh of %s failed: %s", key, exc)
            return
        except Exception:
            logger.exception("Unexpected error refreshing %s", key)
            return
        self.cache.write(key, value)
        logger.info("Refreshed %s", key)
        if self.on_refreshed is not None:
            self.on_refreshed(key)
