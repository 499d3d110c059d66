# src/services/mutation_coordinator.py

"""Create/update/delete with post-confirmation cache patching."""

import asyncio
import enum
import logging
from collections.abc import Callable
from typing import Any

from src.api.errors import CatalogError
from src.api.products_client import ProductsClient
from src.models.product import DeleteResult, Product, ProductList
from src.services.pagination import PaginationState
from src.storage.query_cache import (
    LIST_PREFIX,
    SEARCH_PREFIX,
    CacheHit,
    CacheResult,
    QueryCache,
    product_key,
)

logger = logging.getLogger("catalog_admin.mutations")

# notify(message, severity) with severity "information" | "warning" | "error"
Notifier = Callable[[str, str], None]


class MutationKind(enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class MutationState(enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


_SUCCESS_MESSAGES: dict[MutationKind, str] = {
    MutationKind.CREATE: "Product added successfully!",
    MutationKind.UPDATE: "Product updated successfully!",
    MutationKind.DELETE: "Product deleted successfully!",
}

_FALLBACK_MESSAGES: dict[MutationKind, str] = {
    MutationKind.CREATE: "Failed to add product",
    MutationKind.UPDATE: "Failed to update product",
    MutationKind.DELETE: "Failed to delete product",
}

_ALREADY_DELETED_MESSAGE = "Product was already deleted"


# --- Patch functions (total over hit and miss) ---


def _prepend(product: Product) -> Callable[[CacheResult], ProductList | None]:
    def apply(result: CacheResult) -> ProductList | None:
        if not isinstance(result, CacheHit):
            return None
        page: ProductList = result.value
        return page.with_products(
            [product, *page.products], page.total + 1
        )

    return apply


def _replace(product: Product) -> Callable[[CacheResult], ProductList | None]:
    def apply(result: CacheResult) -> ProductList | None:
        if not isinstance(result, CacheHit):
            return None
        page: ProductList = result.value
        if not page.contains(product.id):
            return None
        return page.with_products(
            [product if p.id == product.id else p for p in page.products],
            page.total,
        )

    return apply


def _drop(product_id: int) -> Callable[[CacheResult], ProductList | None]:
    def apply(result: CacheResult) -> ProductList | None:
        if not isinstance(result, CacheHit):
            return None
        page: ProductList = result.value
        if not page.contains(product_id):
            return None
        return page.with_products(
            [p for p in page.products if p.id != product_id],
            max(0, page.total - 1),
        )

    return apply


class MutationCoordinator:
    """Runs mutations and keeps cached pages consistent with the server.

    Cache patches are applied only after the server confirms the
    mutation, so a failure leaves the cache untouched and there is
    nothing to roll back.  Every outcome produces exactly one
    notification.

    There is one state slot per mutation kind and no lock: callers
    must not start a second mutation of the same kind while one is
    pending.  When two mutations of the same product overlap, the one
    that completes last wins in the cache.
    """

    def __init__(
        self,
        client: ProductsClient,
        cache: QueryCache,
        notify: Notifier,
    ) -> None:
        self.client = client
        self.cache = cache
        self.notify = notify
        self._states: dict[MutationKind, MutationState] = {
            kind: MutationState.IDLE for kind in MutationKind
        }

    def state(self, kind: MutationKind) -> MutationState:
        return self._states[kind]

    def is_pending(self, kind: MutationKind) -> bool:
        return self._states[kind] is MutationState.PENDING

    # --- Mutations ---

    async def create(
        self,
        data: dict[str, Any],
        pagination: PaginationState,
    ) -> Product:
        """Create a product and show it at the top of the current page.

        The whole list family is then invalidated so the next read
        picks up the server's real ordering.
        """
        product: Product = await self._run(
            MutationKind.CREATE,
            lambda: self.client.create_product(data),
        )
        self.cache.patch(pagination.list_key, _prepend(product))
        self.cache.invalidate(LIST_PREFIX)
        self._succeed(MutationKind.CREATE)
        return product

    async def update(
        self,
        product_id: int,
        partial: dict[str, Any],
    ) -> Product:
        """Update a product and rewrite it wherever it is cached.

        Ordering and totals of cached pages do not change.
        """
        product: Product = await self._run(
            MutationKind.UPDATE,
            lambda: self.client.update_product(product_id, partial),
        )
        self.cache.write(product_key(product.id), product)
        patched = self._patch_pages(_replace(product))
        logger.debug(
            "Rewrote product %d in %d cached pages", product.id, patched
        )
        self._succeed(MutationKind.UPDATE)
        return product

    async def delete(self, product_id: int) -> DeleteResult:
        """Delete a product and purge it from every cached page.

        A server answer of ``was_deleted=False`` means the product was
        already gone: the cache is purged all the same and the user
        gets a warning instead of a success message.
        """
        result: DeleteResult = await self._run(
            MutationKind.DELETE,
            lambda: self.client.delete_product(product_id),
        )
        patched = self._patch_pages(_drop(product_id))
        self.cache.remove(product_key(product_id))
        logger.debug(
            "Purged product %d from %d cached pages", product_id, patched
        )
        if result.was_deleted:
            self._succeed(MutationKind.DELETE)
        else:
            self._states[MutationKind.DELETE] = MutationState.SUCCESS
            self.notify(_ALREADY_DELETED_MESSAGE, "warning")
        return result

    # --- Private helpers ---

    async def _run(
        self,
        kind: MutationKind,
        call: Callable[[], Any],
    ) -> Any:
        """Await the remote call; on failure notify and re-raise."""
        self._states[kind] = MutationState.PENDING
        logger.info("Mutation %s pending", kind.value)
        try:
            return await asyncio.to_thread(call)
        except Exception as exc:
            self._states[kind] = MutationState.FAILED
            server_message = (
                exc.server_message if isinstance(exc, CatalogError) else None
            )
            message = server_message or _FALLBACK_MESSAGES[kind]
            logger.error(
                "Mutation %s failed: %s", kind.value, exc, exc_info=True
            )
            self.notify(message, "error")
            raise

    def _succeed(self, kind: MutationKind) -> None:
        self._states[kind] = MutationState.SUCCESS
        logger.info("Mutation %s succeeded", kind.value)
        self.notify(_SUCCESS_MESSAGES[kind], "information")

    def _patch_pages(
        self,
        fn: Callable[[CacheResult], ProductList | None],
    ) -> int:
        """Apply *fn* to every cached list page and search result."""
        patched = 0
        for key in self.cache.keys(LIST_PREFIX) + self.cache.keys(SEARCH_PREFIX):
            before = self.cache.read(key)
            after = self.cache.patch(key, fn)
            if isinstance(before, CacheHit) and isinstance(after, CacheHit):
                if after.value is not before.value:
                    patched += 1
        return patched
