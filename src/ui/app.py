# src/ui/app.py

"""Terminal UI for the catalog_admin product panel."""

import logging
from collections.abc import Callable
from typing import cast

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Select,
    Static,
)

from src.api.errors import CatalogError
from src.api.products_client import ProductsClient
from src.config.settings import Settings
from src.filters.stock_summary import (
    format_price,
    stock_style,
    summarize_stock,
)
from src.models.product import Product, ProductList
from src.services.catalog_queries import CatalogQueries
from src.services.mutation_coordinator import (
    MutationCoordinator,
    MutationKind,
)
from src.services.pagination import PaginationState
from src.services.search_overlay import ActiveSource, SearchOverlay
from src.storage.query_cache import LIST_PREFIX, SEARCH_PREFIX, QueryCache
from src.ui.screens import (
    ConfirmDeleteScreen,
    ProductDetailScreen,
    ProductFormScreen,
)

logger = logging.getLogger("catalog_admin.ui")


class CatalogAdminApp(App[object]):
    """Terminal UI for the catalog_admin product panel."""

    CSS_PATH = "styles.tcss"
    TITLE = "Catalog Admin"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("a", "add", "Add"),
        Binding("e", "edit", "Edit"),
        Binding("d", "delete", "Delete"),
        Binding("v", "view", "View"),
        Binding("n", "next_page", "Next"),
        Binding("p", "previous_page", "Prev"),
        Binding("r", "reload", "Reload"),
    ]

    def __init__(self, client: ProductsClient | None = None) -> None:
        super().__init__()
        self.settings = Settings()
        self.client = client or ProductsClient()
        self.cache = QueryCache()
        self.pagination = PaginationState()
        self.queries = CatalogQueries(
            self.client, self.cache, on_refreshed=self._on_refreshed
        )
        self.coordinator = MutationCoordinator(
            self.client, self.cache, self._notify
        )
        self.overlay = SearchOverlay(on_change=self._on_search_changed)
        self.current_page: ProductList | None = None
        self.products: list[Product] = []

    def compose(self) -> ComposeResult:
        """Build the widget tree for the TUI."""
        page_sizes = [
            (f"{size} / page", size)
            for size in self.settings.PAGE_SIZE_OPTIONS
        ]

        yield Header()
        yield Container(
            Static("📦 Product Management", id="title"),

            # Search Bar
            Horizontal(
                Input(
                    placeholder="Search products by name or brand...",
                    id="search_input",
                ),
                Button("Add Product", variant="primary", id="add_btn"),
                id="search_bar",
            ),

            Static("Loading products...", id="status"),
            cast(
                DataTable[str | Text],
                DataTable(
                    id="products_table",
                    zebra_stripes=True,
                    cursor_type="row",
                ),
            ),

            # Pagination
            Horizontal(
                Button("◀ Prev", id="prev_btn"),
                Static("", id="page_label"),
                Button("Next ▶", id="next_btn"),
                Select(
                    page_sizes,
                    value=self.pagination.page_size,
                    allow_blank=False,
                    id="page_size",
                ),
                id="pager",
            ),

            Static("", id="stats"),
            id="main_container",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Configure the table columns and load the first page."""
        table = self._table()
        table.add_columns(
            "ID", "Title", "Brand", "Category",
            "Price", "Rating", "Stock", "Status",
        )
        self.run_worker(self.refresh_table())

    def on_unmount(self) -> None:
        self.overlay.cancel()
        self.client.close()

    # --- Loading & rendering ---

    async def refresh_table(self) -> None:
        """Load the active source (cache first) and render it."""
        source = self.overlay.active_source(self.pagination)
        try:
            page = await self._load(source)
        except CatalogError as exc:
            logger.error("Loading %s failed: %s", source.key, exc)
            self._status().update(f"❌ {exc.message}")
            self.notify(exc.message, severity="error")
            return
        except Exception as exc:
            logger.exception("Unexpected error loading %s", source.key)
            self._status().update("❌ Failed to load products")
            self.notify(f"Error: {exc}", severity="error")
            return

        # A newer source may have become active while this one loaded
        if self.overlay.active_source(self.pagination) != source:
            logger.debug("Discarding superseded result for %s", source.key)
            return
        self.render_page(page, source)

    async def _load(self, source: ActiveSource) -> ProductList:
        if source.is_search:
            return await self.queries.fetch_search(source.query)
        return await self.queries.fetch_list(self.pagination)

    def render_page(self, page: ProductList, source: ActiveSource) -> None:
        """Fill the table, status, pager and stats from *page*."""
        self.current_page = page
        self.products = list(page.products)

        table = self._table()
        table.clear()
        for p in self.products:
            table.add_row(
                str(p.id),
                p.title[:40],
                p.brand,
                p.category,
                format_price(p.price),
                f"⭐ {p.rating:.1f}",
                Text(str(p.stock), style=stock_style(p.stock)),
                p.availability_status,
                key=str(p.id),
            )

        pager = self.query_one("#pager", Horizontal)
        if source.is_search:
            self._status().update(
                f'🔍 Searching for "{source.query}": '
                f"{page.total} matches"
            )
            pager.display = False
        else:
            pager.display = True
            page_count = self.pagination.page_count(page.total)
            self.query_one("#page_label", Static).update(
                f"Page {self.pagination.page_index + 1} of {page_count}"
            )
            self.query_one("#prev_btn", Button).disabled = (
                self.pagination.page_index == 0
            )
            self.query_one("#next_btn", Button).disabled = (
                not self.pagination.has_next(page.total)
            )
            self._status().update(
                f"✅ Showing {len(self.products)} of {page.total} products"
                if self.products
                else "No products on this page"
            )

        summary = summarize_stock(page)
        self.query_one("#stats", Static).update(
            f"{summary.total} Products · {summary.in_stock} In Stock · "
            f"{summary.well_stocked} Well Stocked · "
            f"{summary.low_stock} Low Stock · "
            f"{summary.out_of_stock} Out of Stock"
        )

    def _on_refreshed(self, key: str) -> None:
        if key == self.overlay.active_source(self.pagination).key:
            self.run_worker(self.refresh_table())

    def _on_search_changed(self, value: str) -> None:
        logger.info("Search source switched to '%s'", value or "<list>")
        self.run_worker(self.refresh_table())

    # --- Event handlers ---

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search_input":
            self.overlay.set_input(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "search_input":
            self.overlay.flush()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button click events."""
        if event.button.id == "add_btn":
            self.action_add()
        elif event.button.id == "prev_btn":
            self.action_previous_page()
        elif event.button.id == "next_btn":
            self.action_next_page()

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id != "page_size":
            return
        value = event.value
        if not isinstance(value, int) or value == self.pagination.page_size:
            return
        self.pagination.set_page_size(value)
        self.run_worker(self.refresh_table())

    def on_data_table_row_selected(
        self, event: DataTable.RowSelected
    ) -> None:
        """Open the detail screen for the selected product."""
        if 0 <= event.cursor_row < len(self.products):
            self.show_detail(self.products[event.cursor_row])

    # --- Actions ---

    def action_next_page(self) -> None:
        if self.overlay.is_searching or self.current_page is None:
            return
        if not self.pagination.has_next(self.current_page.total):
            return
        self.pagination.next_page()
        self.run_worker(self.refresh_table())

    def action_previous_page(self) -> None:
        if self.overlay.is_searching or self.pagination.page_index == 0:
            return
        self.pagination.previous_page()
        self.run_worker(self.refresh_table())

    def action_reload(self) -> None:
        source = self.overlay.active_source(self.pagination)
        self.cache.invalidate(SEARCH_PREFIX if source.is_search else LIST_PREFIX)
        self.run_worker(self.refresh_table())

    def action_add(self) -> None:
        self.push_screen(ProductFormScreen(None, self.submit_create))

    def action_edit(self) -> None:
        product = self.selected_product()
        if product is None:
            self.notify("Select a product first", severity="warning")
            return
        self.open_editor(product)

    def action_delete(self) -> None:
        product = self.selected_product()
        if product is None:
            self.notify("Select a product first", severity="warning")
            return
        self.confirm_delete(product)

    def action_view(self) -> None:
        product = self.selected_product()
        if product is not None:
            self.show_detail(product)

    # --- Mutations (shared with the detail screen) ---

    def selected_product(self) -> Product | None:
        row = self._table().cursor_row
        if 0 <= row < len(self.products):
            return self.products[row]
        return None

    def show_detail(self, product: Product) -> None:
        self.push_screen(ProductDetailScreen(product.id))

    def open_editor(
        self,
        product: Product,
        on_saved: Callable[[Product], None] | None = None,
    ) -> None:
        async def submit(payload: dict[str, object]) -> Product | None:
            updated = await self.submit_update(product.id, payload)
            if updated is not None and on_saved is not None:
                on_saved(updated)
            return updated

        self.push_screen(ProductFormScreen(product, submit))

    def confirm_delete(
        self,
        product: Product,
        on_deleted: Callable[[], None] | None = None,
    ) -> None:
        def answered(confirmed: bool | None) -> None:
            if confirmed:
                self.run_worker(self.submit_delete(product.id, on_deleted))

        self.push_screen(ConfirmDeleteScreen(product), answered)

    async def submit_create(self, payload: dict[str, object]) -> Product | None:
        if self.coordinator.is_pending(MutationKind.CREATE):
            return None
        try:
            product = await self.coordinator.create(payload, self.pagination)
        except CatalogError:
            return None
        await self.refresh_table()
        return product

    async def submit_update(
        self, product_id: int, payload: dict[str, object],
    ) -> Product | None:
        if self.coordinator.is_pending(MutationKind.UPDATE):
            return None
        try:
            product = await self.coordinator.update(product_id, payload)
        except CatalogError:
            return None
        await self.refresh_table()
        return product

    async def submit_delete(
        self,
        product_id: int,
        on_deleted: Callable[[], None] | None = None,
    ) -> None:
        if self.coordinator.is_pending(MutationKind.DELETE):
            return
        try:
            await self.coordinator.delete(product_id)
        except CatalogError:
            return
        if on_deleted is not None:
            on_deleted()
        await self.refresh_table()

    # --- Helpers ---

    def _notify(self, message: str, severity: str) -> None:
        if severity == "error":
            self.notify(message, severity="error")
        elif severity == "warning":
            self.notify(message, severity="warning")
        else:
            self.notify(message)

    def _table(self) -> DataTable[str | Text]:
        return cast(
            DataTable[str | Text],
            self.query_one("#products_table", DataTable),
        )

    def _status(self) -> Static:
        return self.query_one("#status", Static)
