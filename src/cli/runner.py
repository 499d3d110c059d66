# src/cli/runner.py

"""Headless catalog commands on top of the cached query and mutation layer."""

import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.table import Table

from src.api.errors import CatalogError
from src.api.products_client import ProductsClient
from src.filters.product_form import (
    FORM_FIELDS,
    ProductFormValidator,
    form_defaults,
)
from src.filters.stock_summary import (
    format_price,
    stock_style,
    summarize_stock,
)
from src.models.product import Product, ProductList
from src.services.catalog_queries import CatalogQueries
from src.services.mutation_coordinator import MutationCoordinator
from src.services.pagination import PaginationState
from src.storage.query_cache import QueryCache

logger = logging.getLogger("catalog_admin.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

_SEVERITY_STYLES: dict[str, str] = {
    "information": "green",
    "warning": "yellow",
    "error": "red",
}


def _notify(message: str, severity: str) -> None:
    style = _SEVERITY_STYLES.get(severity, "white")
    _err.print(f"[{style}]{message}[/{style}]")


def parse_field_args(pairs: Sequence[str]) -> dict[str, str]:
    """Turn ``["price=9.99", "title=Lamp"]`` into a field mapping.

    Raises ``ValueError`` on a malformed pair or an unknown field.
    """
    fields: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not name:
            msg = f"expected KEY=VALUE, got '{pair}'"
            raise ValueError(msg)
        if name not in FORM_FIELDS:
            msg = (
                f"unknown field '{name}' "
                f"(valid: {', '.join(FORM_FIELDS)})"
            )
            raise ValueError(msg)
        fields[name] = value
    return fields


class CatalogCli:
    """One headless session: a client, a cache and a page position."""

    def __init__(
        self,
        client: ProductsClient | None = None,
        output_format: str = "json",
    ) -> None:
        self.client = client or ProductsClient()
        self.cache = QueryCache()
        self.pagination = PaginationState()
        self.queries = CatalogQueries(self.client, self.cache)
        self.coordinator = MutationCoordinator(
            self.client, self.cache, _notify
        )
        self.output_format = output_format

    # --- Commands ---

    async def list_products(
        self,
        page: int,
        page_size: int,
        limit: int | None = None,
        skip: int | None = None,
    ) -> int:
        """Print one page; raw ``limit``/``skip`` override page numbers."""
        if limit is not None or skip is not None:
            products = await self._guard(
                self.queries.fetch_page(
                    limit if limit is not None else page_size,
                    skip or 0,
                )
            )
        else:
            self.pagination.set_page_size(page_size)
            self.pagination.page_index = max(0, page - 1)
            products = await self._guard(
                self.queries.fetch_list(self.pagination)
            )
        if products is None:
            return 1
        self._emit_list(products, "Products")
        return 0

    async def get_product(self, product_id: int) -> int:
        product = await self._guard(
            self.queries.fetch_product(product_id)
        )
        if product is None:
            return 1
        self._emit_product(product)
        return 0

    async def search(self, query: str) -> int:
        if not query.strip():
            _err.print("[yellow]Search query is empty; nothing to do.[/yellow]")
            return 1
        products = await self._guard(self.queries.fetch_search(query))
        if products is None:
            return 1
        self._emit_list(products, f'Search "{query}"')
        return 0

    async def add(self, field_args: Sequence[str]) -> int:
        fields = self._parse_fields(field_args)
        if fields is None:
            return 1
        raw = {**form_defaults(None), **fields}
        payload, errors = ProductFormValidator.validate(raw)
        if errors:
            self._print_errors(errors)
            return 1
        try:
            product = await self.coordinator.create(payload, self.pagination)
        except CatalogError:
            return 1
        self._emit_product(product)
        return 0

    async def update(self, product_id: int, field_args: Sequence[str]) -> int:
        fields = self._parse_fields(field_args)
        if fields is None:
            return 1
        current = await self._guard(
            self.queries.fetch_product(product_id)
        )
        if current is None:
            return 1
        raw = {**form_defaults(current), **fields}
        payload, errors = ProductFormValidator.validate(
            raw, current.category
        )
        if errors:
            self._print_errors(errors)
            return 1
        partial = ProductFormValidator.changed_fields(current, payload)
        if not partial:
            _err.print("[yellow]No changes to save.[/yellow]")
            return 0
        try:
            product = await self.coordinator.update(product_id, partial)
        except CatalogError:
            return 1
        self._emit_product(product)
        return 0

    async def delete(self, product_id: int) -> int:
        try:
            result = await self.coordinator.delete(product_id)
        except CatalogError:
            return 1
        self._emit({"id": result.id, "isDeleted": result.was_deleted})
        return 0

    # --- Private helpers ---

    async def _guard(self, awaitable: Any) -> Any:
        """Await a read; report ``CatalogError`` and return ``None``."""
        try:
            return await awaitable
        except CatalogError as exc:
            logger.error("Command failed: %s", exc)
            _err.print(f"[red]Error: {exc.message}[/red]")
            return None

    def _parse_fields(self, field_args: Sequence[str]) -> dict[str, str] | None:
        try:
            return parse_field_args(field_args)
        except ValueError as exc:
            _err.print(f"[red]{exc}[/red]")
            return None

    def _print_errors(self, errors: dict[str, str]) -> None:
        for name, message in errors.items():
            _err.print(f"[red]{name}: {message}[/red]")

    def _emit(self, data: Any) -> None:
        json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")

    def _emit_list(self, page: ProductList, title: str) -> None:
        summary = summarize_stock(page)
        _err.print(
            f"[green]✓ {len(page.products)} of {page.total} products[/green] "
            f"[dim]({summary.in_stock} in stock, "
            f"{summary.out_of_stock} out of stock)[/dim]"
        )
        if self.output_format == "table":
            _print_table(page.products, title)
        else:
            self._emit(
                {
                    "products": [p.to_api() for p in page.products],
                    "total": page.total,
                    "skip": page.skip,
                    "limit": page.limit,
                }
            )

    def _emit_product(self, product: Product) -> None:
        if self.output_format == "table":
            _print_table((product,), product.title)
        else:
            data = product.to_api()
            data["discountedPrice"] = round(product.discounted_price, 2)
            self._emit(data)


def _print_table(products: Sequence[Product], title: str) -> None:
    """Render a Rich table of products to stdout."""
    table = Table(
        title=title,
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Title", max_width=40)
    table.add_column("Brand", style="magenta")
    table.add_column("Category")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Stock", justify="right")
    table.add_column("Status")

    for p in products:
        table.add_row(
            str(p.id),
            p.title[:40],
            p.brand or "—",
            p.category,
            format_price(p.price),
            f"{p.rating:.1f}",
            f"[{stock_style(p.stock)}]{p.stock}[/]",
            p.availability_status,
        )

    Console().print(table)
