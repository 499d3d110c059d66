# tests/test_app.py

"""Smoke tests for the TUI application using Textual's Pilot."""

import unittest
from typing import Any, cast
from unittest.mock import MagicMock

from textual.containers import Horizontal
from textual.widgets import Button, DataTable, Input, Select, Static

from src.api.errors import NotFoundError, TransportError
from src.api.products_client import ProductsClient
from src.models.product import DeleteResult, Product, ProductList
from src.ui.app import CatalogAdminApp
from src.ui.screens import (
    ConfirmDeleteScreen,
    ProductDetailScreen,
    ProductFormScreen,
)


def _page(start: int, count: int, total: int = 194) -> ProductList:
    products = tuple(
        Product(id=i, title=f"Product {i}", price=10.0, stock=i % 15)
        for i in range(start, start + count)
    )
    return ProductList(
        products=products, total=total, skip=start - 1, limit=count
    )


def _client() -> MagicMock:
    client = MagicMock(spec=ProductsClient)
    client.list_products.side_effect = (
        lambda limit, skip: _page(skip + 1, limit)
    )
    return client


class TestCatalogAdminApp(unittest.IsolatedAsyncioTestCase):
    """Smoke tests for the Textual TUI."""

    async def _settle(self, app: CatalogAdminApp, pilot: Any) -> None:
        await pilot.pause()
        await app.workers.wait_for_complete()
        await pilot.pause()

    def _table(self, app: CatalogAdminApp) -> DataTable[Any]:
        return cast(DataTable[Any], app.query_one("#products_table", DataTable))

    async def test_app_composes_without_crash(self) -> None:
        """Verify the app starts and renders all widgets."""
        app = CatalogAdminApp(client=_client())
        async with app.run_test() as pilot:
            app.query_one("#search_input", Input)
            app.query_one("#add_btn", Button)
            app.query_one("#status", Static)
            app.query_one("#page_size", Select)
            app.query_one("#pager", Horizontal)
            await self._settle(app, pilot)

    async def test_first_page_loads(self) -> None:
        client = _client()
        app = CatalogAdminApp(client=client)
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            client.list_products.assert_called_once_with(10, 0)
            self.assertEqual(self._table(app).row_count, 10)
            self.assertEqual(app.products[0].id, 1)
            self.assertTrue(app.query_one("#prev_btn", Button).disabled)

    async def test_next_and_previous_page(self) -> None:
        client = _client()
        app = CatalogAdminApp(client=client)
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            app.action_next_page()
            await self._settle(app, pilot)
            client.list_products.assert_called_with(10, 10)
            self.assertEqual(app.products[0].id, 11)

            app.action_previous_page()
            await self._settle(app, pilot)
            # page one is served from cache
            self.assertEqual(client.list_products.call_count, 2)
            self.assertEqual(app.products[0].id, 1)

    async def test_search_replaces_list_and_hides_pager(self) -> None:
        client = _client()
        client.search_products.return_value = ProductList(
            products=(Product(id=99, title="Lamp"),), total=1, limit=1
        )
        app = CatalogAdminApp(client=client)
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            app.query_one("#search_input", Input).value = "lamp"
            await pilot.pause()
            app.overlay.flush()
            await self._settle(app, pilot)

            client.search_products.assert_called_once_with("lamp")
            self.assertEqual([p.id for p in app.products], [99])
            self.assertFalse(app.query_one("#pager", Horizontal).display)

            app.query_one("#search_input", Input).value = ""
            await pilot.pause()
            app.overlay.flush()
            await self._settle(app, pilot)
            self.assertEqual(len(app.products), 10)
            self.assertTrue(app.query_one("#pager", Horizontal).display)

    async def test_load_error_leaves_table_empty(self) -> None:
        client = MagicMock(spec=ProductsClient)
        client.list_products.side_effect = TransportError("HTTP 500", 500)
        app = CatalogAdminApp(client=client)
        async with app.run_test(notifications=True) as pilot:
            await self._settle(app, pilot)
            self.assertEqual(app.products, [])
            self.assertIsNone(app.current_page)

    async def test_malformed_response_does_not_crash(self) -> None:
        client = MagicMock(spec=ProductsClient)
        client.list_products.side_effect = TypeError("missing 'title'")
        app = CatalogAdminApp(client=client)
        async with app.run_test(notifications=True) as pilot:
            await self._settle(app, pilot)
            self.assertTrue(app.is_running)
            self.assertEqual(app.products, [])

    async def test_add_opens_form(self) -> None:
        app = CatalogAdminApp(client=_client())
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            app.action_add()
            await pilot.pause()
            self.assertIsInstance(app.screen, ProductFormScreen)
            await pilot.press("escape")
            await pilot.pause()
            self.assertNotIsInstance(app.screen, ProductFormScreen)

    async def test_submit_create_prepends_row(self) -> None:
        client = _client()
        client.create_product.return_value = Product(id=195, title="New Lamp")
        app = CatalogAdminApp(client=client)
        async with app.run_test(notifications=True) as pilot:
            await self._settle(app, pilot)
            created = await app.submit_create({"title": "New Lamp"})
            # rendered from the patched page before the background refetch
            self.assertIsNotNone(created)
            self.assertIsNotNone(app.current_page)
            assert app.current_page is not None
            self.assertEqual(app.current_page.total, 195)
            self.assertEqual(app.products[0].id, 195)

    async def test_submit_update_rewrites_row(self) -> None:
        client = _client()
        client.update_product.return_value = Product(
            id=3, title="Product 3", stock=0, availability_status="Out of Stock"
        )
        app = CatalogAdminApp(client=client)
        async with app.run_test(notifications=True) as pilot:
            await self._settle(app, pilot)
            await app.submit_update(3, {"stock": 0})
            await self._settle(app, pilot)
            self.assertEqual(app.products[2].stock, 0)
            self.assertEqual(len(app.products), 10)

    async def test_submit_delete_removes_row(self) -> None:
        client = _client()
        client.delete_product.return_value = DeleteResult(3, True)
        app = CatalogAdminApp(client=client)
        async with app.run_test(notifications=True) as pilot:
            await self._settle(app, pilot)
            deleted: list[bool] = []
            await app.submit_delete(3, lambda: deleted.append(True))
            await self._settle(app, pilot)
            self.assertEqual(deleted, [True])
            self.assertNotIn(3, [p.id for p in app.products])
            self.assertEqual(self._table(app).row_count, 9)

    async def test_failed_update_returns_none(self) -> None:
        client = _client()
        client.update_product.side_effect = TransportError("HTTP 500", 500)
        app = CatalogAdminApp(client=client)
        async with app.run_test(notifications=True) as pilot:
            await self._settle(app, pilot)
            self.assertIsNone(await app.submit_update(3, {"stock": 0}))
            self.assertEqual(app.products[2].stock, 3)

    async def test_delete_action_asks_for_confirmation(self) -> None:
        app = CatalogAdminApp(client=_client())
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            app.action_delete()
            await pilot.pause()
            self.assertIsInstance(app.screen, ConfirmDeleteScreen)
            await pilot.press("escape")
            await pilot.pause()
            app.client.delete_product.assert_not_called()  # type: ignore[attr-defined]

    async def test_detail_screen_loads_product(self) -> None:
        client = _client()
        client.get_product.return_value = Product(id=5, title="Product 5")
        app = CatalogAdminApp(client=client)
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            app.show_detail(app.products[4])
            await pilot.pause()
            screen = app.screen
            self.assertIsInstance(screen, ProductDetailScreen)
            await self._settle(app, pilot)
            assert isinstance(screen, ProductDetailScreen)
            self.assertEqual(screen.product, Product(id=5, title="Product 5"))

    async def test_detail_screen_not_found(self) -> None:
        client = _client()
        client.get_product.side_effect = NotFoundError(
            "missing", 404, "Product with id '999' not found"
        )
        app = CatalogAdminApp(client=client)
        async with app.run_test() as pilot:
            await self._settle(app, pilot)
            app.push_screen(ProductDetailScreen(999))
            await pilot.pause()
            screen = app.screen
            await self._settle(app, pilot)
            assert isinstance(screen, ProductDetailScreen)
            self.assertIsNone(screen.product)


if __name__ == "__main__":
    unittest.main()
