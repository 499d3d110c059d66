# tests/test_search_overlay.py

"""Tests for the debounced search overlay."""

import asyncio
import unittest

from src.services.pagination import PaginationState
from src.services.search_overlay import Debouncer, SearchOverlay

DELAY = 0.05


class TestDebouncer(unittest.IsolatedAsyncioTestCase):
    """Trailing-edge timer behavior."""

    async def test_only_last_value_fires(self) -> None:
        fired: list[str] = []
        debouncer = Debouncer(DELAY, fired.append)
        for value in ("a", "ab", "abc"):
            debouncer.arm(value)
            await asyncio.sleep(DELAY / 5)
        self.assertTrue(debouncer.pending)
        await asyncio.sleep(DELAY * 3)
        self.assertEqual(fired, ["abc"])
        self.assertFalse(debouncer.pending)

    async def test_cancel_prevents_firing(self) -> None:
        fired: list[str] = []
        debouncer = Debouncer(DELAY, fired.append)
        debouncer.arm("x")
        debouncer.cancel()
        await asyncio.sleep(DELAY * 3)
        self.assertEqual(fired, [])

    def test_arm_requires_running_loop(self) -> None:
        debouncer = Debouncer(DELAY, lambda _v: None)
        with self.assertRaises(RuntimeError):
            debouncer.arm("x")


class TestSearchOverlay(unittest.IsolatedAsyncioTestCase):
    """Source selection and change notifications."""

    def setUp(self) -> None:
        self.changes: list[str] = []
        self.overlay = SearchOverlay(delay=DELAY, on_change=self.changes.append)
        self.pagination = PaginationState()

    async def test_typing_burst_yields_one_search(self) -> None:
        for text in ("a", "ab", "abc"):
            self.overlay.set_input(text)
            await asyncio.sleep(DELAY / 5)
        self.assertEqual(self.overlay.raw_value, "abc")
        self.assertEqual(self.overlay.debounced_value, "")
        await asyncio.sleep(DELAY * 3)
        self.assertEqual(self.changes, ["abc"])
        source = self.overlay.active_source(self.pagination)
        self.assertTrue(source.is_search)
        self.assertEqual(source.query, "abc")
        self.assertEqual(source.key, "search:abc")

    async def test_flush_applies_immediately(self) -> None:
        self.overlay.set_input("phone")
        self.overlay.flush()
        self.assertEqual(self.overlay.debounced_value, "phone")
        self.assertFalse(self.overlay.pending)
        await asyncio.sleep(DELAY * 3)
        self.assertEqual(self.changes, ["phone"])

    async def test_query_is_trimmed(self) -> None:
        self.overlay.set_input("  lamp  ")
        self.overlay.flush()
        self.assertEqual(self.overlay.debounced_value, "lamp")

    async def test_blank_input_returns_to_list(self) -> None:
        self.overlay.set_input("lamp")
        self.overlay.flush()
        self.overlay.set_input("   ")
        self.overlay.flush()
        self.assertFalse(self.overlay.is_searching)
        self.assertEqual(self.changes, ["lamp", ""])
        self.pagination.next_page()
        source = self.overlay.active_source(self.pagination)
        self.assertFalse(source.is_search)
        self.assertEqual(source.key, "list:limit=10,skip=10")
        self.assertEqual((source.limit, source.skip), (10, 10))

    async def test_same_value_does_not_notify_twice(self) -> None:
        self.overlay.set_input("lamp")
        self.overlay.flush()
        self.overlay.set_input("lamp ")
        self.overlay.flush()
        self.assertEqual(self.changes, ["lamp"])

    async def test_cancel_drops_pending_value(self) -> None:
        self.overlay.set_input("lamp")
        self.overlay.cancel()
        await asyncio.sleep(DELAY * 3)
        self.assertEqual(self.changes, [])
        self.assertFalse(self.overlay.is_searching)

    def test_defaults_to_list_source(self) -> None:
        overlay = SearchOverlay()
        source = overlay.active_source(PaginationState(page_size=20))
        self.assertEqual(source.kind, "list")
        self.assertEqual(source.limit, 20)


if __name__ == "__main__":
    unittest.main()
