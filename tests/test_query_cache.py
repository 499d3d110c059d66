# tests/test_query_cache.py

"""Tests for the in-memory stale-while-revalidate query cache."""

import time
import unittest
from unittest.mock import patch

from src.models.product import Product, ProductList
from src.storage.query_cache import (
    LIST_PREFIX,
    CacheHit,
    CacheMiss,
    CacheResult,
    QueryCache,
    list_key,
    product_key,
    search_key,
)

TIME_PATH = "src.storage.query_cache.time.time"


def _page(*ids: int, total: int = 194) -> ProductList:
    """Create a minimal ProductList for testing."""
    return ProductList(
        products=tuple(Product(id=i, title=f"P{i}") for i in ids),
        total=total,
        limit=len(ids),
    )


class TestCacheKeys(unittest.TestCase):
    """Key helpers."""

    def test_key_formats(self) -> None:
        self.assertEqual(list_key(10, 0), "list:limit=10,skip=0")
        self.assertEqual(product_key(42), "product:42")
        self.assertEqual(search_key("wireless"), "search:wireless")

    def test_list_keys_share_prefix(self) -> None:
        self.assertTrue(list_key(20, 40).startswith(LIST_PREFIX))
        self.assertFalse(product_key(1).startswith(LIST_PREFIX))


class TestQueryCache(unittest.TestCase):
    """QueryCache unit tests."""

    def setUp(self) -> None:
        self.cache = QueryCache()

    # --- Read & write ---

    def test_empty_cache_miss(self) -> None:
        self.assertIsInstance(self.cache.read("list:limit=10,skip=0"), CacheMiss)

    def test_fresh_hit(self) -> None:
        page = _page(1, 2)
        self.cache.write(list_key(2, 0), page)
        result = self.cache.read(list_key(2, 0))
        self.assertEqual(result, CacheHit(page, is_stale=False))

    def test_repeated_reads_are_identical(self) -> None:
        """Two reads with no write in between return the same value."""
        self.cache.write(product_key(1), Product(id=1, title="A"))
        first = self.cache.read(product_key(1))
        second = self.cache.read(product_key(1))
        assert isinstance(first, CacheHit) and isinstance(second, CacheHit)
        self.assertIs(first.value, second.value)
        self.assertEqual(first, second)

    def test_write_replaces_value(self) -> None:
        self.cache.write(product_key(1), Product(id=1, title="A"))
        self.cache.write(product_key(1), Product(id=1, title="B"))
        result = self.cache.read(product_key(1))
        assert isinstance(result, CacheHit)
        self.assertEqual(result.value.title, "B")

    # --- Staleness ---

    def test_entry_past_window_is_stale_but_served(self) -> None:
        """Old entries are returned, flagged stale, never dropped."""
        self.cache.write(list_key(10, 0), _page(1))
        future = time.time() + 301
        with patch(TIME_PATH, return_value=future):
            result = self.cache.read(list_key(10, 0))
        self.assertIsInstance(result, CacheHit)
        assert isinstance(result, CacheHit)
        self.assertTrue(result.is_stale)
        self.assertEqual(result.value.products[0].id, 1)

    def test_entry_inside_window_is_fresh(self) -> None:
        self.cache.write(list_key(10, 0), _page(1))
        future = time.time() + 60
        with patch(TIME_PATH, return_value=future):
            result = self.cache.read(list_key(10, 0))
        assert isinstance(result, CacheHit)
        self.assertFalse(result.is_stale)

    def test_write_resets_staleness(self) -> None:
        self.cache.write(list_key(10, 0), _page(1))
        self.cache.invalidate(LIST_PREFIX)
        self.cache.write(list_key(10, 0), _page(2))
        result = self.cache.read(list_key(10, 0))
        assert isinstance(result, CacheHit)
        self.assertFalse(result.is_stale)

    def test_custom_stale_time(self) -> None:
        cache = QueryCache(stale_time=0)
        cache.write("k", 1)
        result = cache.read("k")
        assert isinstance(result, CacheHit)
        self.assertTrue(result.is_stale)

    # --- Invalidation ---

    def test_invalidate_marks_whole_family(self) -> None:
        """All list pages go stale regardless of limit/skip."""
        self.cache.write(list_key(10, 0), _page(1))
        self.cache.write(list_key(10, 10), _page(11))
        self.cache.write(list_key(20, 0), _page(1, 2))
        self.cache.write(product_key(1), Product(id=1, title="A"))

        count = self.cache.invalidate(LIST_PREFIX)

        self.assertEqual(count, 3)
        for key in self.cache.keys(LIST_PREFIX):
            result = self.cache.read(key)
            assert isinstance(result, CacheHit)
            self.assertTrue(result.is_stale)
        detail = self.cache.read(product_key(1))
        assert isinstance(detail, CacheHit)
        self.assertFalse(detail.is_stale)

    def test_invalidate_empty_family(self) -> None:
        self.assertEqual(self.cache.invalidate(LIST_PREFIX), 0)

    # --- Patch ---

    def test_patch_receives_hit(self) -> None:
        self.cache.write("k", 1)
        seen: list[CacheResult] = []

        def bump(result: CacheResult) -> int | None:
            seen.append(result)
            return result.value + 1 if isinstance(result, CacheHit) else None

        after = self.cache.patch("k", bump)
        self.assertEqual(seen, [CacheHit(1, False)])
        self.assertEqual(after, CacheHit(2, False))

    def test_patch_receives_miss(self) -> None:
        """Patch functions see the miss explicitly instead of a no-op."""
        seen: list[CacheResult] = []

        def record(result: CacheResult) -> None:
            seen.append(result)
            return None

        after = self.cache.patch("absent", record)
        self.assertEqual(seen, [CacheMiss()])
        self.assertIsInstance(after, CacheMiss)
        self.assertEqual(self.cache.keys(), [])

    def test_patch_can_seed_a_miss(self) -> None:
        self.cache.patch("k", lambda r: 5 if isinstance(r, CacheMiss) else None)
        self.assertEqual(self.cache.read("k"), CacheHit(5, False))

    def test_patch_keeps_stale_flag(self) -> None:
        self.cache.write(list_key(10, 0), _page(1))
        self.cache.invalidate(LIST_PREFIX)
        after = self.cache.patch(
            list_key(10, 0), lambda r: _page(1, 2)
        )
        assert isinstance(after, CacheHit)
        self.assertTrue(after.is_stale)
        self.assertEqual(len(after.value.products), 2)

    # --- Remove / clear ---

    def test_remove_drops_entry(self) -> None:
        self.cache.write(product_key(7), Product(id=7, title="X"))
        self.assertTrue(self.cache.remove(product_key(7)))
        self.assertIsInstance(self.cache.read(product_key(7)), CacheMiss)
        self.assertFalse(self.cache.remove(product_key(7)))

    def test_keys_by_prefix(self) -> None:
        self.cache.write(list_key(10, 0), _page(1))
        self.cache.write(search_key("a"), _page(1))
        self.assertEqual(self.cache.keys(LIST_PREFIX), [list_key(10, 0)])
        self.assertEqual(len(self.cache.keys()), 2)

    def test_clear_returns_purged_count(self) -> None:
        self.cache.write("a", 1)
        self.cache.write("b", 2)
        self.assertEqual(self.cache.clear(), 2)
        self.assertIsInstance(self.cache.read("a"), CacheMiss)

    def test_clear_on_empty_cache_returns_zero(self) -> None:
        self.assertEqual(self.cache.clear(), 0)


if __name__ == "__main__":
    unittest.main()
