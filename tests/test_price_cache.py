"""Tests for price_cache.py - lookup order and memoization."""

from tests.conftest import CountingDatabase, CountingTable
from database import Database
from price_cache import PriceCache


class TestLookupOrder:

    def test_primary_table_first(self):
        primary = CountingTable({"a": 100})
        handbook = CountingTable({"a": 999})
        cache = PriceCache()
        assert cache.lookup(CountingDatabase(primary, handbook), "a") == 100
        assert handbook.calls == 0

    def test_falls_back_to_handbook(self):
        primary = CountingTable({})
        handbook = CountingTable({"a": 999})
        assert PriceCache().lookup(CountingDatabase(primary, handbook), "a") == 999

    def test_absent_everywhere(self):
        db = CountingDatabase(CountingTable({}), CountingTable({}))
        assert PriceCache().lookup(db, "a") is None

    def test_real_database_handbook_fallback(self):
        db = Database({"templates": {
            "prices": {"a": 10},
            "handbook": {"Items": [{"Id": "b", "Price": 20}]},
        }})
        cache = PriceCache()
        assert cache.lookup(db, "a") == 10
        assert cache.lookup(db, "b") == 20


class TestMemoization:

    def test_second_lookup_does_not_touch_tables(self):
        primary = CountingTable({"a": 100})
        handbook = CountingTable({})
        db = CountingDatabase(primary, handbook)
        cache = PriceCache()

        first = cache.lookup(db, "a")
        calls = primary.calls + handbook.calls
        second = cache.lookup(db, "a")

        assert first == second == 100
        assert primary.calls + handbook.calls == calls
        assert cache.hits == 1

    def test_absence_is_memoized(self):
        primary = CountingTable({})
        handbook = CountingTable({})
        db = CountingDatabase(primary, handbook)
        cache = PriceCache()

        assert cache.lookup(db, "missing") is None
        assert cache.lookup(db, "missing") is None
        assert primary.calls == 1
        assert handbook.calls == 1
        assert "missing" in cache

    def test_cached_value_survives_table_changes(self):
        primary = CountingTable({"a": 100})
        db = CountingDatabase(primary)
        cache = PriceCache()
        cache.lookup(db, "a")
        primary.prices["a"] = 5
        assert cache.lookup(db, "a") == 100

    def test_clear(self):
        primary = CountingTable({"a": 100})
        db = CountingDatabase(primary)
        cache = PriceCache()
        cache.lookup(db, "a")
        cache.clear()
        assert len(cache) == 0
        cache.lookup(db, "a")
        assert primary.calls == 2


class TestFailures:

    def test_broken_source_cached_as_absent(self, caplog):
        class Exploding:
            calls = 0

            def price_sources(self):
                Exploding.calls += 1
                raise RuntimeError("store offline")

        db = Exploding()
        cache = PriceCache()
        assert cache.lookup(db, "a") is None
        assert cache.lookup(db, "a") is None
        assert Exploding.calls == 1
        assert "store offline" in caplog.text

    def test_stats(self):
        db = CountingDatabase(CountingTable({"a": 1}))
        cache = PriceCache()
        cache.lookup(db, "a")
        cache.lookup(db, "b")
        stats = cache.get_stats()
        assert stats["cached"] == 2
        assert stats["priced"] == 1
        assert stats["unpriced"] == 1
