"""Tests for price_tables.py - shape and field-name normalization."""

import math

import pytest

from price_tables import PriceTable, coerce_price


class TestCoercePrice:

    @pytest.mark.parametrize("raw,expected", [
        (1000, 1000.0),
        (12.5, 12.5),
        ("1500", 1500.0),
        (" 42 ", 42.0),
    ])
    def test_numeric_values(self, raw, expected):
        assert coerce_price(raw) == expected

    @pytest.mark.parametrize("raw", [
        None, 0, -5, "", "abc", True, [], {}, math.inf, float("nan"),
    ])
    def test_rejected_values(self, raw):
        assert coerce_price(raw) is None


class TestMapShape:

    def test_flat_numbers(self):
        table = PriceTable({"a": 100, "b": "250"})
        assert table.get("a") == 100
        assert table.get("b") == 250

    def test_record_synonyms(self):
        table = PriceTable({
            "a": {"Price": 10},
            "b": {"price": 20},
            "c": {"DefaultPrice": 30},
            "d": {"basePrice": "40"},
        })
        assert [table.get(k) for k in "abcd"] == [10, 20, 30, 40]

    def test_first_truthy_synonym_wins(self):
        table = PriceTable({"a": {"Price": 0, "price": 55}})
        assert table.get("a") == 55

    def test_missing(self):
        assert PriceTable({"a": 1}).get("zzz") is None

    def test_non_positive_is_absent(self):
        table = PriceTable({"a": {"Price": -3}, "b": "0"})
        assert table.get("a") is None
        assert table.get("b") is None


class TestListShape:

    def test_id_synonyms(self):
        table = PriceTable([{"Id": "a", "Price": 5}, {"id": "b", "price": 6}])
        assert table.get("a") == 5
        assert table.get("b") == 6

    def test_first_duplicate_wins(self):
        table = PriceTable([{"Id": "a", "Price": 5}, {"Id": "a", "Price": 9}])
        assert table.get("a") == 5

    def test_malformed_records_skipped(self):
        table = PriceTable(["junk", None, {"noid": 1}, {"Id": "a", "Price": 7}])
        assert table.get("a") == 7
        assert table.get("noid") is None

    def test_handbook_ignores_default_price(self):
        table = PriceTable.handbook([{"Id": "a", "DefaultPrice": 5}])
        assert table.get("a") is None


class TestBrokenTables:

    def test_empty_and_none(self):
        assert PriceTable(None).get("a") is None
        assert PriceTable({}).get("a") is None

    def test_unsupported_type_logged_not_raised(self, caplog):
        table = PriceTable("not a table")
        assert table.get("a") is None
        assert "malformed" in caplog.text
