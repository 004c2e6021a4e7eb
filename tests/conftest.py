"""Shared fixtures for the price randomizer test suite."""

import sys
import logging
from pathlib import Path

import pytest

# Ensure src/ is importable
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from config import DOLLAR_TPL, EURO_TPL, RUBLE_TPL
from core import PriceRandomizer, RandomizerConfig
from database import Database

logger = logging.getLogger(__name__)

# Item templates used across tests
AK_TPL = "5644bd2b4bdc2d3b4c8b4572"
BANDAGE_TPL = "544fb25a4bdc2dfb738b4567"
SALEWA_TPL = "544fb45d4bdc2dee738b4568"
BOLT_TPL = "57347c5b245977448d35f6e1"


# ── Helper factories ─────────────────────────────────────

def make_config(**overrides) -> RandomizerConfig:
    """RandomizerConfig with test-friendly defaults (fixed seed, explicit traders)."""
    fields = dict(
        auto_discover=False,
        trader_ids=["aio_trader"],
        seed=12345,
    )
    fields.update(overrides)
    return RandomizerConfig(**fields)


def make_trader(nickname, entries):
    """Raw trader dict from (item_id, tpl, offers) triples.

    offers is a bare offer list; it is wrapped as [[...]] like the server does.
    """
    items = []
    barter = {}
    for item_id, tpl, offers in entries:
        items.append({"_id": item_id, "_tpl": tpl, "parentId": "hideout"})
        if offers is not None:
            barter[item_id] = [offers]
    return {
        "base": {"nickname": nickname},
        "assort": {"items": items, "barter_scheme": barter},
    }


def make_tables(prices=None, handbook=None, traders=None) -> dict:
    """Minimal server tables dict."""
    templates = {}
    if prices is not None:
        templates["prices"] = prices
    if handbook is not None:
        templates["handbook"] = {"Items": handbook}
    return {"templates": templates, "traders": traders or {}}


def rub(count=1):
    return {"_tpl": RUBLE_TPL, "count": count}


def usd(count=1):
    return {"_tpl": DOLLAR_TPL, "count": count}


def eur(count=1):
    return {"_tpl": EURO_TPL, "count": count}


class CountingTable:
    """PriceTable stand-in that counts get() calls."""

    def __init__(self, prices):
        self.prices = dict(prices)
        self.calls = 0

    def get(self, tpl):
        self.calls += 1
        return self.prices.get(tpl)


class CountingDatabase:
    """Exposes price_sources() over CountingTables."""

    def __init__(self, *tables):
        self.tables = tables

    def price_sources(self):
        return self.tables


# ── Fixtures ─────────────────────────────────────────────

@pytest.fixture
def reference_prices():
    return {
        AK_TPL: 40000,
        BANDAGE_TPL: 1000,
        SALEWA_TPL: "12500",
        DOLLAR_TPL: 125,
        EURO_TPL: 140,
    }


@pytest.fixture
def tables(reference_prices):
    """One AIO trader selling three items in rubles, dollars and a barter."""
    traders = {
        "aio_trader": make_trader("AIO Trader", [
            ("offer_ak", AK_TPL, [rub(38000)]),
            ("offer_bandage", BANDAGE_TPL, [usd(9)]),
            ("offer_salewa", SALEWA_TPL, [{"_tpl": BOLT_TPL, "count": 2}]),
        ]),
        "prapor": make_trader("Prapor", [
            ("p_ak", AK_TPL, [rub(45000)]),
        ]),
    }
    return make_tables(prices=reference_prices, traders=traders)


@pytest.fixture
def db(tables):
    return Database(tables)


@pytest.fixture
def engine():
    return PriceRandomizer(make_config())
