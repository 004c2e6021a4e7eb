"""
PriceRandomizer - recomputes trader offer prices once per cycle.

Every cycle:
    1. pick the traders (auto-discovered by nickname, else config.trader_ids)
    2. snapshot reference prices for everything they sell (the baseline)
    3. for each assort entry: baseline * random multiplier, clamped and
       rounded, written into the entry's currency offer

The random stream comes from a seeded generator, so the same config gives
the same price sequence after every restart. With stick_to_baseline the
baseline is built once and then frozen, so prices always wander around the
reference price instead of drifting cycle over cycle.

Usage:
    from core import PriceRandomizer
    from database import Database

    engine = PriceRandomizer(config)
    result = engine.run_cycle(Database(tables))
"""

import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from config import DISCOVERY_NICKNAME_PATTERNS
from core.randomizer_config import RandomizerConfig
from price_cache import PriceCache
from seeded_rng import SeededRandom

logger = logging.getLogger(__name__)


def round_price(value: float, mode: str) -> int:
    """Round to whole currency units. "nearest" rounds halves up."""
    if mode == "floor":
        return math.floor(value)
    if mode == "ceil":
        return math.ceil(value)
    return math.floor(value + 0.5)


@dataclass
class CycleResult:
    """What one run_cycle() did."""
    skipped: bool = False
    trader_ids: List[str] = field(default_factory=list)
    processed: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    offers_updated: int = 0
    baseline_size: int = 0


class PriceRandomizer:
    """Engine state: price cache, currency rates, baseline, RNG.

    All of it is instance state; reset_caches() puts it back to the
    just-constructed condition.
    """

    def __init__(self, config: RandomizerConfig, log=None):
        self.config = config
        # Anything with info/warning/error/debug works; logging.Logger does.
        self.log = log or logger
        self.rng = SeededRandom(config.seed)
        self.price_cache = PriceCache()
        self.currency_rates: Dict[str, Optional[float]] = {}
        self.baseline_prices: Dict[str, float] = {}
        self._lock = threading.RLock()

    # ── Public API ──────────────────────────────────────────

    def run_cycle(self, db) -> CycleResult:
        """One full pass over the active traders. Never raises per trader."""
        with self._lock:
            result = CycleResult()
            if not self.config.enabled:
                self.log.info("Disabled, skipping cycle")
                result.skipped = True
                return result

            trader_ids = list(self.config.trader_ids)
            if self.config.auto_discover:
                discovered = self.discover_traders(db)
                if discovered:
                    trader_ids = discovered
            result.trader_ids = trader_ids

            self.build_baselines(db, trader_ids)
            result.baseline_size = len(self.baseline_prices)

            for trader_id in trader_ids:
                try:
                    trader = db.get_trader(trader_id)
                    if trader is None:
                        self.log.warning(f"Trader not found: {trader_id}")
                        result.missing.append(trader_id)
                        continue
                    result.offers_updated += self.process_trader(trader, db)
                    result.processed.append(trader_id)
                except Exception as e:
                    self.log.error(f"Failed to process {trader_id}: {e}")
                    result.failed[trader_id] = str(e)

            return result

    def reset_caches(self):
        """Forget prices, rates and baseline, and rewind the RNG."""
        with self._lock:
            self.price_cache.clear()
            self.currency_rates.clear()
            self.baseline_prices.clear()
            self.rng = SeededRandom(self.config.seed)

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "baseline": len(self.baseline_prices),
                "currency_rates": len(self.currency_rates),
                "prices": self.price_cache.get_stats(),
            }

    # ── Baseline ────────────────────────────────────────────

    def build_baselines(self, db, trader_ids: List[str]):
        """Snapshot reference prices for every template the traders sell.

        With stick_to_baseline an existing baseline is authoritative and
        this is a no-op; otherwise it is rebuilt from scratch.
        """
        if self.config.stick_to_baseline and self.baseline_prices:
            return

        self.baseline_prices.clear()
        templates: Dict[str, None] = {}
        for trader_id in trader_ids:
            try:
                trader = db.get_trader(trader_id)
                if trader is None:
                    self.log.warning(f"No assort for trader {trader_id}, skipped in baseline")
                    continue
                for item in trader.items:
                    tpl = item.get("_tpl") if isinstance(item, dict) else None
                    if tpl:
                        templates[tpl] = None
            except Exception as e:
                self.log.warning(f"Unreadable assort for trader {trader_id}: {e}")

        for tpl in templates:
            price = self.price_cache.lookup(db, tpl)
            if price and price > 0:
                self.baseline_prices[tpl] = price

        self.log.info(f"Built baselines for {len(self.baseline_prices)} items")

    # ── Pricing ─────────────────────────────────────────────

    def draw_multiplier(self) -> float:
        """Next RNG value mapped linearly onto [min_multiplier, max_multiplier]."""
        lo = self.config.min_multiplier
        hi = self.config.max_multiplier
        return self.rng.next() * (hi - lo) + lo

    def randomize_price(self, baseline: float) -> int:
        """baseline * multiplier, clamped to the absolute bounds, rounded."""
        price = baseline * self.draw_multiplier()
        if self.config.min_absolute > 0:
            price = max(price, self.config.min_absolute)
        if self.config.max_absolute > 0:
            price = min(price, self.config.max_absolute)
        return max(0, round_price(price, self.config.rounding))

    def convert_currency(self, db, amount: float, currency_tpl: str) -> Optional[int]:
        """Base-currency amount -> units of currency_tpl, or None."""
        if currency_tpl not in self.currency_rates:
            rate = self.price_cache.lookup(db, currency_tpl)
            self.currency_rates[currency_tpl] = rate or None

        rate = self.currency_rates[currency_tpl]
        if not rate or rate <= 0:
            return None

        converted = amount / rate
        if not math.isfinite(converted):
            return None
        return round_price(converted, self.config.currency_rounding)

    # ── Offers ──────────────────────────────────────────────

    def find_currency_offer(self, offers) -> Optional[dict]:
        """The offer paid in a configured currency; base currency first."""
        if not isinstance(offers, list):
            return None
        candidates = [o for o in offers if isinstance(o, dict) and o.get("_tpl")]
        base_tpl = self.config.base_currency_tpl
        for offer in candidates:
            if offer["_tpl"] == base_tpl:
                return offer
        currencies = self.config.currency_ids()
        for offer in candidates:
            if offer["_tpl"] in currencies:
                return offer
        return None

    def update_offer(self, offers, price: int, db) -> bool:
        """Write price into the right offer of one scheme. True if written."""
        if self.config.only_cash_trades:
            target = self.find_currency_offer(offers)
        else:
            # First slot regardless of kind; may be a barter ingredient
            target = offers[0] if isinstance(offers, list) and offers else None
        if not isinstance(target, dict):
            return False

        if target.get("_tpl") == self.config.base_currency_tpl:
            target["count"] = max(1, price)
            return True

        converted = None
        if self.config.currency_conversion_enabled:
            converted = self.convert_currency(db, price, target.get("_tpl"))
        target["count"] = max(1, converted or math.floor(price))
        return True

    # ── Traders ─────────────────────────────────────────────

    def discover_traders(self, db) -> List[str]:
        """Trader ids whose nickname contains a known AIO pattern."""
        found = []
        for trader in db.iter_traders():
            nickname = trader.nickname.lower()
            if any(p in nickname for p in DISCOVERY_NICKNAME_PATTERNS):
                found.append(trader.id)
        if self.config.debug:
            self.log.debug(f"Auto-discovered {len(found)} traders")
        return found

    def process_trader(self, trader, db) -> int:
        """Reprice one trader's assort. Returns the number of offers written."""
        updated = 0
        for item in trader.items:
            if not isinstance(item, dict):
                continue
            tpl, item_id = item.get("_tpl"), item.get("_id")
            if not tpl or not item_id:
                continue

            baseline = self.baseline_prices.get(tpl)
            if not baseline or baseline <= 0:
                continue

            # One RNG step per priced assort entry, offers or not
            new_price = self.randomize_price(baseline)
            offers = trader.offers_for(item_id)
            if not offers:
                continue
            if self.update_offer(offers, new_price, db):
                updated += 1

        if updated > 0 and self.config.debug:
            name = trader.nickname or "Unknown"
            self.log.info(f"{name}: updated {updated} offers")
        return updated
