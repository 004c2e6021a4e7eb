"""
AIO Price Randomizer - Price Cache
Memoized reference-price lookups for item templates.

Lookup order is the flat price table first, then the handbook. Whatever the
answer is (including "no price"), it is cached for the rest of the process:
reference data never changes after the server has loaded its database, so a
second lookup for the same template never touches the tables again.
"""

import logging
import threading
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class PriceCache:
    """Template id -> reference price (or None), filled lazily."""

    def __init__(self):
        self._prices: Dict[str, Optional[float]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, tpl: str) -> bool:
        return tpl in self._prices

    def lookup(self, db, tpl: str) -> Optional[float]:
        """Return the positive reference price for tpl, or None.

        db is anything exposing price_sources() -> ordered PriceTables.
        Never raises: a broken table is logged and cached as "no price".
        """
        with self._lock:
            if tpl in self._prices:
                self.hits += 1
                return self._prices[tpl]
            self.misses += 1

            price = None
            try:
                for table in db.price_sources():
                    price = table.get(tpl)
                    if price:
                        break
            except Exception as e:
                logger.warning(f"Price lookup failed for {tpl}: {e}")
                price = None

            if not price or price <= 0:
                price = None
            self._prices[tpl] = price
            return price

    def clear(self):
        with self._lock:
            self._prices.clear()
            self.hits = 0
            self.misses = 0

    def get_stats(self) -> dict:
        with self._lock:
            priced = sum(1 for p in self._prices.values() if p)
            return {
                "cached": len(self._prices),
                "priced": priced,
                "unpriced": len(self._prices) - priced,
                "hits": self.hits,
                "misses": self.misses,
            }
