"""
RandomizerConfig - validated configuration for the price randomizer.

Every value the engine reads is a field here. The config loader builds one
from the merged JSON files and guarantees the invariants below before the
engine ever sees it:

  - min_multiplier <= max_multiplier
  - rounding and currency_rounding are one of ROUNDING_MODES
  - min_absolute, max_absolute >= 0 (0 means that side is unbounded)
  - seed fits in 32 unsigned bits
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from config import BASE_CURRENCY, DEFAULT_CONFIG


@dataclass
class RandomizerConfig:
    """Complete configuration for one PriceRandomizer instance."""

    # ── Switches ────────────────────────────────────────────
    enabled: bool = True
    debug: bool = False

    # ── Vendor selection ────────────────────────────────────
    auto_discover: bool = True
    trader_ids: List[str] = field(default_factory=list)

    # ── Multiplier + clamps ─────────────────────────────────
    min_multiplier: float = 0.85
    max_multiplier: float = 1.35
    min_absolute: float = 0               # 0 = no lower clamp
    max_absolute: float = 0               # 0 = no upper clamp
    rounding: str = "nearest"             # nearest | floor | ceil

    # ── Offers + currencies ─────────────────────────────────
    only_cash_trades: bool = True
    currency_tpls: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_CONFIG["currencyTpls"]))
    currency_conversion_enabled: bool = True
    currency_rounding: str = "nearest"

    # ── Baseline + scheduling ───────────────────────────────
    stick_to_baseline: bool = True
    interval_seconds: int = 3600          # 0 = run once, no repetition

    # ── Determinism ─────────────────────────────────────────
    seed: int = 0
    derived_seed: bool = False

    @property
    def base_currency_tpl(self) -> Optional[str]:
        """Item id of the base currency every baseline is priced in."""
        return self.currency_tpls.get(BASE_CURRENCY)

    def currency_ids(self) -> List[str]:
        """All configured currency item ids, in table order."""
        return list(self.currency_tpls.values())

    @classmethod
    def from_dict(cls, raw: dict) -> "RandomizerConfig":
        """Build from an already-normalized config dict (loader key names)."""
        conversion = raw.get("CurrencyConversion") or {}
        return cls(
            enabled=raw["enabled"],
            debug=raw["debug"],
            auto_discover=raw["autoDiscoverTraderIds"],
            trader_ids=list(raw["traderIds"]),
            min_multiplier=raw["minMultiplier"],
            max_multiplier=raw["maxMultiplier"],
            min_absolute=raw["minAbsolute"],
            max_absolute=raw["maxAbsolute"],
            rounding=raw["rounding"],
            only_cash_trades=raw["onlyCashTrades"],
            currency_tpls=dict(raw["currencyTpls"]),
            currency_conversion_enabled=conversion.get("enabled", True),
            currency_rounding=conversion.get("rounding", "nearest"),
            stick_to_baseline=raw["stickToBaseline"],
            interval_seconds=raw["intervalSeconds"],
            seed=raw["seed"],
            derived_seed=raw.get("_derivedSeed", False),
        )
