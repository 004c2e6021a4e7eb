"""
AIO Price Randomizer core - deterministic trader price randomization.

Usage:
    from core import PriceRandomizer, RandomizerConfig
    from database import Database

    engine = PriceRandomizer(RandomizerConfig(seed=1234))
    result = engine.run_cycle(Database(tables))
"""

from core.randomizer_config import RandomizerConfig
from core.price_engine import CycleResult, PriceRandomizer, round_price

__all__ = [
    "CycleResult",
    "PriceRandomizer",
    "RandomizerConfig",
    "round_price",
]
