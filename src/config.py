"""
AIO Price Randomizer - Configuration
All tunable constants in one place.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

# ─────────────────────────────────────────────
# Version
# ─────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent
_version_file = PROJECT_ROOT / "resources" / "VERSION"
APP_VERSION = _version_file.read_text().strip() if _version_file.exists() else "dev"

MOD_NAME = "AIOPriceRandomizer"

# ─────────────────────────────────────────────
# Config file discovery
# ─────────────────────────────────────────────
# Defaults file is only looked for in the mod directory itself
DEFAULTS_FILENAMES = ["config.defaults.json", "defaults.json"]

# User config is searched from the mod directory upward
USER_CONFIG_FILENAMES = [str(Path("config") / "config.json"), "config.json"]
USER_CONFIG_MAX_DEPTH = 6

# Explicit config path (overrides the upward search when set)
CONFIG_PATH_ENV = "PRICE_RANDOMIZER_CONFIG"
CONFIG_PATH_OVERRIDE = os.environ.get(CONFIG_PATH_ENV, "")

# ─────────────────────────────────────────────
# Currencies (item template ids)
# ─────────────────────────────────────────────
RUBLE_TPL = "5449016a4bdc2d6f028b456f"
DOLLAR_TPL = "5696686a4bdc2da3298b456a"
EURO_TPL = "569668774bdc2da2298b4568"

# The base currency every baseline price is expressed in
BASE_CURRENCY = "ruble"

# ─────────────────────────────────────────────
# Randomization defaults
# ─────────────────────────────────────────────
ROUNDING_MODES = ("nearest", "floor", "ceil")

DEFAULT_CONFIG = {
    "enabled": True,
    "autoDiscoverTraderIds": True,
    "traderIds": [],
    "minMultiplier": 0.85,
    "maxMultiplier": 1.35,
    "intervalSeconds": 3600,     # 1 hour; 0 disables repetition
    "rounding": "nearest",
    "onlyCashTrades": True,
    "currencyTpls": {
        "ruble": RUBLE_TPL,
        "dollar": DOLLAR_TPL,
        "eur": EURO_TPL,
    },
    "CurrencyConversion": {
        "enabled": True,
        "rounding": "nearest",
    },
    "stickToBaseline": True,
    "minAbsolute": 0,            # 0 = unbounded
    "maxAbsolute": 0,            # 0 = unbounded
    "seed": None,                # None = derived from multipliers + trader ids
    "debug": False,
}

# ─────────────────────────────────────────────
# Vendor auto-discovery
# ─────────────────────────────────────────────
# Lowercase nickname substrings identifying compatible AIO trader mods
DISCOVERY_NICKNAME_PATTERNS = ("aio", "bluehead", "aiotrader")

# ─────────────────────────────────────────────
# Reference price tables
# ─────────────────────────────────────────────
# Field-name synonyms for "price" in the flat price table
PRICE_FIELDS = ("Price", "price", "DefaultPrice", "basePrice")

# Field-name synonyms for "price" in handbook records
HANDBOOK_PRICE_FIELDS = ("Price", "price")

# Record identifier synonyms
ID_FIELDS = ("Id", "id")

# ─────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────
LOG_LEVEL = "INFO"
LOG_FILE = Path(os.path.expanduser("~")) / ".aio-price-randomizer" / "randomizer.log"
