"""
config_loader.py - Find, merge and validate the randomizer config.

Layers, lowest priority first:
    1. DEFAULT_CONFIG (config.py)
    2. config.defaults.json / defaults.json in the mod directory
    3. config/config.json / config.json, searched upward from the mod
       directory (or an explicit path from --config / PRICE_RANDOMIZER_CONFIG)

Anything malformed falls back to the default for that key; only an explicit
path that cannot be read raises ConfigError.
"""

import copy
import hashlib
import json
import logging
import math
from pathlib import Path
from typing import List, Optional, Tuple

from config import (
    CONFIG_PATH_OVERRIDE,
    DEFAULT_CONFIG,
    DEFAULTS_FILENAMES,
    ROUNDING_MODES,
    USER_CONFIG_FILENAMES,
    USER_CONFIG_MAX_DEPTH,
)
from core.randomizer_config import RandomizerConfig

logger = logging.getLogger(__name__)

_NESTED_KEYS = ("currencyTpls", "CurrencyConversion")


class ConfigError(Exception):
    """An explicitly requested config file could not be used."""


def find_config_file(start_dir: Path, filenames: List[str],
                     max_depth: int = USER_CONFIG_MAX_DEPTH) -> Tuple[Optional[Path], List[Path]]:
    """Search start_dir and up to max_depth parents for the first match.

    Returns (found_path or None, every path tried in order).
    """
    current = Path(start_dir or Path.cwd()).resolve()
    tried: List[Path] = []
    for _ in range(max_depth + 1):
        for filename in filenames:
            candidate = current / filename
            tried.append(candidate)
            if candidate.exists():
                return candidate, tried
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None, tried


def read_json_file(path: Path) -> Optional[dict]:
    """Parse a JSON object file; log and return None on any failure."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to parse {path}: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"Ignoring {path}: top level is not an object")
        return None
    return data


def merge_config(base: dict, override: dict) -> dict:
    """Shallow merge; nested objects are merged one level deep."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict):
            current = base.get(key)
            nested = dict(current) if isinstance(current, dict) else {}
            nested.update(value)
            result[key] = nested
        else:
            result[key] = value
    return result


def derive_seed(min_multiplier: float, max_multiplier: float, trader_ids: List[str]) -> int:
    """First 32 bits of md5 over the settings that shape the price sequence."""
    seed_data = json.dumps(
        {
            "minMultiplier": _js_number(min_multiplier),
            "maxMultiplier": _js_number(max_multiplier),
            "traderIds": trader_ids,
        },
        separators=(",", ":"),
        ensure_ascii=False,
    )
    digest = hashlib.md5(seed_data.encode("utf-8")).hexdigest()
    return int(digest[:8], 16)


def _js_number(value: float):
    # integral floats are hashed as ints (1.0 -> 1)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _to_number(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


def normalize_config(config: dict) -> dict:
    """Coerce types, clamp ranges and fill in the seed. Mutates and returns config."""
    for key in ("enabled", "autoDiscoverTraderIds", "onlyCashTrades",
                "stickToBaseline", "debug"):
        config[key] = bool(config.get(key))

    # Trader ids: strings, non-empty, unique, order kept
    ids = config.get("traderIds")
    if not isinstance(ids, list):
        ids = []
    config["traderIds"] = list(dict.fromkeys(
        str(i) for i in ids if i is not None and str(i)))

    # Multipliers: zero or junk falls back to the default
    for key in ("minMultiplier", "maxMultiplier"):
        config[key] = _to_number(config.get(key)) or DEFAULT_CONFIG[key]
    if config["minMultiplier"] > config["maxMultiplier"]:
        config["minMultiplier"], config["maxMultiplier"] = (
            config["maxMultiplier"], config["minMultiplier"])

    # 0 is kept: it means "run once, never repeat"
    interval = _to_number(config.get("intervalSeconds"))
    if interval is None:
        interval = DEFAULT_CONFIG["intervalSeconds"]
    config["intervalSeconds"] = abs(math.floor(interval))

    if config.get("rounding") not in ROUNDING_MODES:
        config["rounding"] = DEFAULT_CONFIG["rounding"]
    conversion = config["CurrencyConversion"]
    conversion["enabled"] = bool(conversion.get("enabled"))
    if conversion.get("rounding") not in ROUNDING_MODES:
        conversion["rounding"] = DEFAULT_CONFIG["CurrencyConversion"]["rounding"]

    # Absolute bounds: 0 = unbounded
    for key in ("minAbsolute", "maxAbsolute"):
        config[key] = max(0, _to_number(config.get(key)) or 0)
    if config["maxAbsolute"] > 0 and config["minAbsolute"] > config["maxAbsolute"]:
        config["minAbsolute"], config["maxAbsolute"] = (
            config["maxAbsolute"], config["minAbsolute"])

    config["currencyTpls"] = {
        str(k): str(v) for k, v in config["currencyTpls"].items() if v}

    seed = config.get("seed")
    numeric_seed = _to_number(seed)
    if seed is not None and numeric_seed is None:
        logger.warning("Invalid seed provided, deriving from config")
    if numeric_seed is None:
        config["seed"] = derive_seed(
            config["minMultiplier"], config["maxMultiplier"], config["traderIds"])
        config["_derivedSeed"] = True
        if config["debug"]:
            logger.debug(f"Derived seed: {config['seed']}")
    else:
        config["seed"] = math.floor(abs(numeric_seed)) & 0xFFFFFFFF
        config["_derivedSeed"] = False

    return config


def load_config(mod_dir: Path, config_path: Optional[Path] = None) -> Tuple[RandomizerConfig, List[Path]]:
    """Resolve and validate the config for a mod directory.

    Returns (RandomizerConfig, paths tried for the user config).
    Raises ConfigError if config_path is given explicitly but unusable.
    """
    mod_dir = Path(mod_dir)

    defaults_path, _ = find_config_file(mod_dir, DEFAULTS_FILENAMES, max_depth=0)
    file_defaults = read_json_file(defaults_path) if defaults_path else None
    if file_defaults:
        logger.info(f"Loaded defaults from {defaults_path}")

    explicit = config_path or (Path(CONFIG_PATH_OVERRIDE) if CONFIG_PATH_OVERRIDE else None)
    if explicit:
        tried = [Path(explicit)]
        if not Path(explicit).exists():
            raise ConfigError(f"Config file not found: {explicit}")
        user_config = read_json_file(explicit)
        if user_config is None:
            raise ConfigError(f"Config file is not a valid JSON object: {explicit}")
        logger.info(f"Loaded user config from {explicit}")
    else:
        found, tried = find_config_file(mod_dir, USER_CONFIG_FILENAMES)
        user_config = read_json_file(found) if found else None
        if user_config:
            logger.info(f"Loaded user config from {found}")
        else:
            searched = ", ".join(str(p) for p in tried[:5])
            logger.warning(f"No user config found (searched: {searched})")

    merged = copy.deepcopy(DEFAULT_CONFIG)
    merged = merge_config(merged, file_defaults or {})
    merged = merge_config(merged, user_config or {})

    # A non-object nested override would have replaced the whole block
    for key in _NESTED_KEYS:
        if not isinstance(merged.get(key), dict):
            merged[key] = dict(DEFAULT_CONFIG[key])

    raw = normalize_config(merged)
    return RandomizerConfig.from_dict(raw), tried
