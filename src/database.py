"""
database.py - Adapter over the game server's in-memory database tables.

The engine only needs three things from the server: the reference price
tables, the trader collection, and write access to barter-scheme counts.
Database wraps the raw tables dict and exposes exactly that. Traders are
thin views over the raw dicts, so writing an offer count mutates the
server's own data in place.

load_dir() / dump_assorts() read and write the same layout the server
ships on disk, for running the randomizer outside the server.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from price_tables import PriceTable

logger = logging.getLogger(__name__)


class Trader:
    """View over one raw trader dict ({"base": ..., "assort": ...})."""

    def __init__(self, trader_id: str, raw: dict):
        self.id = trader_id
        self.raw = raw

    @property
    def nickname(self) -> str:
        base = self.raw.get("base") or {}
        return base.get("nickname") or ""

    @property
    def assort(self) -> dict:
        return self.raw.get("assort") or {}

    @property
    def items(self) -> list:
        return self.assort.get("items") or []

    @property
    def barter_scheme(self) -> dict:
        return self.assort.get("barter_scheme") or {}

    def offers_for(self, item_id: str) -> Optional[list]:
        """Offer list for an assort entry, or None when it has no scheme.

        Schemes are normally a list of alternative offer lists ([[...]]);
        only the first alternative carries the price.
        """
        scheme = self.barter_scheme.get(item_id)
        if not scheme:
            return None
        if isinstance(scheme, list) and isinstance(scheme[0], list):
            return scheme[0]
        return scheme

    def __repr__(self):
        return f"Trader({self.id!r}, {self.nickname!r})"


class Database:
    """Read/write access to prices, handbook and traders."""

    def __init__(self, tables: Optional[dict] = None):
        self.tables = tables if tables is not None else {}
        self._price_sources: Optional[Tuple[PriceTable, ...]] = None

    # ── Reference data ───────────────────────────────

    @property
    def templates(self) -> dict:
        return self.tables.get("templates") or {}

    def price_sources(self) -> Tuple[PriceTable, ...]:
        """Price tables in lookup order: flat prices, then handbook."""
        if self._price_sources is None:
            templates = self.templates
            handbook = templates.get("handbook") or {}
            items = handbook.get("Items") if isinstance(handbook, dict) else None
            self._price_sources = (
                PriceTable(templates.get("prices")),
                PriceTable.handbook(items),
            )
        return self._price_sources

    # ── Traders ──────────────────────────────────────

    @property
    def traders(self) -> Dict[str, Any]:
        return self.tables.get("traders") or {}

    def get_trader(self, trader_id: str) -> Optional[Trader]:
        raw = self.traders.get(trader_id)
        if not raw or not isinstance(raw, dict):
            return None
        return Trader(trader_id, raw)

    def iter_traders(self) -> Iterator[Trader]:
        for trader_id, raw in self.traders.items():
            if isinstance(raw, dict):
                yield Trader(trader_id, raw)

    def trader_count(self) -> int:
        return len(self.traders)

    # ── Disk layout ──────────────────────────────────

    @classmethod
    def load_dir(cls, db_dir: Path) -> "Database":
        """Load templates/prices.json, templates/handbook.json and traders/*/."""
        db_dir = Path(db_dir)
        templates: Dict[str, Any] = {}
        for name in ("prices", "handbook"):
            data = _read_json(db_dir / "templates" / f"{name}.json")
            if data is not None:
                templates[name] = data

        traders: Dict[str, Any] = {}
        traders_dir = db_dir / "traders"
        if traders_dir.is_dir():
            for tdir in sorted(p for p in traders_dir.iterdir() if p.is_dir()):
                base = _read_json(tdir / "base.json")
                assort = _read_json(tdir / "assort.json")
                if base is None and assort is None:
                    continue
                traders[tdir.name] = {"base": base or {}, "assort": assort or {}}
        else:
            logger.warning(f"No traders directory under {db_dir}")

        logger.info(f"Loaded database from {db_dir}: {len(traders)} traders")
        return cls({"templates": templates, "traders": traders})

    def dump_assorts(self, db_dir: Path) -> List[Path]:
        """Write every trader's assort back to traders/<id>/assort.json."""
        written = []
        for trader in self.iter_traders():
            path = Path(db_dir) / "traders" / trader.id / "assort.json"
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(trader.assort, indent=2), encoding="utf-8")
            written.append(path)
        logger.info(f"Wrote {len(written)} assorts to {db_dir}")
        return written


def _read_json(path: Path) -> Any:
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to read {path}: {e}")
        return None
