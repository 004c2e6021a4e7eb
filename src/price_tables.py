"""
Reference price tables.

The server hands us price data in two shapes, and uses a handful of field
names for the same thing:

    templates.prices           {tpl: 1234}  or  {tpl: {"Price": "1234"}}
                               or [{"Id": tpl, "Price": 1234}, ...]
    templates.handbook.Items   [{"Id": tpl, "Price": 1234}, ...]
                               or {tpl: {"price": 1234}}

PriceTable hides all of that behind get(tpl) -> positive float or None, so
PriceCache never has to sniff shapes itself.
"""

import logging
import math
from typing import Any, Dict, Iterable, Optional

from config import HANDBOOK_PRICE_FIELDS, ID_FIELDS, PRICE_FIELDS

logger = logging.getLogger(__name__)


def coerce_price(value: Any) -> Optional[float]:
    """Numeric or numeric-string value -> positive finite float, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


class PriceTable:
    """Read-only id -> price view over one raw reference table."""

    def __init__(self, raw: Any, name: str = "prices",
                 price_fields: Iterable[str] = PRICE_FIELDS):
        self.name = name
        self.price_fields = tuple(price_fields)
        self._raw = raw
        self._index: Optional[Dict[str, Any]] = None  # list shape, built on first use

    @classmethod
    def handbook(cls, raw: Any) -> "PriceTable":
        return cls(raw, name="handbook", price_fields=HANDBOOK_PRICE_FIELDS)

    def get(self, tpl: str) -> Optional[float]:
        """Price for tpl, or None when missing, malformed or non-positive."""
        if not self._raw:
            return None
        try:
            entry = self._find(tpl)
            if entry is None:
                return None
            return self._extract(entry)
        except Exception as e:
            logger.warning(f"{self.name}: malformed entry for {tpl}: {e}")
            return None

    def _find(self, tpl: str) -> Any:
        if isinstance(self._raw, dict):
            return self._raw.get(tpl)
        if isinstance(self._raw, list):
            if self._index is None:
                self._index = self._build_index(self._raw)
            return self._index.get(tpl)
        raise TypeError(f"unsupported table type {type(self._raw).__name__}")

    def _build_index(self, records: list) -> Dict[str, Any]:
        """First record wins for duplicate ids, same as a linear scan."""
        index: Dict[str, Any] = {}
        skipped = 0
        for rec in records:
            if not isinstance(rec, dict):
                skipped += 1
                continue
            for key in ID_FIELDS:
                rid = rec.get(key)
                if rid is not None:
                    index.setdefault(str(rid), rec)
                    break
            else:
                skipped += 1
        if skipped:
            logger.debug(f"{self.name}: skipped {skipped} records without an id")
        return index

    def _extract(self, entry: Any) -> Optional[float]:
        # Flat map: {tpl: 1234}
        if not isinstance(entry, dict):
            return coerce_price(entry)
        for field_name in self.price_fields:
            value = entry.get(field_name)
            if value:
                return coerce_price(value)
        return None
