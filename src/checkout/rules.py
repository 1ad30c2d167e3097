"""Parse pricing rules from the compact notation and from rule files."""
from __future__ import annotations

import json
import logging
import zipfile
from decimal import Decimal
from pathlib import Path
from typing import Dict, Hashable, List, Mapping, Optional, Tuple

import pandas as pd

from .errors import InvalidTierError, RulesFileError
from .price_table import PriceTable

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("ITEM_CODE", "QUANTITY", "PRICE")
_QUANTITY_KEYS = ("min", "quantity", "qty")

RawTier = Tuple[object, object]

_READ_ERRORS = (
    OSError,
    UnicodeDecodeError,
    zipfile.BadZipFile,
    pd.errors.EmptyDataError,
    pd.errors.ParserError,
)


def _is_scalar(value: object) -> bool:
    return isinstance(value, (int, float, str, Decimal)) and not isinstance(value, bool)


def _tier_from_mapping(entry: Mapping, code: Optional[Hashable]) -> RawTier:
    if "price" not in entry:
        raise InvalidTierError(code, f"tier {dict(entry)!r} has no price")
    quantity: object = 1
    for key in _QUANTITY_KEYS:
        if key in entry:
            quantity = entry[key]
            break
    return quantity, entry["price"]


def parse_tiers(spec: object, code: Optional[Hashable] = None) -> List[RawTier]:
    """
    Expand one SKU's compact price notation into ``(quantity, price)`` pairs.

    Accepted forms::

        "0.15"                                   unit price only
        [{"price": 2}, {"min": 4, "price": 7}]   unit price plus bulk tiers
        [[1, 2], [4, 7]]                         explicit pairs
        {"price": 2, "bulk": [{"min": 4, "price": 7}]}

    The pairs are returned unvalidated; :meth:`PriceTable.build` checks them.
    """

    if _is_scalar(spec):
        return [(1, spec)]
    if isinstance(spec, Mapping):
        if "bulk" in spec:
            head = [(1, spec["price"])] if "price" in spec else []
            return head + parse_tiers(spec["bulk"], code)
        return [_tier_from_mapping(spec, code)]
    if isinstance(spec, (list, tuple)):
        tiers: List[RawTier] = []
        for entry in spec:
            if isinstance(entry, Mapping):
                tiers.append(_tier_from_mapping(entry, code))
            elif isinstance(entry, (list, tuple)) and len(entry) == 2:
                tiers.append((entry[0], entry[1]))
            else:
                raise InvalidTierError(code, f"cannot read tier {entry!r}")
        return tiers
    raise InvalidTierError(code, f"cannot read price rule {spec!r}")


def parse_rules(raw: Mapping) -> Dict[Hashable, List[RawTier]]:
    """Apply :func:`parse_tiers` to every entry of a code -> notation mapping."""

    return {code: parse_tiers(spec, code) for code, spec in raw.items()}


def _normalize_columns(frame: pd.DataFrame) -> pd.DataFrame:
    renamed = {col: str(col).strip().upper().replace(" ", "_") for col in frame.columns}
    return frame.rename(columns=renamed)


def rules_from_frame(frame: pd.DataFrame) -> Dict[Hashable, List[RawTier]]:
    """Group ``ITEM_CODE``/``QUANTITY``/``PRICE`` rows into per-code tier lists."""

    frame = _normalize_columns(frame)
    missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
    if missing:
        raise RulesFileError(f"rules table is missing column(s): {', '.join(missing)}")

    rules: Dict[Hashable, List[RawTier]] = {}
    for row in frame.loc[:, list(REQUIRED_COLUMNS)].itertuples(index=False):
        code = str(row.ITEM_CODE).strip()
        if not code:
            continue
        rules.setdefault(code, []).append((row.QUANTITY, row.PRICE))
    return rules


def _read_json(path: Path) -> Dict[Hashable, List[RawTier]]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"), parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise RulesFileError(f"invalid JSON in rules file '{path}': {exc}") from exc
    if isinstance(payload, Mapping) and isinstance(payload.get("prices"), Mapping):
        payload = payload["prices"]
    if not isinstance(payload, Mapping):
        raise RulesFileError(f"rules file '{path}' must hold an object of item code -> prices")
    return parse_rules(payload)


def load_rules(path: Path) -> Dict[Hashable, List[RawTier]]:
    """Read a ``.json``, ``.csv`` or ``.xlsx`` rules file into tier pairs.

    Unreadable files (missing, directories, bad encoding, empty or malformed
    tables) raise :class:`RulesFileError`.
    """

    path = Path(path)
    if not path.exists():
        raise RulesFileError(f"rules file '{path}' not found")

    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            rules = _read_json(path)
        elif suffix == ".csv":
            rules = rules_from_frame(pd.read_csv(path, dtype=str, keep_default_na=False))
        elif suffix in {".xlsx", ".xls"}:
            rules = rules_from_frame(pd.read_excel(path, dtype=str, keep_default_na=False))
        else:
            raise RulesFileError(f"unsupported rules file type '{suffix}' ({path})")
    except _READ_ERRORS as exc:
        raise RulesFileError(f"unable to read rules file '{path}': {exc}") from exc

    logger.debug("Loaded %d item rule(s) from %s", len(rules), path)
    return rules


def load_price_table(path: Path, **build_kwargs) -> PriceTable:
    return PriceTable.build(load_rules(path), **build_kwargs)


__all__ = [
    "REQUIRED_COLUMNS",
    "parse_tiers",
    "parse_rules",
    "rules_from_frame",
    "load_rules",
    "load_price_table",
]
