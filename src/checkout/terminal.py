"""Point-of-sale terminal that tallies scans and prices them."""
from __future__ import annotations

from decimal import Decimal
from typing import Dict, Hashable, Iterable, List, Mapping

from .errors import UnknownItemError
from .models import ZERO, LineTotal
from .price_logic import apply_tiers
from .price_table import PriceTable, TierInput


class Terminal:
    """Accumulates scanned item codes against a shared :class:`PriceTable`.

    Each SKU's quantity is priced largest tier first: as many full groups of
    the biggest tier as fit, then the next one down with the remainder, ending
    with the unit price. That is only the cheapest price when larger tiers
    never cost more per unit and tiers do not overlap; ``PriceTable.build``
    checks this unless told otherwise.

    One writer per terminal. The table itself is read-only and safe to share.
    """

    def __init__(self, table: PriceTable) -> None:
        self._table = table
        self._tally: Dict[Hashable, int] = {}

    @classmethod
    def from_rules(cls, rules: Mapping[Hashable, TierInput], **build_kwargs) -> "Terminal":
        """Build a price table from ``rules`` and bind a new terminal to it."""
        return cls(PriceTable.build(rules, **build_kwargs))

    @property
    def table(self) -> PriceTable:
        return self._table

    @property
    def scanned(self) -> Dict[Hashable, int]:
        return dict(self._tally)

    @property
    def is_empty(self) -> bool:
        return not self._tally

    def count(self, code: Hashable) -> int:
        return self._tally.get(code, 0)

    def scan(self, code: Hashable) -> None:
        """Add one unit of ``code``; unknown codes raise and change nothing."""
        if code not in self._table:
            raise UnknownItemError(code)
        self._tally[code] = self._tally.get(code, 0) + 1

    def scan_many(self, codes: Iterable[Hashable]) -> None:
        """Scan every code in ``codes``, or none of them if any is unknown."""
        batch = list(codes)
        for code in batch:
            if code not in self._table:
                raise UnknownItemError(code)
        for code in batch:
            self._tally[code] = self._tally.get(code, 0) + 1

    def breakdown(self) -> List[LineTotal]:
        lines = []
        for code, quantity in self._tally.items():
            price, groups = apply_tiers(self._table.tiers_for(code), quantity)
            lines.append(LineTotal(item_code=code, quantity=quantity, price=price, groups=groups))
        lines.sort(key=lambda line: str(line.item_code))
        return lines

    def total(self) -> Decimal:
        total = ZERO
        for code, quantity in self._tally.items():
            total += apply_tiers(self._table.tiers_for(code), quantity)[0]
        return total

    def __repr__(self) -> str:
        return f"Terminal(items={sum(self._tally.values())}, skus={len(self._tally)})"


__all__ = ["Terminal"]
