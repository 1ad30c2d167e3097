from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Hashable, List, Mapping, Optional, Sequence

from .errors import UnknownItemError
from .models import LineTotal
from .price_table import PriceTable
from .rules import load_price_table, parse_rules
from .terminal import Terminal

logger = logging.getLogger(__name__)


@dataclass
class CheckoutOptions:
    codes: Sequence[Hashable] = ()
    prices_path: Optional[Path] = None
    rules: Optional[Mapping] = None
    require_greedy_optimal: bool = True
    stop_on_unknown: bool = False


@dataclass(frozen=True)
class CheckoutResult:
    total: Decimal
    lines: List[LineTotal] = field(default_factory=list)
    rejected: List[Hashable] = field(default_factory=list)


def resolve_table(options: CheckoutOptions) -> PriceTable:
    """Build the price table from inline ``rules`` or, failing that, ``prices_path``."""

    if options.rules is not None:
        return PriceTable.build(
            parse_rules(options.rules), require_greedy_optimal=options.require_greedy_optimal
        )
    if options.prices_path is None:
        raise ValueError("either rules or prices_path must be provided")
    return load_price_table(options.prices_path, require_greedy_optimal=options.require_greedy_optimal)


def checkout(options: CheckoutOptions) -> CheckoutResult:
    """Programmatic interface: scan ``options.codes`` and return the priced basket.

    Unknown codes are skipped and reported in ``rejected`` unless
    ``stop_on_unknown`` is set, in which case :class:`UnknownItemError`
    propagates.
    """

    terminal = Terminal(resolve_table(options))
    rejected: List[Hashable] = []
    for code in options.codes:
        try:
            terminal.scan(code)
        except UnknownItemError:
            if options.stop_on_unknown:
                raise
            logger.warning("Rejected scan of unknown item %r", code)
            rejected.append(code)
    return CheckoutResult(total=terminal.total(), lines=terminal.breakdown(), rejected=rejected)


__all__ = ["CheckoutOptions", "CheckoutResult", "checkout", "resolve_table"]
