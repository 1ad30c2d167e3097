"""Immutable per-SKU tier table shared by checkout terminals."""
from __future__ import annotations

from decimal import Decimal
from types import MappingProxyType
from typing import Hashable, Iterable, Iterator, Mapping, Tuple

from .errors import InvalidTierError, UnknownItemError
from .models import PricingTier, to_amount, to_quantity
from .price_logic import find_greedy_shortfall, find_per_unit_inversion, greedy_price

TierInput = Iterable[object]


def _coerce_tier(code: Hashable, raw: object) -> PricingTier:
    if isinstance(raw, PricingTier):
        quantity, price = raw.quantity, raw.price
    elif isinstance(raw, (Mapping, str, bytes)):
        raise InvalidTierError(code, f"expected a (quantity, price) pair, got {raw!r}")
    else:
        try:
            quantity, price = raw  # type: ignore[misc]
        except (TypeError, ValueError):
            raise InvalidTierError(code, f"expected a (quantity, price) pair, got {raw!r}") from None
    try:
        quantity = to_quantity(quantity)
    except ValueError as exc:
        raise InvalidTierError(code, str(exc)) from None
    try:
        price = to_amount(price)
    except ValueError as exc:
        raise InvalidTierError(code, str(exc)) from None
    if quantity <= 0:
        raise InvalidTierError(code, f"quantity must be positive, got {quantity}")
    if price < 0:
        raise InvalidTierError(code, f"price must not be negative, got {price}")
    return PricingTier(quantity=quantity, price=price)


def _build_tiers(code: Hashable, raw_tiers: TierInput, require_greedy_optimal: bool) -> Tuple[PricingTier, ...]:
    if isinstance(raw_tiers, (str, bytes)) or not isinstance(raw_tiers, Iterable):
        raise InvalidTierError(code, f"expected a sequence of tiers, got {raw_tiers!r}")
    tiers = [_coerce_tier(code, raw) for raw in raw_tiers]
    if not tiers:
        raise InvalidTierError(code, "no tiers defined")

    seen = set()
    for tier in tiers:
        if tier.quantity in seen:
            raise InvalidTierError(code, f"duplicate tier for quantity {tier.quantity}")
        seen.add(tier.quantity)
    if 1 not in seen:
        raise InvalidTierError(code, "missing unit price (quantity 1 tier)")

    ordered = tuple(sorted(tiers, key=lambda tier: tier.quantity, reverse=True))
    if require_greedy_optimal:
        inversion = find_per_unit_inversion(ordered)
        if inversion is not None:
            larger, smaller = inversion
            raise InvalidTierError(
                code,
                f"{larger.quantity} for {larger.price} costs more per unit than "
                f"{smaller.quantity} for {smaller.price}",
            )
        try:
            shortfall = find_greedy_shortfall(ordered)
        except ValueError as exc:
            raise InvalidTierError(code, f"{exc}; build with require_greedy_optimal=False to accept it") from None
        if shortfall is not None:
            quantity, greedy, cheapest = shortfall
            raise InvalidTierError(
                code,
                f"overlapping tiers: {quantity} units price at {greedy} largest-tier-first "
                f"but can be bought for {cheapest}",
            )
    return ordered


class PriceTable:
    """Read-only mapping of item code to tiers ordered by descending quantity.

    Build instances with :meth:`build`; the table never changes afterwards and
    may be shared by any number of :class:`~checkout.terminal.Terminal`
    objects.
    """

    __slots__ = ("_tiers",)

    def __init__(self, tiers: Mapping[Hashable, Tuple[PricingTier, ...]]) -> None:
        self._tiers = MappingProxyType(dict(tiers))

    @classmethod
    def build(
        cls,
        rules: Mapping[Hashable, TierInput],
        *,
        require_greedy_optimal: bool = True,
    ) -> "PriceTable":
        """Validate ``rules`` and return a new table.

        ``rules`` maps each item code to ``(quantity, price)`` pairs or
        :class:`PricingTier` instances in any order. With
        ``require_greedy_optimal`` (the default) tables whose largest-tier-first
        price is not the cheapest price are rejected as well; pass ``False``
        to keep such tables and price them greedily anyway.
        """

        if not isinstance(rules, Mapping):
            raise InvalidTierError(None, f"rules must be a mapping of item code to tiers, got {type(rules).__name__}")
        tiers = {
            code: _build_tiers(code, raw_tiers, require_greedy_optimal)
            for code, raw_tiers in rules.items()
        }
        return cls(tiers)

    def tiers_for(self, code: Hashable) -> Tuple[PricingTier, ...]:
        try:
            return self._tiers[code]
        except (KeyError, TypeError):
            raise UnknownItemError(code) from None

    def unit_price(self, code: Hashable) -> Decimal:
        return self.tiers_for(code)[-1].price

    def price_for(self, code: Hashable, quantity: int) -> Decimal:
        """Greedy price of ``quantity`` units of ``code``."""

        if quantity < 0:
            raise ValueError(f"quantity must not be negative, got {quantity}")
        return greedy_price(self.tiers_for(code), quantity)

    @property
    def codes(self) -> Tuple[Hashable, ...]:
        return tuple(self._tiers)

    def __contains__(self, code: object) -> bool:
        try:
            return code in self._tiers
        except TypeError:
            return False

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._tiers)

    def __len__(self) -> int:
        return len(self._tiers)

    def __repr__(self) -> str:
        return f"PriceTable({len(self._tiers)} items)"


__all__ = ["PriceTable"]
