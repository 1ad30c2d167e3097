from __future__ import annotations

import heapq
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from .models import ZERO, PricingTier


def apply_tiers(
    tiers: Sequence[PricingTier], quantity: int
) -> Tuple[Decimal, Tuple[Tuple[PricingTier, int], ...]]:
    """
    Price ``quantity`` units with greedy largest-tier-first grouping.

    Parameters
    ----------
    tiers:
        Tiers for a single SKU ordered by descending quantity. The last tier
        must be the unit tier so every remainder can be consumed.
    quantity:
        Number of scanned units (zero or more).

    Returns
    -------
    tuple
        ``(price, groups)`` where ``groups`` lists each tier used together
        with how many full groups of it were charged.
    """

    remaining = quantity
    price = ZERO
    groups: List[Tuple[PricingTier, int]] = []
    for tier in tiers:
        if remaining == 0:
            break
        count, remaining = divmod(remaining, tier.quantity)
        if count:
            price += tier.price * count
            groups.append((tier, count))
    if remaining:
        raise ValueError(f"{remaining} unit(s) left unpriced; tier list has no unit tier")
    return price, tuple(groups)


def greedy_price(tiers: Sequence[PricingTier], quantity: int) -> Decimal:
    return apply_tiers(tiers, quantity)[0]


# Largest tier quantity the residue search will walk; beyond it only
# divisible tier chains can be verified.
GREEDY_CHECK_MAX_QUANTITY = 100_000


def _descending(tiers: Sequence[PricingTier]) -> List[PricingTier]:
    return sorted(tiers, key=lambda tier: tier.quantity, reverse=True)


def is_divisible_chain(tiers: Sequence[PricingTier]) -> bool:
    """True when every tier quantity divides the next larger one."""

    ordered = _descending(tiers)
    return all(larger.quantity % smaller.quantity == 0 for larger, smaller in zip(ordered, ordered[1:]))


def can_verify_greedy(tiers: Sequence[PricingTier]) -> bool:
    ordered = _descending(tiers)
    return is_divisible_chain(ordered) or ordered[0].quantity <= GREEDY_CHECK_MAX_QUANTITY


def find_per_unit_inversion(
    tiers: Sequence[PricingTier],
) -> Optional[Tuple[PricingTier, PricingTier]]:
    """Return ``(larger, smaller)`` where the larger tier costs more per unit."""

    ordered = _descending(tiers)
    for i, larger in enumerate(ordered):
        for smaller in ordered[i + 1:]:
            if not larger.cheaper_per_unit_than(smaller):
                return larger, smaller
    return None


def _cheapest_by_residue(ordered: Sequence[PricingTier]) -> List[Tuple[Decimal, int, Decimal]]:
    """Shortest paths over the residues modulo the largest tier quantity.

    A group of ``q`` units priced ``p`` moves from residue ``r`` to
    ``(r + q) % q_max`` at reduced cost ``p * q_max - q * p_max``, which is the
    amount it costs above the largest tier's rate. Entries are
    ``(reduced_cost, units, price)`` of the cheapest combination found.
    """

    top, rest = ordered[0], ordered[1:]
    modulus = top.quantity
    best: List[Optional[Tuple[Decimal, int, Decimal]]] = [None] * modulus
    best[0] = (ZERO, 0, ZERO)
    settled = [False] * modulus
    heap = [(ZERO, 0, 0, ZERO)]
    while heap:
        reduced, units, residue, price = heapq.heappop(heap)
        if settled[residue]:
            continue
        settled[residue] = True
        for tier in rest:
            target = (residue + tier.quantity) % modulus
            candidate = (
                reduced + tier.price * modulus - tier.quantity * top.price,
                units + tier.quantity,
                price + tier.price,
            )
            current = best[target]
            if current is None or candidate[:2] < current[:2]:
                best[target] = candidate
                heapq.heappush(heap, (candidate[0], candidate[1], target, candidate[2]))
    return best  # type: ignore[return-value]


def find_greedy_shortfall(
    tiers: Sequence[PricingTier],
) -> Optional[Tuple[int, Decimal, Decimal]]:
    """
    Return ``(quantity, greedy, cheaper)`` for a quantity greedy overprices.

    Assumes per-unit prices never rise for larger tiers (see
    :func:`find_per_unit_inversion`). Any split of ``n`` units then costs
    ``(n * p_max + reduced) / q_max``, and extra largest-tier groups add no
    reduced cost, so greedy is cheapest for every quantity exactly when, for
    each residue modulo ``q_max``, the greedy remainder is the cheapest
    combination of smaller tiers reaching that residue. Divisible tier chains
    always pass and are accepted without the search.

    Raises
    ------
    ValueError
        If the search would exceed :data:`GREEDY_CHECK_MAX_QUANTITY` residues.
    """

    ordered = _descending(tiers)
    if len(ordered) < 2 or is_divisible_chain(ordered):
        return None
    if not can_verify_greedy(ordered):
        raise ValueError(
            f"cannot verify greedy pricing for a {ordered[0].quantity} unit tier "
            f"(limit {GREEDY_CHECK_MAX_QUANTITY} for tiers that do not divide each other)"
        )

    top, rest = ordered[0], ordered[1:]
    best = _cheapest_by_residue(ordered)
    for residue in range(1, top.quantity):
        reduced, units, price = best[residue]
        greedy_reduced = greedy_price(rest, residue) * top.quantity - residue * top.price
        if greedy_reduced > reduced:
            return units, greedy_price(ordered, units), price
    return None


__all__ = [
    "GREEDY_CHECK_MAX_QUANTITY",
    "apply_tiers",
    "greedy_price",
    "is_divisible_chain",
    "can_verify_greedy",
    "find_per_unit_inversion",
    "find_greedy_shortfall",
]
