from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Hashable, Tuple

ZERO = Decimal("0")


def to_amount(value: object) -> Decimal:
    """Coerce ``value`` to a finite :class:`Decimal`.

    Floats go through ``str`` so ``1.25`` stays ``Decimal("1.25")`` rather than
    the binary approximation. Booleans are rejected.
    """

    if isinstance(value, bool):
        raise ValueError(f"price must be numeric, got {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.replace("$", "").replace(",", "").strip()
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"price must be numeric, got {value!r}") from None
    else:
        raise ValueError(f"price must be numeric, got {value!r}")
    if not amount.is_finite():
        raise ValueError(f"price must be finite, got {value!r}")
    return amount


def to_quantity(value: object) -> int:
    """Coerce ``value`` to a whole-number quantity (sign is not checked)."""

    if isinstance(value, bool):
        raise ValueError(f"quantity must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return int(value)
    if isinstance(value, str):
        # spreadsheets hand back whole numbers as "4.0"
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"quantity must be an integer, got {value!r}") from None
        if number.is_finite() and number == number.to_integral_value():
            return int(number)
    raise ValueError(f"quantity must be an integer, got {value!r}")


@dataclass(frozen=True)
class PricingTier:
    """Every group of ``quantity`` units costs ``price``."""

    quantity: int
    price: Decimal

    @property
    def is_unit(self) -> bool:
        return self.quantity == 1

    def cheaper_per_unit_than(self, other: "PricingTier") -> bool:
        """True when this tier's per-unit price is at most ``other``'s."""

        # cross-multiplied so no division or rounding is involved
        return self.price * other.quantity <= other.price * self.quantity


@dataclass(frozen=True)
class LineTotal:
    """How the scanned quantity of one SKU was priced."""

    item_code: Hashable
    quantity: int
    price: Decimal
    groups: Tuple[Tuple[PricingTier, int], ...] = ()

    @property
    def bulk_units(self) -> int:
        return sum(tier.quantity * count for tier, count in self.groups if not tier.is_unit)


__all__ = ["ZERO", "PricingTier", "LineTotal", "to_amount", "to_quantity"]
