"""Exception hierarchy for the checkout package."""
from __future__ import annotations

from typing import Hashable, Optional


class CheckoutError(Exception):
    """Base class for every error raised by the package."""


class InvalidTierError(CheckoutError, ValueError):
    """Raised when a SKU's pricing tiers cannot form a valid price table."""

    def __init__(self, item_code: Optional[Hashable], reason: str) -> None:
        self.item_code = item_code
        self.reason = reason
        if item_code is None:
            message = reason
        else:
            message = f"invalid tiers for item {item_code!r}: {reason}"
        super().__init__(message)


class UnknownItemError(CheckoutError, LookupError):
    """Raised when an item code is not present in the price table."""

    def __init__(self, item_code: Hashable) -> None:
        self.item_code = item_code
        super().__init__(f"unknown item {item_code!r}")


class RulesFileError(CheckoutError):
    """Raised when a rules file cannot be read or parsed."""


__all__ = ["CheckoutError", "InvalidTierError", "UnknownItemError", "RulesFileError"]
