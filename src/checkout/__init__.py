"""Checkout terminal with per-item bulk pricing tiers."""

from .errors import CheckoutError, InvalidTierError, RulesFileError, UnknownItemError
from .models import LineTotal, PricingTier
from .price_table import PriceTable
from .terminal import Terminal

__all__ = [
    "CheckoutError",
    "InvalidTierError",
    "RulesFileError",
    "UnknownItemError",
    "LineTotal",
    "PricingTier",
    "PriceTable",
    "Terminal",
]
