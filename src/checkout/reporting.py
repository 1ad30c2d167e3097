from __future__ import annotations

from decimal import Decimal
from typing import Sequence

import pandas as pd

from .models import LineTotal

BREAKDOWN_COLUMNS = ["ITEM_CODE", "QUANTITY", "BULK_UNITS", "TIERS", "LINE_TOTAL"]


def format_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"


def _describe_groups(line: LineTotal) -> str:
    return " + ".join(
        f"{count}x({tier.quantity} for {format_amount(tier.price)})" for tier, count in line.groups
    )


def breakdown_frame(lines: Sequence[LineTotal]) -> pd.DataFrame:
    """One row per scanned SKU with the tiers that priced it."""

    rows = [
        {
            "ITEM_CODE": str(line.item_code),
            "QUANTITY": line.quantity,
            "BULK_UNITS": line.bulk_units,
            "TIERS": _describe_groups(line),
            "LINE_TOTAL": line.price,
        }
        for line in lines
    ]
    return pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)


def make_summary_text(lines: Sequence[LineTotal], total: Decimal) -> str:
    if not lines:
        return f"No items scanned.\nTotal: {format_amount(total)}\n"
    frame = breakdown_frame(lines)
    frame["LINE_TOTAL"] = frame["LINE_TOTAL"].map(format_amount)
    units = int(frame["QUANTITY"].sum())
    return (
        f"{units} unit(s) across {len(frame)} item(s).\n"
        f"{frame.to_string(index=False)}\n"
        f"Total: {format_amount(total)}\n"
    )


__all__ = ["BREAKDOWN_COLUMNS", "breakdown_frame", "format_amount", "make_summary_text"]
