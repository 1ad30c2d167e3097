from __future__ import annotations

import json
from pathlib import Path

import pytest

from checkout import PriceTable, Terminal

KATA_RULES = {
    "A": [(1, 2), (4, 7)],
    "B": [(1, 12)],
    "C": [(1, "1.25"), (6, 6)],
    "D": [(1, "0.15")],
}


@pytest.fixture
def kata_table() -> PriceTable:
    return PriceTable.build(KATA_RULES)


@pytest.fixture
def terminal(kata_table: PriceTable) -> Terminal:
    return Terminal(kata_table)


@pytest.fixture
def bulk_table() -> PriceTable:
    return PriceTable.build({"A": [(1, 50), (3, 130)], "B": [(1, 30), (2, 45)]})


@pytest.fixture(autouse=True)
def _clean_checkout_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("CHECKOUT_PRICES", "CHECKOUT_ALLOW_NON_GREEDY", "CHECKOUT_STOP_ON_UNKNOWN", "CHECKOUT_VERBOSE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def prices_json(tmp_path: Path) -> Path:
    path = tmp_path / "prices.json"
    path.write_text(
        json.dumps(
            {
                "A": [{"price": 2}, {"min": 4, "price": 7}],
                "B": 12,
                "C": [{"price": "1.25"}, {"min": 6, "price": 6}],
                "D": "0.15",
            }
        ),
        encoding="utf-8",
    )
    return path
