from __future__ import annotations

from decimal import Decimal

import pytest

from checkout import InvalidTierError, Terminal, UnknownItemError


def _scan(terminal: Terminal, sequence: str) -> None:
    for code in sequence:
        terminal.scan(code)


def test_even_split_basket(terminal):
    _scan(terminal, "ABCDABAA")
    assert terminal.total() == Decimal("32.40")


def test_both_tiers_applied(terminal):
    _scan(terminal, "CCCCCCC")
    assert terminal.total() == Decimal("7.25")


def test_all_unit_prices(terminal):
    _scan(terminal, "ABCD")
    assert terminal.total() == Decimal("15.40")


@pytest.mark.parametrize("scans, expected", [(2, "100"), (3, "130"), (4, "180")])
def test_bulk_tier(bulk_table, scans, expected):
    terminal = Terminal(bulk_table)
    _scan(terminal, "A" * scans)
    assert terminal.total() == Decimal(expected)


def test_multi_sku_basket(bulk_table):
    terminal = Terminal(bulk_table)
    _scan(terminal, "ABABA")
    assert terminal.total() == Decimal("175")


def test_empty_terminal_totals_zero(terminal):
    assert terminal.is_empty
    assert terminal.total() == Decimal("0")
    assert terminal.breakdown() == []


def test_total_is_repeatable(terminal):
    _scan(terminal, "ABCDABAA")
    first = terminal.total()
    assert terminal.total() == first
    assert terminal.scanned == {"A": 4, "B": 2, "C": 1, "D": 1}


def test_total_never_decreases(bulk_table):
    terminal = Terminal(bulk_table)
    previous = terminal.total()
    for _ in range(10):
        terminal.scan("A")
        current = terminal.total()
        assert current >= previous
        previous = current


def test_unknown_scan_leaves_tally_unchanged(terminal):
    _scan(terminal, "AB")
    before = terminal.total()
    with pytest.raises(UnknownItemError) as excinfo:
        terminal.scan("ZZZ")
    assert excinfo.value.item_code == "ZZZ"
    assert terminal.scanned == {"A": 1, "B": 1}
    assert terminal.total() == before


def test_unknown_scan_on_empty_terminal(terminal):
    with pytest.raises(UnknownItemError):
        terminal.scan("E")
    assert terminal.is_empty


def test_scan_many_is_all_or_nothing(terminal):
    terminal.scan_many("AAAA")
    assert terminal.count("A") == 4
    with pytest.raises(UnknownItemError):
        terminal.scan_many(["B", "C", "Q", "D"])
    assert terminal.scanned == {"A": 4}
    assert terminal.total() == Decimal("7")


def test_terminals_share_one_table(kata_table):
    first = Terminal(kata_table)
    second = Terminal(kata_table)
    first.scan("A")
    assert second.is_empty
    assert first.table is second.table


def test_scanned_returns_a_copy(terminal):
    terminal.scan("A")
    snapshot = terminal.scanned
    snapshot["A"] = 99
    assert terminal.count("A") == 1


def test_breakdown_lines(terminal):
    _scan(terminal, "CCCCCCCAD")
    lines = {line.item_code: line for line in terminal.breakdown()}
    assert [line.item_code for line in terminal.breakdown()] == ["A", "C", "D"]
    assert lines["C"].quantity == 7
    assert lines["C"].price == Decimal("7.25")
    assert lines["C"].bulk_units == 6
    assert [(tier.quantity, count) for tier, count in lines["C"].groups] == [(6, 1), (1, 1)]
    assert sum(line.price for line in lines.values()) == terminal.total()


def test_from_rules():
    terminal = Terminal.from_rules({"A": [(1, 50), (3, 130)]})
    terminal.scan_many("AAAA")
    assert terminal.total() == Decimal("180")


def test_from_rules_passes_build_options():
    with pytest.raises(InvalidTierError):
        Terminal.from_rules({"A": [(1, 10), (3, 24), (4, 31)]})
    terminal = Terminal.from_rules({"A": [(1, 10), (3, 24), (4, 31)]}, require_greedy_optimal=False)
    terminal.scan_many("AAAAAA")
    assert terminal.total() == Decimal("51")
