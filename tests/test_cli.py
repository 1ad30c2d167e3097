from __future__ import annotations

import json
from pathlib import Path

import pytest

from checkout import cli


def test_expand_codes():
    assert cli.expand_codes(["AB CD", "", "A"], split=True) == ["A", "B", "C", "D", "A"]
    assert cli.expand_codes(["apple", " pear "], split=False) == ["apple", "pear"]


def test_main_prints_total(prices_json: Path, capsys):
    rc = cli.main(["--prices", str(prices_json), "--split", "ABCDABAA"])
    assert rc == cli.EXIT_OK
    assert capsys.readouterr().out.strip() == "32.40"


def test_main_uses_env_prices(prices_json: Path, monkeypatch: pytest.MonkeyPatch, capsys):
    monkeypatch.setenv("CHECKOUT_PRICES", str(prices_json))
    rc = cli.main(["C"] * 7)
    assert rc == cli.EXIT_OK
    assert capsys.readouterr().out.strip() == "7.25"


def test_main_breakdown(prices_json: Path, capsys):
    rc = cli.main(["--prices", str(prices_json), "--breakdown", "--split", "ABCD"])
    assert rc == cli.EXIT_OK
    out = capsys.readouterr().out
    assert "4 unit(s) across 4 item(s)." in out
    assert out.rstrip().endswith("Total: 15.40")


def test_unknown_items_skipped_by_default(prices_json: Path, capsys):
    rc = cli.main(["--prices", str(prices_json), "A", "ZZZ", "B"])
    assert rc == cli.EXIT_OK
    assert capsys.readouterr().out.strip() == "14.00"


def test_stop_on_unknown(prices_json: Path, capsys):
    rc = cli.main(["--prices", str(prices_json), "--stop-on-unknown", "A", "ZZZ"])
    assert rc == cli.EXIT_UNKNOWN_ITEM
    assert capsys.readouterr().out == ""


def test_bad_rules_file(tmp_path: Path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"A": [{"min": 3, "price": 10}]}), encoding="utf-8")
    assert cli.main(["--prices", str(path), "A"]) == cli.EXIT_BAD_RULES
    assert cli.main(["--prices", str(tmp_path / "missing.json"), "A"]) == cli.EXIT_BAD_RULES


def test_allow_non_greedy(tmp_path: Path, capsys):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"A": [[1, 10], [3, 24], [4, 31]]}), encoding="utf-8")
    assert cli.main(["--prices", str(path), "--split", "AAAAAA"]) == cli.EXIT_BAD_RULES
    capsys.readouterr()
    assert cli.main(["--prices", str(path), "--allow-non-greedy", "--split", "AAAAAA"]) == cli.EXIT_OK
    assert capsys.readouterr().out.strip() == "51.00"


def test_default_sample_prices(capsys):
    rc = cli.main(["--split", "CCCCCCC"])
    assert rc == cli.EXIT_OK
    assert capsys.readouterr().out.strip() == "7.25"


@pytest.mark.parametrize(
    "name, content",
    [
        ("rules.csv", b""),
        ("rules.json", b'{"A": "\xff"}'),
        ("rules.csv", b"ITEM_CODE,QUANTITY,PRICE\nA,1,2\nB,1,2,3,4\n"),
    ],
)
def test_unreadable_rules_file_exits_cleanly(tmp_path: Path, name, content, capsys):
    path = tmp_path / name
    path.write_bytes(content)
    assert cli.main(["--prices", str(path), "A"]) == cli.EXIT_BAD_RULES
    assert capsys.readouterr().out == ""


def test_rules_path_is_a_directory(tmp_path: Path):
    path = tmp_path / "rules.json"
    path.mkdir()
    assert cli.main(["--prices", str(path), "A"]) == cli.EXIT_BAD_RULES


def test_large_totals_print_without_grouping(tmp_path: Path, capsys):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"X": "1234.5"}), encoding="utf-8")
    assert cli.main(["--prices", str(path), "X"]) == cli.EXIT_OK
    assert capsys.readouterr().out.strip() == "1234.50"
