"""Tests for the CSV trade journal."""
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List

import pandas as pd
import pytest

from tradelog.errors import JournalError, TradeNotFound
from tradelog.journal import (
    JOURNAL_COLUMNS,
    append_trade,
    find_trade,
    load_journal,
    remove_trade,
    replace_trade,
    save_journal,
)
from tradelog.trades import build_trade, revise_trade
from tradelog.types import Trade

NOW = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def trades() -> List[Trade]:
    """Trades with awkward floats and text to exercise the CSV round trip."""
    return [
        build_trade(
            {"date": "2024-03-01", "asset": "NA", "direction": "LONG", "entryPrice": 0.1,
             "exitPrice": 0.3, "positionSize": 3, "commission": 0.07, "notes": "first, with comma"},
            trade_id="t1", now=NOW,
        ),
        build_trade(
            {"date": "2024-03-02", "asset": "ETHUSD", "direction": "SHORT", "entryPrice": 3210.55,
             "exitPrice": 3199.1, "positionSize": 0.37},
            trade_id="t2", now=NOW,
        ),
    ]


def test_save_and_load_round_trip(tmp_path: Path, trades: List[Trade]):
    path = tmp_path / "journal.csv"
    save_journal(path, trades)
    loaded = load_journal(path)
    assert loaded == trades
    assert loaded[0].asset == "NA"
    assert loaded[0].notes == "first, with comma"
    assert loaded[1].notes is None


def test_saved_file_uses_wire_columns(tmp_path: Path, trades: List[Trade]):
    path = tmp_path / "journal.csv"
    save_journal(path, trades)
    df = pd.read_csv(path)
    assert list(df.columns) == JOURNAL_COLUMNS
    assert not (tmp_path / "journal.csv.tmp").exists()


def test_empty_journal(tmp_path: Path):
    path = tmp_path / "journal.csv"
    save_journal(path, [])
    assert load_journal(path) == []

    blank = tmp_path / "blank.csv"
    blank.write_text("")
    assert load_journal(blank) == []


def test_missing_journal_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_journal(tmp_path / "nope.csv")


def test_tampered_derived_value_is_rejected(tmp_path: Path, trades: List[Trade]):
    path = tmp_path / "journal.csv"
    save_journal(path, trades)
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.loc[1, "netPL"] = "1000.0"
    df.to_csv(path, index=False)

    with pytest.raises(JournalError, match="line 3"):
        load_journal(path)


def test_missing_columns_are_rejected(tmp_path: Path):
    path = tmp_path / "journal.csv"
    path.write_text("id,date,asset\nt1,2024-01-01,AAPL\n")
    with pytest.raises(JournalError, match="missing columns"):
        load_journal(path)


def test_failed_save_leaves_no_temp_file(mocker, tmp_path: Path, trades: List[Trade]):
    path = tmp_path / "journal.csv"
    save_journal(path, trades[:1])

    def partial_write(target, *args, **kwargs):
        Path(target).write_text("id,crea")
        raise OSError("disk full")

    mocker.patch.object(pd.DataFrame, "to_csv", side_effect=partial_write)

    with pytest.raises(OSError, match="disk full"):
        save_journal(path, trades)

    assert not (tmp_path / "journal.csv.tmp").exists()
    mocker.stopall()
    assert [t.id for t in load_journal(path)] == ["t1"]


def test_append_trade_creates_and_extends(tmp_path: Path, trades: List[Trade]):
    path = tmp_path / "sub" / "journal.csv"
    append_trade(path, trades[0])
    append_trade(path, trades[1])
    assert [t.id for t in load_journal(path)] == ["t1", "t2"]


def test_append_duplicate_id_is_rejected(tmp_path: Path, trades: List[Trade]):
    path = tmp_path / "journal.csv"
    append_trade(path, trades[0])
    with pytest.raises(JournalError, match="already exists"):
        append_trade(path, trades[0])


def test_find_replace_remove(trades: List[Trade]):
    assert find_trade(trades, "t2") is trades[1]

    revised = revise_trade(trades[0], {"date": date(2024, 3, 1), "asset": "NA", "direction": "SHORT",
                                       "entryPrice": 0.1, "exitPrice": 0.3, "positionSize": 3})
    replaced = replace_trade(trades, revised)
    assert replaced[0] is revised
    assert trades[0].direction.value == "LONG"

    remaining = remove_trade(trades, "t1")
    assert [t.id for t in remaining] == ["t2"]
    assert len(trades) == 2


def test_unknown_id_raises(trades: List[Trade]):
    with pytest.raises(TradeNotFound):
        find_trade(trades, "missing")
    with pytest.raises(TradeNotFound):
        remove_trade(trades, "missing")
