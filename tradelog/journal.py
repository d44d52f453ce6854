"""
CSV-backed trade journal.

Each row holds the raw and derived fields of one trade under their wire
aliases. Rows are re-validated on load, so a file edited by hand with stale
derived values is rejected instead of silently producing wrong statistics.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from pydantic import ValidationError

from tradelog.errors import JournalError, TradeNotFound
from tradelog.types import Trade

__all__ = [
    "JOURNAL_COLUMNS",
    "load_journal",
    "save_journal",
    "append_trade",
    "find_trade",
    "replace_trade",
    "remove_trade",
]

log = logging.getLogger(__name__)

JOURNAL_COLUMNS = [
    "id",
    "createdAt",
    "updatedAt",
    "date",
    "asset",
    "direction",
    "entryPrice",
    "exitPrice",
    "positionSize",
    "commission",
    "notes",
    "grossPL",
    "netPL",
    "returnPercent",
    "isWin",
]

_TEXT_COLUMNS = {"id": str, "createdAt": str, "updatedAt": str, "date": str, "asset": str, "direction": str, "notes": str}


def _row_to_trade(row: Dict[str, Any], line_no: int) -> Trade:
    """Convert CSV row -> Trade."""
    row = dict(row)
    row["notes"] = row.get("notes") or None
    is_win = row.get("isWin")
    if isinstance(is_win, str):
        row["isWin"] = is_win.strip().lower() == "true"
    elif is_win is not None:
        row["isWin"] = bool(is_win)
    try:
        return Trade.model_validate(row)
    except ValidationError as e:
        raise JournalError(f"Invalid trade on line {line_no}: {e}") from e


# impure
def load_journal(path: Path) -> List[Trade]:
    """
    Reads all trades from a journal file, in file order.
    #impure: Reads from the filesystem.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Journal file not found: {path}")

    try:
        df = pd.read_csv(
            path,
            dtype=_TEXT_COLUMNS,
            keep_default_na=False,
            float_precision="round_trip",
        )
    except pd.errors.EmptyDataError:
        log.info(f"Journal {path} is empty.")
        return []
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
        raise JournalError(f"Could not read journal {path}: {e}") from e

    missing = [c for c in JOURNAL_COLUMNS if c not in df.columns and c != "notes"]
    if missing:
        raise JournalError(f"Journal {path} is missing columns: {', '.join(missing)}")

    # Line 1 is the header.
    trades = [_row_to_trade(row, i + 2) for i, row in enumerate(df.to_dict(orient="records"))]
    log.info(f"Loaded {len(trades)} trades from {path}")
    return trades


# impure
def save_journal(path: Path, trades: List[Trade]) -> None:
    """
    Writes the full journal, replacing the file in one step.
    #impure: Writes to the filesystem.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame([t.dump() for t in trades], columns=JOURNAL_COLUMNS)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        df.to_csv(tmp_path, index=False)
        tmp_path.replace(path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise
    log.info(f"Saved {len(trades)} trades to {path}")


# impure
def append_trade(path: Path, trade: Trade) -> None:
    """Adds one trade to the journal, creating the file if needed."""
    trades = load_journal(path) if path.exists() else []
    if any(t.id == trade.id for t in trades):
        raise JournalError(f"Trade {trade.id} already exists in {path}")
    trades.append(trade)
    save_journal(path, trades)


def find_trade(trades: List[Trade], trade_id: str) -> Trade:
    for trade in trades:
        if trade.id == trade_id:
            return trade
    raise TradeNotFound(trade_id)


def replace_trade(trades: List[Trade], revised: Trade) -> List[Trade]:
    """Returns a new list with the trade sharing revised.id swapped for revised."""
    find_trade(trades, revised.id)
    return [revised if t.id == revised.id else t for t in trades]


def remove_trade(trades: List[Trade], trade_id: str) -> List[Trade]:
    find_trade(trades, trade_id)
    return [t for t in trades if t.id != trade_id]
