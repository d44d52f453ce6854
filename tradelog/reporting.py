"""
Generating output reports for a set of journal trades.
"""
import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from rich.console import Console

from tradelog.config import Config
from tradelog.core.equity import build_equity_curve, equity_series
from tradelog.core.stats import aggregate, stats_by_asset
from tradelog.formatting import format_currency, format_percent
from tradelog.journal import JOURNAL_COLUMNS
from tradelog.types import EquityPoint, PeriodStats, Trade

__all__ = ["generate_all_reports", "trades_to_frame"]


def _to_json_serializable(data):
    """Recursively converts non-serializable types in a dictionary."""
    if isinstance(data, dict):
        return {k: _to_json_serializable(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_to_json_serializable(i) for i in data]
    if isinstance(data, Path):
        return str(data)
    # Covers datetime and pd.Timestamp as well.
    if isinstance(data, date):
        return data.isoformat()
    if data is None or (isinstance(data, float) and np.isnan(data)):
        return None
    if isinstance(data, np.integer):
        return int(data)
    if isinstance(data, np.floating):
        return float(data)
    if isinstance(data, np.bool_):
        return bool(data)
    return data


def trades_to_frame(trades: List[Trade]) -> pd.DataFrame:
    """
    One row per trade with the wire-alias columns, oldest first.
    Returns an empty DataFrame with those columns if there are no trades.
    """
    df = pd.DataFrame([t.dump() for t in trades], columns=JOURNAL_COLUMNS)
    if df.empty:
        return df
    df["date"] = pd.to_datetime(df["date"])
    return df.sort_values("date", kind="stable").reset_index(drop=True)


# impure
def _generate_trade_ledger_csv(trades: List[Trade], output_dir: Path) -> None:
    """Generates a CSV file with all trade details."""
    trades_to_frame(trades).to_csv(output_dir / "trade_ledger.csv", index=False)


# impure
def _generate_equity_csv(curve: List[EquityPoint], output_dir: Path) -> None:
    equity_series(curve).to_csv(output_dir / "equity_curve.csv", header=True)


# impure
def _generate_summary_json(
    stats: PeriodStats,
    curve: List[EquityPoint],
    by_asset: Dict[str, PeriodStats],
    config: Config,
    label: str,
    output_dir: Path,
) -> None:
    """Generates a JSON file with summary statistics and the equity curve."""
    summary: Dict[str, Any] = {
        "period": label,
        "starting_balance": curve[0].equity,
        "final_equity": curve[-1].equity,
        "journal": config.journal.path,
        "stats": stats.model_dump(),
        "by_asset": {asset: s.model_dump() for asset, s in by_asset.items()},
        "equity_curve": [p.model_dump() for p in curve],
    }
    with (output_dir / "summary.json").open("w") as f:
        json.dump(_to_json_serializable(summary), f, indent=2)


# impure
def _generate_summary_markdown(
    stats: PeriodStats, curve: List[EquityPoint], label: str, output_dir: Path
) -> None:
    """Generates a Markdown file with a human-readable summary."""
    md = f"# Trading Summary ({label})\n\n"
    md += "## Key Metrics\n\n"

    key_metrics = [
        ("Total Trades", str(stats.total_trades)),
        ("Winning Trades", str(stats.winning_trades)),
        ("Losing Trades", str(stats.losing_trades)),
        ("Win Rate", f"{stats.win_rate:.2f}%"),
        ("Total Net P&L", format_currency(stats.total_net_pl)),
        ("Total Gross Profit", format_currency(stats.total_gross_profit)),
        ("Total Commission", f"${stats.total_commission:.2f}"),
        ("Average Win", format_currency(stats.average_win)),
        ("Average Loss", f"${stats.average_loss:.2f}"),
        ("Risk/Reward Ratio", f"{stats.risk_reward_ratio:.2f}"),
        ("Largest Win", format_currency(stats.largest_win)),
        ("Largest Loss", format_currency(stats.largest_loss)),
    ]
    for name, value in key_metrics:
        md += f"- **{name}**: {value}\n"

    start, end = curve[0].equity, curve[-1].equity
    change = (end - start) / start * 100 if start else 0.0
    md += "\n## Equity\n\n"
    md += f"- **Starting Balance**: ${start:.2f}\n"
    md += f"- **Final Equity**: ${end:.2f} ({format_percent(change)})\n"

    (output_dir / "summary.md").write_text(md)


# impure
def generate_all_reports(
    config: Config,
    trades: List[Trade],
    run_dir: Path,
    console: Console,
    label: str = "all",
    starting_balance: Optional[float] = None,
    today: Optional[date] = None,
) -> None:
    """
    Orchestrates the generation of all output reports for the given trades.
    #impure: Writes to the filesystem.
    """
    balance = config.equity.starting_balance if starting_balance is None else starting_balance
    stats = aggregate(trades)
    curve = build_equity_curve(trades, balance, today=today)

    formats = config.reporting.output_formats

    if "csv" in formats:
        console.print("Generating trade ledger and equity curve CSV...")
        _generate_trade_ledger_csv(trades, run_dir)
        _generate_equity_csv(curve, run_dir)

    if "json" in formats:
        console.print("Generating summary JSON...")
        _generate_summary_json(stats, curve, stats_by_asset(trades), config, label, run_dir)

    if "markdown" in formats:
        console.print("Generating summary Markdown...")
        _generate_summary_markdown(stats, curve, label, run_dir)

    console.print("All reports generated.")
