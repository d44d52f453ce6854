"""
CLI entry point for the tradelog application.
"""
import logging
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from tradelog.config import Config, load_config
from tradelog.core.equity import build_equity_curve
from tradelog.core.metrics import Direction
from tradelog.core.stats import aggregate, daily_stats, stats_by_asset
from tradelog.errors import InvalidInput, JournalError
from tradelog.formatting import format_currency, format_percent
from tradelog.journal import append_trade, find_trade, load_journal, remove_trade, replace_trade, save_journal
from tradelog.periods import Period, filter_date_range, filter_period
from tradelog.reporting import generate_all_reports
from tradelog.trades import build_trade, revise_trade
from tradelog.types import PeriodStats, Trade

# Console is created once and passed down.
# Log to stderr to separate from potential data output to stdout.
app = typer.Typer(pretty_exceptions_show_locals=False, help="Trading journal with P&L statistics and equity curves.")
console = Console(stderr=True)

CONFIG_OPTION = typer.Option(..., "--config", "-c", help="Path to the YAML configuration file.", exists=True)
JOURNAL_OPTION = typer.Option(None, "--journal", "-j", help="Journal CSV file. Overrides journal.path.")
PERIOD_OPTION = typer.Option(None, "--period", "-p", help="Time window. Defaults to periods.default.", case_sensitive=False)
START_OPTION = typer.Option(None, "--start", help="First trade date to include (YYYY-MM-DD).", formats=["%Y-%m-%d"])
END_OPTION = typer.Option(None, "--end", help="Last trade date to include (YYYY-MM-DD).", formats=["%Y-%m-%d"])


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress messages."),
):
    """Trading journal with P&L statistics and equity curves."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config_or_exit(config_path: Path) -> Config:
    """Helper to load config and exit on failure."""
    try:
        return load_config(config_path)
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e}")
        raise typer.Exit(code=1)


def _journal_path(config: Config, journal: Optional[Path]) -> Path:
    return journal if journal is not None else config.journal.path


def _load_trades_or_exit(path: Path) -> List[Trade]:
    try:
        return load_journal(path)
    except FileNotFoundError:
        console.print(f"[bold red]Error:[/bold red] No journal found at {path}. Add a trade first.")
        raise typer.Exit(code=1)
    except JournalError as e:
        console.print(f"[bold red]Journal Error:[/bold red] {e}")
        raise typer.Exit(code=1)


def _select_trades(
    trades: List[Trade],
    config: Config,
    period: Optional[Period],
    start: Optional[datetime],
    end: Optional[datetime],
) -> Tuple[List[Trade], str]:
    """Applies either an explicit date range or a period window. Returns (trades, label)."""
    if start is not None or end is not None:
        first = start.date() if start is not None else date.min
        last = end.date() if end is not None else date.max
        try:
            selected = filter_date_range(trades, first, last)
        except ValueError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(code=1)
        label = f"{first if start is not None else '...'} to {last if end is not None else '...'}"
        return selected, label

    period = period or Period(config.periods.default)
    selected = filter_period(trades, period, week_start=config.periods.week_start)
    return selected, period.value


def _trade_payload(
    trade_date: Optional[str],
    asset: str,
    direction: Direction,
    entry: float,
    exit_price: float,
    size: float,
    commission: float,
    notes: Optional[str],
) -> dict:
    return {
        "date": trade_date or date.today().isoformat(),
        "asset": asset,
        "direction": direction,
        "entryPrice": entry,
        "exitPrice": exit_price,
        "positionSize": size,
        "commission": commission,
        "notes": notes,
    }


def _print_trade(trade: Trade) -> None:
    colour = "green" if trade.is_win else "red"
    console.print(
        f"{trade.trade_date} {trade.direction.value} {trade.asset} "
        f"gross {format_currency(trade.gross_pl)} | "
        f"[{colour}]net {format_currency(trade.net_pl)}[/{colour}] | "
        f"return {format_percent(trade.return_percent)} | "
        f"{'WIN' if trade.is_win else 'LOSS'} | id {trade.id}"
    )


def _stats_table(stats: PeriodStats, title: str) -> Table:
    table = Table(title=title)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Total Trades", str(stats.total_trades))
    table.add_row("Winning Trades", str(stats.winning_trades))
    table.add_row("Losing Trades", str(stats.losing_trades))
    table.add_row("Win Rate", f"{stats.win_rate:.2f}%")
    table.add_row("Total Net P&L", format_currency(stats.total_net_pl))
    table.add_row("Total Gross Profit", format_currency(stats.total_gross_profit))
    table.add_row("Total Commission", f"${stats.total_commission:.2f}")
    table.add_row("Average Win", format_currency(stats.average_win))
    table.add_row("Average Loss", f"${stats.average_loss:.2f}")
    table.add_row("Risk/Reward", f"{stats.risk_reward_ratio:.2f}")
    table.add_row("Largest Win", format_currency(stats.largest_win))
    table.add_row("Largest Loss", format_currency(stats.largest_loss))
    return table


@app.command()
def add(
    config_path: Path = CONFIG_OPTION,
    asset: str = typer.Option(..., "--asset", "-a", help="Asset symbol, e.g. BTCUSD."),
    direction: Direction = typer.Option(..., "--direction", "-d", help="LONG or SHORT.", case_sensitive=False),
    entry: float = typer.Option(..., "--entry", help="Entry price."),
    exit_price: float = typer.Option(..., "--exit", help="Exit price."),
    size: float = typer.Option(..., "--size", help="Position size in units."),
    commission: float = typer.Option(0.0, "--commission", help="Flat commission for the trade."),
    trade_date: Optional[str] = typer.Option(None, "--date", help="Trade date (YYYY-MM-DD). Defaults to today."),
    notes: Optional[str] = typer.Option(None, "--notes", help="Free-text notes."),
    journal: Optional[Path] = JOURNAL_OPTION,
):
    """Record a new trade; its P&L metrics are derived automatically."""
    config = _load_config_or_exit(config_path)
    path = _journal_path(config, journal)

    try:
        trade = build_trade(_trade_payload(trade_date, asset, direction, entry, exit_price, size, commission, notes))
        append_trade(path, trade)
    except (InvalidInput, JournalError) as e:
        console.print(f"[bold red]Trade rejected:[/bold red] {e}")
        raise typer.Exit(code=1)

    _print_trade(trade)
    console.print(f"[bold green]Trade saved to {path}.[/bold green]")


@app.command()
def edit(
    trade_id: str = typer.Argument(..., help="Id of the trade to replace."),
    config_path: Path = CONFIG_OPTION,
    asset: str = typer.Option(..., "--asset", "-a", help="Asset symbol, e.g. BTCUSD."),
    direction: Direction = typer.Option(..., "--direction", "-d", help="LONG or SHORT.", case_sensitive=False),
    entry: float = typer.Option(..., "--entry", help="Entry price."),
    exit_price: float = typer.Option(..., "--exit", help="Exit price."),
    size: float = typer.Option(..., "--size", help="Position size in units."),
    commission: float = typer.Option(0.0, "--commission", help="Flat commission for the trade."),
    trade_date: Optional[str] = typer.Option(None, "--date", help="Trade date (YYYY-MM-DD). Keeps the current date."),
    notes: Optional[str] = typer.Option(None, "--notes", help="Free-text notes. Keeps the current notes."),
    journal: Optional[Path] = JOURNAL_OPTION,
):
    """Replace the fields of an existing trade and re-derive its metrics."""
    config = _load_config_or_exit(config_path)
    path = _journal_path(config, journal)
    trades = _load_trades_or_exit(path)

    try:
        current = find_trade(trades, trade_id)
        payload = _trade_payload(
            trade_date or current.trade_date.isoformat(),
            asset,
            direction,
            entry,
            exit_price,
            size,
            commission,
            current.notes if notes is None else notes,
        )
        revised = revise_trade(current, payload)
        save_journal(path, replace_trade(trades, revised))
    except (InvalidInput, JournalError) as e:
        console.print(f"[bold red]Edit rejected:[/bold red] {e}")
        raise typer.Exit(code=1)

    _print_trade(revised)
    console.print("[bold green]Trade updated.[/bold green]")


@app.command()
def delete(
    trade_id: str = typer.Argument(..., help="Id of the trade to delete."),
    config_path: Path = CONFIG_OPTION,
    journal: Optional[Path] = JOURNAL_OPTION,
):
    """Remove a trade from the journal."""
    config = _load_config_or_exit(config_path)
    path = _journal_path(config, journal)
    trades = _load_trades_or_exit(path)

    try:
        save_journal(path, remove_trade(trades, trade_id))
    except JournalError as e:
        console.print(f"[bold red]Delete failed:[/bold red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[bold green]Deleted trade {trade_id}.[/bold green]")


@app.command("list")
def list_trades(
    config_path: Path = CONFIG_OPTION,
    period: Optional[Period] = PERIOD_OPTION,
    start: Optional[datetime] = START_OPTION,
    end: Optional[datetime] = END_OPTION,
    journal: Optional[Path] = JOURNAL_OPTION,
):
    """List trades newest first, with the ids used by edit and delete."""
    config = _load_config_or_exit(config_path)
    trades = _load_trades_or_exit(_journal_path(config, journal))
    if not trades:
        console.print("[yellow]No trades yet. Add your first trade to get started.[/yellow]")
        return

    selected, label = _select_trades(trades, config, period, start, end)
    if not selected:
        console.print(f"[yellow]No trades in period ({label}).[/yellow]")
        return

    table = Table(title=f"Trades ({label})")
    table.add_column("Id", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    table.add_column("Asset")
    table.add_column("Dir")
    for column in ("Entry", "Exit", "Size", "Gross", "Comm.", "Net", "Return"):
        table.add_column(column, justify="right")
    for trade in sorted(selected, key=lambda t: t.trade_date, reverse=True):
        colour = "green" if trade.is_win else "red"
        table.add_row(
            trade.id,
            trade.trade_date.isoformat(),
            trade.asset,
            trade.direction.value,
            f"{trade.entry_price:g}",
            f"{trade.exit_price:g}",
            f"{trade.position_size:g}",
            format_currency(trade.gross_pl),
            f"${trade.commission:.2f}",
            f"[{colour}]{format_currency(trade.net_pl)}[/{colour}]",
            format_percent(trade.return_percent),
        )
    console.print(table)


@app.command()
def stats(
    config_path: Path = CONFIG_OPTION,
    period: Optional[Period] = PERIOD_OPTION,
    start: Optional[datetime] = START_OPTION,
    end: Optional[datetime] = END_OPTION,
    by_asset: bool = typer.Option(False, "--by-asset", help="Also break the statistics down per asset."),
    journal: Optional[Path] = JOURNAL_OPTION,
):
    """Show aggregate statistics for a time window."""
    config = _load_config_or_exit(config_path)
    trades = _load_trades_or_exit(_journal_path(config, journal))
    selected, label = _select_trades(trades, config, period, start, end)

    console.print(_stats_table(aggregate(selected), f"Statistics ({label})"))

    if by_asset:
        table = Table(title="By Asset")
        for column in ("Asset", "Trades", "Win Rate", "Net P&L", "Risk/Reward"):
            table.add_column(column, justify="left" if column == "Asset" else "right")
        for asset, asset_stats in stats_by_asset(selected).items():
            table.add_row(
                asset or "-",
                str(asset_stats.total_trades),
                f"{asset_stats.win_rate:.2f}%",
                format_currency(asset_stats.total_net_pl),
                f"{asset_stats.risk_reward_ratio:.2f}",
            )
        console.print(table)


@app.command()
def daily(
    config_path: Path = CONFIG_OPTION,
    period: Optional[Period] = PERIOD_OPTION,
    start: Optional[datetime] = START_OPTION,
    end: Optional[datetime] = END_OPTION,
    journal: Optional[Path] = JOURNAL_OPTION,
):
    """Show a per-day breakdown of trades."""
    config = _load_config_or_exit(config_path)
    trades = _load_trades_or_exit(_journal_path(config, journal))
    selected, label = _select_trades(trades, config, period, start, end)

    days = daily_stats(selected)
    if not days:
        console.print(f"[yellow]No trades in period ({label}).[/yellow]")
        return

    table = Table(title=f"Daily ({label})")
    for column in ("Date", "Trades", "W/L", "Win Rate", "Commission", "Net P&L"):
        table.add_column(column, justify="left" if column == "Date" else "right")
    for day in days:
        table.add_row(
            day.date.isoformat(),
            str(day.total_trades),
            f"{day.winning_trades}/{day.losing_trades}",
            f"{day.win_rate:.2f}%",
            f"${day.total_commission:.2f}",
            format_currency(day.net_pl),
        )
    console.print(table)


@app.command()
def equity(
    config_path: Path = CONFIG_OPTION,
    period: Optional[Period] = PERIOD_OPTION,
    start: Optional[datetime] = START_OPTION,
    end: Optional[datetime] = END_OPTION,
    starting_balance: Optional[float] = typer.Option(
        None, "--starting-balance", help="Balance before the first trade. Overrides equity.starting_balance."
    ),
    journal: Optional[Path] = JOURNAL_OPTION,
):
    """Show the equity curve: running balance after each trade."""
    config = _load_config_or_exit(config_path)
    trades = _load_trades_or_exit(_journal_path(config, journal))
    selected, label = _select_trades(trades, config, period, start, end)

    balance = config.equity.starting_balance if starting_balance is None else starting_balance
    curve = build_equity_curve(selected, balance)

    table = Table(title=f"Equity Curve ({label})")
    table.add_column("Date")
    table.add_column("Equity", justify="right")
    table.add_column("Change", justify="right")
    previous = curve[0].equity
    for i, point in enumerate(curve):
        change = "" if i == 0 else format_currency(point.equity - previous)
        table.add_row(point.date.isoformat(), f"${point.equity:.2f}", change)
        previous = point.equity
    console.print(table)


@app.command()
def report(
    config_path: Path = CONFIG_OPTION,
    period: Optional[Period] = PERIOD_OPTION,
    start: Optional[datetime] = START_OPTION,
    end: Optional[datetime] = END_OPTION,
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Overrides reporting.output_dir."),
    journal: Optional[Path] = JOURNAL_OPTION,
):
    """Write summary reports (JSON, Markdown, CSV) for a time window."""
    config = _load_config_or_exit(config_path)
    trades = _load_trades_or_exit(_journal_path(config, journal))
    selected, label = _select_trades(trades, config, period, start, end)

    run_dir = output_dir if output_dir is not None else config.reporting.output_dir
    run_dir.mkdir(parents=True, exist_ok=True)
    console.print(f"Report artifacts will be saved to: [cyan]{run_dir}[/cyan]")
    generate_all_reports(config, selected, run_dir, console, label=label)
    console.print("[bold green]Report command finished.[/bold green]")


if __name__ == "__main__":
    app()
