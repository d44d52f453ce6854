"""
Equity curve construction.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional

import pandas as pd

from tradelog.types import EquityPoint, Trade

__all__ = ["DEFAULT_STARTING_BALANCE", "build_equity_curve", "equity_series"]

log = logging.getLogger(__name__)

DEFAULT_STARTING_BALANCE = 2200.0


def build_equity_curve(
    trades: Iterable[Trade],
    starting_balance: float = DEFAULT_STARTING_BALANCE,
    today: Optional[date] = None,
) -> List[EquityPoint]:
    """
    Builds the running-balance curve for a set of trades.

    The curve starts with a seed point at the starting balance, dated at the
    earliest trade (or `today` when there are no trades), followed by one
    point per trade in chronological order. Trades on the same date keep
    their input order and each get their own point.

    Args:
        trades: Trades to apply. The caller's collection is not modified.
        starting_balance: Equity before any trade is applied.
        today: Date of the seed point for an empty input. Defaults to date.today().

    Returns:
        A list of len(trades) + 1 EquityPoints ordered by date.
    """
    # sorted() is stable, so equal dates keep their original relative order.
    ordered = sorted(trades, key=lambda t: t.trade_date)

    if ordered:
        seed_date = ordered[0].trade_date
    else:
        seed_date = today if today is not None else date.today()

    points = [EquityPoint(date=seed_date, equity=starting_balance)]
    running_equity = starting_balance
    for trade in ordered:
        running_equity += trade.net_pl
        points.append(EquityPoint(date=trade.trade_date, equity=running_equity))

    log.debug(f"Built equity curve with {len(points)} points, final equity {running_equity}")
    return points


def equity_series(points: List[EquityPoint]) -> pd.Series:
    """Converts an equity curve to a Series indexed by date. Dates may repeat."""
    if not points:
        return pd.Series(dtype=float, name="equity")
    index = pd.to_datetime([p.date for p in points])
    return pd.Series([p.equity for p in points], index=pd.DatetimeIndex(index, name="date"), name="equity")
