"""
Time-window selection for the read path.

The statistics and equity functions accept any subset of trades; these
helpers produce the common subsets (this week, this month, this year, or an
explicit date range).
"""
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, List, Literal, Optional

from tradelog.types import Trade

__all__ = ["Period", "period_start", "filter_period", "filter_date_range"]

WeekStart = Literal["sunday", "monday"]


class Period(str, Enum):
    ALL = "all"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def period_start(period: Period, today: date, week_start: WeekStart = "sunday") -> Optional[date]:
    """
    Returns the first date of the current period, or None for Period.ALL.

    Weeks start on Sunday unless week_start is "monday".
    """
    if period is Period.ALL:
        return None
    if period is Period.WEEK:
        # date.weekday(): Monday == 0 ... Sunday == 6
        offset = today.weekday() if week_start == "monday" else (today.weekday() + 1) % 7
        return today - timedelta(days=offset)
    if period is Period.MONTH:
        return today.replace(day=1)
    if period is Period.YEAR:
        return today.replace(month=1, day=1)
    raise ValueError(f"Unknown period: {period!r}")


def filter_period(
    trades: Iterable[Trade],
    period: Period,
    today: Optional[date] = None,
    week_start: WeekStart = "sunday",
) -> List[Trade]:
    """Keeps trades dated on or after the start of the current period."""
    start = period_start(period, today or date.today(), week_start)
    if start is None:
        return list(trades)
    return [t for t in trades if t.trade_date >= start]


def filter_date_range(trades: Iterable[Trade], start: date, end: date) -> List[Trade]:
    """Keeps trades with start <= trade date <= end."""
    if end < start:
        raise ValueError(f"End date {end} is before start date {start}")
    return [t for t in trades if start <= t.trade_date <= end]
