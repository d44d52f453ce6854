"""
Period statistics.

Reduces a collection of trades (already carrying their derived metrics) into
aggregate statistics. Inputs are assumed validated; nothing is re-derived.
"""
import logging
from itertools import groupby
from typing import Dict, Iterable, List

from tradelog.types import DailyStats, PeriodStats, Trade

__all__ = ["aggregate", "daily_stats", "stats_by_asset"]

log = logging.getLogger(__name__)


def aggregate(trades: Iterable[Trade]) -> PeriodStats:
    """
    Computes period statistics for the given trades.

    Winners and losers are split on the stored is_win flag, so a trade with a
    net P&L of exactly zero counts as a loss. The result does not depend on
    the order of the input.

    Args:
        trades: Trades to aggregate, in any order.

    Returns:
        A PeriodStats. All fields are zero when there are no trades.
    """
    trades = list(trades)
    if not trades:
        return PeriodStats()

    winners = [t.net_pl for t in trades if t.is_win]
    losers = [t.net_pl for t in trades if not t.is_win]

    average_win = sum(winners) / len(winners) if winners else 0.0
    average_loss = abs(sum(losers) / len(losers)) if losers else 0.0
    # 0 stands for "no losses to compare against".
    risk_reward_ratio = average_win / average_loss if average_loss > 0 else 0.0

    stats = PeriodStats(
        total_trades=len(trades),
        winning_trades=len(winners),
        losing_trades=len(losers),
        total_gross_profit=sum(t.gross_pl for t in trades),
        total_commission=sum(t.commission for t in trades),
        total_net_pl=sum(t.net_pl for t in trades),
        win_rate=len(winners) / len(trades) * 100,
        average_win=average_win,
        average_loss=average_loss,
        risk_reward_ratio=risk_reward_ratio,
        largest_win=max(winners) if winners else 0.0,
        largest_loss=min(losers) if losers else 0.0,
    )
    log.debug(f"Aggregated {stats.total_trades} trades: net={stats.total_net_pl}")
    return stats


def daily_stats(trades: Iterable[Trade]) -> List[DailyStats]:
    """Returns one DailyStats per distinct trade date, oldest first."""
    ordered = sorted(trades, key=lambda t: t.trade_date)
    days = []
    for day, group in groupby(ordered, key=lambda t: t.trade_date):
        stats = aggregate(group)
        days.append(
            DailyStats(
                date=day,
                total_trades=stats.total_trades,
                winning_trades=stats.winning_trades,
                losing_trades=stats.losing_trades,
                gross_profit=stats.total_gross_profit,
                total_commission=stats.total_commission,
                net_pl=stats.total_net_pl,
                win_rate=stats.win_rate,
            )
        )
    return days


def stats_by_asset(trades: Iterable[Trade]) -> Dict[str, PeriodStats]:
    """Aggregates trades separately for each asset symbol, keyed in sorted order."""
    by_asset: Dict[str, List[Trade]] = {}
    for trade in trades:
        by_asset.setdefault(trade.asset, []).append(trade)
    return {asset: aggregate(by_asset[asset]) for asset in sorted(by_asset)}
