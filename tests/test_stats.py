"""
Tests for the period statistics aggregator.
"""
import random
from datetime import date
from typing import List

import pytest

from tradelog.core.stats import aggregate, daily_stats, stats_by_asset
from tradelog.trades import build_trade
from tradelog.types import PeriodStats, Trade


def _trade(direction: str, entry: float, exit_price: float, size: float, commission: float,
           day: date = date(2024, 3, 1), asset: str = "AAPL") -> Trade:
    return build_trade({
        "date": day,
        "asset": asset,
        "direction": direction,
        "entryPrice": entry,
        "exitPrice": exit_price,
        "positionSize": size,
        "commission": commission,
    })


@pytest.fixture
def win_and_loss() -> List[Trade]:
    """One trade netting +95 and one netting -105."""
    return [
        _trade("LONG", 100, 110, 10, 5),
        _trade("SHORT", 100, 110, 10, 5),
    ]


def test_empty_input_gives_all_zero_stats():
    stats = aggregate([])
    assert stats == PeriodStats()
    assert stats.total_trades == 0
    assert stats.win_rate == 0.0
    assert stats.risk_reward_ratio == 0.0
    assert stats.largest_loss == 0.0


def test_one_win_one_loss(win_and_loss: List[Trade]):
    stats = aggregate(win_and_loss)
    assert stats.total_trades == 2
    assert stats.winning_trades == 1
    assert stats.losing_trades == 1
    assert stats.win_rate == 50.0
    assert stats.average_win == 95.0
    assert stats.average_loss == 105.0
    assert stats.risk_reward_ratio == pytest.approx(0.9048, abs=1e-4)
    assert stats.total_net_pl == -10.0
    assert stats.total_gross_profit == 0.0
    assert stats.total_commission == 10.0
    assert stats.largest_win == 95.0
    assert stats.largest_loss == -105.0


def test_zero_net_trade_counts_as_loss():
    breakeven = _trade("LONG", 100, 101, 5, 5)
    winner = _trade("LONG", 100, 110, 1, 0)
    stats = aggregate([breakeven, winner])
    assert stats.winning_trades == 1
    assert stats.losing_trades == 1
    # The break-even "loss" has magnitude zero, so there is nothing to compare against.
    assert stats.average_loss == 0.0
    assert stats.risk_reward_ratio == 0.0
    assert stats.largest_loss == 0.0


def test_no_losers_reports_zero_loss_fields():
    """With no losing trades, largest_loss and average_loss are 0 rather than missing."""
    stats = aggregate([_trade("LONG", 10, 12, 1, 0), _trade("LONG", 10, 15, 1, 0)])
    assert stats.losing_trades == 0
    assert stats.average_loss == 0.0
    assert stats.largest_loss == 0.0
    assert stats.risk_reward_ratio == 0.0
    assert stats.win_rate == 100.0
    assert stats.largest_win == 5.0
    assert stats.average_win == 3.5


def test_no_winners_reports_zero_win_fields():
    stats = aggregate([_trade("SHORT", 10, 12, 1, 0), _trade("LONG", 10, 9, 3, 1)])
    assert stats.winning_trades == 0
    assert stats.average_win == 0.0
    assert stats.largest_win == 0.0
    assert stats.average_loss == 3.0
    assert stats.largest_loss == -4.0
    assert stats.win_rate == 0.0


def test_counts_always_add_up():
    trades = [_trade("LONG", 100, 100 + i - 3, 1, 1) for i in range(8)]
    stats = aggregate(trades)
    assert stats.winning_trades + stats.losing_trades == stats.total_trades == 8


def test_aggregate_is_order_independent():
    trades = [
        _trade("LONG", 20, 25, 2, 0.5),
        _trade("SHORT", 40, 41, 3, 1),
        _trade("LONG", 7, 6, 10, 0.25),
        _trade("SHORT", 12, 9, 4, 2),
    ]
    shuffled = trades[:]
    random.Random(7).shuffle(shuffled)
    a, b = aggregate(trades), aggregate(shuffled)
    assert a.total_trades == b.total_trades
    assert a.winning_trades == b.winning_trades
    assert a.largest_win == b.largest_win
    assert a.largest_loss == b.largest_loss
    assert a.total_net_pl == pytest.approx(b.total_net_pl)
    assert a.risk_reward_ratio == pytest.approx(b.risk_reward_ratio)


def test_aggregate_accepts_generators(win_and_loss: List[Trade]):
    assert aggregate(t for t in win_and_loss).total_trades == 2


def test_daily_stats_groups_by_date():
    trades = [
        _trade("LONG", 100, 110, 1, 1, day=date(2024, 3, 2)),
        _trade("LONG", 100, 90, 1, 1, day=date(2024, 3, 1)),
        _trade("SHORT", 100, 90, 1, 1, day=date(2024, 3, 2)),
    ]
    days = daily_stats(trades)
    assert [d.date for d in days] == [date(2024, 3, 1), date(2024, 3, 2)]

    first, second = days
    assert first.total_trades == 1
    assert first.losing_trades == 1
    assert first.net_pl == -11.0
    assert second.total_trades == 2
    assert second.winning_trades == 2
    assert second.win_rate == 100.0
    assert second.gross_profit == 20.0
    assert second.total_commission == 2.0
    assert second.net_pl == 18.0


def test_daily_stats_empty():
    assert daily_stats([]) == []


def test_stats_by_asset():
    trades = [
        _trade("LONG", 100, 110, 1, 0, asset="MSFT"),
        _trade("LONG", 100, 90, 1, 0, asset="AAPL"),
        _trade("LONG", 100, 120, 1, 0, asset="MSFT"),
    ]
    by_asset = stats_by_asset(trades)
    assert list(by_asset) == ["AAPL", "MSFT"]
    assert by_asset["AAPL"].total_net_pl == -10.0
    assert by_asset["MSFT"].total_trades == 2
    assert by_asset["MSFT"].largest_win == 20.0
