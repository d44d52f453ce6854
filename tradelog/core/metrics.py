"""
Per-trade metrics.

Derives gross P&L, net P&L, return percentage and the win flag from the five
raw fields of a trade. This is the only place untrusted raw values enter the
engine, so all validation happens here and nothing partial is ever returned.
"""
import logging
import math
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from tradelog.errors import DivisionByZero, InvalidDirection, InvalidInput, InvalidNumericField

__all__ = [
    "Direction",
    "TradeMetrics",
    "derive_metrics",
    "gross_pl",
    "net_pl",
    "return_percent",
    "is_winning_trade",
    "parse_direction",
    "coerce_number",
]

log = logging.getLogger(__name__)


class Direction(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class TradeMetrics(BaseModel):
    """The four values derived from a trade's raw fields."""

    model_config = ConfigDict(frozen=True)

    gross_pl: float = Field(..., description="P&L from price movement alone, before commission.")
    net_pl: float = Field(..., description="Gross P&L minus commission.")
    return_percent: float = Field(..., description="Gross price move relative to entry, in percent.")
    is_win: bool = Field(..., description="True only when net P&L is strictly positive.")


def gross_pl(direction: Direction, entry_price: float, exit_price: float, position_size: float) -> float:
    """P&L before commission. Direction flips the sign of the price delta only."""
    if direction is Direction.LONG:
        return (exit_price - entry_price) * position_size
    return (entry_price - exit_price) * position_size


def net_pl(gross: float, commission: float) -> float:
    return gross - commission


def return_percent(direction: Direction, entry_price: float, exit_price: float) -> float:
    """
    Gross price movement relative to the entry price, in percent.

    Position size and commission do not enter this ratio, so a trade can lose
    money net of commission while still showing a non-negative return.
    """
    if entry_price == 0:
        raise DivisionByZero("entry_price", entry_price)
    if direction is Direction.LONG:
        return (exit_price - entry_price) / entry_price * 100
    return (entry_price - exit_price) / entry_price * 100


def is_winning_trade(net: float) -> bool:
    # A net P&L of exactly zero is not a win.
    return net > 0


def parse_direction(value: Union[Direction, str, Any]) -> Direction:
    """Accepts a Direction or a 'LONG'/'SHORT' string (case-insensitive)."""
    if isinstance(value, Direction):
        return value
    if isinstance(value, str):
        try:
            return Direction(value.strip().upper())
        except ValueError:
            pass
    raise InvalidDirection(value)


def coerce_number(field: str, value: Any) -> float:
    """Coerces a raw value to a finite float or raises InvalidNumericField."""
    if value is None or isinstance(value, bool):
        raise InvalidNumericField(field, value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidNumericField(field, value) from None
    if not math.isfinite(number):
        raise InvalidNumericField(field, value)
    return number


def derive_metrics(
    direction: Union[Direction, str],
    entry_price: Any,
    exit_price: Any,
    position_size: Any,
    commission: Optional[Any] = 0.0,
) -> TradeMetrics:
    """
    Computes all derived metrics for one trade.

    Args:
        direction: LONG or SHORT.
        entry_price: Price the position was opened at. Must be non-zero.
        exit_price: Price the position was closed at.
        position_size: Units traded (shares, contracts, coins).
        commission: Flat per-trade cost. None is treated as no commission.

    Returns:
        A complete TradeMetrics.

    Raises:
        InvalidDirection: direction is not LONG or SHORT.
        InvalidNumericField: a numeric field is not a finite number.
        DivisionByZero: entry_price is zero.
    """
    side = parse_direction(direction)
    entry = coerce_number("entry_price", entry_price)
    exit_ = coerce_number("exit_price", exit_price)
    size = coerce_number("position_size", position_size)
    fee = 0.0 if commission is None else coerce_number("commission", commission)

    if entry == 0:
        raise DivisionByZero("entry_price", entry_price)

    gross = gross_pl(side, entry, exit_, size)
    net = net_pl(gross, fee)
    ret = return_percent(side, entry, exit_)

    if not (math.isfinite(gross) and math.isfinite(net) and math.isfinite(ret)):
        raise InvalidInput("Derived metrics overflowed to a non-finite value.")

    log.debug(f"Derived metrics for {side.value} {entry} -> {exit_} x {size}: net={net}")
    return TradeMetrics(gross_pl=gross, net_pl=net, return_percent=ret, is_win=is_winning_trade(net))
