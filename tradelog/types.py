"""
Shared data structures for the application.
"""
import datetime as dt
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tradelog.core.metrics import Direction, TradeMetrics, derive_metrics

__all__ = ["Direction", "Trade", "TradeMetrics", "PeriodStats", "DailyStats", "EquityPoint"]


class Trade(BaseModel):
    """
    A single closed trade in the journal.

    Field aliases form the wire/storage contract (camelCase). The four derived
    fields must always equal what derive_metrics returns for the raw fields;
    a record where they disagree is rejected at validation time.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    id: str = Field(..., description="Unique trade identifier.")
    created_at: dt.datetime = Field(..., alias="createdAt", description="Audit only.")
    updated_at: dt.datetime = Field(..., alias="updatedAt", description="Audit only.")
    trade_date: dt.date = Field(..., alias="date", description="Date used for ordering and filtering.")
    asset: str = Field("", description="Free-text asset symbol.")
    direction: Direction
    entry_price: float = Field(..., gt=0, alias="entryPrice")
    exit_price: float = Field(..., gt=0, alias="exitPrice")
    position_size: float = Field(..., gt=0, alias="positionSize")
    commission: float = Field(0.0, ge=0)
    notes: Optional[str] = None

    gross_pl: float = Field(..., alias="grossPL")
    net_pl: float = Field(..., alias="netPL")
    return_percent: float = Field(..., alias="returnPercent")
    is_win: bool = Field(..., alias="isWin")

    @model_validator(mode="after")
    def _derived_fields_match_raw_fields(self) -> "Trade":
        expected = derive_metrics(
            self.direction, self.entry_price, self.exit_price, self.position_size, self.commission
        )
        if self.metrics != expected:
            raise ValueError(
                "Derived fields (grossPL, netPL, returnPercent, isWin) are inconsistent "
                f"with the raw trade fields; expected {expected.model_dump()}"
            )
        return self

    @property
    def metrics(self) -> TradeMetrics:
        return TradeMetrics(
            gross_pl=self.gross_pl,
            net_pl=self.net_pl,
            return_percent=self.return_percent,
            is_win=self.is_win,
        )

    def dump(self) -> Dict[str, Any]:
        """Serializes to the camelCase wire contract with JSON-compatible values."""
        return self.model_dump(mode="json", by_alias=True)


class PeriodStats(BaseModel):
    """Aggregate statistics over an arbitrary set of trades. Never persisted."""

    model_config = ConfigDict(frozen=True)

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    total_gross_profit: float = 0.0
    total_commission: float = 0.0
    total_net_pl: float = 0.0
    win_rate: float = Field(0.0, description="Winning trades as a percentage of all trades.")
    average_win: float = 0.0
    average_loss: float = Field(0.0, description="Mean loss as a non-negative magnitude.")
    risk_reward_ratio: float = Field(0.0, description="average_win / average_loss; 0 when there are no losses.")
    largest_win: float = 0.0
    largest_loss: float = Field(0.0, description="Most negative net P&L among losers; 0 when there are none.")


class DailyStats(BaseModel):
    """Per-day summary of the trades closed on one date."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    total_trades: int
    winning_trades: int
    losing_trades: int
    gross_profit: float
    total_commission: float
    net_pl: float
    win_rate: float


class EquityPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    equity: float
