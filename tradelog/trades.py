"""
The write path: turning raw trade input into validated Trade records.

Raw payloads come from the CLI or any other caller that creates or edits a
trade. Metrics are derived before anything is assembled, so invalid input is
rejected as a whole and no partially-derived record ever exists.
"""
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Mapping, Optional

import pandas as pd
from pydantic import ValidationError

from tradelog.core.metrics import coerce_number, derive_metrics, parse_direction
from tradelog.errors import InvalidTradeRecord
from tradelog.types import Trade

__all__ = ["build_trade", "revise_trade"]

log = logging.getLogger(__name__)

# Accepted payload keys for each raw field, wire alias first.
_PAYLOAD_KEYS: Dict[str, tuple] = {
    "date": ("date", "trade_date"),
    "asset": ("asset",),
    "direction": ("direction",),
    "entry_price": ("entryPrice", "entry_price"),
    "exit_price": ("exitPrice", "exit_price"),
    "position_size": ("positionSize", "position_size"),
    "commission": ("commission",),
    "notes": ("notes",),
}


def _pick(payload: Mapping[str, Any], field: str) -> Any:
    for key in _PAYLOAD_KEYS[field]:
        if key in payload:
            return payload[key]
    return None


def _parse_trade_date(value: Any) -> date:
    """Accepts a date, a datetime or an ISO-like string; keeps only the calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidTradeRecord("Trade date is required.")
    if not isinstance(value, str):
        raise InvalidTradeRecord(f"Invalid trade date: {value!r}")
    try:
        parsed = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise InvalidTradeRecord(f"Invalid trade date: {value!r}") from e
    if pd.isna(parsed):
        raise InvalidTradeRecord(f"Invalid trade date: {value!r}")
    return parsed.date()


def _assemble(
    payload: Mapping[str, Any],
    trade_id: str,
    created_at: datetime,
    updated_at: datetime,
) -> Trade:
    direction = parse_direction(_pick(payload, "direction"))
    entry_price = coerce_number("entry_price", _pick(payload, "entry_price"))
    exit_price = coerce_number("exit_price", _pick(payload, "exit_price"))
    position_size = coerce_number("position_size", _pick(payload, "position_size"))
    raw_commission = _pick(payload, "commission")
    commission = 0.0 if raw_commission is None else coerce_number("commission", raw_commission)

    # Fail fast before any record is assembled.
    metrics = derive_metrics(direction, entry_price, exit_price, position_size, commission)

    notes = _pick(payload, "notes")
    asset = _pick(payload, "asset")
    try:
        return Trade(
            id=trade_id,
            created_at=created_at,
            updated_at=updated_at,
            trade_date=_parse_trade_date(_pick(payload, "date")),
            asset="" if asset is None else str(asset).strip(),
            direction=direction,
            entry_price=entry_price,
            exit_price=exit_price,
            position_size=position_size,
            commission=commission,
            notes=str(notes) if notes else None,
            **metrics.model_dump(),
        )
    except ValidationError as e:
        raise InvalidTradeRecord(f"Trade record failed validation: {e}") from e


def build_trade(
    payload: Mapping[str, Any],
    *,
    trade_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Trade:
    """
    Creates a new Trade from raw input.

    Args:
        payload: Raw fields keyed by wire alias (e.g. "entryPrice") or field
            name (e.g. "entry_price"). A missing commission means 0.
        trade_id: Identifier to use. A random hex id is generated if omitted.
        now: Creation timestamp. Defaults to the current UTC time.

    Raises:
        InvalidInput: any raw field is invalid. Nothing is returned in that case.
    """
    now = now or datetime.now(timezone.utc)
    trade = _assemble(payload, trade_id or uuid.uuid4().hex, created_at=now, updated_at=now)
    log.info(f"Built trade {trade.id}: {trade.direction.value} {trade.asset} net={trade.net_pl:.2f}")
    return trade


def revise_trade(trade: Trade, payload: Mapping[str, Any], *, now: Optional[datetime] = None) -> Trade:
    """
    Replaces the raw fields of an existing trade, recomputing all derived fields.

    The payload is a full replacement: fields it omits fall back to their
    defaults, as for a new trade. The id and creation time are kept.
    """
    revised = _assemble(
        payload,
        trade.id,
        created_at=trade.created_at,
        updated_at=now or datetime.now(timezone.utc),
    )
    log.info(f"Revised trade {revised.id}: net {trade.net_pl:.2f} -> {revised.net_pl:.2f}")
    return revised
