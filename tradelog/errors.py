"""
Exception hierarchy for the trade journal.

Raw trade input is validated at a single boundary (the metrics deriver and
the write path built on it). Everything downstream assumes validated trades.
"""

__all__ = [
    "TradeLogError",
    "InvalidInput",
    "InvalidDirection",
    "InvalidNumericField",
    "DivisionByZero",
    "InvalidTradeRecord",
    "JournalError",
    "TradeNotFound",
]


class TradeLogError(Exception):
    """Base class for all errors raised by tradelog."""


class InvalidInput(TradeLogError):
    """Raw trade input was rejected; nothing was derived or stored."""


class InvalidDirection(InvalidInput):
    """Direction is neither LONG nor SHORT."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid direction: {value!r} (expected 'LONG' or 'SHORT')")


class InvalidNumericField(InvalidInput):
    """A numeric field is missing or not a finite number after coercion."""

    def __init__(self, field: str, value: object, reason: str = "must be a finite number") -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid numeric field '{field}': {value!r} {reason}")


class DivisionByZero(InvalidNumericField):
    """Entry price is zero, so the return percentage is undefined."""

    def __init__(self, field: str = "entry_price", value: object = 0.0) -> None:
        super().__init__(field, value, reason="must be non-zero (return percentage is undefined)")


class InvalidTradeRecord(InvalidInput):
    """The assembled trade record failed model validation."""


class JournalError(TradeLogError):
    """The journal file could not be read or written."""


class TradeNotFound(JournalError):
    """No trade with the requested id exists in the journal."""

    def __init__(self, trade_id: str) -> None:
        self.trade_id = trade_id
        super().__init__(f"Trade not found: {trade_id}")
