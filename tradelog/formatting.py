"""
Display formatting for money and percentages.
"""

__all__ = ["format_currency", "format_percent"]


def format_currency(amount: float) -> str:
    """Formats as "+$12.50" for non-negative amounts and "$-12.50" otherwise."""
    prefix = "+" if amount >= 0 else ""
    return f"{prefix}${amount:.2f}"


def format_percent(percent: float) -> str:
    prefix = "+" if percent >= 0 else ""
    return f"{prefix}{percent:.2f}%"
