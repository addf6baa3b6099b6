"""Formatting utilities.

Number and currency formatting for log lines and API previews.
"""

from __future__ import annotations

import math


def format_number(value: float) -> str:
    """Format a quantity as a floored integer with thousands separators."""
    return f"{math.floor(value):,}"


def format_usd(value: float) -> str:
    """Format an amount of money as floored US dollars."""
    amount = math.floor(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,}.00"


def format_compact_number(value: float) -> str:
    """Format a number with a K/M/B/T suffix and one decimal."""
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if abs(value) >= threshold:
            text = f"{value / threshold:.1f}".rstrip("0").rstrip(".")
            return f"{text}{suffix}"
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return text


def format_percent(value: float) -> str:
    """Format a fraction as percentage."""
    return f"{value * 100:.0f}%"
