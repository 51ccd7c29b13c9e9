"""Best-effort numeric parsing and display formatting for report values."""

from __future__ import annotations

import math

Number = int | float


def parse_number(raw: str) -> float | None:
    """Parse ``raw`` as a finite number, or return None."""

    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_amount(raw: str) -> float | None:
    """Parse an OCR amount such as ``5,500`` after dropping thousands separators.

    None marks a misread so callers can tell it apart from a real zero.
    """

    return parse_number(raw.replace(",", ""))


def normalize_number(value: float) -> Number:
    """Store integral values as int so persisted targets read back cleanly."""

    if value.is_integer():
        return int(value)
    return value


def format_number(value: Number) -> str:
    """``1000`` -> ``1,000``; ``1000.5`` -> ``1,000.50``."""

    if value == 0:
        return "0"
    if isinstance(value, int):
        return f"{value:,}"
    if value.is_integer():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


def format_diff(value: Number) -> str:
    formatted = format_number(value)
    if value >= 0:
        return f"+{formatted}"
    return formatted
