"""Handicap and price helpers for Asian handicap / goal line markets."""

import math
import re
from typing import Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")


def parse_int(value) -> int:
    """Parse the leading integer of a value, 0 when there is none.

    Mirrors how the upstream feed is usually read: "12" -> 12, "7'" -> 7,
    "" / None / "abc" -> 0.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def parse_price(value) -> float:
    """Parse a decimal price such as "0.925"; unparseable values give 0.0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else 0.0
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(1)) if match else 0.0


def parse_handicap(handicap: Optional[str]) -> Optional[float]:
    """Leading numeric value of a handicap string, None when there is none.

    Split lines such as "0.5,1.0" read as their first component (0.5).
    """
    if handicap is None:
        return None
    match = _LEADING_FLOAT.match(str(handicap))
    return float(match.group(1)) if match else None



def format_handicap(value: float) -> str:
    """Format a handicap with two decimals and an explicit plus sign."""
    formatted = f"{value:.2f}"
    return f"+{formatted}" if value > 0 else formatted


def invert_handicap(handicap: str) -> str:
    """Handicap seen from the away side.

    "0" and strings that are not a number are returned unchanged.
    """
    value = parse_handicap(handicap)
    if value is None or value == 0:
        return handicap
    return format_handicap(-value)


def win_profit(stake: float, odds: float) -> float:
    """Net profit of a winning bet at decimal odds."""
    return (stake * odds) - stake
