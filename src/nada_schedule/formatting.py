"""Currency, percentage and cell formatting for schedule output.

Rounding follows the browser screens the exports are compared against:
cells and percentages round the exact binary value with ties away from
zero, currency rounds the shortest decimal form of the value the same way.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

_LINE_BREAKS = re.compile(r"\r\n|\n|\r")


def format_currency(value: float) -> str:
    """Format as "$ 1,234.56"."""
    value = _fixed_value(value)
    if not math.isfinite(value):
        return f"$ {_non_finite(value)}"
    return f"$ {_round_half_up(Decimal(repr(value)), 2):,.2f}"


def format_percentage(value: float) -> str:
    """Format as "-20.00%"."""
    return f"{fixed(value)}%"


def fixed(value: float, digits: int = 2) -> str:
    """Fixed-point text with no negative zero: 100.125 -> "100.13"."""
    value = _fixed_value(value)
    if not math.isfinite(value):
        return _non_finite(value)
    return f"{_round_half_up(Decimal(value), digits):.{digits}f}"


def _fixed_value(value: float) -> float:
    # -0.0 + 0.0 == 0.0
    return float(value) + 0.0


def _round_half_up(value: Decimal, digits: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)


def _non_finite(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "Infinity" if value > 0 else "-Infinity"


def plain_number(value: float) -> str:
    """Shortest number text: 20000.0 -> "20000", 20000.5 -> "20000.5"."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def sanitize_field(value: object) -> str:
    """Replace commas and line breaks with spaces to keep CSV columns aligned."""
    text = "" if value is None else str(value)
    return _LINE_BREAKS.sub(" ", text.replace(",", " "))


def generate_months(year: str) -> list[str]:
    """Column headers for a year: ["Jan 2024", ..., "Dec 2024"]."""
    year_num = int(year)
    return [f"{month} {year_num}" for month in MONTH_ABBREVIATIONS]


def all_unique_years(
    current_years: Iterable[dict] | None,
    prior_years: Iterable[dict] | None,
) -> list[str]:
    """Union of the API's all_year entries for both series, newest first.

    Each entry looks like {"date_year": "2024"}; blank years are ignored.
    """
    years: set[str] = set()
    for source in (current_years, prior_years):
        for item in source or []:
            year = item.get("date_year")
            if year:
                years.add(str(year))
    return sorted(years, key=int, reverse=True)
