"""NADA depreciation schedule calculator.

Pure functions over one car-year of monthly records:

- lookup_current_cost / lookup_prior_cost: value for a month and the
  latest-month ("CURRENT") value of a category
- nada_change / nada_change_current: prior -> current change percentages
- total_equity: Retail minus Amount Owed for a month

Missing data never raises. A month, category or year without records
yields 0 so a car-year that has not been operated yet exports cleanly.

Year matching differs between the two series on the latest-month path:
the prior series compares the year part of the date string numerically,
the current series compares the year of the parsed date. Both are kept
as separate strategies and covered by tests.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime
from typing import Callable, Sequence

from ..common.models import CostCategory, DepreciationRecord, DepreciationWithAddRecord
from .categories import CHANGE_ROWS, resolve_equity_ids
from .models import CostLookup, NadaChange

logger = logging.getLogger(__name__)

Record = DepreciationRecord | DepreciationWithAddRecord

# Latest-month matching starts from the epoch and requires a strictly later date
_EPOCH = date(1970, 1, 1)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_leading_int(value: str) -> int | None:
    """Leading-integer parse: "03" -> 3, "3x" -> 3, "x" -> None."""
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def _to_number(value: str) -> int | None:
    """Whole-string numeric parse: "2024" -> 2024, "2024x" -> None."""
    try:
        return int(value.strip())
    except ValueError:
        return None


def _split_date(value: str) -> tuple[str, int | None]:
    """Split "YYYY-MM" into the year string and month number."""
    parts = value.split("-")
    month = parse_leading_int(parts[1]) if len(parts) > 1 else None
    return parts[0], month


def _parse_date(value: str) -> date | None:
    """Parse "YYYY-MM" as the first day of that month."""
    try:
        return datetime.strptime(f"{value}-01", "%Y-%m-%d").date()
    except ValueError:
        return None


def _string_year(record: Record) -> int | None:
    return _to_number(_split_date(record.date)[0])


def _parsed_year(record: Record) -> int | None:
    parsed = _parse_date(record.date)
    return parsed.year if parsed else None


def _year_max_month(records: Sequence[Record], year: str) -> int:
    """Highest month present for the year across all categories, 0 if none."""
    months = []
    for record in records:
        record_year, month = _split_date(record.date)
        if record_year == year and month is not None:
            months.append(month)
    return max(months) if months else 0


def _lookup(
    month: int | None,
    category_id: int,
    records: Sequence[Record],
    year: str,
    year_of: Callable[[Record], int | None],
) -> CostLookup:
    result = CostLookup()
    max_month = _year_max_month(records, year)
    target_year = _to_number(year)
    max_date = _EPOCH

    for record in records:
        if record.category_id != category_id:
            continue
        record_year, record_month = _split_date(record.date)

        if month is not None and record_month == month and record_year == year:
            result.amount = float(record.amount)
            result.data_item = record

        record_date = _parse_date(record.date)
        if (
            target_year is not None
            and year_of(record) == target_year
            and record_date is not None
            and record_date > max_date
            and record_month == max_month
        ):
            max_date = record_date
            result.current_amount = float(record.amount)

    return result


def lookup_prior_cost(
    month: int | None,
    category_id: int,
    prior_records: Sequence[DepreciationWithAddRecord],
    year: str,
) -> CostLookup:
    """Look up a prior-series (with-add) category value.

    Args:
        month: Month number 1-12, or None to fetch only the latest value.
        category_id: Category id to match.
        prior_records: Prior-year series records.
        year: Four-digit year string.

    Returns:
        CostLookup with the month's amount, its record, and the value at
        the year's highest month.
    """
    return _lookup(month, category_id, prior_records, year, _string_year)


def lookup_current_cost(
    month: int | None,
    category_id: int,
    records: Sequence[DepreciationRecord],
    year: str,
) -> CostLookup:
    """Look up a current-series category value.

    Same contract as lookup_prior_cost(); the latest-month match compares
    the year of the parsed record date.
    """
    return _lookup(month, category_id, records, year, _parsed_year)


def nada_change(
    month: int,
    prior_records: Sequence[DepreciationWithAddRecord],
    records: Sequence[DepreciationRecord],
    year: str,
    code: str | None = None,
) -> NadaChange | float:
    """Change percentage of the four NADA grades for one month.

    (current - prior) / prior * 100 per grade; a zero prior value leaves
    that grade at 0. When code names a field (e.g. "changeRetail" or
    "change_retail") only that value is returned.
    """
    change = NadaChange()

    if prior_records and records:
        for prior in prior_records:
            prior_year, prior_month = _split_date(prior.date)
            if prior_month != month or prior_year != year:
                continue
            for current in records:
                current_year, current_month = _split_date(current.date)
                if current_month != month or current_year != year:
                    continue
                for _label, field_name, _current_field, category_id in CHANGE_ROWS:
                    if prior.category_id == category_id and current.category_id == category_id:
                        prev_amount = float(prior.amount)
                        if prev_amount != 0:
                            setattr(
                                change,
                                field_name,
                                (float(current.amount) - prev_amount) / prev_amount * 100,
                            )

    if code is not None:
        return change.get(code)
    return change


def nada_change_current(
    year: str,
    category_id: int,
    prior_records: Sequence[DepreciationWithAddRecord],
    records: Sequence[DepreciationRecord],
) -> float:
    """Change percentage between each series' latest month for a category."""
    prev_amount = _lookup(None, category_id, prior_records, year, _parsed_year).current_amount
    current_amount = _lookup(None, category_id, records, year, _parsed_year).current_amount

    if prev_amount == 0:
        return 0.0
    result = (current_amount - prev_amount) / prev_amount * 100
    return result if math.isfinite(result) else 0.0


def total_equity(
    month: int,
    records: Sequence[DepreciationRecord],
    year: str,
    categories: Sequence[CostCategory] | None,
) -> float:
    """Total equity in the car: Retail value minus Amount Owed for a month."""
    if not categories:
        return 0.0

    retail_id, owed_id = resolve_equity_ids(categories)
    retail = 0.0
    amount_owed = 0.0

    for record in records:
        record_year, record_month = _split_date(record.date)
        if record_month != month or record_year != year:
            continue
        if record.category_id == retail_id:
            retail = float(record.amount)
        if record.category_id == owed_id:
            amount_owed = float(record.amount)

    return retail - amount_owed
