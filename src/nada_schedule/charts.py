"""Table rows and chart series for the schedule page."""

from __future__ import annotations

from typing import Sequence

from ..common.models import (
    CostCategory,
    CostCategoryWithAdd,
    DepreciationRecord,
    DepreciationWithAddRecord,
)
from .calculator import lookup_current_cost, lookup_prior_cost, nada_change, total_equity
from .categories import CHANGE_ROWS, GRADE_NAMES
from .formatting import MONTH_ABBREVIATIONS
from .models import ScheduleRow


def schedule_rows(
    categories: Sequence[CostCategory | CostCategoryWithAdd],
    records: Sequence[DepreciationRecord | DepreciationWithAddRecord],
    year: str,
    prior: bool = False,
) -> list[ScheduleRow]:
    """One row per category with twelve monthly values and the latest value."""
    lookup = lookup_prior_cost if prior else lookup_current_cost
    rows = []
    for category in categories:
        values = [lookup(month, category.aid, records, year).amount for month in range(1, 13)]
        rows.append(ScheduleRow(
            category_id=category.aid,
            label=category.name,
            values=values,
            current=lookup(None, category.aid, records, year).current_amount,
            is_miles=category.is_miles,
        ))
    return rows


def equity_row(
    categories: Sequence[CostCategory],
    records: Sequence[DepreciationRecord],
    year: str,
) -> ScheduleRow:
    return ScheduleRow(
        category_id=0,
        label="Total Equity in Car",
        values=[total_equity(month, records, year, categories) for month in range(1, 13)],
    )


def change_rows(
    prior_records: Sequence[DepreciationWithAddRecord],
    records: Sequence[DepreciationRecord],
    year: str,
) -> list[ScheduleRow]:
    """Change % rows for the four NADA grades."""
    rows = []
    for label, field_name, _current_field, category_id in CHANGE_ROWS:
        values = [
            nada_change(month, prior_records, records, year, field_name)
            for month in range(1, 13)
        ]
        rows.append(ScheduleRow(category_id=category_id, label=label, values=values))
    return rows


def chart_series(rows: Sequence[ScheduleRow]) -> list[dict]:
    """Reshape rows into per-month points: {"month": "Jan", "NADA - Retail": value, ...}.

    Only the Retail, Clean, Average and Rough rows are plotted. Points are
    keyed by grade name for both value rows and change % rows.
    """
    charted = [row for row in rows if row.category_id in GRADE_NAMES]
    points = []
    for index, month in enumerate(MONTH_ABBREVIATIONS):
        point: dict = {"month": month}
        for row in charted:
            point[GRADE_NAMES[row.category_id]] = row.values[index] if index < len(row.values) else 0.0
        points.append(point)
    return points
