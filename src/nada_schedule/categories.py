"""Default cost categories and role resolution.

The back office serves its category lists from /api/current-cost and
/api/current-cost-with-add. When those lists are empty the schedule falls
back to the defaults below.
"""

from __future__ import annotations

from typing import Sequence

from ..common.models import CategoryRole, CostCategory, CostCategoryWithAdd

# Ids of the four NADA grades compared by the change % table
RETAIL_ID = 1
CLEAN_ID = 2
AVERAGE_ID = 3
ROUGH_ID = 4

# Series names used by the schedule and change charts
GRADE_NAMES = {
    RETAIL_ID: "NADA - Retail",
    CLEAN_ID: "NADA - Clean",
    AVERAGE_ID: "NADA - Average",
    ROUGH_ID: "NADA - Rough",
}

DEFAULT_CATEGORIES: list[CostCategory] = [
    CostCategory(aid=1, name="NADA - Retail", compute_expression="", role=CategoryRole.RETAIL),
    CostCategory(aid=2, name="NADA - Clean", compute_expression="nada-clean", role=CategoryRole.CLEAN),
    CostCategory(aid=3, name="NADA - Average", compute_expression="nada-average", role=CategoryRole.AVERAGE),
    CostCategory(aid=4, name="NADA - Rough", compute_expression="", role=CategoryRole.ROUGH),
    CostCategory(aid=5, name="MILES", compute_expression="", role=CategoryRole.MILEAGE),
    CostCategory(aid=6, name="Amounted Owed on Car $", compute_expression="", role=CategoryRole.AMOUNT_OWED),
]

DEFAULT_PRIOR_CATEGORIES: list[CostCategoryWithAdd] = [
    CostCategoryWithAdd(aid=1, name="NADA - Retail", role=CategoryRole.RETAIL),
    CostCategoryWithAdd(aid=2, name="NADA - Clean", role=CategoryRole.CLEAN),
    CostCategoryWithAdd(aid=3, name="NADA - Average", role=CategoryRole.AVERAGE),
    CostCategoryWithAdd(aid=4, name="NADA - Rough", role=CategoryRole.ROUGH),
    CostCategoryWithAdd(aid=5, name="MILES", role=CategoryRole.MILEAGE),
]

# (label, selector, latest-month selector, category id) for the change % table
CHANGE_ROWS = [
    ("NADA Change Retail %", "change_retail", "current_change_retail", RETAIL_ID),
    ("NADA Change Clean %", "change_clean", "current_change_clean", CLEAN_ID),
    ("NADA Change Average %", "change_average", "current_change_average", AVERAGE_ID),
    ("NADA Change Rough", "change_rough", "current_change_rough", ROUGH_ID),
]


def find_miles_id(categories: Sequence[CostCategory | CostCategoryWithAdd]) -> int | None:
    """Return the id of the first category whose name contains MILES."""
    for category in categories:
        if category.is_miles:
            return category.aid
    return None


def resolve_equity_ids(categories: Sequence[CostCategory]) -> tuple[int, int] | None:
    """Return (retail_id, amount_owed_id) for the equity row.

    Explicit roles win when both are present. Otherwise the first category
    is Retail and the last is Amount Owed, whatever their names.
    """
    if not categories:
        return None

    retail_id = None
    owed_id = None
    for category in categories:
        if category.role == CategoryRole.RETAIL and retail_id is None:
            retail_id = category.aid
        elif category.role == CategoryRole.AMOUNT_OWED and owed_id is None:
            owed_id = category.aid
    if retail_id is not None and owed_id is not None:
        return retail_id, owed_id

    return categories[0].aid, categories[-1].aid
