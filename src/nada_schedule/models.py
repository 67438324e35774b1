"""Result types for the depreciation calculator."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..common.models import DepreciationRecord, DepreciationWithAddRecord

# Selector names accepted by nada_change(); camelCase spellings map to fields.
CHANGE_CODES = {
    "changeRetail": "change_retail",
    "changeClean": "change_clean",
    "changeAverage": "change_average",
    "changeRough": "change_rough",
    "currentChangeRetail": "current_change_retail",
    "currentChangeClean": "current_change_clean",
    "currentChangeAverage": "current_change_average",
    "currentChangeRough": "current_change_rough",
}


@dataclass
class CostLookup:
    """Value of one category for a month, plus its latest-month value."""

    amount: float = 0.0
    data_item: DepreciationRecord | DepreciationWithAddRecord | None = None
    current_amount: float = 0.0


@dataclass
class NadaChange:
    """Month-over-month change percentages for the four NADA grades.

    The current_change_* fields are never filled by nada_change(); only
    nada_change_current() computes latest-month changes.
    """

    change_retail: float = 0.0
    change_clean: float = 0.0
    change_average: float = 0.0
    change_rough: float = 0.0
    current_change_retail: float = 0.0
    current_change_clean: float = 0.0
    current_change_average: float = 0.0
    current_change_rough: float = 0.0

    def get(self, code: str) -> float:
        """Return one field by snake_case or camelCase name.

        Unknown codes raise KeyError rather than returning the whole
        NadaChange; call nada_change() without a code for the full result.
        """
        name = CHANGE_CODES.get(code, code)
        if name not in CHANGE_CODES.values():
            raise KeyError(f"Unknown change code: {code}")
        return getattr(self, name)

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in CHANGE_CODES.values()}


@dataclass
class ScheduleRow:
    """One table row: a category with its twelve monthly values."""

    category_id: int
    label: str
    values: list[float] = field(default_factory=list)
    current: float = 0.0
    is_miles: bool = False

    @property
    def average(self) -> float:
        return sum(self.values) / len(self.values) if self.values else 0.0

    def to_dict(self) -> dict:
        return {
            "category_id": self.category_id,
            "label": self.label,
            "values": list(self.values),
            "current": self.current,
            "is_miles": self.is_miles,
        }
