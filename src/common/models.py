"""Shared Pydantic data models for the NADA schedule engine.

These models define the data contract with the back-office REST API.
The API serves camelCase keys; every model also accepts snake_case field
names so snapshots and tests can be written either way.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


# === Enums ===

class CategoryRole(str, Enum):
    """Semantic role of a cost category in the schedule."""
    RETAIL = "retail"
    CLEAN = "clean"
    AVERAGE = "average"
    ROUGH = "rough"
    MILEAGE = "mileage"
    AMOUNT_OWED = "amount_owed"


# === Depreciation records ===

class DepreciationRecord(BaseModel):
    """One (category, month) value of the current-year series."""
    aid: int = Field(default=0, alias="nadaDepreciationAid")
    category_id: int = Field(alias="nadaDepreciationId")
    car_id: int = Field(default=0, alias="nadaDepreciationCarId")
    date: str = Field(alias="nadaDepreciationDate", description="YYYY-MM")
    amount: float = Field(default=0.0, alias="nadaDepreciationAmount")
    active: bool = Field(default=True, alias="nadaDepreciationIsActive")

    model_config = {"populate_by_name": True}


class DepreciationWithAddRecord(BaseModel):
    """One (category, month) value of the prior-year (with-add) series."""
    aid: int = Field(default=0, alias="nadaDepreciationWithAddAid")
    category_id: int = Field(alias="nadaDepreciationWithAddId")
    car_id: int = Field(default=0, alias="nadaDepreciationWithAddCarId")
    date: str = Field(alias="nadaDepreciationWithAddDate", description="YYYY-MM")
    amount: float = Field(default=0.0, alias="nadaDepreciationWithAddAmount")
    active: bool = Field(default=True, alias="nadaDepreciationWithAddIsActive")

    model_config = {"populate_by_name": True}


# === Categories ===

class CostCategory(BaseModel):
    """Current-year cost category (Retail, Clean, ..., Amount Owed)."""
    aid: int = Field(alias="currentCostAid")
    name: str = Field(alias="currentCostName")
    compute_expression: str | None = Field(default=None, alias="currentCostCompute")
    active: bool = Field(default=True, alias="currentCostIsActive")
    role: CategoryRole | None = None

    model_config = {"populate_by_name": True}

    @property
    def is_miles(self) -> bool:
        return "MILES" in self.name


class CostCategoryWithAdd(BaseModel):
    """Prior-year cost category. Has no Amount Owed row."""
    aid: int = Field(alias="currentCostWithAddAid")
    name: str = Field(alias="currentCostWithAddName")
    active: bool = Field(default=True, alias="currentCostWithAddIsActive")
    role: CategoryRole | None = None

    model_config = {"populate_by_name": True}

    @property
    def is_miles(self) -> bool:
        return "MILES" in self.name


# === Car identity ===

class CarOwner(BaseModel):
    """Client who owns the car."""
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    phone: str | None = None
    email: str | None = None

    model_config = {"populate_by_name": True}


class CarProfile(BaseModel):
    """Car fields used by the export header block."""
    id: int | None = None
    make_model: str | None = Field(default=None, alias="makeModel")
    year: int | str | None = None
    vin: str | None = None
    license_plate: str | None = Field(default=None, alias="licensePlate")
    turo_link: str | None = Field(default=None, alias="turoLink")
    admin_turo_link: str | None = Field(default=None, alias="adminTuroLink")
    owner: CarOwner | None = None

    model_config = {"populate_by_name": True}

    @property
    def owner_full_name(self) -> str:
        if self.owner is None:
            return ""
        return f"{self.owner.first_name} {self.owner.last_name}"


# === Snapshot ===

class DepreciationSnapshot(BaseModel):
    """Everything needed to export one car-year schedule."""
    year: str
    car: CarProfile = Field(default_factory=CarProfile)
    categories: list[CostCategory] = []
    prior_categories: list[CostCategoryWithAdd] = []
    records: list[DepreciationRecord] = []
    prior_records: list[DepreciationWithAddRecord] = []


# === Edit history ===

CHANGE_LOG_PAGE_SIZE = 20


class ChangeLogEntry(BaseModel):
    """One car-backlog row written when a schedule value is created or edited."""
    aid: int | None = Field(default=None, alias="carBacklogAid")
    fullname: str | None = None
    created: str | None = Field(default=None, alias="carBacklogCreated")
    item: str | None = Field(default=None, alias="carBacklogItem")
    category_name: str | None = Field(default=None, alias="carBacklogCategoryName")
    date: str | None = Field(default=None, alias="carBacklogDate", description="YYYY-MM")
    old_amount: int | float | str | None = Field(default=None, alias="carBacklogOldAmount")
    old_values: str | None = Field(default=None, alias="carBacklogOldValues")
    new_amount: int | float | str | None = Field(default=None, alias="carBacklogNewAmount")
    new_values: str | None = Field(default=None, alias="carBacklogNewValues")

    model_config = {"populate_by_name": True}

    @property
    def item_label(self) -> str:
        """Backlog item slug with dashes shown as spaces."""
        return self.item.replace("-", " ") if self.item else "N/A"

    @property
    def old_value(self) -> str:
        return str(self.old_amount or self.old_values or "0")

    @property
    def new_value(self) -> str:
        return str(self.new_amount or self.new_values or "0")


class ChangeLogPage(BaseModel):
    """One page of the edit history; pages hold CHANGE_LOG_PAGE_SIZE rows."""
    data: list[ChangeLogEntry] = []
    page: int = 1
    total: int = 0
    count: int = 0

    @property
    def has_next(self) -> bool:
        total_pages = -(-self.total // CHANGE_LOG_PAGE_SIZE)
        return self.page < total_pages
