"""NADA Depreciation Schedule - calculator, exports and API client."""

from .calculator import (
    lookup_current_cost,
    lookup_prior_cost,
    nada_change,
    nada_change_current,
    total_equity,
)
from .client import ApiError, DepreciationClient
from .exporter import ExportError, ScheduleExporter
from .formatting import format_currency, format_percentage
from .models import CostLookup, NadaChange, ScheduleRow

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "CostLookup",
    "DepreciationClient",
    "ExportError",
    "NadaChange",
    "ScheduleExporter",
    "ScheduleRow",
    "format_currency",
    "format_percentage",
    "lookup_current_cost",
    "lookup_prior_cost",
    "nada_change",
    "nada_change_current",
    "total_equity",
]
