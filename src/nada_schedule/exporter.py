"""NADA depreciation schedule exporter.

Two exports:
- detailed CSV: car header block, prior-year schedule, change % table and
  current-year schedule with the equity row
- template: an all-zero fill-in sheet, as CSV or XLSX

Files are written with a UTF-8 byte-order mark so spreadsheet apps pick up
the encoding. The XLSX writer (openpyxl) is imported only when a workbook
is requested.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Sequence

from ..common.config import ExportSettings, settings
from ..common.models import (
    CarProfile,
    CostCategory,
    CostCategoryWithAdd,
    DepreciationSnapshot,
)
from .calculator import (
    lookup_current_cost,
    lookup_prior_cost,
    nada_change,
    nada_change_current,
    parse_leading_int,
    total_equity,
)
from .categories import CHANGE_ROWS, RETAIL_ID
from .formatting import MONTH_ABBREVIATIONS, fixed, plain_number, sanitize_field

logger = logging.getLogger(__name__)


class ExportError(Exception):
    """Raised when an export file cannot be produced."""


class ScheduleExporter:
    """Build and write NADA schedule exports.

    Usage:
        exporter = ScheduleExporter(output_dir="data/exports")
        path = exporter.export_detailed(snapshot)
        path = exporter.export_template_xlsx(categories, prior_categories, "2024")
    """

    def __init__(
        self,
        output_dir: str | Path | None = None,
        export_settings: ExportSettings | None = None,
    ) -> None:
        self.export_settings = export_settings or settings.export
        self.output_dir = Path(output_dir) if output_dir else settings.export_abs_dir

    # ================================================================
    # Detailed export
    # ================================================================

    @staticmethod
    def detailed_file_name(car: CarProfile, year: str) -> str:
        return (
            f"Export {year} {car.make_model or ''}-{car.owner_full_name}"
            " NADA depreciation schedule.csv"
        )

    @staticmethod
    def build_detailed_csv(snapshot: DepreciationSnapshot) -> str:
        """Render the full schedule document as delimited text."""
        car = snapshot.car
        year = snapshot.year
        car_year = str(car.year) if car.year else ""
        previous_year = _previous_year(car.year) if car.year else year
        month_headers = "".join(f"{month} {year}, " for month in MONTH_ABBREVIATIONS)

        out = _header_block(car)

        # Prior-year schedule
        out += f",NADA DEPRECIATION SCHEDULE {previous_year}\n "
        out += ",CURRENT COST OF VEHICLES , " + month_headers + "CURRENT \n"
        for category in snapshot.prior_categories:
            out += "," + sanitize_field(category.name) + ","
            for month in range(1, 13):
                amount = lookup_prior_cost(month, category.aid, snapshot.prior_records, year).amount
                out += _raw_cell(amount, category.is_miles) + ","
            current = lookup_prior_cost(None, category.aid, snapshot.prior_records, year).current_amount
            out += _raw_cell(current, category.is_miles) + "\n"

        # Change % table
        out += f"\n ,NADA CHANGE % {previous_year} {car_year or year}\n "
        out += ",CATEGORY , " + month_headers + "AVERAGE ,CURRENT \n"
        for label, field_name, current_field, category_id in CHANGE_ROWS:
            out += f",{label} ,"
            total_average = 0.0
            dead_current = 0.0
            for month in range(1, 13):
                amount = nada_change(
                    month, snapshot.prior_records, snapshot.records, year, field_name
                )
                total_average += amount / 12
                dead_current = nada_change(
                    month, snapshot.prior_records, snapshot.records, year, current_field
                )
                out += sanitize_field(fixed(amount)) + "%,"

            # The Retail row reads the never-populated current_change_retail
            # field, so its CURRENT column is always 0.00%.
            if category_id == RETAIL_ID:
                current = dead_current
            else:
                current = nada_change_current(
                    year, category_id, snapshot.prior_records, snapshot.records
                )
            out += sanitize_field(fixed(total_average)) + "%," + sanitize_field(fixed(current)) + "%\n"

        # Current-year schedule
        out += f"\n ,NADA DEPRECIATION SCHEDULE {car_year or year}\n "
        out += ",CURRENT COST OF VEHICLES , " + month_headers + "CURRENT \n"
        for category in snapshot.categories:
            out += "," + sanitize_field(category.name) + ","
            for month in range(1, 13):
                amount = lookup_current_cost(month, category.aid, snapshot.records, year).amount
                out += _fixed_cell(amount, category.is_miles) + ","
            current = lookup_current_cost(None, category.aid, snapshot.records, year).current_amount
            out += _fixed_cell(current, category.is_miles) + "\n"

        out += ",Total Equity in Car ,"
        for month in range(1, 13):
            equity = total_equity(month, snapshot.records, year, snapshot.categories)
            out += sanitize_field(f"$ {fixed(equity)}") + ","

        return out

    def export_detailed(self, snapshot: DepreciationSnapshot) -> Path:
        """Write the detailed schedule CSV and return its path."""
        content = self.build_detailed_csv(snapshot)
        path = self.save_data(content, self.detailed_file_name(snapshot.car, snapshot.year))
        logger.info(
            "Exported NADA schedule %s for %s (%d current, %d prior records) -> %s",
            snapshot.year,
            snapshot.car.make_model or "unknown car",
            len(snapshot.records),
            len(snapshot.prior_records),
            path,
        )
        return path

    # ================================================================
    # Template export
    # ================================================================

    @staticmethod
    def build_template_rows(
        categories: Sequence[CostCategory],
        prior_categories: Sequence[CostCategoryWithAdd],
        year: str,
    ) -> list[list]:
        """All-zero template rows: prior-year section, blank row, current-year section."""
        previous_year = _previous_year(year)
        header = ["CURRENT COST OF VEHICLES"] + [f"{m} {year}" for m in MONTH_ABBREVIATIONS] + ["CURRENT"]

        rows: list[list] = [[f"NADA DEPRECIATION SCHEDULE {previous_year}"], header]
        for category in sorted(prior_categories, key=lambda c: c.aid):
            rows.append([category.name] + [0] * 13)
        rows.append([])
        rows.append([f"NADA DEPRECIATION SCHEDULE {year}"])
        rows.append(list(header))
        for category in sorted(categories, key=lambda c: c.aid):
            rows.append([category.name] + [0] * 13)
        return rows

    def build_template_csv(
        self,
        categories: Sequence[CostCategory],
        prior_categories: Sequence[CostCategoryWithAdd],
        year: str,
    ) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerows(self.build_template_rows(categories, prior_categories, year))
        return buffer.getvalue()

    def export_template_csv(
        self,
        categories: Sequence[CostCategory],
        prior_categories: Sequence[CostCategoryWithAdd],
        year: str,
    ) -> Path:
        content = self.build_template_csv(categories, prior_categories, year)
        path = self.save_data(content, self.export_settings.template_csv_name)
        logger.info("Exported NADA template CSV -> %s", path)
        return path

    def export_template_xlsx(
        self,
        categories: Sequence[CostCategory],
        prior_categories: Sequence[CostCategoryWithAdd],
        year: str,
    ) -> Path:
        """Write the template as a single-sheet workbook.

        Raises:
            ExportError: If the workbook library cannot be loaded.
        """
        try:
            from openpyxl import Workbook
            from openpyxl.utils import get_column_letter
        except ImportError as exc:
            logger.error("Failed to load workbook library: %s", exc)
            raise ExportError(
                "Failed to load the Excel export library. Install openpyxl and try again."
            ) from exc

        rows = self.build_template_rows(categories, prior_categories, year)
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = self.export_settings.sheet_name
        for row in rows:
            sheet.append(row)

        sheet.column_dimensions["A"].width = self.export_settings.first_column_width
        for col_idx in range(2, 2 + len(MONTH_ABBREVIATIONS) + 1):
            sheet.column_dimensions[get_column_letter(col_idx)].width = (
                self.export_settings.month_column_width
            )

        path = self._target_path(self.export_settings.template_xlsx_name)
        workbook.save(path)
        logger.info("Exported NADA template workbook -> %s", path)
        return path

    # ================================================================
    # Output
    # ================================================================

    def save_data(self, content: str, file_name: str) -> Path:
        """Write text with a UTF-8 BOM into the output directory."""
        path = self._target_path(file_name)
        with open(path, "w", encoding="utf-8-sig", newline="") as f:
            f.write(content)
        logger.debug("Wrote %d characters to %s", len(content), path)
        return path

    def _target_path(self, file_name: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        safe_name = file_name.replace("/", " ").replace("\\", " ")
        return self.output_dir / safe_name


# ================================================================
# Helper functions
# ================================================================

def _header_block(car: CarProfile) -> str:
    owner = car.owner
    car_name = f"{car.make_model or ''} {car.year or ''}"
    lines = [
        ("CAR NAME ,", car_name),
        ("VIN #,", car.vin or ""),
        ("LICENSE ,", car.license_plate or ""),
        ("NAME ,", car.owner_full_name),
        ("CONTACT # ,", (owner.phone if owner else None) or ""),
        ("EMAIL # ,", (owner.email if owner else None) or ""),
        ("TURO LINK ,", car.turo_link or ""),
        ("ADMIN TURO LINK ,", car.admin_turo_link or ""),
    ]
    return "".join(f"{label}{sanitize_field(value)}\n" for label, value in lines) + "\n"


def _previous_year(car_year: int | str) -> str:
    """Year before the car's model year; "NaN" when the year has no leading digits."""
    parsed = parse_leading_int(str(car_year))
    return str(parsed - 1) if parsed is not None else "NaN"


def _raw_cell(amount: float, is_miles: bool) -> str:
    """Prior-year cell: unformatted number, "$ " prefix unless mileage."""
    if is_miles:
        return sanitize_field(plain_number(amount))
    return sanitize_field(f"$ {plain_number(amount)}")


def _fixed_cell(amount: float, is_miles: bool) -> str:
    """Current-year cell: mileage unformatted, money with two decimals."""
    if is_miles:
        return sanitize_field(plain_number(amount))
    return sanitize_field(f"$ {fixed(amount)}")
