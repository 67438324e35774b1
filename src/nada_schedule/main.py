"""CLI entry point for the NADA depreciation schedule exports.

Usage:
    python -m src.nada_schedule.main --snapshot data/snapshots/car_12_2024.json
    python -m src.nada_schedule.main --car-id 12 --year 2024
    python -m src.nada_schedule.main --car-id 12 --year 2024 --log
    python -m src.nada_schedule.main --template xlsx --year 2024 --output-dir data/exports
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from ..common.config import settings
from ..common.logging import setup_logging
from ..common.models import DepreciationSnapshot
from .calculator import lookup_current_cost, nada_change_current, total_equity
from .categories import CHANGE_ROWS, DEFAULT_CATEGORIES, DEFAULT_PRIOR_CATEGORIES, RETAIL_ID
from .client import ApiError, DepreciationClient
from .exporter import ExportError, ScheduleExporter
from .formatting import format_currency, format_percentage

logger = logging.getLogger(__name__)


def load_snapshot(path: str | Path) -> DepreciationSnapshot:
    """Load a car-year snapshot JSON file.

    Raises:
        ValueError: If the file is missing or does not match the snapshot shape.
    """
    path = Path(path)
    if not path.exists():
        raise ValueError(f"Snapshot file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    try:
        return DepreciationSnapshot.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid snapshot {path}: {exc}") from exc


def log_summary(snapshot: DepreciationSnapshot) -> None:
    """Log latest Retail value, latest-month changes and latest equity."""
    year = snapshot.year
    retail = lookup_current_cost(None, RETAIL_ID, snapshot.records, year).current_amount
    logger.info("=== NADA schedule %s: %s ===", year, snapshot.car.make_model or "unknown car")
    logger.info("  Current retail: %s", format_currency(retail))
    for label, _field, _current, category_id in CHANGE_ROWS:
        change = nada_change_current(year, category_id, snapshot.prior_records, snapshot.records)
        logger.info("  %s (current): %s", label, format_percentage(change))
    for month in range(12, 0, -1):
        equity = total_equity(month, snapshot.records, year, snapshot.categories)
        if equity:
            logger.info("  Total equity (month %d): %s", month, format_currency(equity))
            break


def log_change_history(client: DepreciationClient, car_id: int, year: str | None = None) -> int:
    """Log the schedule's edit history for a car and return the entry count."""
    item = f"NADA-depreciation-schedule-{year}" if year else None
    count = 0
    logger.info("=== Edit history for car %d ===", car_id)
    for count, entry in enumerate(client.iter_change_log(car_id, item=item), start=1):
        logger.info(
            "  %d. %s | %s | %s | %s | %s | %s -> %s",
            count,
            entry.fullname or "N/A",
            entry.created or "",
            entry.item_label,
            entry.category_name or "N/A",
            entry.date or "",
            entry.old_value,
            entry.new_value,
        )
    if count == 0:
        logger.info("  No history entries")
    return count


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="NADA Depreciation Schedule export")
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--snapshot",
        type=str,
        help="Car-year snapshot JSON (year, car, categories, prior_categories, records, prior_records)",
    )
    source.add_argument(
        "--car-id",
        type=int,
        help="Car id to fetch from the back-office API",
    )
    parser.add_argument(
        "--year",
        type=str,
        default=None,
        help=f"Schedule year (default {settings.default_year}, or the snapshot's year)",
    )
    parser.add_argument(
        "--template",
        choices=["csv", "xlsx"],
        help="Write the all-zero fill-in template instead of a data export",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        help="Log the edit history for --car-id instead of exporting",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        help="Directory for the exported file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging (default level comes from settings log_level)",
    )

    args = parser.parse_args(argv)
    try:
        setup_logging(verbose=args.verbose)
    except ValueError as exc:
        parser.error(str(exc))

    if not args.template and not args.snapshot and args.car_id is None:
        parser.error("Either --snapshot, --car-id or --template is required")
    if args.log and args.car_id is None:
        parser.error("--log requires --car-id")

    exporter = ScheduleExporter(output_dir=args.output_dir)

    try:
        if args.log:
            with DepreciationClient() as client:
                log_change_history(client, args.car_id, args.year)
            return 0
        if args.template:
            year = args.year or settings.default_year
            if args.template == "xlsx":
                path = exporter.export_template_xlsx(DEFAULT_CATEGORIES, DEFAULT_PRIOR_CATEGORIES, year)
            else:
                path = exporter.export_template_csv(DEFAULT_CATEGORIES, DEFAULT_PRIOR_CATEGORIES, year)
        else:
            if args.snapshot:
                snapshot = load_snapshot(args.snapshot)
                if args.year:
                    snapshot.year = args.year
            else:
                with DepreciationClient() as client:
                    snapshot = client.get_snapshot(args.car_id, args.year or settings.default_year)
            log_summary(snapshot)
            path = exporter.export_detailed(snapshot)
    except (ExportError, ApiError, ValueError) as exc:
        logger.error("Export failed: %s", exc)
        print(f"Export failed: {exc}", file=sys.stderr)
        return 1

    logger.info("Output written to %s", path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
