"""Shared test fixtures for the NADA schedule engine."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.models import (
    CarProfile,
    DepreciationRecord,
    DepreciationSnapshot,
    DepreciationWithAddRecord,
)
from src.nada_schedule.categories import DEFAULT_CATEGORIES, DEFAULT_PRIOR_CATEGORIES


def make_record(category_id: int, date: str, amount: float) -> DepreciationRecord:
    return DepreciationRecord(category_id=category_id, date=date, amount=amount, car_id=12)


def make_prior(category_id: int, date: str, amount: float) -> DepreciationWithAddRecord:
    return DepreciationWithAddRecord(category_id=category_id, date=date, amount=amount, car_id=12)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return PROJECT_ROOT / "tests" / "fixtures"


@pytest.fixture
def sample_car() -> CarProfile:
    return CarProfile.model_validate({
        "id": 12,
        "makeModel": "Toyota Camry",
        "year": 2024,
        "vin": "4T1BF1FK5CU123456",
        "licensePlate": "8ABC123",
        "turoLink": "https://turo.com/us/en/car-rental/12",
        "adminTuroLink": "",
        "owner": {
            "firstName": "Jamie",
            "lastName": "Rivera",
            "phone": "555-0100",
            "email": "jamie@example.com",
        },
    })


@pytest.fixture
def current_records() -> list[DepreciationRecord]:
    """Current series for 2024: Jan-Mar values, latest month is March."""
    return [
        make_record(1, "2024-01", 22000),
        make_record(1, "2024-02", 21000),
        make_record(1, "2024-03", 20000),
        make_record(2, "2024-03", 18000),
        make_record(3, "2024-03", 16000),
        make_record(4, "2024-03", 12000),
        make_record(5, "2024-03", 31500),
        make_record(6, "2024-03", 8000),
        make_record(1, "2023-12", 23000),
    ]


@pytest.fixture
def prior_records() -> list[DepreciationWithAddRecord]:
    """Prior series for 2024: Jan-Mar values, latest month is March."""
    return [
        make_prior(1, "2024-01", 24000),
        make_prior(1, "2024-03", 25000),
        make_prior(2, "2024-03", 20000),
        make_prior(3, "2024-03", 0),
        make_prior(4, "2024-03", 15000),
        make_prior(5, "2024-03", 20000),
    ]


@pytest.fixture
def sample_snapshot(sample_car, current_records, prior_records) -> DepreciationSnapshot:
    return DepreciationSnapshot(
        year="2024",
        car=sample_car,
        categories=list(DEFAULT_CATEGORIES),
        prior_categories=list(DEFAULT_PRIOR_CATEGORIES),
        records=current_records,
        prior_records=prior_records,
    )
