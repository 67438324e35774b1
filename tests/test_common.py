"""Tests for shared common modules: models, config, logging."""

import logging

import pytest
import yaml

from src.common.config import Settings
from src.common.logging import resolve_level, setup_logging
from src.common.models import (
    CarProfile,
    CategoryRole,
    ChangeLogEntry,
    ChangeLogPage,
    CostCategory,
    CostCategoryWithAdd,
    DepreciationRecord,
    DepreciationSnapshot,
    DepreciationWithAddRecord,
)


class TestDepreciationRecord:
    def test_api_aliases(self):
        record = DepreciationRecord.model_validate({
            "nadaDepreciationAid": 7,
            "nadaDepreciationId": 2,
            "nadaDepreciationCarId": 12,
            "nadaDepreciationDate": "2024-05",
            "nadaDepreciationAmount": "18000.25",
            "nadaDepreciationIsActive": False,
        })
        assert record.aid == 7
        assert record.category_id == 2
        assert record.amount == 18000.25
        assert record.active is False

    def test_field_names(self):
        record = DepreciationWithAddRecord(category_id=1, date="2023-12", amount=100)
        assert record.date == "2023-12"
        assert record.active is True

    def test_amount_must_be_numeric(self):
        with pytest.raises(Exception):
            DepreciationRecord(category_id=1, date="2024-01", amount="n/a")


class TestCategories:
    def test_cost_category_aliases(self):
        category = CostCategory.model_validate({
            "currentCostAid": 2,
            "currentCostName": "NADA - Clean",
            "currentCostCompute": "nada-clean",
        })
        assert category.compute_expression == "nada-clean"
        assert category.role is None

    def test_role(self):
        category = CostCategory(aid=6, name="Amounted Owed on Car $", role="amount_owed")
        assert category.role == CategoryRole.AMOUNT_OWED

    def test_is_miles(self):
        assert CostCategoryWithAdd(aid=5, name="MILES").is_miles
        assert not CostCategory(aid=1, name="NADA - Retail").is_miles


class TestCarProfile:
    def test_owner_full_name(self, sample_car):
        assert sample_car.owner_full_name == "Jamie Rivera"

    def test_no_owner(self):
        assert CarProfile().owner_full_name == ""


class TestSnapshot:
    def test_defaults(self):
        snapshot = DepreciationSnapshot(year="2024")
        assert snapshot.records == []
        assert snapshot.car.make_model is None


class TestChangeLogModels:
    def test_entry_aliases_and_fallbacks(self):
        entry = ChangeLogEntry.model_validate({
            "carBacklogAid": 3,
            "carBacklogItem": "NADA-depreciation-schedule-2024",
            "carBacklogOldAmount": 24000,
            "carBacklogNewValues": "25000",
        })
        assert entry.item_label == "NADA depreciation schedule 2024"
        assert entry.old_value == "24000"
        assert entry.new_value == "25000"
        assert ChangeLogEntry().old_value == "0"
        assert ChangeLogEntry().item_label == "N/A"

    @pytest.mark.parametrize("page, total, expected", [
        (1, 0, False),
        (1, 20, False),
        (1, 21, True),
        (2, 40, False),
    ])
    def test_has_next(self, page, total, expected):
        assert ChangeLogPage(page=page, total=total).has_next is expected


class TestSettings:
    def test_defaults_without_file(self, tmp_path, monkeypatch):
        for var in ("NADA_API_BASE_URL", "NADA_REQUEST_TIMEOUT", "NADA_EXPORT_DIR", "NADA_LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings.load(tmp_path / "missing.yaml")
        assert settings.api.request_timeout == 30
        assert settings.export.sheet_name == "NADA Depreciation"
        assert settings.export.first_column_width == 25
        assert settings.log_level == "INFO"

    def test_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("NADA_API_BASE_URL", raising=False)
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.dump({"api": {"base_url": "https://api.example.com"}, "default_year": "2025"}))
        settings = Settings.load(path)
        assert settings.api.base_url == "https://api.example.com"
        assert settings.default_year == "2025"

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NADA_API_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("NADA_REQUEST_TIMEOUT", "5")
        monkeypatch.setenv("NADA_EXPORT_DIR", str(tmp_path))
        monkeypatch.setenv("NADA_LOG_LEVEL", "DEBUG")
        settings = Settings.load(tmp_path / "missing.yaml")
        assert settings.api.base_url == "https://env.example.com"
        assert settings.api.request_timeout == 5
        assert settings.export_abs_dir == tmp_path
        assert settings.log_level == "DEBUG"

    def test_project_config_loads(self, project_root):
        settings = Settings.load(project_root / "config" / "settings.yaml")
        assert settings.export.template_xlsx_name == "NADA Depreciation Schedule Template.xlsx"


class TestLogging:
    @pytest.fixture(autouse=True)
    def restore_package_logger(self):
        logger = logging.getLogger("src")
        handlers, level = list(logger.handlers), logger.level
        yield
        logger.handlers = handlers
        logger.setLevel(level)

    def test_single_handler_on_package_logger(self):
        logger = setup_logging()
        again = setup_logging()
        assert logger is again
        assert logger.name == "src"
        assert [h.get_name() for h in logger.handlers].count("src") == 1

    def test_level_from_settings(self, monkeypatch):
        monkeypatch.setattr("src.common.logging.settings.log_level", "warning")
        assert setup_logging().level == logging.WARNING

    def test_verbose_forces_debug(self):
        logger = setup_logging(level="ERROR", verbose=True)
        assert logger.level == logging.DEBUG
        assert logger.handlers[-1].level == logging.DEBUG

    def test_covers_common_and_schedule_modules(self):
        setup_logging(level="WARNING")
        assert logging.getLogger("src.common.config").getEffectiveLevel() == logging.WARNING
        assert logging.getLogger("src.nada_schedule.client").getEffectiveLevel() == logging.WARNING

    def test_resolve_level(self):
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level(" Info ") == logging.INFO
        assert resolve_level(30) == logging.WARNING

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            resolve_level("LOUD")
