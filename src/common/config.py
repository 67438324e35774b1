"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"
DATA_EXPORTS_DIR = DATA_DIR / "exports"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


class ApiSettings(BaseModel):
    """Back-office REST API settings."""
    base_url: str = ""
    request_timeout: int = 30
    max_retries: int = 3
    backoff_base: float = 2.0


class ExportSettings(BaseModel):
    """Settings for the schedule exports."""
    output_dir: str = str(DATA_EXPORTS_DIR)
    template_csv_name: str = "NADA Depreciation Schedule Template.csv"
    template_xlsx_name: str = "NADA Depreciation Schedule Template.xlsx"
    sheet_name: str = "NADA Depreciation"
    first_column_width: int = 25
    month_column_width: int = 12


class Settings(BaseModel):
    """Top-level application settings."""
    api: ApiSettings = Field(default_factory=ApiSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    default_year: str = "2026"
    log_level: str = "INFO"

    @classmethod
    def load(cls, settings_path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, falling back to defaults.

        Environment variables override the file:
        NADA_API_BASE_URL, NADA_REQUEST_TIMEOUT, NADA_EXPORT_DIR, NADA_LOG_LEVEL.
        """
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        settings = cls(**data)

        if url := os.getenv("NADA_API_BASE_URL"):
            settings.api.base_url = url
        if timeout := os.getenv("NADA_REQUEST_TIMEOUT"):
            settings.api.request_timeout = int(timeout)
        if export_dir := os.getenv("NADA_EXPORT_DIR"):
            settings.export.output_dir = export_dir
        if log_level := os.getenv("NADA_LOG_LEVEL"):
            settings.log_level = log_level
        return settings

    @property
    def export_abs_dir(self) -> Path:
        """Resolve export dir relative to project root."""
        p = Path(self.export.output_dir)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


# Singleton settings instance
settings = Settings.load()
