"""Settings, logging and API models shared by the schedule engine."""

from .config import Settings, settings
from .logging import setup_logging
from .models import CarProfile, DepreciationSnapshot

__all__ = [
    "CarProfile",
    "DepreciationSnapshot",
    "Settings",
    "settings",
    "setup_logging",
]
