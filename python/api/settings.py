"""
Settings Module

Loads config/pointbridge.yaml and provides the ledger store and engine to
the routes.
"""

import logging
import os
import threading
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Generator

import yaml

from point_extractor import ExtractorOptions
from point_ledger import IngestionEngine, WorkbookStore

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent

DEFAULT_CONFIG = {
    "store": {
        "workbook_path": "data/point_history.xlsx",
    },
    "extractors": {
        "includePontaManagement": False,
        "includeVPointInvestment": False,
    },
}

# Calls against the same workbook must not interleave within this process
_ingest_lock = threading.Lock()


class Settings:
    """Configuration loaded from pointbridge.yaml with env overrides."""

    def __init__(self, config_dir: Path | str | None = None):
        """Initialize settings.

        Args:
            config_dir: Directory holding pointbridge.yaml
        """
        if config_dir is None:
            config_dir = os.getenv("POINTBRIDGE_CONFIG_DIR", PROJECT_ROOT / "config")

        self.config_path = Path(config_dir) / "pointbridge.yaml"
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML."""
        self.config = {key: dict(value) for key, value in DEFAULT_CONFIG.items()}

        if self.config_path.exists():
            with open(self.config_path) as f:
                data = yaml.safe_load(f) or {}
            for section, values in data.items():
                self.config.setdefault(section, {}).update(values or {})
            logger.info(f"Loaded settings from {self.config_path}")
        else:
            logger.warning(f"Settings file not found: {self.config_path}, using defaults")

    @property
    def workbook_path(self) -> Path:
        path = Path(os.getenv("POINTBRIDGE_WORKBOOK", self.config["store"]["workbook_path"]))
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path

    @property
    def extractor_options(self) -> ExtractorOptions:
        return ExtractorOptions.from_mapping(self.config.get("extractors"))

    @property
    def cors_origins(self) -> list[str]:
        origins = os.getenv("CORS_ORIGINS", self.config.get("api", {}).get("cors_origins", "*"))
        return [o.strip() for o in str(origins).split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings."""
    return Settings()


@contextmanager
def get_engine_context() -> Generator[IngestionEngine, None, None]:
    """Get an ingestion engine bound to a fresh view of the workbook.

    Holds the process lock for the duration, so the workbook is read and
    written by one call at a time.
    """
    with _ingest_lock:
        store = WorkbookStore(get_settings().workbook_path)
        yield IngestionEngine(store)
