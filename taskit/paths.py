from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

APP_DIR_NAME = "taskit"
SAVE_FILE_NAME = "save.json"
DATA_DIR_ENV = "TASKIT_DATA_DIR"

logger = logging.getLogger(__name__)


def data_directory() -> Path:
    """Per-user application data directory (not created here)."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Roaming"
        return root / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    base = os.environ.get("XDG_DATA_HOME")
    root = Path(base) if base else Path.home() / ".local" / "share"
    return root / APP_DIR_NAME


def ensure_data_directory(directory: Optional[Path] = None) -> Path:
    d = Path(directory) if directory is not None else data_directory()
    if not d.exists():
        logger.info("data directory %s does not exist; creating", d)
        d.mkdir(parents=True, exist_ok=True)
    return d


def save_file_path(directory: Optional[Path] = None) -> Path:
    return ensure_data_directory(directory) / SAVE_FILE_NAME
