#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants and database file resolution for Daybook.

The database lives in the platform application directory unless a
database from an earlier install is found at the legacy fixed home
directory location. The choice is made once, at startup, by
resolve_db_path().
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from pathlib import Path
from typing import Optional, Union

# --- Third party imports ---
import click

# --- Local imports ---
from .exceptions import FileAccessError

APP_NAME = "daybook"
DB_FILENAME = "daybook.db"

# ---- Legacy location (pre app-dir installs) ----
LEGACY_DB_PATH: Path = Path.home() / ".daybook" / DB_FILENAME

# ---- Environment overrides ----
DATA_DIR_ENV = "DAYBOOK_DATA_DIR"
DB_PATH_ENV = "DAYBOOK_DB_PATH"
LOG_DIR_ENV = "DAYBOOK_LOG_DIR"


def default_data_dir() -> Path:
    """
    Return the managed data directory.

    Honors DAYBOOK_DATA_DIR, otherwise the per-platform application
    directory reported by click.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path(click.get_app_dir(APP_NAME))


def resolve_db_path(
    legacy_path: Optional[Union[str, Path]] = LEGACY_DB_PATH,
    data_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Choose the database file to open.

    A database at the legacy path is preferred when it already exists as
    a regular file. Otherwise the managed data directory is used and
    created if missing.

    Args:
        legacy_path: Legacy database file location (None disables the check)
        data_dir: Managed data directory (defaults to default_data_dir())

    Returns:
        Path to the database file

    Raises:
        FileAccessError: If the managed directory cannot be created
    """
    if legacy_path is not None:
        legacy = Path(legacy_path).expanduser()
        if legacy.is_file():
            return legacy

    directory = Path(data_dir).expanduser() if data_dir else default_data_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileAccessError(f"Cannot create data directory {directory}: {e}")

    return directory / DB_FILENAME
