"""
Configuration module for OneFinance.

Contains constants, settings, and configuration values used throughout the application.
"""

import os
import sys
from pathlib import Path

# Version
VERSION = "0.1.0"

# Application paths
APP_NAME = "OneFinance"
DB_FILENAME = "onefinance.db"


def get_data_dir() -> Path:
    """
    Resolve the per-user data directory.

    ONEFINANCE_DATA_DIR wins when set; otherwise the platform's conventional
    application-data location is used.
    """
    override = os.getenv("ONEFINANCE_DATA_DIR")
    if override:
        return Path(override).expanduser()

    if sys.platform.startswith("win"):
        base = Path(os.getenv("APPDATA") or Path.home() / "AppData" / "Roaming")
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.getenv("XDG_DATA_HOME") or Path.home() / ".local" / "share")
    return base / APP_NAME


def get_default_db_path() -> Path:
    """Get the default database file path."""
    return get_data_dir() / DB_FILENAME


def get_log_dir() -> Path:
    """Get the directory log files are written to."""
    return get_data_dir() / "logs"


# Database configuration
DB_TIMEOUT = 10.0  # seconds

# Ledger period bounds
MIN_YEAR = 1900
MAX_YEAR = 3000
MONTHS_PER_YEAR = 12

# Transaction constraints
MAX_TITLE_LENGTH = 200
MAX_NOTES_LENGTH = 500
BALANCE_PRECISION = 2  # decimal places kept on stored balances

# Category / account constraints
MAX_NAME_LENGTH = 100

# Query limits
DEFAULT_RECENT_LIMIT = 8
MIN_RECENT_LIMIT = 1
MAX_RECENT_LIMIT = 100

# Export configuration
EXPORT_FORMATS = ["csv", "xlsx"]

# Chart generation
CHART_DPI = 150
CHART_FORMAT = "png"
CHART_WIDTH = 12
CHART_HEIGHT = 6

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "onefinance.log"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def ensure_directories():
    """Ensure required directories exist."""
    get_data_dir().mkdir(parents=True, exist_ok=True)
    get_log_dir().mkdir(parents=True, exist_ok=True)


def get_log_level():
    """Get the configured log level."""
    import logging

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(os.getenv("LOG_LEVEL", LOG_LEVEL).upper(), logging.INFO)
