"""Global configuration for the menu schedule service.

This module exposes configuration constants via the `Config` class. All values
are read from environment variables with local-development defaults.
"""

import os  # Standard library for environment and filesystem helpers
import re  # Robust parsing of numeric envs with comments/ranges


def _env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable robustly.

    Accepts values like "8000", "8000 # comment" or "\"8000\"" and returns the
    first integer found. Falls back to default if parsing fails.
    """
    val = os.getenv(name)
    if val is None:
        return default
    s = str(val).strip().strip('"').strip("'")
    m = re.search(r"-?\d+", s)
    if not m:
        return default
    return int(m.group(0))


def _env_path(name: str, default: str) -> str:
    """Read a path from the environment: strip quotes, expand ~ and $VARS, make absolute."""
    raw = str(os.getenv(name, default)).strip().strip('"').strip("'")
    raw = os.path.expanduser(os.path.expandvars(raw))
    return raw if os.path.isabs(raw) else os.path.abspath(raw)


class Config:
    """Application configuration sourced from environment variables.

    Import settings as constants (`from menu_schedule.config import Config`).
    To override a setting, define the corresponding environment variable
    before launching the application.
    """
    # Web server
    HOST = os.getenv("MS_HOST", "0.0.0.0")  # Flask bind host
    PORT = _env_int("MS_PORT", 8000)  # Flask bind port
    DEBUG = os.getenv("MS_DEBUG", "0") == "1"  # Flask debug switch

    # Catalog seed (venues, menus and their schedules) in JSON
    DATA_FILE = _env_path("MS_DATA_FILE", os.path.join("data", "catalog.json"))

    # Venues without an explicit IANA timezone evaluate schedules on this clock
    DEFAULT_TIMEZONE = os.getenv("MS_DEFAULT_TIMEZONE", "UTC").strip() or "UTC"
