"""Static configuration for forgewatch.

All user-editable settings (ignore/include lists, start date, notification
format, logging) live in a single JSON file for quick edits without touching
Python.
"""

import json
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Catalog sources and filters are loaded from config.json so users can tune
# what gets checked without editing code.
CONFIG_PATH = os.getenv("FORGEWATCH_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _project_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the classification database.
DB_PATH = _project_path(_CONFIG.get("db_path", "forgewatch.sqlite"))

# CSV export of the local song library (artist, path).
LIBRARY_CSV = _project_path(_CONFIG.get("library_csv", "library.csv"))

# Remote catalog settings.
# - PAGE_SIZE: rows requested per listing page
# - JOB_DELAY_SECONDS: pause after each candidate to throttle requests
_catalog = _CONFIG.get("catalog", {})
CATALOG_BASE_URL = _catalog.get("base_url", "https://ignition4.customsforge.com")
REQUEST_TIMEOUT = float(_catalog.get("timeout_seconds", 30))
PAGE_SIZE = int(_catalog.get("page_size", 100))
JOB_DELAY_SECONDS = float(_catalog.get("job_delay_seconds", 0.2))

# Raw ignore/include lists, start date, and notification template; parsed by
# the app after logging is configured.
CATALOG = _catalog

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
