"""Pre-DB bootstrap configuration. Zero imports from the rest of the app.

Holds the preferences that must be known before the store is opened
(db_folder, log_level). Lives in ~/.expense_manager/config.json.
"""
import json
import os
from pathlib import Path

CONFIG_DIR = Path.home() / ".expense_manager"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_LOG_LEVEL = "INFO"


def load_config() -> dict:
    """Returns {} on missing or corrupt file; never raises."""
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict) -> None:
    """Creates the config dir if needed; atomic write via .tmp + os.replace()."""
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    tmp = CONFIG_FILE.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, CONFIG_FILE)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def get_db_folder() -> str | None:
    """Return config["db_folder"] or None if not set."""
    return load_config().get("db_folder") or None


def set_db_folder(path: str | None) -> None:
    config = load_config()
    if path is None:
        config.pop("db_folder", None)
    else:
        config["db_folder"] = path
    save_config(config)


def get_log_level() -> str:
    level = load_config().get("log_level")
    return level if isinstance(level, str) and level else DEFAULT_LOG_LEVEL


def db_path_for(folder: str | None, filename: str) -> str:
    """Join the configured DB folder (or CWD when unset) with filename."""
    if folder:
        return os.path.join(folder, filename)
    return filename
