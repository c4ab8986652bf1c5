"""Pre-DB bootstrap configuration. Zero imports from the services layer.

Stores preferences that must be known before opening the DB (db path, log level).
Config lives in ~/.spenderplus/config.json to avoid a bootstrapping problem.
"""
import json
import os
from pathlib import Path

from utils.constants import DB_FILE

CONFIG_DIR = Path.home() / ".spenderplus"
CONFIG_FILE = CONFIG_DIR / "config.json"


def load_config(config_file: Path | None = None) -> dict:
    """Returns {} on missing or corrupt file, never raises."""
    path = config_file or CONFIG_FILE
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict, config_file: Path | None = None) -> None:
    """Creates the config dir if needed; atomic write via .tmp + os.replace()."""
    path = config_file or CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def get_db_path(config_file: Path | None = None) -> str:
    """Return config["db_path"] or the default DB file in the working directory."""
    return load_config(config_file).get("db_path") or DB_FILE


def set_db_path(path: str | None, config_file: Path | None = None) -> None:
    """Update db_path in config and save. None resets to the default."""
    config = load_config(config_file)
    if path is None:
        config.pop("db_path", None)
    else:
        config["db_path"] = path
    save_config(config, config_file)


def get_log_level(config_file: Path | None = None) -> str:
    return str(load_config(config_file).get("log_level", "INFO")).upper()
