"""Configuration loader for EyeRest.

Handles loading, saving, and default creation of config.json.
Resolves platform-appropriate data directories:
  - macOS:   ~/Library/Application Support/EyeRest
  - Windows: %APPDATA%/EyeRest
  - Other:   ~/.eyerest

config.json holds application plumbing (database location, dashboard port,
log level, alert sound).  Reminder settings the user edits at runtime live
in the database, see ``eyerest.core.settings``.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

APP_NAME = "EyeRest"
SOUND_TYPES = ("beep", "chime", "bell", "nature")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_data_directory() -> Path:
    """Return the platform-appropriate data directory for EyeRest."""
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    if sys.platform == "win32":
        roaming = os.environ.get("APPDATA") or Path.home() / "AppData" / "Roaming"
        return Path(roaming) / APP_NAME
    return Path.home() / ".eyerest"


def get_default_config() -> dict[str, Any]:
    """Return the default configuration dictionary."""
    return {
        "database_path": str(get_data_directory() / "eyerest.db"),
        "dashboard_port": 5555,
        "log_level": "INFO",
        "sound": {"type": "chime", "duration_ms": 500},
    }


def get_default_config_path() -> Path:
    """Return the default path for config.json."""
    return get_data_directory() / "config.json"


def get_sound_profile(config: dict[str, Any]) -> tuple[str, int]:
    """Return ``(sound_type, duration_ms)`` from *config*, falling back to defaults."""
    defaults = get_default_config()["sound"]
    sound = config.get("sound")
    if not isinstance(sound, dict):
        sound = {}
    sound_type = sound.get("type", defaults["type"])
    if sound_type not in SOUND_TYPES:
        logger.warning("Unknown sound type %r; using %r", sound_type, defaults["type"])
        sound_type = defaults["type"]
    duration = sound.get("duration_ms", defaults["duration_ms"])
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        logger.warning("Invalid sound duration %r; using %d", duration, defaults["duration_ms"])
        duration = defaults["duration_ms"]
    return sound_type, duration


def normalize_config(data: dict[str, Any]) -> dict[str, Any]:
    """Merge *data* over the defaults, replacing invalid known values.

    Unknown keys are kept as they are. Each rejected value is logged and
    swapped for its default; nothing here raises.
    """
    config = get_default_config()
    config.update(data)

    port = config["dashboard_port"]
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        logger.warning("Invalid dashboard_port %r; using 5555", port)
        config["dashboard_port"] = 5555

    level = config["log_level"]
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        logger.warning("Unknown log_level %r; using INFO", level)
        config["log_level"] = "INFO"
    else:
        config["log_level"] = level.upper()

    if not isinstance(config["database_path"], str) or not config["database_path"]:
        logger.warning("Invalid database_path %r; using default", config["database_path"])
        config["database_path"] = get_default_config()["database_path"]

    sound_type, duration = get_sound_profile(config)
    config["sound"] = {"type": sound_type, "duration_ms": duration}
    return config


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load and normalize config.json.

    A missing file is created with the defaults. An unreadable file, or
    one whose top level is not a JSON object, is logged and ignored.
    """
    config_path = Path(path) if path is not None else get_default_config_path()

    if not config_path.exists():
        logger.info("No config at %s; writing defaults", config_path)
        defaults = get_default_config()
        try:
            save_config(defaults, config_path)
        except OSError as exc:
            logger.error("Could not write default config to %s: %s", config_path, exc)
        return defaults

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (ValueError, OSError) as exc:
        logger.error("Failed to load config from %s: %s; using defaults", config_path, exc)
        return get_default_config()
    if not isinstance(data, dict):
        logger.error("Config at %s is not a JSON object; using defaults", config_path)
        return get_default_config()
    return normalize_config(data)


def save_config(config: dict[str, Any], path: str | Path | None = None) -> None:
    """Write *config* as indented JSON, creating parent directories."""
    config_path = Path(path) if path is not None else get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
