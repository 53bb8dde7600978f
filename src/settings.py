"""
Settings Module for Snakes & Ladders Board Mapper

Provides persistent storage for user preferences using JSON.
Settings are stored in config.json in the working directory.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Union

logger = logging.getLogger(__name__)

# Settings file location (working directory)
SETTINGS_FILE = Path("config.json")

# Default settings
DEFAULT_SETTINGS: Dict[str, Any] = {
    "board_image": "assets/board-default.jpg",  # Default image for `detect`
    "mapping_store": "mapping_store.json",      # Key-value store holding the active mapping
    "debug_enabled": False,                     # Always write annotated debug images
    "min_confidence": 0.5                       # Below this, detect advises manual calibration
}


def merge_settings(settings: Dict[str, Any]) -> Dict[str, Any]:
    """Merge user settings over the defaults, dropping values of the wrong type."""
    result = DEFAULT_SETTINGS.copy()
    for key, value in settings.items():
        if key not in DEFAULT_SETTINGS:
            logger.debug(f"Unknown setting kept as-is: {key}")
            result[key] = value
            continue

        default = DEFAULT_SETTINGS[key]
        if isinstance(default, bool):
            valid = isinstance(value, bool)
        elif isinstance(default, float):
            valid = isinstance(value, (int, float)) and not isinstance(value, bool) and 0.0 <= value <= 1.0
        else:
            valid = isinstance(value, type(default))

        if valid:
            result[key] = value
        else:
            logger.warning(f"Invalid value for '{key}': {value!r}, using default {default!r}")
    return result


def load_settings(path: Union[str, Path] = SETTINGS_FILE) -> Dict[str, Any]:
    """
    Load settings from config.json.

    Args:
        path: Settings file to read

    Returns:
        Settings dictionary. Returns defaults if file missing or invalid.
    """
    path = Path(path)
    if not path.exists():
        logger.debug("Settings file not found, using defaults")
        return DEFAULT_SETTINGS.copy()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            settings = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Failed to load settings: {e}, using defaults")
        return DEFAULT_SETTINGS.copy()

    if not isinstance(settings, dict):
        logger.warning("Settings file is not a JSON object, using defaults")
        return DEFAULT_SETTINGS.copy()

    result = merge_settings(settings)
    logger.debug(f"Settings loaded: {result}")
    return result


def save_settings(settings: Dict[str, Any], path: Union[str, Path] = SETTINGS_FILE) -> None:
    """
    Save settings to config.json.

    Args:
        settings: Settings dictionary to save
        path: Settings file to write
    """
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=2)
        logger.debug(f"Settings saved: {settings}")
    except IOError as e:
        logger.error(f"Failed to save settings: {e}")
