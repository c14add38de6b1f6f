"""
Settings Module for Nepraetor

Analysis preferences kept between runs as JSON (config.json in the
working directory). Command line flags override them for a single run.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

SETTINGS_FILE = Path("config.json")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "debug_enabled": False,
    "ocr_engine": "tesseract",
    "tesseract_cmd": None,
    "batch_size": 3,
    "parallel_sections": False,
    "screenshots_dir": "Screenshots",
}


def _valid_value(key: str, value: Any) -> bool:
    """Check a stored value against the type of its default."""
    if key == "tesseract_cmd":
        return value is None or isinstance(value, str)
    if key == "batch_size":
        return isinstance(value, int) and not isinstance(value, bool) and value >= 1
    default = DEFAULT_SETTINGS[key]
    return isinstance(value, type(default))


def merge_settings(stored: Dict[str, Any]) -> Dict[str, Any]:
    """
    Lay stored values over the defaults.

    Values of the wrong type are replaced by their default; unknown keys
    are kept so newer config files survive older versions.

    Args:
        stored: Settings as read from disk

    Returns:
        Complete settings dictionary
    """
    merged = dict(DEFAULT_SETTINGS)
    for key, value in stored.items():
        if key in DEFAULT_SETTINGS and not _valid_value(key, value):
            logger.warning(f"Ignoring invalid setting {key}={value!r}, "
                           f"using {DEFAULT_SETTINGS[key]!r}")
            continue
        merged[key] = value
    return merged


def load_settings(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Read the saved analysis preferences.

    Args:
        path: Settings file (SETTINGS_FILE if None)

    Returns:
        Complete settings; the defaults when the file is absent or unreadable
    """
    settings_file = Path(path) if path else SETTINGS_FILE

    if not settings_file.exists():
        logger.debug(f"No {settings_file}, using default settings")
        return dict(DEFAULT_SETTINGS)

    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            stored = json.load(f)
        if not isinstance(stored, dict):
            raise ValueError("settings root must be an object")
    except (json.JSONDecodeError, ValueError, OSError) as e:
        logger.warning(f"Cannot read {settings_file} ({e}), using default settings")
        return dict(DEFAULT_SETTINGS)

    settings = merge_settings(stored)
    logger.debug(f"Loaded settings from {settings_file}: {settings}")
    return settings


def save_settings(settings: Dict[str, Any], path: Optional[Union[str, Path]] = None) -> None:
    """
    Persist analysis preferences.

    Write failures are logged; the run continues with the in-memory values.

    Args:
        settings: Settings to store
        path: Settings file (SETTINGS_FILE if None)
    """
    settings_file = Path(path) if path else SETTINGS_FILE

    try:
        with open(settings_file, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=2, sort_keys=True)
    except OSError as e:
        logger.error(f"Cannot write {settings_file}: {e}")
        return
    logger.info(f"Settings saved to {settings_file}")
