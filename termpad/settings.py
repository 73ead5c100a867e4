"""User configuration for the editor.

Settings are read from a JSON file in the platform's config directory, or
from the file named by the ``TERMPAD_CONFIG`` environment variable. A missing
or broken file never stops the editor from starting; bad values are logged
and replaced by their defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TERMPAD_CONFIG"


@dataclass
class EditorSettings:
    """Tunable editor behaviour."""
    quit_times: int = EditorConstants.QUIT_TIMES
    message_timeout: float = EditorConstants.MESSAGE_TIMEOUT
    read_timeout: int = EditorConstants.READ_TIMEOUT


def validate_setting(key: str, value: Any) -> bool:
    """Check a single setting value.

    Args:
        key: Setting name.
        value: Value loaded from the config file.

    Returns:
        True if the value is acceptable for that setting.
    """
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        return False
    if key == "quit_times":
        return isinstance(value, int) and 1 <= value <= 10
    if key == "message_timeout":
        return isinstance(value, (int, float)) and value > 0
    if key == "read_timeout":
        # VTIME is a single cc byte, in tenths of a second
        return isinstance(value, int) and 1 <= value <= 255
    return False


class SettingsStore:
    """Locates and reads the config file."""

    def __init__(self, path: Optional[str] = None):
        """Initialize settings lookup.

        Args:
            path: Explicit config file. Defaults to $TERMPAD_CONFIG, then
                config.json in the user config directory.
        """
        if path is None:
            path = os.environ.get(CONFIG_ENV_VAR)
        if path:
            self._settings_file = Path(path)
        else:
            self._settings_file = Path(platformdirs.user_config_dir("termpad")) / "config.json"

    @property
    def path(self) -> Path:
        return self._settings_file

    def _read_raw(self) -> Dict[str, Any]:
        if not self._settings_file.exists():
            return {}
        try:
            with open(self._settings_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            return {}
        return data

    def load(self) -> EditorSettings:
        """Read the config file and return validated settings."""
        data = self._read_raw()
        known = {f.name for f in fields(EditorSettings)}
        values = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Unknown setting {key!r} in {self._settings_file}, ignoring")
            elif not validate_setting(key, value):
                logger.warning(f"Invalid value {value!r} for setting {key!r}, using default")
            else:
                values[key] = value
        return EditorSettings(**values)


def load_settings(path: Optional[str] = None) -> EditorSettings:
    """Load editor settings from path or the default location."""
    return SettingsStore(path).load()
