"""Unit tests for editor settings loading."""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path

from termpad.constants import EditorConstants
from termpad.settings import (
    CONFIG_ENV_VAR, EditorSettings, SettingsStore, load_settings, validate_setting,
)


class TestSettingsStore(unittest.TestCase):
    """Test config file loading."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.temp_dir, "config.json")

    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def write_config(self, data):
        with open(self.config_path, "w", encoding="utf-8") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)

    def test_missing_file_gives_defaults(self):
        settings = SettingsStore(self.config_path).load()
        self.assertEqual(settings, EditorSettings())
        self.assertEqual(settings.quit_times, EditorConstants.QUIT_TIMES)
        self.assertEqual(settings.message_timeout, EditorConstants.MESSAGE_TIMEOUT)
        self.assertEqual(settings.read_timeout, EditorConstants.READ_TIMEOUT)

    def test_valid_values_are_loaded(self):
        self.write_config({"quit_times": 5, "message_timeout": 2.5, "read_timeout": 3})
        settings = SettingsStore(self.config_path).load()
        self.assertEqual(settings, EditorSettings(quit_times=5, message_timeout=2.5, read_timeout=3))

    def test_invalid_values_fall_back_to_defaults(self):
        self.write_config({"quit_times": 0, "message_timeout": "soon", "read_timeout": 1000})
        with self.assertLogs("termpad.settings", level="WARNING"):
            settings = SettingsStore(self.config_path).load()
        self.assertEqual(settings, EditorSettings())

    def test_unknown_keys_are_ignored(self):
        self.write_config({"quit_times": 2, "colour": "blue"})
        with self.assertLogs("termpad.settings", level="WARNING") as logs:
            settings = SettingsStore(self.config_path).load()
        self.assertEqual(settings.quit_times, 2)
        self.assertTrue(any("colour" in line for line in logs.output))

    def test_malformed_json_gives_defaults(self):
        self.write_config("{not json")
        with self.assertLogs("termpad.settings", level="WARNING"):
            settings = SettingsStore(self.config_path).load()
        self.assertEqual(settings, EditorSettings())

    def test_non_dict_json_gives_defaults(self):
        self.write_config([1, 2, 3])
        with self.assertLogs("termpad.settings", level="WARNING"):
            settings = SettingsStore(self.config_path).load()
        self.assertEqual(settings, EditorSettings())

    def test_environment_variable_selects_file(self):
        self.write_config({"quit_times": 7})
        old = os.environ.get(CONFIG_ENV_VAR)
        os.environ[CONFIG_ENV_VAR] = self.config_path
        try:
            self.assertEqual(load_settings().quit_times, 7)
            self.assertEqual(SettingsStore().path, Path(self.config_path))
        finally:
            if old is None:
                del os.environ[CONFIG_ENV_VAR]
            else:
                os.environ[CONFIG_ENV_VAR] = old

    def test_default_location_is_user_config_dir(self):
        old = os.environ.pop(CONFIG_ENV_VAR, None)
        try:
            path = SettingsStore().path
        finally:
            if old is not None:
                os.environ[CONFIG_ENV_VAR] = old
        self.assertEqual(path.name, "config.json")
        self.assertIn("termpad", str(path))


class TestValidateSetting(unittest.TestCase):

    def test_quit_times_range(self):
        self.assertTrue(validate_setting("quit_times", 1))
        self.assertTrue(validate_setting("quit_times", 10))
        self.assertFalse(validate_setting("quit_times", 11))
        self.assertFalse(validate_setting("quit_times", 2.0))
        self.assertFalse(validate_setting("quit_times", True))

    def test_message_timeout_positive(self):
        self.assertTrue(validate_setting("message_timeout", 1))
        self.assertTrue(validate_setting("message_timeout", 0.5))
        self.assertFalse(validate_setting("message_timeout", 0))
        self.assertFalse(validate_setting("message_timeout", None))

    def test_read_timeout_fits_vtime(self):
        self.assertTrue(validate_setting("read_timeout", 255))
        self.assertFalse(validate_setting("read_timeout", 0))
        self.assertFalse(validate_setting("read_timeout", 256))


if __name__ == "__main__":
    unittest.main()
