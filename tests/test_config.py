"""
Unit tests for settings loading
"""

import json
import unittest
from unittest.mock import patch

from config import load_settings


class TestLoadSettings(unittest.TestCase):
    """Test cases for load_settings function."""

    @patch.dict("os.environ", {}, clear=True)
    def test_defaults(self):
        """Test defaults when nothing is configured."""
        settings = load_settings()

        self.assertEqual(settings["port"], 8080)
        self.assertEqual(settings["project_number"], "")
        self.assertEqual(settings["log_level"], "INFO")
        self.assertFalse(settings["dry_run"])
        self.assertIsNone(settings["http_timeout"])

    @patch.dict(
        "os.environ",
        {
            "PORT": "9090",
            "GCP_PROJECT_NUMBER": " 12345 ",
            "LOG_LEVEL": "debug",
            "DRY_RUN": "True",
            "HTTP_TIMEOUT": "2.5",
        },
        clear=True,
    )
    def test_env_variables(self):
        """Test values read from environment variables."""
        settings = load_settings()

        self.assertEqual(settings["port"], 9090)
        self.assertEqual(settings["project_number"], "12345")
        self.assertEqual(settings["log_level"], "DEBUG")
        self.assertTrue(settings["dry_run"])
        self.assertEqual(settings["http_timeout"], 2.5)

    @patch.dict("os.environ", {"PORT": "", "GCP_PROJECT_NUMBER": ""}, clear=True)
    def test_empty_env_variables_are_unset(self):
        """Test that empty environment variables fall back to defaults."""
        settings = load_settings()

        self.assertEqual(settings["port"], 8080)
        self.assertEqual(settings["project_number"], "")

    @patch.dict("os.environ", {"PORT": "not-a-port", "HTTP_TIMEOUT": "-1"}, clear=True)
    def test_invalid_env_values_keep_defaults(self):
        """Test that unparseable values are logged and skipped."""
        with self.assertLogs("config", level="WARNING") as logs:
            settings = load_settings()

        self.assertEqual(settings["port"], 8080)
        self.assertIsNone(settings["http_timeout"])
        self.assertEqual(len(logs.records), 2)

    @patch.dict(
        "os.environ",
        {"SETTINGS_CONFIG": json.dumps({"project_number": 987, "dry_run": True})},
        clear=True,
    )
    def test_settings_document_json(self):
        """Test loading settings from SETTINGS_CONFIG (JSON format)."""
        settings = load_settings()

        self.assertEqual(settings["project_number"], "987")
        self.assertTrue(settings["dry_run"])

    @patch.dict(
        "os.environ",
        {"SETTINGS_CONFIG": "port: 7070\nhttp_timeout: 10\n"},
        clear=True,
    )
    def test_settings_document_yaml(self):
        """Test loading settings from SETTINGS_CONFIG (YAML format)."""
        settings = load_settings()

        self.assertEqual(settings["port"], 7070)
        self.assertEqual(settings["http_timeout"], 10.0)

    @patch.dict(
        "os.environ",
        {"SETTINGS_CONFIG": json.dumps({"project_number": "111"}), "GCP_PROJECT_NUMBER": "222"},
        clear=True,
    )
    def test_env_overrides_settings_document(self):
        """Test that environment variables win over the settings document."""
        settings = load_settings()

        self.assertEqual(settings["project_number"], "222")

    @patch.dict("os.environ", {"SETTINGS_CONFIG": "invalid: yaml: content:"}, clear=True)
    def test_settings_document_invalid_format(self):
        """Test invalid SETTINGS_CONFIG (neither valid JSON nor YAML)."""
        settings = load_settings()

        self.assertEqual(settings["port"], 8080)
        self.assertEqual(settings["project_number"], "")

    @patch.dict("os.environ", {"SETTINGS_CONFIG": json.dumps({"unknown": 1})}, clear=True)
    def test_unknown_setting_ignored(self):
        """Test that unknown keys in the settings document are ignored."""
        with self.assertLogs("config", level="WARNING"):
            settings = load_settings()

        self.assertNotIn("unknown", settings)

    @patch.dict("os.environ", {"SETTINGS_CONFIG_PATH": "/workspace/settings.yaml"}, clear=True)
    @patch(
        "builtins.open",
        unittest.mock.mock_open(read_data="project_number: '555'\ndry_run: yes\n"),
    )
    def test_load_from_yaml_file(self):
        """Test loading settings from a YAML file."""
        settings = load_settings()

        self.assertEqual(settings["project_number"], "555")
        self.assertTrue(settings["dry_run"])

    @patch.dict("os.environ", {"SETTINGS_CONFIG_PATH": "/workspace/settings.json"}, clear=True)
    @patch("builtins.open", unittest.mock.mock_open(read_data='{"port": 8181}'))
    def test_load_from_json_file(self):
        """Test loading settings from a JSON file."""
        settings = load_settings()

        self.assertEqual(settings["port"], 8181)

    @patch.dict("os.environ", {"SETTINGS_CONFIG_PATH": "/workspace/missing.json"}, clear=True)
    @patch("builtins.open", side_effect=FileNotFoundError())
    def test_load_file_not_found(self, mock_open):
        """Test loading when the settings file is missing."""
        with self.assertLogs("config", level="WARNING"):
            settings = load_settings()

        self.assertEqual(settings["port"], 8080)


if __name__ == "__main__":
    unittest.main()
