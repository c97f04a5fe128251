"""
Configuration utilities for loading receiver settings.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "port": 8080,
    "project_number": "",
    "log_level": "INFO",
    "dry_run": False,
    "http_timeout": None,
}

# Environment variable -> settings key
ENV_OVERRIDES = {
    "PORT": "port",
    "GCP_PROJECT_NUMBER": "project_number",
    "LOG_LEVEL": "log_level",
    "DRY_RUN": "dry_run",
    "HTTP_TIMEOUT": "http_timeout",
}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def _parse_timeout(value: Any) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return None
    timeout = float(value)
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {value}")
    return timeout


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw value (from env or a settings document) to the key's type."""
    if key == "port":
        return int(value)
    if key == "dry_run":
        return _parse_bool(value)
    if key == "http_timeout":
        return _parse_timeout(value)
    if key == "log_level":
        return str(value).strip().upper()
    return str(value).strip()


def load_settings_document() -> Dict[str, Any]:
    """Load the optional settings document from environment or file.

    Supports both JSON and YAML formats. When loading from the SETTINGS_CONFIG
    environment variable, tries JSON first, then falls back to YAML. When loading
    from SETTINGS_CONFIG_PATH, the format is determined by the file extension
    (.json, .yml, .yaml).
    """
    config_str = os.environ.get("SETTINGS_CONFIG")
    if config_str:
        try:
            return json.loads(config_str)
        except json.JSONDecodeError:
            try:
                return yaml.safe_load(config_str) or {}
            except yaml.YAMLError as e:
                logger.error("Failed to parse SETTINGS_CONFIG as JSON or YAML: %s", e)

    config_path = os.environ.get("SETTINGS_CONFIG_PATH")
    if not config_path:
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.endswith((".yml", ".yaml")):
                return yaml.safe_load(f) or {}
            else:
                return json.load(f)
    except FileNotFoundError:
        logger.warning("Settings file not found: %s", config_path)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        logger.error("Failed to parse settings file: %s", e)

    return {}


def load_settings() -> Dict[str, Any]:
    """
    Build the effective settings for one request or process start.

    Precedence (lowest first): defaults, settings document, environment variables.
    Values that cannot be converted are logged and skipped.

    Returns:
        Dictionary with port, project_number, log_level, dry_run and http_timeout
    """
    settings = dict(DEFAULT_SETTINGS)

    document = load_settings_document()
    if not isinstance(document, dict):
        logger.error("Settings document must be a mapping, got %s", type(document).__name__)
        document = {}

    for key, value in document.items():
        if key not in DEFAULT_SETTINGS:
            logger.warning("Ignoring unknown setting: %s", key)
            continue
        if value is None:
            continue
        try:
            settings[key] = _coerce(key, value)
        except (TypeError, ValueError) as e:
            logger.warning("Invalid value for setting %s: %s", key, e)

    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        # Empty values count as unset
        if value is None or not value.strip():
            continue
        try:
            settings[key] = _coerce(key, value)
        except (TypeError, ValueError) as e:
            logger.warning("Invalid value for %s: %s", env_name, e)

    return settings
