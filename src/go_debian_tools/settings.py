"""Settings file discovery and loading."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from go_debian_tools.exceptions import SettingsError
from schemas.settings import ToolSettings

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "GO_DEBIAN_TOOLS_CONFIG"
DEFAULT_SETTINGS_PATH = Path("~/.config/go-debian-tools/config.yaml")


def find_settings_file(explicit: Path | None = None) -> Path | None:
    """Locate the settings file to use.

    Args:
        explicit: Path given on the command line, if any

    Returns:
        Path to the settings file, or None if no settings file applies

    Tries these locations in order:
    1. The explicit path (must exist)
    2. $GO_DEBIAN_TOOLS_CONFIG (must exist)
    3. ~/.config/go-debian-tools/config.yaml (optional)
    """
    if explicit is not None:
        return explicit

    from_env = os.environ.get(SETTINGS_ENV_VAR, "").strip()
    if from_env:
        return Path(from_env)

    default_path = DEFAULT_SETTINGS_PATH.expanduser()
    if default_path.exists():
        return default_path

    return None


def load_settings(path: Path | None = None) -> ToolSettings:
    """Load and validate settings.

    Args:
        path: Explicit settings file, or None to search default locations

    Returns:
        Validated ToolSettings (all defaults if no settings file applies)

    Raises:
        SettingsError: If the file is missing, not valid YAML, or fails validation
    """
    settings_path = find_settings_file(path)
    if settings_path is None:
        logger.debug("No settings file found, using defaults")
        return ToolSettings()

    logger.debug(f"Loading settings from {settings_path}")
    try:
        data = load_yaml(settings_path)
    except FileNotFoundError as e:
        raise SettingsError(str(e)) from e
    except (yaml.YAMLError, ValueError) as e:
        raise SettingsError(f"Invalid settings file {settings_path}: {e}") from e

    try:
        return ToolSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {settings_path}:\n{e}") from e


def load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse YAML file.

    Args:
        path: Path to YAML file

    Returns:
        Parsed YAML data as dictionary (empty for an empty file)

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        ValueError: If parsed data is not a dictionary
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ValueError(f"Expected YAML object in {path}, got {type(data)}")

    return data
