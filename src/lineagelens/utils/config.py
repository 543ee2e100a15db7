"""Configuration management for lineagelens.

Loads configuration from lineagelens.toml in the current working directory.
"""

import tomllib
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ValidationError
from rich.console import Console

from lineagelens.global_models import ViewMode

CONFIG_FILE_NAME = "lineagelens.toml"
CONFIG_SECTION = "lineagelens"

console = Console(stderr=True)


class ConfigSettings(BaseModel):
    """Configuration settings for lineagelens.

    All fields are optional. None values indicate the setting was not
    specified in the config file.
    """

    view_mode: Optional[ViewMode] = None
    default_collapsed: Optional[bool] = None
    output_format: Optional[str] = None
    schemas: Optional[List[str]] = None
    databases: Optional[List[str]] = None
    focus_mode: Optional[bool] = None


def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """Find lineagelens.toml in the current working directory.

    Args:
        start_path: Starting directory to search for config file.
                   Defaults to current working directory.

    Returns:
        Path to config file if found, None otherwise.
    """
    if start_path is None:
        start_path = Path.cwd()

    config_path = start_path / CONFIG_FILE_NAME

    if config_path.exists() and config_path.is_file():
        return config_path

    return None


def _use_defaults(message: str) -> ConfigSettings:
    console.print(f"[yellow]Warning:[/yellow] {message}")
    console.print("[yellow]Using default settings[/yellow]")
    return ConfigSettings()


def load_config(config_path: Optional[Path] = None) -> ConfigSettings:
    """Load configuration from lineagelens.toml.

    Priority order:
    1. Explicit config_path parameter
    2. lineagelens.toml in current working directory
    3. Empty ConfigSettings (all None)

    Args:
        config_path: Optional explicit path to config file.
                    If not provided, searches current working directory.

    Returns:
        ConfigSettings with values from TOML file or None for unset fields.
        Always returns a valid ConfigSettings object, even on errors.

    Error Handling:
        - Missing file: Returns empty ConfigSettings (silent)
        - Malformed TOML: Warns user and returns empty ConfigSettings
        - Invalid values: Warns user and returns empty ConfigSettings
        - Unknown keys: Ignored (forward compatibility)
    """
    if config_path is None:
        config_path = find_config_file()

    if config_path is None:
        return ConfigSettings()

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        return _use_defaults(f"Failed to parse {config_path}: {e}")
    except OSError as e:
        return _use_defaults(f"Could not read {config_path}: {e}")

    section = toml_data.get(CONFIG_SECTION, {})
    try:
        return ConfigSettings(**section)
    except (TypeError, ValidationError) as e:
        return _use_defaults(f"Invalid configuration in {config_path}: {e}")
