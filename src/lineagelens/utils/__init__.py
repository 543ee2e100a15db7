"""Utility functions for lineagelens."""

from lineagelens.utils.config import ConfigSettings, find_config_file, load_config

__all__ = [
    "ConfigSettings",
    "find_config_file",
    "load_config",
]
