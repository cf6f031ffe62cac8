"""Config file support for templint."""

from templint.config.loader import ConfigFileError, ConfigLoader, load_settings

__all__ = [
    "ConfigFileError",
    "ConfigLoader",
    "load_settings",
]
