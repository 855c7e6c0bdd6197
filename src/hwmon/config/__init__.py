"""Configuration module for hwmon.

This module provides:
- Pydantic models for configuration validation
- YAML config file loading and discovery
- Default configuration values
- Environment variable expansion
- Clear error messages for config issues
"""

from hwmon.config.defaults import DEFAULT_CONFIG, default_disk_drive
from hwmon.config.loader import (
    CLIConfig,
    Config,
    ConfigError,
    ConfigKeyError,
    ConfigSyntaxError,
    ConfigValidationError,
    DisplayConfig,
    LoggingConfig,
    SentryConfig,
    get_config_path,
    load_config,
)

__all__ = [
    "Config",
    "CLIConfig",
    "ConfigError",
    "ConfigKeyError",
    "ConfigSyntaxError",
    "ConfigValidationError",
    "DisplayConfig",
    "LoggingConfig",
    "SentryConfig",
    "DEFAULT_CONFIG",
    "default_disk_drive",
    "get_config_path",
    "load_config",
]
