"""Configuration loading and validation for hwmon.

This module provides:
- Pydantic models for configuration validation
- YAML config file discovery and loading
- Environment variable expansion in config values
- Merging of config file with defaults
- Clear, user-friendly error messages for config issues

The resulting Config is immutable; it is built once at startup and passed
explicitly to the components that need it.
"""

from difflib import get_close_matches
import os
from pathlib import Path
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
import yaml

from hwmon.config.defaults import DEFAULT_CONFIG, default_disk_drive


class ConfigError(Exception):
    """Base exception for configuration errors.

    Provides user-friendly error messages with context about what went wrong
    and suggestions for how to fix it.

    Attributes:
        message: The main error message
        file_path: Path to the config file (if applicable)
        line_number: Line number where the error occurred (if known)
        suggestion: Helpful suggestion for fixing the error
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        line_number: int | None = None,
        column: int | None = None,
        suggestion: str | None = None,
        context_lines: list[str] | None = None,
    ) -> None:
        self.message = message
        self.file_path = file_path
        self.line_number = line_number
        self.column = column
        self.suggestion = suggestion
        self.context_lines = context_lines
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = []

        if self.file_path:
            location = f"Error in {self.file_path}"
            if self.line_number:
                location += f" line {self.line_number}"
            parts.append(location + ":")
        else:
            parts.append("Configuration error:")

        parts.append(f"  {self.message}")

        if self.context_lines and self.column:
            parts.append("")
            for line in self.context_lines:
                parts.append(f"    {line}")
            pointer = " " * (self.column + 3) + "^"
            parts.append(pointer)

        if self.suggestion:
            parts.append("")
            parts.append(f"  Suggestion: {self.suggestion}")

        return "\n".join(parts)


class ConfigSyntaxError(ConfigError):
    """Error for YAML syntax issues."""

    pass


class ConfigValidationError(ConfigError):
    """Error for configuration value validation failures."""

    pass


class ConfigKeyError(ConfigValidationError):
    """Error for unknown or invalid configuration keys."""

    pass


# Known valid configuration keys at each level for suggestions
VALID_KEYS: dict[tuple[str, ...], set[str]] = {
    (): {
        "refresh_interval",
        "sample_duration",
        "disk_drive",
        "provider_timeout",
        "display",
        "cli",
        "logging",
        "sentry",
    },
    ("display",): {"decimal_places", "time_format"},
    ("cli",): {"default_format", "pretty_print"},
    ("logging",): {"enabled", "level", "file"},
    ("sentry",): {"dsn", "environment"},
}

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def _suggest_key(unknown_key: str, valid_keys: set[str]) -> str | None:
    """Suggest a similar valid key for an unknown key.

    Returns:
        A suggestion message, or None if no good match found
    """
    matches = get_close_matches(unknown_key, list(valid_keys), n=1, cutoff=0.6)
    if matches:
        return f"Did you mean '{matches[0]}'?"
    return None


def _get_type_description(value: Any) -> str:
    """Get a human-readable type description for a value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return f'string "{value}"'
    if isinstance(value, list):
        return "list"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _format_pydantic_error(
    error: ValidationError,
    config_data: dict[str, Any],
    file_path: str | None = None,
) -> ConfigValidationError:
    """Convert a Pydantic ValidationError to a user-friendly ConfigValidationError.

    Args:
        error: The Pydantic validation error
        config_data: The original config data for context
        file_path: Path to the config file

    Returns:
        A ConfigValidationError (or ConfigKeyError) with message and suggestion
    """
    errors = error.errors()
    if not errors:
        return ConfigValidationError(
            "Configuration validation failed",
            file_path=file_path,
        )

    first_error = errors[0]
    loc = first_error.get("loc", ())
    msg = first_error.get("msg", "Invalid value")
    error_type = first_error.get("type", "")
    ctx = first_error.get("ctx", {})

    path = ".".join(str(part) for part in loc)

    actual_value: Any = config_data
    for key in loc:
        if isinstance(actual_value, dict):
            actual_value = actual_value.get(key)
        else:
            break

    suggestion = None

    if error_type == "literal_error":
        expected = ctx.get("expected", "")
        message = f"Invalid value for '{path}': got {_get_type_description(actual_value)}"
        suggestion = f"Expected one of: {expected}"

    elif error_type in ("greater_than_equal", "less_than_equal", "greater_than"):
        limit = ctx.get("ge", ctx.get("le", ctx.get("gt")))
        message = f"Value for '{path}' is out of range: {actual_value}"
        if error_type == "less_than_equal":
            suggestion = f"Value must be at most {limit}"
        else:
            suggestion = f"Value must be at least {limit}"

    elif error_type in ("int_parsing", "float_parsing"):
        message = f"Invalid number for '{path}': got {_get_type_description(actual_value)}"
        suggestion = "Please provide a valid number"

    elif error_type == "string_type":
        message = f"Expected string for '{path}': got {_get_type_description(actual_value)}"
        suggestion = "Please provide a text value"

    elif error_type in ("bool_type", "bool_parsing"):
        message = f"Expected boolean for '{path}': got {_get_type_description(actual_value)}"
        suggestion = "Use 'true' or 'false'"

    elif error_type == "extra_forbidden":
        unknown_key = str(loc[-1]) if loc else "unknown"
        parent_path = tuple(str(part) for part in loc[:-1])
        valid_keys = VALID_KEYS.get(parent_path, set())
        suggestion = _suggest_key(unknown_key, valid_keys)
        if not suggestion:
            suggestion = "Check the documentation for valid configuration options"
        return ConfigKeyError(
            f"Unknown configuration key '{path}'",
            file_path=file_path,
            suggestion=suggestion,
        )

    else:
        label = path or "configuration"
        message = f"Invalid value for '{label}': {msg}"

    return ConfigValidationError(
        message,
        file_path=file_path,
        suggestion=suggestion,
    )


def _format_yaml_error(
    error: yaml.YAMLError,
    file_path: str | None = None,
    content: str | None = None,
) -> ConfigSyntaxError:
    """Convert a YAML error to a user-friendly ConfigSyntaxError."""
    line_number = None
    column = None
    context_lines = None
    suggestion = None

    mark = getattr(error, "problem_mark", None)
    if mark is not None:
        line_number = mark.line + 1  # YAML uses 0-indexed lines
        column = mark.column + 1

        if content:
            lines = content.splitlines()
            if 0 <= mark.line < len(lines):
                context_lines = [lines[mark.line]]

    error_str = str(error).lower()

    if "could not find expected ':'" in error_str:
        suggestion = "Check for missing colons after keys (e.g., 'key: value')"
    elif "found character" in error_str and "tab" in error_str:
        suggestion = "Use spaces instead of tabs for indentation"
    elif "mapping values are not allowed" in error_str:
        suggestion = "Check your indentation - make sure nested keys are properly indented"

    message = "Invalid YAML syntax"
    problem = getattr(error, "problem", None)
    if problem:
        message = f"YAML syntax error: {problem}"

    return ConfigSyntaxError(
        message,
        file_path=file_path,
        line_number=line_number,
        column=column,
        context_lines=context_lines,
        suggestion=suggestion,
    )


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax. Unset variables without a
    default are left as written.
    """
    if isinstance(value, str):

        def replace_env_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default_value is not None:
                return default_value
            return match.group(0)

        return ENV_VAR_PATTERN.sub(replace_env_var, value)
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# Pydantic Configuration Models


class DisplayConfig(BaseModel):
    """Display preferences configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    decimal_places: int = Field(default=1, ge=0, le=10)
    time_format: str = "%H:%M:%S"


class CLIConfig(BaseModel):
    """Headless output configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    default_format: Literal["json", "prometheus"] = "json"
    pretty_print: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = False
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    file: str = "~/.hwmon/hwmon.log"


class SentryConfig(BaseModel):
    """Error reporting configuration; disabled when ``dsn`` is unset."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    dsn: str | None = None
    environment: str = "production"


class Config(BaseModel):
    """Main configuration model for hwmon.

    Loaded from YAML and CLI overrides, validated once, then passed to the
    scheduler and collector at construction. Instances are immutable.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    refresh_interval: float = Field(default=1.0, ge=0.1, le=3600)
    sample_duration: float = Field(default=0.1, ge=0.0, le=60)
    disk_drive: str = Field(default_factory=default_disk_drive, min_length=1)
    provider_timeout: float | None = Field(default=5.0, gt=0)

    display: DisplayConfig = Field(default_factory=DisplayConfig)
    cli: CLIConfig = Field(default_factory=CLIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sentry: SentryConfig = Field(default_factory=SentryConfig)

    @model_validator(mode="after")
    def check_sample_fits_interval(self) -> "Config":
        """CPU sampling must finish within one refresh interval."""
        if self.sample_duration > self.refresh_interval:
            raise ValueError(
                f"sample_duration ({self.sample_duration}s) must not exceed "
                f"refresh_interval ({self.refresh_interval}s)"
            )
        return self


def get_config_path(custom_path: str | None = None) -> Path | None:
    """Determine the configuration file path.

    Checks locations in this order:
    1. Custom path (if provided via --config flag)
    2. HWMON_CONFIG_PATH environment variable
    3. ~/.config/hwmon/config.yaml (XDG standard)
    4. ~/.hwmon/config.yaml (legacy location)

    Returns:
        Path to config file if found, None otherwise

    Raises:
        FileNotFoundError: If a custom path was given but does not exist
    """
    if custom_path:
        path = Path(custom_path).expanduser()
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {custom_path}")

    env_path = os.environ.get("HWMON_CONFIG_PATH")
    if env_path:
        path = Path(env_path).expanduser()
        if path.exists():
            return path
        return None

    xdg_path = Path.home() / ".config" / "hwmon" / "config.yaml"
    if xdg_path.exists():
        return xdg_path

    legacy_path = Path.home() / ".hwmon" / "config.yaml"
    if legacy_path.exists():
        return legacy_path

    return None


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
    raise_on_error: bool = True,
) -> Config:
    """Load and validate configuration.

    Configuration is merged in this order (later overrides earlier):
    1. Default configuration
    2. Config file (if found)
    3. CLI overrides (if provided)

    Environment variables in config values are expanded using ${VAR} syntax.

    Args:
        config_path: Optional custom config file path
        cli_overrides: Optional dict of CLI argument overrides
        raise_on_error: If True, raise ConfigError on issues; if False, fall
            back to defaults

    Returns:
        Validated, immutable Config object

    Raises:
        FileNotFoundError: If custom config path doesn't exist
        ConfigSyntaxError: If config file has invalid YAML syntax
        ConfigValidationError: If config values are invalid
    """
    config_data = DEFAULT_CONFIG.copy()
    resolved_path: Path | None = None

    path = get_config_path(config_path)
    if path:
        resolved_path = path
        file_content = path.read_text()
        try:
            file_config = yaml.safe_load(file_content) or {}
        except yaml.YAMLError as e:
            if raise_on_error:
                raise _format_yaml_error(e, str(path), file_content) from e
            file_config = {}

        if not isinstance(file_config, dict):
            if raise_on_error:
                raise ConfigValidationError(
                    f"Top level must be a mapping, got {_get_type_description(file_config)}",
                    file_path=str(path),
                )
            file_config = {}

        config_data = deep_merge(config_data, file_config)

    if cli_overrides:
        config_data = deep_merge(config_data, cli_overrides)

    config_data = expand_env_vars(config_data)

    try:
        return Config(**config_data)
    except ValidationError as e:
        if raise_on_error:
            raise _format_pydantic_error(
                e,
                config_data,
                str(resolved_path) if resolved_path else None,
            ) from e
        return Config(**DEFAULT_CONFIG)
