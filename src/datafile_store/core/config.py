"""Configuration for datafile-store.

The YAML file is read with PyYAML, ``${NAME}`` references are replaced from
the environment, and the result is validated by the Pydantic models below.
Every failure surfaces as ConfigurationError carrying the underlying error
as its cause.
"""

import os
import re
from pathlib import Path
from typing import Annotated, Final

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from datafile_store.types.models import BUFFER_SPACE_BYTES, IdentityMatch

# ${NAME} where NAME is upper-case letters, digits and underscores
ENV_REFERENCE: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Z0-9_]+)\}")

DEFAULT_DATA_DIRECTORY_NAME: Final[str] = "data"
DEFAULT_SETTINGS_FILE_NAME: Final[str] = "settings.yaml"


class ConfigurationError(Exception):
    """Configuration could not be loaded or is invalid.

    Messages name the offending file or field and what to change.
    """


class InvalidConfigurationError(ConfigurationError):
    """Exception raised when a configuration value cannot be read or decoded.

    Raised by settings stores when their backend fails to answer and by the
    file chooser factory when a stored upload priority is not recognized.
    """


class EnvironmentVariableError(Exception):
    """A ``${NAME}`` reference names an unset environment variable."""


class StoreConfig(BaseModel):
    """Configuration for the data file store.

    Defines where storage areas live, the removable storage mount point,
    the safety buffer and the identity matching rule.
    """

    base_dir: Annotated[
        Path,
        Field(description="Root directory under which named storage areas resolve"),
    ]
    data_directory_name: Annotated[
        str,
        Field(
            min_length=1,
            description="Name of the storage area holding data files",
        ),
    ] = DEFAULT_DATA_DIRECTORY_NAME
    removable_mount: Annotated[
        Path | None,
        Field(description="Mount point of the removable storage volume"),
    ] = None
    allow_non_removable_storage: Annotated[
        bool,
        Field(description="Accept files even when removable storage is missing"),
    ] = False
    buffer_space_bytes: Annotated[
        int,
        Field(
            ge=0,
            description="Space kept free on the volume regardless of target size",
        ),
    ] = BUFFER_SPACE_BYTES
    settings_file: Annotated[
        Path | None,
        Field(description="YAML file persisting runtime settings"),
    ] = None
    identity_match: Annotated[
        IdentityMatch,
        Field(description="Rule used to match a file id against data files"),
    ] = IdentityMatch.EXACT
    metadata_cache: Annotated[
        bool,
        Field(description="Cache parsed metadata keyed by file id and mtime"),
    ] = False

    @field_validator("data_directory_name", mode="after")
    @classmethod
    def validate_directory_name(cls, v: str) -> str:
        """Validate that the storage area name is a single path segment.

        Args:
            v: Storage area name

        Returns:
            Validated name

        Raises:
            ValueError: If the name contains path separators
        """
        if "/" in v or "\\" in v or v in {".", ".."}:
            msg = f"Data directory name must be a single path segment, got: {v}"
            raise ValueError(msg)
        return v

    def resolved_settings_file(self) -> Path:
        """Return the settings file, defaulting to one under base_dir."""
        if self.settings_file is not None:
            return self.settings_file
        return self.base_dir / DEFAULT_SETTINGS_FILE_NAME


class ApplicationConfig(BaseModel):
    """Process-wide settings: verbosity and syslog output."""

    log_level: Annotated[
        str,
        Field(
            description="Minimum level of emitted log records",
            pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        ),
    ] = "INFO"
    syslog_enabled: Annotated[
        bool,
        Field(description="Also send log records to the local syslog daemon"),
    ] = False


class MainConfig(BaseModel):
    """Root of the YAML configuration file.

    Sections:
    - store: where data files live and how space is managed
    - application: logging
    """

    store: Annotated[
        StoreConfig,
        Field(description="Data file store configuration"),
    ]
    application: Annotated[
        ApplicationConfig,
        Field(
            default_factory=ApplicationConfig,
            description="Logging configuration",
        ),
    ]


def resolve_env_var(value: str) -> str:
    """Substitute every ``${NAME}`` in ``value`` from the environment.

    Raises:
        EnvironmentVariableError: If a referenced variable is unset

    Examples:
        >>> os.environ["STORE_ROOT"] = "/mnt/sdcard"
        >>> resolve_env_var("${STORE_ROOT}/hopper")
        '/mnt/sdcard/hopper'
    """

    def lookup(match: re.Match[str]) -> str:
        name = match.group(1)
        try:
            return os.environ[name]
        except KeyError:
            msg = f"Environment variable {name!r} is referenced but not set"
            raise EnvironmentVariableError(msg) from None

    return ENV_REFERENCE.sub(lookup, value)


def _resolve_node(node: object) -> object:
    if isinstance(node, str):
        return resolve_env_var(node)
    if isinstance(node, dict):
        return {key: _resolve_node(item) for key, item in node.items()}  # pyright: ignore[reportUnknownVariableType]  # YAML boundary
    if isinstance(node, list):
        return [_resolve_node(item) for item in node]  # pyright: ignore[reportUnknownVariableType]  # YAML boundary
    return node


def resolve_env_vars_in_dict(data: dict[str, object]) -> dict[str, object]:
    """Return a copy of ``data`` with references resolved in every string.

    Nested mappings and lists are walked; other scalars are kept as they are.

    Raises:
        EnvironmentVariableError: If a referenced variable is unset
    """
    return {key: _resolve_node(value) for key, value in data.items()}


def _read_yaml_mapping(config_path: Path) -> dict[str, object]:
    try:
        with config_path.open("r", encoding="utf-8") as f:
            raw_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]  # YAML boundary
    except yaml.YAMLError as e:
        msg = f"Failed to parse YAML in {config_path}: {e}"
        raise ConfigurationError(msg) from e
    except OSError as e:
        msg = f"Cannot read configuration file {config_path}: {e}"
        raise ConfigurationError(msg) from e

    if not isinstance(raw_data, dict):
        msg = (
            f"Expected YAML dictionary at the top of {config_path}, "
            f"found {type(raw_data).__name__}"
        )
        raise ConfigurationError(msg)
    return raw_data  # pyright: ignore[reportUnknownVariableType]  # YAML boundary


def _describe_validation_error(config_path: Path, error: ValidationError) -> str:
    lines = [f"Configuration validation failed for {config_path}:"]
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        lines.append(f"  {location}: {detail['msg']} ({detail['type']})")
    return "\n".join(lines)


def load_main_config(config_path: Path) -> MainConfig:
    """Load, resolve and validate the configuration file.

    Args:
        config_path: YAML configuration file

    Returns:
        Validated MainConfig instance

    Raises:
        ConfigurationError: If the file is missing, unreadable, not a YAML
            mapping, references an unset variable or fails validation
    """
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise ConfigurationError(msg)

    raw_data = _read_yaml_mapping(config_path)

    try:
        resolved_data = resolve_env_vars_in_dict(raw_data)
    except EnvironmentVariableError as e:
        msg = f"Environment variable resolution failed in {config_path}: {e}"
        raise ConfigurationError(msg) from e

    try:
        return MainConfig.model_validate(resolved_data)
    except ValidationError as e:
        raise ConfigurationError(_describe_validation_error(config_path, e)) from e
