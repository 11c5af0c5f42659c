"""Persisted string settings backing runtime configuration choices.

Settings differ from the YAML application configuration in that the store
itself writes them back, e.g. the upload priority default on first use.
"""

import logging
from pathlib import Path
from typing import Final, override

import yaml

from datafile_store.core.config import InvalidConfigurationError

logger = logging.getLogger(__name__)


class SettingKey:
    """Identifiers of persisted settings."""

    UPLOAD_PRIORITY: Final[str] = "upload_priority"
    ORIGIN_UID: Final[str] = "unique_identifier"


class MemorySettingsStore:
    """Dictionary-backed settings store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._settings: dict[str, str] = dict(initial or {})

    def get_string_setting(self, key: str) -> str | None:
        return self._settings.get(key)

    def set_string_setting(self, key: str, value: str) -> None:
        self._settings[key] = value

    @override
    def __repr__(self) -> str:
        return f"MemorySettingsStore({self._settings!r})"


class YamlSettingsStore:
    """Settings persisted as a flat YAML mapping of string keys to string values.

    Every read re-reads the file so that values written by another process
    are observed. A missing file reads as an empty mapping.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: YAML file holding the settings
        """
        self.path: Path = path

    def get_string_setting(self, key: str) -> str | None:
        """Read a setting.

        Args:
            key: Setting identifier

        Returns:
            The stored value, or None if the setting was never written

        Raises:
            InvalidConfigurationError: If the settings file cannot be read or decoded
        """
        value = self._load().get(key)
        logger.debug(
            "Read setting",
            extra={"key": key, "value": value, "settings_file": str(self.path)},
        )
        return value

    def set_string_setting(self, key: str, value: str) -> None:
        """Persist a setting, rewriting the whole file.

        Args:
            key: Setting identifier
            value: Value to store

        Raises:
            InvalidConfigurationError: If the settings file cannot be read or written
        """
        settings = self._load()
        settings[key] = value

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                yaml.safe_dump(settings, f, default_flow_style=False, sort_keys=True)
        except OSError as e:
            msg = f"Failed to write settings file: {self.path}\nError: {e}"
            raise InvalidConfigurationError(msg) from e

        logger.info(
            "Stored setting",
            extra={"key": key, "value": value, "settings_file": str(self.path)},
        )

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]  # YAML boundary
        except yaml.YAMLError as e:
            msg = f"Failed to parse settings file: {self.path}\nYAML parsing error: {e}"
            raise InvalidConfigurationError(msg) from e
        except OSError as e:
            msg = f"Failed to read settings file: {self.path}\nError: {e}"
            raise InvalidConfigurationError(msg) from e

        if raw_data is None:
            return {}

        if not isinstance(raw_data, dict):
            msg = (
                f"Invalid settings file format: {self.path}\n"
                f"Expected YAML dictionary at root level, got: {type(raw_data).__name__}"
            )
            raise InvalidConfigurationError(msg)

        settings: dict[str, str] = {}
        for key, value in raw_data.items():  # pyright: ignore[reportUnknownVariableType]  # YAML boundary
            if not isinstance(key, str) or not isinstance(value, str):
                msg = f"Settings must map strings to strings, got {key!r}: {value!r} in {self.path}"
                raise InvalidConfigurationError(msg)
            settings[key] = value
        return settings

    @override
    def __repr__(self) -> str:
        return f"YamlSettingsStore({str(self.path)!r})"
