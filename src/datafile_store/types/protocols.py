"""Protocol definitions for external collaborators.

This module defines structural subtyping protocols for the services the
store calls into without owning: storage area resolution, storage flags,
removable storage detection, persisted settings and volume statistics.
"""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class DirectoryProvider(Protocol):
    """Resolves named storage areas to filesystem directories."""

    def get_file_directory(self, name: str) -> Path | None:
        """Resolve a named storage area.

        Args:
            name: Storage area name (e.g. "data")

        Returns:
            Directory path, or None if the area is currently unavailable
        """
        ...


class StorageFlagProvider(Protocol):
    """Answers storage policy flags."""

    def is_non_removable_storage_allowed(self) -> bool:
        """Return True if files may be received on non-removable storage."""
        ...


class RemovableStorageProbe(Protocol):
    """Checks removable storage availability."""

    def is_removable_storage_available(self) -> bool:
        """Return True if removable storage is mounted and usable."""
        ...


@runtime_checkable
class SettingsStore(Protocol):
    """Persisted string settings.

    Both operations may raise InvalidConfigurationError when the backend
    cannot answer.
    """

    def get_string_setting(self, key: str) -> str | None:
        """Read a setting, returning None when it has never been set."""
        ...

    def set_string_setting(self, key: str, value: str) -> None:
        """Persist a setting."""
        ...


class VolumeStats(Protocol):
    """Total and free space of the volume holding the data files."""

    def total_space(self) -> int:
        """Return total volume size in bytes."""
        ...

    def free_space(self) -> int:
        """Return free volume space in bytes."""
        ...
