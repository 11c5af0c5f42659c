"""Storage area resolution and volume statistics.

Maps named storage areas onto directories below a configured base directory,
answers storage policy flags, detects removable storage through the mounted
partition table and reads volume statistics via psutil.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import psutil

from datafile_store.core.config import StoreConfig

logger = logging.getLogger(__name__)


class FileManager:
    """Resolves named storage areas below the configured base directory."""

    def __init__(self, config: StoreConfig) -> None:
        """Initialize the file manager.

        Args:
            config: Store configuration providing the base directory and flags
        """
        self.config: StoreConfig = config

    def get_file_directory(self, name: str) -> Path | None:
        """Resolve a named storage area, creating it on demand.

        Args:
            name: Storage area name

        Returns:
            Directory path, or None if the base directory is unavailable
        """
        base_dir = self.config.base_dir
        if not base_dir.is_dir():
            logger.warning(
                "Storage base directory is unavailable",
                extra={"base_dir": str(base_dir)},
            )
            return None

        directory = base_dir / name
        try:
            directory.mkdir(exist_ok=True)
        except OSError as exc:
            logger.warning(
                "Cannot create storage area",
                extra={"directory": str(directory), "error": str(exc)},
            )
            return None

        if not directory.is_dir():
            logger.warning(
                "Storage area is not a directory",
                extra={"directory": str(directory)},
            )
            return None

        return directory

    def is_non_removable_storage_allowed(self) -> bool:
        return self.config.allow_non_removable_storage


class RemovableStorage:
    """Detects whether the removable storage volume is mounted and writable."""

    def __init__(self, mount_point: Path | None) -> None:
        self.mount_point: Path | None = mount_point

    def is_removable_storage_available(self) -> bool:
        """Check the partition table for the configured mount point.

        Returns:
            True if the mount point is mounted and writable
        """
        if self.mount_point is None:
            logger.debug("No removable storage mount point configured")
            return False

        try:
            mounted = {
                Path(partition.mountpoint)
                for partition in psutil.disk_partitions(all=True)
            }
        except OSError as exc:
            logger.warning(
                "Cannot read partition table",
                extra={"error": str(exc)},
            )
            return False

        if self.mount_point not in mounted:
            logger.debug(
                "Removable storage is not mounted",
                extra={"mount_point": str(self.mount_point)},
            )
            return False

        return os.access(self.mount_point, os.W_OK)


class PsutilVolume:
    """Volume statistics for the filesystem containing ``path``.

    An unavailable path (e.g. unmounted removable storage) reports zero
    total and free space instead of raising.
    """

    def __init__(self, path: Path) -> None:
        self.path: Path = path

    def total_space(self) -> int:
        return self._usage()[0]

    def free_space(self) -> int:
        return self._usage()[1]

    def _usage(self) -> tuple[int, int]:
        """Return (total, free) in bytes, (0, 0) if the path is unavailable."""
        try:
            usage = psutil.disk_usage(str(self.path))
        except OSError as exc:
            logger.warning(
                "Cannot read volume statistics",
                extra={"path": str(self.path), "error": str(exc)},
            )
            return 0, 0
        return usage.total, usage.free
