"""Data models for datafile-store.

This module defines immutable dataclasses used throughout the application
for type-safe data transfer between components.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Final

# Reserve that must stay free on the volume regardless of the target size
BUFFER_SPACE_BYTES: Final[int] = 100 * 1024 * 1024

# Metadata keys inside the archive's JSON entry
ORIGIN_UID_KEY: Final[str] = "OriginUID"
CREATION_TIMESTAMP_KEY: Final[str] = "CreationTimestamp"
FILE_NAME_KEY: Final[str] = "FileName"


class IdentityMatch(str, Enum):
    """How a requested file identity is compared against data files."""

    EXACT = "exact"  # identity equals the requested id
    PREFIX = "prefix"  # display name starts with the requested id


@dataclass(slots=True, frozen=True)
class StorageInformation:
    """Immutable point-in-time read of the storage volume.

    Captures total and free space of the volume holding the data files plus
    the aggregate size of incomplete data files at capture time. A fresh
    instance must be captured for every space decision.
    """

    total_space: int
    free_space: int
    incomplete_files_space: int
    buffer_space: int = BUFFER_SPACE_BYTES

    def has_enough_space(self, target_size: int) -> bool:
        """Check whether ``target_size`` bytes fit while keeping the buffer free.

        Args:
            target_size: Number of bytes that need to be accommodated

        Returns:
            True if free space minus the safety buffer covers the target size

        Examples:
            >>> mib = 1024 * 1024
            >>> StorageInformation(0, 150 * mib, 0).has_enough_space(49 * mib)
            True
            >>> StorageInformation(0, 150 * mib, 0).has_enough_space(51 * mib)
            False
        """
        return self.free_space - self.buffer_space >= target_size


@dataclass(slots=True, frozen=True)
class DataFileMetadata:
    """Metadata embedded as the JSON entry of a packaged data file."""

    file_name: str
    creation_timestamp: int  # milliseconds since the Unix epoch
    origin_uid: str

    def to_json(self) -> str:
        """Serialize using the on-disk key names."""
        return json.dumps(
            {
                FILE_NAME_KEY: self.file_name,
                CREATION_TIMESTAMP_KEY: self.creation_timestamp,
                ORIGIN_UID_KEY: self.origin_uid,
            }
        )
