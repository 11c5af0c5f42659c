"""Type definitions and protocols for datafile-store.

This package provides:
- Data models (immutable dataclasses)
- Protocol definitions (structural subtyping interfaces)
"""

from datafile_store.types.models import (
    BUFFER_SPACE_BYTES,
    CREATION_TIMESTAMP_KEY,
    FILE_NAME_KEY,
    ORIGIN_UID_KEY,
    DataFileMetadata,
    IdentityMatch,
    StorageInformation,
)
from datafile_store.types.protocols import (
    DirectoryProvider,
    RemovableStorageProbe,
    SettingsStore,
    StorageFlagProvider,
    VolumeStats,
)

__all__ = [
    # Constants
    "BUFFER_SPACE_BYTES",
    "CREATION_TIMESTAMP_KEY",
    "FILE_NAME_KEY",
    "ORIGIN_UID_KEY",
    # Data models
    "DataFileMetadata",
    "IdentityMatch",
    "StorageInformation",
    # Protocols
    "DirectoryProvider",
    "RemovableStorageProbe",
    "SettingsStore",
    "StorageFlagProvider",
    "VolumeStats",
]
