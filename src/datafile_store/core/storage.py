"""Storage information capture for space decisions.

Every space decision takes a fresh StorageInformation snapshot; nothing is
cached between captures so that each eviction step observes the space it
just released.
"""

import logging

from datafile_store.types.models import BUFFER_SPACE_BYTES, StorageInformation
from datafile_store.types.protocols import VolumeStats

logger = logging.getLogger(__name__)


def capture_storage_information(
    volume: VolumeStats,
    *,
    incomplete_files_space: int,
    buffer_space: int = BUFFER_SPACE_BYTES,
) -> StorageInformation:
    """Capture an immutable snapshot of the volume holding the data files.

    Args:
        volume: Volume statistics source
        incomplete_files_space: Aggregate size of incomplete data files in bytes
        buffer_space: Safety buffer that must remain free

    Returns:
        StorageInformation with total, free and incomplete file space

    Raises:
        OSError: If the volume statistics cannot be read
    """
    information = StorageInformation(
        total_space=volume.total_space(),
        free_space=volume.free_space(),
        incomplete_files_space=incomplete_files_space,
        buffer_space=buffer_space,
    )

    logger.debug(
        "Storage information captured",
        extra={
            "total_space": information.total_space,
            "free_space": information.free_space,
            "incomplete_files_space": information.incomplete_files_space,
            "buffer_space": information.buffer_space,
        },
    )

    return information
