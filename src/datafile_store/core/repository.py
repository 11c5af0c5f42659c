"""Repository over the data directory.

The repository keeps no state about the files it manages: every query lists
the data directory afresh, and every space decision captures fresh storage
information. It takes no locks either; callers that run senders and
receivers concurrently must serialize access to the data directory
themselves (e.g. one lock around each repository call).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Final

from datafile_store.core.config import DEFAULT_DATA_DIRECTORY_NAME, StoreConfig
from datafile_store.core.datafile import DataFile
from datafile_store.core.file_manager import FileManager, PsutilVolume, RemovableStorage
from datafile_store.core.metadata_cache import MetadataCache
from datafile_store.core.selection.factory import create_file_chooser
from datafile_store.core.settings import YamlSettingsStore
from datafile_store.core.storage import capture_storage_information
from datafile_store.types.models import BUFFER_SPACE_BYTES, IdentityMatch, StorageInformation
from datafile_store.types.protocols import (
    DirectoryProvider,
    RemovableStorageProbe,
    SettingsStore,
    StorageFlagProvider,
    VolumeStats,
)
from datafile_store.utils.formatting import format_size

logger = logging.getLogger(__name__)

DATA_FILE_DIRECTORY: Final[str] = DEFAULT_DATA_DIRECTORY_NAME


class DataFileRepository:
    """Query and command surface over the directory of data files.

    Provides:
    - Listing of all, complete and incomplete data files
    - Size aggregates over those partitions
    - Selection of the next file to send using the configured upload priority
    - Eviction of stale incomplete files to make space for an inbound transfer
    """

    def __init__(
        self,
        directory_provider: DirectoryProvider,
        settings: SettingsStore,
        volume: VolumeStats,
        storage_flags: StorageFlagProvider,
        removable_storage: RemovableStorageProbe,
        *,
        data_directory_name: str = DATA_FILE_DIRECTORY,
        buffer_space: int = BUFFER_SPACE_BYTES,
        identity_match: IdentityMatch = IdentityMatch.EXACT,
        metadata_cache: MetadataCache | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            directory_provider: Resolves the data directory
            settings: Settings store holding the upload priority
            volume: Statistics of the volume holding the data directory
            storage_flags: Answers whether non-removable storage may be used
            removable_storage: Checks removable storage availability
            data_directory_name: Name of the storage area holding data files
            buffer_space: Space that must stay free on the volume
            identity_match: Rule used to match file ids
            metadata_cache: Optional cache shared by all listed data files
        """
        self.directory_provider: DirectoryProvider = directory_provider
        self.settings: SettingsStore = settings
        self.volume: VolumeStats = volume
        self.storage_flags: StorageFlagProvider = storage_flags
        self.removable_storage: RemovableStorageProbe = removable_storage
        self.data_directory_name: str = data_directory_name
        self.buffer_space: int = buffer_space
        self.identity_match: IdentityMatch = identity_match
        self.metadata_cache: MetadataCache | None = metadata_cache

    @classmethod
    def from_config(cls, config: StoreConfig) -> DataFileRepository:
        """Build a repository wired to the default collaborators.

        Args:
            config: Store configuration

        Returns:
            Repository using FileManager, YamlSettingsStore, RemovableStorage
            and psutil volume statistics for the base directory
        """
        file_manager = FileManager(config)
        return cls(
            directory_provider=file_manager,
            settings=YamlSettingsStore(config.resolved_settings_file()),
            volume=PsutilVolume(config.base_dir),
            storage_flags=file_manager,
            removable_storage=RemovableStorage(config.removable_mount),
            data_directory_name=config.data_directory_name,
            buffer_space=config.buffer_space_bytes,
            identity_match=config.identity_match,
            metadata_cache=MetadataCache() if config.metadata_cache else None,
        )

    def data_directory(self) -> Path | None:
        return self.directory_provider.get_file_directory(self.data_directory_name)

    def list_all(self) -> list[DataFile]:
        """List every file in the data directory, ordered by name.

        Returns:
            Data files, or an empty list if the directory is unavailable
        """
        directory = self.data_directory()
        if directory is None:
            logger.debug("Data directory unavailable, no data files")
            return []

        try:
            paths = sorted(entry for entry in directory.iterdir() if entry.is_file())
        except OSError as exc:
            logger.warning(
                "Cannot list data directory",
                extra={"directory": str(directory), "error": str(exc)},
            )
            return []

        data_files = [DataFile(path, metadata_cache=self.metadata_cache) for path in paths]
        if self.metadata_cache is not None:
            self.metadata_cache.retain({data_file.file_id for data_file in data_files})
        return data_files

    def list_complete(self) -> list[DataFile]:
        return [data_file for data_file in self.list_all() if data_file.is_complete()]

    def list_incomplete(self) -> list[DataFile]:
        return [data_file for data_file in self.list_all() if not data_file.is_complete()]

    def list_complete_under(self, max_size: int) -> list[DataFile]:
        """List complete data files strictly smaller than ``max_size`` bytes."""
        candidates: list[DataFile] = []
        for data_file in self.list_all():
            is_complete = data_file.is_complete()
            length = data_file.length()
            is_candidate = is_complete and length < max_size
            logger.debug(
                "Checking candidate file",
                extra={
                    "file_name": data_file.name,
                    "complete": is_complete,
                    "length": length,
                    "max_size": max_size,
                    "candidate": is_candidate,
                },
            )
            if is_candidate:
                candidates.append(data_file)
        return candidates

    def total_size(self) -> int:
        return sum(data_file.length() for data_file in self.list_all())

    def incomplete_size(self) -> int:
        return sum(data_file.length() for data_file in self.list_incomplete())

    def retrieve(self, file_id: str) -> DataFile | None:
        """Find the data file carrying ``file_id``, complete or not.

        Args:
            file_id: Identity to look for

        Returns:
            The first matching data file in listing order, or None
        """
        for data_file in self.list_all():
            if data_file.matches(file_id, self.identity_match):
                logger.debug(
                    "Data file found in repository",
                    extra={"file_id": file_id, "file_name": data_file.name},
                )
                return data_file
        return None

    def has_files_to_send(self) -> bool:
        """Check whether at least one complete data file exists."""
        for data_file in self.list_all():
            if data_file.is_complete():
                logger.info("There is a file to send", extra={"file_name": data_file.name})
                return True
        return False

    def select_next_file_for_transfer(self, max_size: int) -> DataFile | None:
        """Choose the next complete data file smaller than ``max_size``.

        Args:
            max_size: Exclusive upper bound on the file length in bytes

        Returns:
            The chosen data file, or None if there is no candidate

        Raises:
            InvalidConfigurationError: If the upload priority cannot be resolved
        """
        data_files = self.list_all()
        logger.info("Data files found", extra={"count": len(data_files)})
        if not data_files:
            return None

        candidates = self.list_complete_under(max_size)
        logger.info("Candidate files found", extra={"count": len(candidates)})
        if not candidates:
            return None

        chooser = create_file_chooser(self.settings)
        selected = chooser.choose_data_file(candidates)
        if selected is not None:
            logger.info(
                "Chosen file",
                extra={
                    "file_name": selected.name,
                    "chooser": type(chooser).__name__,
                    "size": format_size(selected.length()),
                },
            )
        return selected

    def storage_information(self) -> StorageInformation:
        """Capture fresh storage information for the data volume."""
        return capture_storage_information(
            self.volume,
            incomplete_files_space=self.incomplete_size(),
            buffer_space=self.buffer_space,
        )

    def has_enough_space_available(self, target_size: int) -> bool:
        """Check whether ``target_size`` bytes fit while keeping the buffer free."""
        information = self.storage_information()
        enough = information.has_enough_space(target_size)
        logger.debug(
            "Checked available space",
            extra={
                "free_space": information.free_space,
                "buffer_space": information.buffer_space,
                "target_size": target_size,
                "enough_space": enough,
            },
        )
        return enough

    def delete_incomplete_files_for_space(self, file_id: str, target_size: int) -> bool:
        """Delete incomplete data files, oldest first, until ``target_size`` fits.

        The incomplete file carrying ``file_id`` is the transfer in progress
        and is never deleted. Space is checked before the first deletion so
        that a call made while enough space is free deletes nothing.

        Args:
            file_id: Identity of the inbound file to preserve
            target_size: Bytes that need to be accommodated

        Returns:
            True once enough space is available, False if deleting every
            other incomplete file was not enough

        Raises:
            OSError: If a file selected for deletion cannot be removed
        """
        if self.has_enough_space_available(target_size):
            logger.debug("Enough space available, nothing to delete")
            return True

        incomplete_files = sorted(self.list_incomplete(), key=DataFile.last_modified)
        logger.debug(
            "Deleting incomplete files to make space",
            extra={"candidates": len(incomplete_files), "target_size": target_size},
        )

        for data_file in incomplete_files:
            if data_file.matches(file_id, self.identity_match):
                logger.debug(
                    "Skipping file being received",
                    extra={"file_id": file_id, "file_name": data_file.name},
                )
                continue

            try:
                data_file.delete()
            except OSError as exc:
                msg = f"File: {data_file.name} could not be deleted."
                logger.warning(msg, extra={"error": str(exc)})
                raise OSError(msg) from exc

            logger.info("Deleted incomplete file", extra={"file_name": data_file.name})

            if self.has_enough_space_available(target_size):
                logger.debug("Enough space available now")
                return True

        logger.warning(
            "Not enough space after deleting incomplete files",
            extra={"file_id": file_id, "target_size": target_size},
        )
        return False

    def can_receive_files(self) -> bool:
        """Check whether inbound files may currently be stored."""
        if self.storage_flags.is_non_removable_storage_allowed():
            return True

        available = self.removable_storage.is_removable_storage_available()
        if not available:
            logger.warning("Removable storage is not currently available")
        return available
