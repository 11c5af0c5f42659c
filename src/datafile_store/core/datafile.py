"""Data file entity: a file awaiting transfer to a peer device.

A data file is identified by its path. While it is still being received its
name carries the ``.dhincomplete`` suffix; once complete it is a zip archive
whose single ``*.json`` entry holds the transfer metadata.

Metadata is read on demand: every accessor opens the archive and parses the
JSON entry again unless a MetadataCache is supplied.
"""

import json
import logging
import zipfile
from collections.abc import Mapping
from pathlib import Path
from typing import Final, override

from datafile_store.core.metadata_cache import MetadataCache
from datafile_store.types.models import (
    CREATION_TIMESTAMP_KEY,
    FILE_NAME_KEY,
    ORIGIN_UID_KEY,
    IdentityMatch,
)

logger = logging.getLogger(__name__)

# Appendix signaling a partially transferred file
INCOMPLETE_FILE_APPENDIX: Final[str] = "dhincomplete"
INCOMPLETE_FILE_SUFFIX: Final[str] = f".{INCOMPLETE_FILE_APPENDIX}"

METADATA_ENTRY_EXTENSION: Final[str] = ".json"


class DataFile:
    """A file in the data directory, complete or still being received."""

    def __init__(self, path: Path, *, metadata_cache: MetadataCache | None = None) -> None:
        """Initialize the data file.

        Args:
            path: Location of the file; also its identity
            metadata_cache: Optional cache for parsed metadata
        """
        self.path: Path = path
        self.metadata_cache: MetadataCache | None = metadata_cache

    @property
    def name(self) -> str:
        """Display name (final path segment)."""
        return self.path.name

    @property
    def file_id(self) -> str:
        """Identity: the display name without the incomplete suffix."""
        name = self.name
        if name.endswith(INCOMPLETE_FILE_SUFFIX):
            return name[: -len(INCOMPLETE_FILE_SUFFIX)]
        return name

    def is_complete(self) -> bool:
        is_complete = not self.name.endswith(INCOMPLETE_FILE_SUFFIX)
        logger.debug(
            "Checking file completion",
            extra={"file_name": self.name, "complete": is_complete},
        )
        return is_complete

    def remote_incomplete_name(self) -> str:
        """Name this file carries on the remote peer while it is transferred.

        Returns:
            Display name with the incomplete suffix appended
        """
        return f"{self.name}{INCOMPLETE_FILE_SUFFIX}"

    def matches(self, file_id: str, mode: IdentityMatch = IdentityMatch.EXACT) -> bool:
        """Check whether this file carries the requested identity.

        Args:
            file_id: Identity to look for
            mode: EXACT compares identities; PREFIX tests the display name prefix

        Returns:
            True if the file matches
        """
        if mode == IdentityMatch.PREFIX:
            return self.name.startswith(file_id)
        return self.file_id == file_id

    def length(self) -> int:
        """Size in bytes, 0 if the file no longer exists."""
        try:
            return self.path.stat().st_size
        except FileNotFoundError:
            return 0

    def last_modified(self) -> float:
        """Modification time in seconds since the epoch, 0.0 if missing."""
        try:
            return self.path.stat().st_mtime
        except FileNotFoundError:
            return 0.0

    def exists(self) -> bool:
        return self.path.exists()

    def delete(self) -> None:
        """Remove the file from disk.

        Raises:
            OSError: If the file cannot be removed
        """
        self.path.unlink()
        if self.metadata_cache is not None:
            self.metadata_cache.invalidate(self.file_id)

    def get_metadata(self, key: str) -> str | None:
        """Read a value from the embedded JSON metadata entry.

        Metadata access is best-effort: archive, decoding and lookup failures
        are logged and reported as None.

        Args:
            key: Metadata key (e.g. "OriginUID")

        Returns:
            The value as a string, or None if it cannot be read
        """
        document = self._read_metadata_document()
        if document is None:
            return None

        value = document.get(key)
        if isinstance(value, str):
            return value
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)

        logger.error(
            "Metadata key missing or not a scalar",
            extra={"file_name": self.name, "key": key, "value_type": type(value).__name__},
        )
        return None

    def creation_timestamp(self) -> int:
        """Creation timestamp stored in the metadata.

        Unlike the other accessors this one is not null-safe.

        Raises:
            ValueError: If the stored timestamp is not an integer
            TypeError: If the metadata cannot be read
        """
        return int(self.get_metadata(CREATION_TIMESTAMP_KEY))  # pyright: ignore[reportArgumentType]  # None propagates as TypeError

    def origin_uid(self) -> str | None:
        return self.get_metadata(ORIGIN_UID_KEY)

    def original_file_name(self) -> str | None:
        return self.get_metadata(FILE_NAME_KEY)

    def _read_metadata_document(self) -> Mapping[str, object] | None:
        mtime_ns: int | None = None
        if self.metadata_cache is not None:
            try:
                mtime_ns = self.path.stat().st_mtime_ns
            except OSError:
                mtime_ns = None
            if mtime_ns is not None:
                cached = self.metadata_cache.get(self.file_id, mtime_ns)
                if cached is not None:
                    return cached

        document = self._parse_metadata_entry()

        if document is not None and self.metadata_cache is not None and mtime_ns is not None:
            self.metadata_cache.put(self.file_id, mtime_ns, document)
        return document

    def _parse_metadata_entry(self) -> Mapping[str, object] | None:
        try:
            with zipfile.ZipFile(self.path) as archive:
                entry = next(
                    (
                        info
                        for info in archive.infolist()
                        if info.filename.endswith(METADATA_ENTRY_EXTENSION)
                    ),
                    None,
                )
                if entry is None:
                    logger.error(
                        "No metadata entry found in data file",
                        extra={"file_name": self.name},
                    )
                    return None

                raw = archive.read(entry)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, RuntimeError, NotImplementedError):
            logger.error(
                "Error occurred while opening the data file archive",
                extra={"file_name": self.name},
                exc_info=True,
            )
            return None

        try:
            document: object = json.loads(raw.decode("utf-8"))  # pyright: ignore[reportAny]  # JSON boundary
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.error(
                "Error occurred while reading the metadata entry",
                extra={"file_name": self.name, "entry": entry.filename},
                exc_info=True,
            )
            return None

        if not isinstance(document, dict):
            logger.error(
                "Metadata entry is not a JSON object",
                extra={"file_name": self.name, "entry": entry.filename},
            )
            return None

        return document  # pyright: ignore[reportUnknownVariableType]  # JSON boundary

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataFile):
            return NotImplemented
        return self.path == other.path

    @override
    def __hash__(self) -> int:
        return hash(self.path)

    @override
    def __repr__(self) -> str:
        return f"DataFile({str(self.path)!r})"
