"""Packaging of payload files into transferable data files.

A packaged data file is a zip archive holding the payload under its own
name and a ``<name>.json`` metadata entry. The archive is named after the
SHA-256 digest of its bytes.
"""

import hashlib
import logging
import shutil
import tempfile
import time
import zipfile
from pathlib import Path
from typing import Final

from datafile_store.core.datafile import METADATA_ENTRY_EXTENSION
from datafile_store.types.models import DataFileMetadata

logger = logging.getLogger(__name__)

_HASH_CHUNK_SIZE: Final[int] = 1024 * 1024


def current_timestamp_ms() -> int:
    """Milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def calculate_file_hash(path: Path) -> str:
    """SHA-256 hex digest of a file's content."""
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def package_data_file(
    source: Path,
    output_dir: Path,
    origin_uid: str,
    *,
    timestamp: int | None = None,
) -> Path:
    """Package a payload file with its metadata into ``output_dir``.

    Args:
        source: Payload file to package
        output_dir: Directory receiving the packaged data file
        origin_uid: Identifier of the originating device
        timestamp: Creation timestamp in epoch milliseconds (defaults to now)

    Returns:
        Path of the packaged data file, named after its SHA-256 digest

    Raises:
        FileNotFoundError: If the source file does not exist
        FileExistsError: If an identical data file is already in output_dir
        OSError: If the archive cannot be written or moved
    """
    if not source.is_file():
        msg = f"Payload file not found: {source}"
        raise FileNotFoundError(msg)

    metadata = DataFileMetadata(
        file_name=source.name,
        creation_timestamp=timestamp if timestamp is not None else current_timestamp_ms(),
        origin_uid=origin_uid,
    )

    output_dir.mkdir(parents=True, exist_ok=True)
    # Stage next to the output so the final move stays on one filesystem
    staging_dir = Path(tempfile.mkdtemp(prefix=".packaging-", dir=output_dir))
    try:
        archive_path = staging_dir / "packaged.zip"
        payload_info = zipfile.ZipInfo.from_file(source, arcname=source.name)
        # Metadata entry carries the payload's date so identical input yields identical bytes
        metadata_info = zipfile.ZipInfo(
            f"{source.name}{METADATA_ENTRY_EXTENSION}",
            date_time=payload_info.date_time,
        )
        metadata_info.compress_type = zipfile.ZIP_DEFLATED
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.write(source, arcname=source.name)
            archive.writestr(metadata_info, metadata.to_json())

        final_path = output_dir / calculate_file_hash(archive_path)
        if final_path.exists():
            msg = f"Data file already exists: {final_path}"
            raise FileExistsError(msg)

        _ = archive_path.rename(final_path)
    finally:
        shutil.rmtree(staging_dir, ignore_errors=True)

    logger.info(
        "Packaged data file",
        extra={
            "source": str(source),
            "data_file": str(final_path),
            "creation_timestamp": metadata.creation_timestamp,
        },
    )
    return final_path


def unpackage_data_file(archive: Path, output_dir: Path, metadata_dir: Path) -> Path | None:
    """Extract a packaged data file.

    Metadata entries go to ``metadata_dir`` and are skipped when a file of
    the same name already exists there. Payload entries go to ``output_dir``.

    Args:
        archive: Packaged data file
        output_dir: Directory receiving payload entries
        metadata_dir: Directory receiving metadata entries

    Returns:
        Path of the last extracted payload, or None if the archive held none

    Raises:
        FileExistsError: If a payload with the same name already exists
        zipfile.BadZipFile: If the archive is not a zip file
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    metadata_dir.mkdir(parents=True, exist_ok=True)

    payload_path: Path | None = None
    with zipfile.ZipFile(archive) as zf:
        for info in zf.infolist():
            if info.is_dir():
                continue

            entry_name = Path(info.filename).name
            if info.filename.endswith(METADATA_ENTRY_EXTENSION):
                target = metadata_dir / entry_name
                if target.exists():
                    logger.debug("Metadata already extracted", extra={"entry": entry_name})
                    continue
            else:
                target = output_dir / entry_name
                if target.exists():
                    msg = f"A file with the same name already exists: {target}"
                    raise FileExistsError(msg)
                payload_path = target

            with zf.open(info) as src, target.open("wb") as dst:
                shutil.copyfileobj(src, dst)

    logger.info(
        "Unpackaged data file",
        extra={"archive": str(archive), "payload": str(payload_path) if payload_path else None},
    )
    return payload_path
