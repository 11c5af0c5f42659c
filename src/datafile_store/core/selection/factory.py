"""Resolve the configured upload priority to a file chooser.

Resolution is split in two steps: ``ensure_upload_priority`` reads the
setting and writes the default on first use, ``chooser_for`` maps a
validated priority to its chooser. ``create_file_chooser`` runs both.
"""

import logging
from typing import Final

from datafile_store.core.config import InvalidConfigurationError
from datafile_store.core.selection.choosers import (
    FileChooser,
    LargestFileChooser,
    NewestFileChooser,
    OldestFileChooser,
    SmallestFileChooser,
    UploadPriority,
)
from datafile_store.core.settings import SettingKey
from datafile_store.types.protocols import SettingsStore

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_PRIORITY: Final[UploadPriority] = UploadPriority.SMALLEST_FIRST

_CHOOSERS: Final[dict[UploadPriority, type[FileChooser]]] = {
    UploadPriority.LARGEST_FIRST: LargestFileChooser,
    UploadPriority.NEWEST_FIRST: NewestFileChooser,
    UploadPriority.OLDEST_FIRST: OldestFileChooser,
    UploadPriority.SMALLEST_FIRST: SmallestFileChooser,
}


def ensure_upload_priority(settings: SettingsStore) -> UploadPriority:
    """Read the upload priority, storing the default if none is configured.

    Args:
        settings: Settings store holding the upload priority

    Returns:
        The configured (or newly stored default) upload priority

    Raises:
        InvalidConfigurationError: If the store fails or the stored value is unknown
    """
    try:
        stored = settings.get_string_setting(SettingKey.UPLOAD_PRIORITY)
    except InvalidConfigurationError:
        logger.error("Error while reading the upload priority setting", exc_info=True)
        raise

    logger.debug("Upload priority setting read", extra={"upload_priority": stored})

    if stored is None:
        settings.set_string_setting(SettingKey.UPLOAD_PRIORITY, DEFAULT_UPLOAD_PRIORITY.value)
        logger.info(
            "Upload priority not configured, stored default",
            extra={"upload_priority": DEFAULT_UPLOAD_PRIORITY.value},
        )
        return DEFAULT_UPLOAD_PRIORITY

    try:
        return UploadPriority(stored)
    except ValueError as e:
        logger.debug("Unexpected upload priority value", extra={"upload_priority": stored})
        msg = (
            f"Invalid upload priority: {stored!r}. "
            f"Expected one of: {', '.join(p.value for p in UploadPriority)}"
        )
        raise InvalidConfigurationError(msg) from e


def chooser_for(priority: UploadPriority) -> FileChooser:
    """Map an upload priority to a fresh chooser instance."""
    return _CHOOSERS[priority]()


def create_file_chooser(settings: SettingsStore) -> FileChooser:
    """Create the file chooser for the configured upload priority.

    Args:
        settings: Settings store holding the upload priority

    Returns:
        File chooser instance

    Raises:
        InvalidConfigurationError: If the upload priority cannot be resolved
    """
    priority = ensure_upload_priority(settings)
    chooser = chooser_for(priority)
    logger.debug(
        "File chooser created",
        extra={"upload_priority": priority.value, "chooser": type(chooser).__name__},
    )
    return chooser
