"""Upload priority strategies for choosing the next outbound data file."""

from __future__ import annotations

from .choosers import (
    FileChooser,
    LargestFileChooser,
    NewestFileChooser,
    OldestFileChooser,
    SmallestFileChooser,
    UploadPriority,
)
from .factory import (
    DEFAULT_UPLOAD_PRIORITY,
    chooser_for,
    create_file_chooser,
    ensure_upload_priority,
)

__all__ = [
    "DEFAULT_UPLOAD_PRIORITY",
    "FileChooser",
    "LargestFileChooser",
    "NewestFileChooser",
    "OldestFileChooser",
    "SmallestFileChooser",
    "UploadPriority",
    "chooser_for",
    "create_file_chooser",
    "ensure_upload_priority",
]
