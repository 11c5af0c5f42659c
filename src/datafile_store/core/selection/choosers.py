"""File choosers picking the next data file to send.

Each chooser scans the candidates once and keeps the running best, replacing
it only on a strict improvement, so the first of several equal candidates
wins.
"""

from collections.abc import Callable, Sequence
from enum import Enum
from typing import Protocol, runtime_checkable

from datafile_store.core.datafile import DataFile


class UploadPriority(str, Enum):
    """Configured order in which complete data files are sent."""

    LARGEST_FIRST = "LARGEST_FIRST"
    SMALLEST_FIRST = "SMALLEST_FIRST"
    NEWEST_FIRST = "NEWEST_FIRST"
    OLDEST_FIRST = "OLDEST_FIRST"


@runtime_checkable
class FileChooser(Protocol):
    """Strategy choosing one data file from a candidate sequence."""

    def choose_data_file(self, data_files: Sequence[DataFile]) -> DataFile | None:
        """Choose a data file.

        Args:
            data_files: Candidates; never mutated

        Returns:
            The chosen file, or None if there are no candidates
        """
        ...


def _choose_by(
    data_files: Sequence[DataFile],
    key: Callable[[DataFile], int],
    *,
    maximize: bool,
) -> DataFile | None:
    if not data_files:
        return None

    result = data_files[0]
    best = key(result)
    for data_file in data_files[1:]:
        value = key(data_file)
        if (value > best) if maximize else (value < best):
            result = data_file
            best = value
    return result


class LargestFileChooser:
    """Chooses the largest file by length."""

    def choose_data_file(self, data_files: Sequence[DataFile]) -> DataFile | None:
        return _choose_by(data_files, DataFile.length, maximize=True)


class SmallestFileChooser:
    """Chooses the smallest file by length."""

    def choose_data_file(self, data_files: Sequence[DataFile]) -> DataFile | None:
        return _choose_by(data_files, DataFile.length, maximize=False)


class NewestFileChooser:
    """Chooses the file with the latest creation timestamp.

    Propagates the ValueError/TypeError of DataFile.creation_timestamp when a
    candidate carries no readable timestamp.
    """

    def choose_data_file(self, data_files: Sequence[DataFile]) -> DataFile | None:
        return _choose_by(data_files, DataFile.creation_timestamp, maximize=True)


class OldestFileChooser:
    """Chooses the file with the earliest creation timestamp.

    Same failure behavior as NewestFileChooser.
    """

    def choose_data_file(self, data_files: Sequence[DataFile]) -> DataFile | None:
        return _choose_by(data_files, DataFile.creation_timestamp, maximize=False)
