"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
import os
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from datafile_store.core.repository import DataFileRepository
from datafile_store.core.settings import MemorySettingsStore
from datafile_store.types.models import IdentityMatch

MIB = 1024 * 1024


class StaticDirectoryProvider:
    """Directory provider returning a fixed directory (or None)."""

    def __init__(self, directory: Path | None) -> None:
        self.directory: Path | None = directory
        self.requested: list[str] = []

    def get_file_directory(self, name: str) -> Path | None:
        self.requested.append(name)
        return self.directory


class StaticStorageFlags:
    def __init__(self, allowed: bool = False) -> None:
        self.allowed: bool = allowed

    def is_non_removable_storage_allowed(self) -> bool:
        return self.allowed


class StaticRemovableStorage:
    def __init__(self, available: bool = True) -> None:
        self.available: bool = available
        self.calls: int = 0

    def is_removable_storage_available(self) -> bool:
        self.calls += 1
        return self.available


class DirectoryBackedVolume:
    """Volume whose free space shrinks with the bytes stored in a directory.

    Deleting a file from the directory releases its bytes, which lets
    eviction tests observe space being reclaimed.
    """

    def __init__(self, directory: Path, *, total: int, free_when_empty: int) -> None:
        self.directory: Path = directory
        self.total: int = total
        self.free_when_empty: int = free_when_empty
        self.free_space_calls: int = 0

    def total_space(self) -> int:
        return self.total

    def free_space(self) -> int:
        self.free_space_calls += 1
        used = sum(p.stat().st_size for p in self.directory.iterdir() if p.is_file())
        return self.free_when_empty - used


type ArchiveWriter = Callable[..., Path]


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "data"
    directory.mkdir()
    return directory


@pytest.fixture
def write_archive() -> ArchiveWriter:
    """Factory writing a zip data file with a JSON metadata entry."""

    def _write(
        path: Path,
        metadata: dict[str, object] | None = None,
        *,
        payload: bytes = b"payload",
        metadata_entry: str | None = None,
    ) -> Path:
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("payload.bin", payload)
            if metadata is not None:
                entry = metadata_entry or f"{path.name}.json"
                archive.writestr(entry, json.dumps(metadata))
        return path

    return _write


@pytest.fixture
def write_file() -> Callable[..., Path]:
    """Factory writing a plain file of a given size and modification time."""

    def _write(path: Path, size: int, *, mtime: float | None = None) -> Path:
        _ = path.write_bytes(b"x" * size)
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _write


@pytest.fixture
def settings() -> MemorySettingsStore:
    return MemorySettingsStore()


@pytest.fixture
def make_repository(
    data_dir: Path,
    settings: MemorySettingsStore,
) -> Callable[..., DataFileRepository]:
    """Factory building a repository over ``data_dir`` with test collaborators."""

    def _make(
        *,
        directory: Path | None = data_dir,
        free_when_empty: int = 10_000 * MIB,
        total: int = 20_000 * MIB,
        buffer_space: int = 100 * MIB,
        non_removable_allowed: bool = False,
        removable_available: bool = True,
        identity_match: IdentityMatch = IdentityMatch.EXACT,
    ) -> DataFileRepository:
        return DataFileRepository(
            directory_provider=StaticDirectoryProvider(directory),
            settings=settings,
            volume=DirectoryBackedVolume(data_dir, total=total, free_when_empty=free_when_empty),
            storage_flags=StaticStorageFlags(non_removable_allowed),
            removable_storage=StaticRemovableStorage(removable_available),
            buffer_space=buffer_space,
            identity_match=identity_match,
        )

    return _make
