"""Unit tests for resolving the upload priority to a file chooser."""

import logging
from unittest.mock import MagicMock

import pytest

from datafile_store.core.config import InvalidConfigurationError
from datafile_store.core.selection import (
    DEFAULT_UPLOAD_PRIORITY,
    LargestFileChooser,
    NewestFileChooser,
    OldestFileChooser,
    SmallestFileChooser,
    UploadPriority,
    chooser_for,
    create_file_chooser,
    ensure_upload_priority,
)
from datafile_store.core.settings import MemorySettingsStore, SettingKey


@pytest.mark.unit
class TestEnsureUploadPriority:
    """Test reading and defaulting the upload priority."""

    def test_default_written_on_first_use(self) -> None:
        """A missing priority resolves to the default and is persisted."""
        settings = MemorySettingsStore()

        priority = ensure_upload_priority(settings)

        assert priority is DEFAULT_UPLOAD_PRIORITY is UploadPriority.SMALLEST_FIRST
        assert settings.get_string_setting(SettingKey.UPLOAD_PRIORITY) == "SMALLEST_FIRST"

    @pytest.mark.parametrize("priority", list(UploadPriority))
    def test_stored_priority_read(self, priority: UploadPriority) -> None:
        settings = MemorySettingsStore({SettingKey.UPLOAD_PRIORITY: priority.value})

        assert ensure_upload_priority(settings) is priority

    def test_stored_priority_not_overwritten(self) -> None:
        settings = MagicMock()
        settings.get_string_setting.return_value = "NEWEST_FIRST"

        _ = ensure_upload_priority(settings)

        settings.set_string_setting.assert_not_called()

    def test_unknown_priority_raises(self) -> None:
        settings = MemorySettingsStore({SettingKey.UPLOAD_PRIORITY: "biggest"})

        with pytest.raises(InvalidConfigurationError, match="Invalid upload priority") as exc_info:
            _ = ensure_upload_priority(settings)

        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_priority_is_case_sensitive(self) -> None:
        settings = MemorySettingsStore({SettingKey.UPLOAD_PRIORITY: "largest_first"})

        with pytest.raises(InvalidConfigurationError):
            _ = ensure_upload_priority(settings)

    def test_store_failure_logged_and_reraised(self, caplog: pytest.LogCaptureFixture) -> None:
        settings = MagicMock()
        settings.get_string_setting.side_effect = InvalidConfigurationError("unreadable")

        with caplog.at_level(logging.ERROR, logger="datafile_store.core.selection.factory"):
            with pytest.raises(InvalidConfigurationError, match="unreadable"):
                _ = ensure_upload_priority(settings)

        assert "Error while reading the upload priority setting" in caplog.text


@pytest.mark.unit
class TestChooserFor:
    """Test the priority to chooser mapping."""

    @pytest.mark.parametrize(
        ("priority", "chooser_class"),
        [
            (UploadPriority.LARGEST_FIRST, LargestFileChooser),
            (UploadPriority.SMALLEST_FIRST, SmallestFileChooser),
            (UploadPriority.NEWEST_FIRST, NewestFileChooser),
            (UploadPriority.OLDEST_FIRST, OldestFileChooser),
        ],
    )
    def test_mapping(self, priority: UploadPriority, chooser_class: type) -> None:
        assert isinstance(chooser_for(priority), chooser_class)

    def test_fresh_instances(self) -> None:
        assert chooser_for(UploadPriority.LARGEST_FIRST) is not chooser_for(UploadPriority.LARGEST_FIRST)


@pytest.mark.unit
class TestCreateFileChooser:
    """Test creating the chooser from settings."""

    def test_default_chooser(self) -> None:
        assert isinstance(create_file_chooser(MemorySettingsStore()), SmallestFileChooser)

    def test_configured_chooser(self) -> None:
        settings = MemorySettingsStore({SettingKey.UPLOAD_PRIORITY: "OLDEST_FIRST"})

        assert isinstance(create_file_chooser(settings), OldestFileChooser)
