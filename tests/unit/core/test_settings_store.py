"""Unit tests for settings stores."""

from pathlib import Path

import pytest
import yaml

from datafile_store.core.config import InvalidConfigurationError
from datafile_store.core.settings import MemorySettingsStore, SettingKey, YamlSettingsStore
from datafile_store.types.protocols import SettingsStore


@pytest.mark.unit
class TestMemorySettingsStore:
    """Test the dictionary-backed store."""

    def test_unset_key_is_none(self) -> None:
        assert MemorySettingsStore().get_string_setting(SettingKey.UPLOAD_PRIORITY) is None

    def test_initial_values(self) -> None:
        store = MemorySettingsStore({SettingKey.ORIGIN_UID: "dev-1"})

        assert store.get_string_setting(SettingKey.ORIGIN_UID) == "dev-1"

    def test_initial_mapping_is_copied(self) -> None:
        initial = {"k": "v"}
        store = MemorySettingsStore(initial)

        store.set_string_setting("k", "changed")

        assert initial == {"k": "v"}

    def test_satisfies_protocol(self) -> None:
        assert isinstance(MemorySettingsStore(), SettingsStore)


@pytest.mark.unit
class TestYamlSettingsStore:
    """Test the YAML file-backed store."""

    def test_missing_file_reads_empty(self, tmp_path: Path) -> None:
        store = YamlSettingsStore(tmp_path / "settings.yaml")

        assert store.get_string_setting(SettingKey.UPLOAD_PRIORITY) is None

    def test_empty_file_reads_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        _ = path.write_text("")

        assert YamlSettingsStore(path).get_string_setting("anything") is None

    def test_set_then_get(self, tmp_path: Path) -> None:
        """Written values are persisted and read back."""
        path = tmp_path / "nested" / "settings.yaml"
        store = YamlSettingsStore(path)

        store.set_string_setting(SettingKey.UPLOAD_PRIORITY, "LARGEST_FIRST")

        assert store.get_string_setting(SettingKey.UPLOAD_PRIORITY) == "LARGEST_FIRST"
        assert yaml.safe_load(path.read_text()) == {"upload_priority": "LARGEST_FIRST"}

    def test_set_preserves_other_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        _ = path.write_text("unique_identifier: dev-9\n")
        store = YamlSettingsStore(path)

        store.set_string_setting(SettingKey.UPLOAD_PRIORITY, "OLDEST_FIRST")

        assert store.get_string_setting(SettingKey.ORIGIN_UID) == "dev-9"
        assert store.get_string_setting(SettingKey.UPLOAD_PRIORITY) == "OLDEST_FIRST"

    def test_observes_external_writes(self, tmp_path: Path) -> None:
        """Every read re-reads the file."""
        path = tmp_path / "settings.yaml"
        store = YamlSettingsStore(path)
        store.set_string_setting("k", "one")

        _ = path.write_text("k: two\n")

        assert store.get_string_setting("k") == "two"

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        _ = path.write_text("k: [unclosed\n")

        with pytest.raises(InvalidConfigurationError, match="Failed to parse settings file"):
            _ = YamlSettingsStore(path).get_string_setting("k")

    def test_non_mapping_root_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        _ = path.write_text("- a\n- b\n")

        with pytest.raises(InvalidConfigurationError, match="Expected YAML dictionary"):
            _ = YamlSettingsStore(path).get_string_setting("k")

    def test_non_string_value_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        _ = path.write_text("upload_priority: 3\n")

        with pytest.raises(InvalidConfigurationError, match="map strings to strings"):
            _ = YamlSettingsStore(path).get_string_setting(SettingKey.UPLOAD_PRIORITY)

    def test_unreadable_path_raises(self, tmp_path: Path) -> None:
        """A directory in place of the settings file cannot be read."""
        path = tmp_path / "settings.yaml"
        path.mkdir()

        with pytest.raises(InvalidConfigurationError, match="Failed to read settings file"):
            _ = YamlSettingsStore(path).get_string_setting("k")

    def test_unwritable_path_raises(self, tmp_path: Path) -> None:
        """A file where the parent directory should be prevents writing."""
        blocker = tmp_path / "blocker"
        _ = blocker.write_text("")
        store = YamlSettingsStore(blocker / "settings.yaml")

        with pytest.raises(InvalidConfigurationError, match="Failed to write settings file"):
            store.set_string_setting("k", "v")

    def test_satisfies_protocol(self, tmp_path: Path) -> None:
        assert isinstance(YamlSettingsStore(tmp_path / "s.yaml"), SettingsStore)
