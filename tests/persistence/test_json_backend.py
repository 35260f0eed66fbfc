"""
Tests for locked JSON storage of print configuration records.
"""

import json

import portalocker
import pytest

from print_studio.core.utils.serialization import serialize_print_config
from print_studio.persistence import JsonFileBackend, SaveError, load_print_config
from print_studio.persistence.file_locking import (
    locked_read_json,
    locked_read_modify_write_json,
)
from print_studio.studio import default_print_config
from print_studio.studio import store as transitions


class TestFileLocking:
    """Tests for the portalocker helpers."""

    def test_when_file_missing_then_read_returns_none(self, tmp_path):
        assert locked_read_json(tmp_path / "missing.json") is None

    def test_when_file_empty_then_read_returns_none(self, tmp_path):
        # Arrange
        path = tmp_path / "empty.json"
        path.touch()

        # Act / Assert
        assert locked_read_json(path) is None

    def test_when_modified_then_written_and_returned(self, tmp_path):
        # Arrange
        path = tmp_path / "nested" / "store.json"

        # Act
        written = locked_read_modify_write_json(path, lambda d: {**d, "count": d.get("count", 0) + 1})
        again = locked_read_modify_write_json(path, lambda d: {**d, "count": d.get("count", 0) + 1})

        # Assert
        assert written == {"count": 1}
        assert again == {"count": 2}
        assert json.loads(path.read_text(encoding="utf-8")) == {"count": 2}

    def test_when_file_corrupt_then_backed_up_and_replaced(self, tmp_path):
        # Arrange
        path = tmp_path / "store.json"
        path.write_text("{broken", encoding="utf-8")

        # Act
        result = locked_read_modify_write_json(path, lambda d: {**d, "ok": True})

        # Assert
        assert result == {"ok": True}
        assert (tmp_path / "store.json.corrupt").read_text(encoding="utf-8") == "{broken"

    def test_when_file_held_by_other_writer_then_lock_times_out(self, tmp_path):
        # Arrange
        path = tmp_path / "store.json"
        path.write_text("{}", encoding="utf-8")

        # Act / Assert
        with portalocker.Lock(str(path), mode="r+", flags=portalocker.LOCK_EX | portalocker.LOCK_NB):
            with pytest.raises(portalocker.LockException):
                locked_read_modify_write_json(path, lambda d: d, timeout=0.2)


class TestJsonFileBackend:
    """Tests for JsonFileBackend."""

    def test_when_saved_then_loaded_by_period(self, tmp_path):
        # Arrange
        backend = JsonFileBackend(tmp_path)
        first = serialize_print_config(default_print_config(), "p-42", "2024-06-07")
        second = serialize_print_config(
            transitions.toggle_section(default_print_config(), "weather"), "p-42", "2024-06-14"
        )

        # Act
        backend.save("p-42", "2024-06-07", first)
        backend.save("p-42", "2024-06-14", second)

        # Assert
        assert backend.load("p-42", "2024-06-07") == first
        assert backend.load("p-42", "2024-06-14") == second
        assert backend.load("p-42", "2024-06-21") is None

    def test_when_project_id_has_separators_then_safe_file_name(self, tmp_path):
        # Act
        path = JsonFileBackend(tmp_path).path_for("acme/site 7")

        # Assert
        assert path.parent == tmp_path
        assert path.name == "acme_site_7.print.json"

    def test_when_store_unwritable_then_save_error(self, tmp_path):
        # Arrange
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        backend = JsonFileBackend(blocker)

        # Act / Assert
        with pytest.raises(SaveError):
            backend.save("p-42", "2024-06-07", {"schema_version": 2})


class TestLoadPrintConfig:
    """Tests for load_print_config()."""

    def test_when_record_stored_then_config_restored(self, tmp_path):
        # Arrange
        backend = JsonFileBackend(tmp_path)
        config = transitions.set_manual_break(default_print_config(), "equipment", 9)
        backend.save("p-42", "2024-06-07", serialize_print_config(config, "p-42", "2024-06-07"))

        # Act / Assert
        assert load_print_config(backend, "p-42", "2024-06-07") == config

    def test_when_no_record_then_defaults(self, tmp_path):
        assert load_print_config(JsonFileBackend(tmp_path), "p-42", "w") == default_print_config()

    def test_when_store_corrupt_then_defaults(self, tmp_path):
        # Arrange
        backend = JsonFileBackend(tmp_path)
        backend.path_for("p-42").write_text("{broken", encoding="utf-8")

        # Act / Assert
        assert load_print_config(backend, "p-42", "w") == default_print_config()

    def test_when_record_malformed_then_defaults(self, tmp_path):
        # Arrange
        backend = JsonFileBackend(tmp_path)
        backend.save("p-42", "w", {"schema_version": 2, "project_id": "p-42"})

        # Act / Assert
        assert load_print_config(backend, "p-42", "w") == default_print_config()
