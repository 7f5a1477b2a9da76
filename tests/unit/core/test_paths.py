"""
Tests for database file resolution.
"""
import pytest

from daybook.core.exceptions import FileAccessError
from daybook.core.paths import DATA_DIR_ENV, DB_FILENAME, resolve_db_path


def test_prefers_existing_legacy_file(tmp_path):
    legacy = tmp_path / "home" / ".daybook" / DB_FILENAME
    legacy.parent.mkdir(parents=True)
    legacy.write_bytes(b"")

    assert resolve_db_path(legacy, tmp_path / "data") == legacy
    assert not (tmp_path / "data").exists()


def test_uses_managed_directory_without_legacy_file(tmp_path):
    data_dir = tmp_path / "data" / "daybook"

    result = resolve_db_path(tmp_path / "missing.db", data_dir)

    assert result == data_dir / DB_FILENAME
    assert data_dir.is_dir()


def test_legacy_directory_is_not_a_database(tmp_path):
    legacy = tmp_path / "legacy.db"
    legacy.mkdir()

    assert resolve_db_path(legacy, tmp_path / "data") == tmp_path / "data" / DB_FILENAME


def test_data_dir_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path / "from-env"))

    result = resolve_db_path(legacy_path=None)

    assert result == tmp_path / "from-env" / DB_FILENAME
    assert result.parent.is_dir()


def test_unwritable_data_dir_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with pytest.raises(FileAccessError):
        resolve_db_path(legacy_path=None, data_dir=blocker / "data")
