"""
Tests for the DaybookDB facade: opening, sessions, secrets and status.
"""
import sqlite3
import threading

import pytest
from unittest.mock import MagicMock
from sqlalchemy import text

from daybook.core.exceptions import DatabaseError, SecretStoreError
from daybook.core.secrets import AI_API_KEY, TTS_API_KEY
from daybook.database import manager as manager_module
from daybook.database.manager import DaybookDB, open_and_migrate
from daybook.database.migrations import LATEST_VERSION


class TestOpening:
    def test_open_and_migrate_with_path(self, test_db_path):
        with open_and_migrate(test_db_path) as db:
            assert db.db_path == test_db_path.resolve()
            assert db.schema_version() == LATEST_VERSION
        assert test_db_path.exists()

    def test_open_and_migrate_resolves_default_location(self, tmp_path, monkeypatch):
        resolved = tmp_path / "resolved" / "daybook.db"
        monkeypatch.setattr(manager_module, "resolve_db_path", lambda: resolved)

        with open_and_migrate() as db:
            assert db.db_path == resolved.resolve()

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "a" / "b" / "daybook.db"
        with DaybookDB(path):
            pass
        assert path.exists()

    def test_foreign_keys_enforced(self, test_db):
        with test_db.engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar_one() == 1

    def test_logs_written(self, test_db, tmp_path, coffee_content):
        test_db.upsert_entry("2026-01-01", coffee_content)
        log_file = tmp_path / "logs" / "database.log"
        assert "upsert_entry_completed" in log_file.read_text(encoding="utf-8")

    def test_migration_status(self, test_db):
        status = test_db.migration_status()
        assert status["current_version"] == LATEST_VERSION
        assert status["latest_version"] == LATEST_VERSION
        assert status["pending"] == []
        assert [version for version, _ in status["history"]] == list(range(1, LATEST_VERSION + 1))

    def test_unexpected_setup_failure_is_database_error(self, test_db_path, monkeypatch):
        monkeypatch.setattr(
            manager_module, "create_engine", MagicMock(side_effect=RuntimeError("no driver"))
        )
        with pytest.raises(DatabaseError, match="initialization failed"):
            DaybookDB(test_db_path)


class TestSessionScope:
    def test_commits_on_success(self, test_db):
        with test_db.session_scope() as session:
            session.execute(
                text(
                    "INSERT INTO app_settings (key, value, updated_at) "
                    "VALUES ('k', 'v', 1)"
                )
            )
        assert test_db.get_setting("k") == "v"

    def test_rolls_back_on_error(self, test_db, coffee_content):
        with pytest.raises(RuntimeError):
            with test_db.session_scope() as session:
                from daybook.database.managers import EntryManager

                EntryManager(session, test_db.logger).upsert("2026-01-01", coffee_content)
                raise RuntimeError("abort")

        assert test_db.get_entry("2026-01-01") is None
        assert test_db.search_entries("coffee") == []

    def test_write_scope_holds_write_lock(self, test_db_path, test_db):
        with test_db.session_scope():
            other = sqlite3.connect(test_db_path, timeout=0, isolation_level=None)
            try:
                with pytest.raises(sqlite3.OperationalError, match="locked"):
                    other.execute("BEGIN IMMEDIATE")
            finally:
                other.close()

    def test_read_scope_leaves_write_lock_free(self, test_db_path, test_db):
        with test_db.session_scope(write=False) as session:
            session.execute(text("SELECT COUNT(*) FROM entries")).scalar_one()
            other = sqlite3.connect(test_db_path, timeout=0, isolation_level=None)
            try:
                other.execute("BEGIN IMMEDIATE")
                other.execute("ROLLBACK")
            finally:
                other.close()


class TestConcurrentWriters:
    def test_writers_on_one_date_queue_instead_of_failing(
        self, test_db, coffee_content, tea_content
    ):
        errors = []

        def churn():
            for _ in range(40):
                try:
                    test_db.upsert_entry("2026-01-15", coffee_content)
                    test_db.delete_entry("2026-01-15")
                except DatabaseError as e:
                    errors.append(e)

        def fill():
            for day in range(1, 29):
                try:
                    test_db.upsert_entry(f"2026-02-{day:02d}", tea_content)
                except DatabaseError as e:
                    errors.append(e)

        threads = [threading.Thread(target=churn) for _ in range(3)]
        threads.append(threading.Thread(target=fill))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        # Every churn thread ends on a delete
        assert test_db.get_entry("2026-01-15") is None
        assert test_db.count_entries() == 28
        assert test_db.check_index_consistency() == {
            "missing": [],
            "orphaned": [],
            "stale": [],
        }


class TestSecrets:
    def test_set_get_delete(self, test_db):
        test_db.set_secret(AI_API_KEY, "sk-123")
        assert test_db.get_secret(AI_API_KEY) == "sk-123"

        test_db.delete_secret(AI_API_KEY)
        assert test_db.get_secret(AI_API_KEY) is None

    def test_blank_secret_reads_as_absent(self, test_db):
        test_db.set_secret(TTS_API_KEY, "   ")
        assert test_db.get_secret(TTS_API_KEY) is None

    def test_no_store_configured(self, test_db_path):
        with DaybookDB(test_db_path) as db:
            with pytest.raises(SecretStoreError):
                db.get_secret(AI_API_KEY)
            with pytest.raises(SecretStoreError):
                db.set_secret(AI_API_KEY, "x")
