"""
test_migrations.py
------------------
Unit tests for the versioned schema migrator.

Key areas tested:
    - Fresh database reaches the latest version
    - Re-running migrations is a no-op
    - A failing step rolls back completely and aborts startup
    - Step 5 replaces trigger-based index sync and indexes existing rows
"""
import pytest
from sqlalchemy import create_engine, text

from daybook.core.exceptions import MigrationError
from daybook.database.manager import DaybookDB, _configure_sqlite
from daybook.database.migrations import (
    LATEST_VERSION,
    MIGRATIONS,
    MigrationStep,
    Migrator,
    _run_statements,
)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'migrations.db'}")
    _configure_sqlite(engine)
    yield engine
    engine.dispose()


def _table_names(engine):
    with engine.connect() as conn:
        rows = conn.execute(
            text("SELECT name FROM sqlite_master WHERE type IN ('table', 'trigger')")
        ).fetchall()
    return {row[0] for row in rows}


class TestFreshDatabase:
    def test_reaches_latest_version(self, engine):
        migrator = Migrator(engine)

        assert migrator.pending_versions() == [1, 2, 3, 4, 5]
        assert migrator.run() == [1, 2, 3, 4, 5]
        assert migrator.current_version() == LATEST_VERSION
        assert migrator.pending_versions() == []

    def test_creates_all_tables(self, engine):
        Migrator(engine).run()

        names = _table_names(engine)
        for table in ("entries", "ai_operations", "app_settings", "schema_migrations", "entries_fts"):
            assert table in names

    def test_history_records_each_step(self, engine):
        migrator = Migrator(engine)
        migrator.run()

        history = migrator.history()
        assert [version for version, _ in history] == [1, 2, 3, 4, 5]
        assert all(applied_at > 0 for _, applied_at in history)


class TestIdempotence:
    def test_second_run_is_noop(self, engine):
        Migrator(engine).run()
        history = Migrator(engine).history()

        assert Migrator(engine).run() == []
        assert Migrator(engine).history() == history

    def test_reopening_database_keeps_version(self, test_db_path):
        with DaybookDB(test_db_path) as db:
            db.upsert_entry("2026-01-01", '{"text": "first"}')

        with DaybookDB(test_db_path) as db:
            assert db.schema_version() == LATEST_VERSION
            assert db.get_entry("2026-01-01") is not None


class TestFailures:
    def test_failing_step_rolls_back(self, engine):
        broken = MigrationStep(
            2,
            "broken",
            _run_statements(
                "CREATE TABLE half_done (id INTEGER)",
                "INSERT INTO no_such_table VALUES (1)",
            ),
        )
        migrator = Migrator(engine, steps=(MIGRATIONS[0], broken))

        with pytest.raises(MigrationError) as excinfo:
            migrator.run()

        assert excinfo.value.version == 2
        assert migrator.current_version() == 1
        assert "half_done" not in _table_names(engine)

    def test_rejects_unordered_steps(self, engine):
        with pytest.raises(MigrationError):
            Migrator(engine, steps=(MIGRATIONS[1], MIGRATIONS[0]))

    def test_database_open_fails_on_migration_error(self, test_db_path, monkeypatch):
        def fail(self):
            raise MigrationError("step exploded", version=3)

        monkeypatch.setattr(Migrator, "run", fail)

        with pytest.raises(MigrationError, match="step exploded"):
            DaybookDB(test_db_path)


class TestSearchIndexStep:
    def test_drops_legacy_triggers_and_indexes_rows(self, engine):
        Migrator(engine, steps=MIGRATIONS[:4]).run()
        with engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO entries (id, entry_date, content_json, created_at, updated_at) "
                    "VALUES ('e1', '2026-01-01', 'old coffee notes', 1, 1)"
                )
            )
            conn.execute(
                text(
                    "CREATE TRIGGER entries_ai AFTER INSERT ON entries "
                    "BEGIN SELECT 1; END"
                )
            )

        assert Migrator(engine).run() == [5]

        assert "entries_ai" not in _table_names(engine)
        with engine.connect() as conn:
            indexed = conn.execute(
                text("SELECT entry_id FROM entries_fts WHERE entries_fts MATCH 'coffee'")
            ).scalars().all()
        assert indexed == ["e1"]

    def test_mood_step_tolerates_existing_columns(self, engine):
        Migrator(engine, steps=MIGRATIONS[:3]).run()
        with engine.begin() as conn:
            conn.execute(text("ALTER TABLE entries ADD COLUMN mood TEXT"))

        assert Migrator(engine).run() == [4, 5]
