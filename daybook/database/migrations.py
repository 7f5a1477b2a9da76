#!/usr/bin/env python3
"""
migrations.py
-------------
Versioned, forward-only schema migrations for the Daybook database.

Each MigrationStep is applied at most once, in ascending version order,
inside its own transaction together with the row that records it in
schema_migrations. A failing step is rolled back and raises
MigrationError; the store must not be used afterwards.

Steps:
    1. entries table and the version table
    2. ai_operations audit table (dropped first if a stale copy exists)
    3. app_settings key/value table
    4. mood and mood_emoji columns on entries
    5. entries_fts shadow index, populated from existing rows

Usage:
    migrator = Migrator(engine, logger)
    applied = migrator.run()          # [] when already current
    migrator.current_version()        # LATEST_VERSION
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

# --- Third party imports ---
from sqlalchemy import Connection, Engine, text

# --- Local imports ---
from daybook.core.exceptions import MigrationError
from daybook.core.logging_manager import DaybookLogger, safe_logger
from daybook.database.models import utc_now_ms
from daybook.search.search_index import (
    FTS_CREATE_SQL,
    FTS_POPULATE_SQL,
    FTS_TABLE,
    LEGACY_SYNC_TRIGGERS,
)

VERSION_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version INTEGER PRIMARY KEY,
        applied_at INTEGER NOT NULL
    )
"""

# Execution option read by the engine's begin listener: a connection
# carrying it opens its transaction with BEGIN IMMEDIATE.
WRITE_LOCK_OPTION = "daybook_write_lock"


@contextmanager
def write_transaction(engine: Engine) -> Iterator[Connection]:
    """Connection whose transaction holds the write lock from its first statement."""
    with engine.connect() as conn:
        conn.execution_options(**{WRITE_LOCK_OPTION: True})
        with conn.begin():
            yield conn


@dataclass(frozen=True)
class MigrationStep:
    """
    One forward schema change.

    Attributes:
        version: Version recorded once the step is applied (unique, ascending)
        name: Short description for logs
        apply: Callable executing the step's DDL on an open transaction
    """

    version: int
    name: str
    apply: Callable[[Connection], None]


def _run_statements(*statements: str) -> Callable[[Connection], None]:
    """Build a step body executing the given statements in order."""

    def apply(conn: Connection) -> None:
        for statement in statements:
            conn.execute(text(statement))

    return apply


def _column_names(conn: Connection, table: str) -> set:
    rows = conn.execute(text(f"PRAGMA table_info({table})")).fetchall()
    return {row[1] for row in rows}


# ----- Step bodies -----

_create_entries = _run_statements(
    """
    CREATE TABLE IF NOT EXISTS entries (
        id TEXT PRIMARY KEY,
        entry_date TEXT NOT NULL UNIQUE,
        content_json TEXT NOT NULL,
        created_at INTEGER NOT NULL,
        updated_at INTEGER NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_entries_entry_date ON entries(entry_date)",
    "CREATE INDEX IF NOT EXISTS idx_entries_created_at ON entries(created_at)",
    VERSION_TABLE_SQL,
)

_create_ai_operations = _run_statements(
    # An earlier build shipped this table with an incompatible layout
    "DROP TABLE IF EXISTS ai_operations",
    """
    CREATE TABLE ai_operations (
        id TEXT PRIMARY KEY,
        entry_id TEXT NOT NULL,
        op_type TEXT NOT NULL,
        original_text TEXT NOT NULL,
        result_text TEXT NOT NULL,
        provider TEXT NOT NULL,
        model TEXT NOT NULL,
        created_at INTEGER NOT NULL,
        FOREIGN KEY (entry_id) REFERENCES entries(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_ai_operations_entry_id ON ai_operations(entry_id)",
    "CREATE INDEX IF NOT EXISTS idx_ai_operations_created_at ON ai_operations(created_at)",
    "CREATE INDEX IF NOT EXISTS idx_ai_operations_op_type ON ai_operations(op_type)",
)

_create_app_settings = _run_statements(
    """
    CREATE TABLE IF NOT EXISTS app_settings (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at INTEGER NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_app_settings_updated_at ON app_settings(updated_at)",
)


def _add_mood_columns(conn: Connection) -> None:
    existing = _column_names(conn, "entries")
    if "mood" not in existing:
        conn.execute(text("ALTER TABLE entries ADD COLUMN mood TEXT"))
    if "mood_emoji" not in existing:
        conn.execute(text("ALTER TABLE entries ADD COLUMN mood_emoji TEXT"))
    conn.execute(text("CREATE INDEX IF NOT EXISTS idx_entries_mood ON entries(mood)"))


def _create_search_index(conn: Connection) -> None:
    # Index sync is done by the entry store in the same transaction;
    # trigger-based sync from older builds would double-write.
    for trigger in LEGACY_SYNC_TRIGGERS:
        conn.execute(text(f"DROP TRIGGER IF EXISTS {trigger}"))
    conn.execute(text(f"DROP TABLE IF EXISTS {FTS_TABLE}"))
    conn.execute(text(FTS_CREATE_SQL))
    conn.execute(text(FTS_POPULATE_SQL))


MIGRATIONS: Tuple[MigrationStep, ...] = (
    MigrationStep(1, "create_entries", _create_entries),
    MigrationStep(2, "create_ai_operations", _create_ai_operations),
    MigrationStep(3, "create_app_settings", _create_app_settings),
    MigrationStep(4, "add_entry_mood", _add_mood_columns),
    MigrationStep(5, "create_entries_fts", _create_search_index),
)

LATEST_VERSION: int = MIGRATIONS[-1].version


class Migrator:
    """
    Applies MigrationSteps against an engine.

    The engine must run DDL transactionally (see manager._configure_sqlite),
    so a step and its version row commit or roll back together.
    """

    def __init__(
        self,
        engine: Engine,
        logger: Optional[DaybookLogger] = None,
        steps: Sequence[MigrationStep] = MIGRATIONS,
    ) -> None:
        versions = [step.version for step in steps]
        if versions != sorted(set(versions)) or any(v < 1 for v in versions):
            raise MigrationError(
                f"Migration versions must be positive and strictly ascending: {versions}"
            )
        self.engine = engine
        self.logger = logger
        self.steps = tuple(steps)

    def ensure_version_table(self) -> None:
        """Create schema_migrations if absent."""
        try:
            with write_transaction(self.engine) as conn:
                conn.execute(text(VERSION_TABLE_SQL))
        except Exception as e:
            safe_logger(self.logger).log_error(e, {"operation": "migration_bootstrap"})
            raise MigrationError(f"Could not create version table: {e}")

    @staticmethod
    def _read_version(conn: Connection) -> int:
        return conn.execute(
            text("SELECT COALESCE(MAX(version), 0) FROM schema_migrations")
        ).scalar_one()

    def current_version(self) -> int:
        """Highest applied version (0 for a fresh database)."""
        self.ensure_version_table()
        with self.engine.connect() as conn:
            return self._read_version(conn)

    def pending_versions(self) -> List[int]:
        """Versions that run() would apply, in order."""
        current = self.current_version()
        return [step.version for step in self.steps if step.version > current]

    def history(self) -> List[Tuple[int, int]]:
        """Applied (version, applied_at) pairs, oldest first."""
        self.ensure_version_table()
        with self.engine.connect() as conn:
            rows = conn.execute(
                text("SELECT version, applied_at FROM schema_migrations ORDER BY version")
            ).fetchall()
        return [(row[0], row[1]) for row in rows]

    def run(self) -> List[int]:
        """
        Apply every pending step in ascending order.

        Returns:
            Versions applied by this call (empty when already current)

        Raises:
            MigrationError: If any step fails; that step is rolled back
        """
        log = safe_logger(self.logger)
        self.ensure_version_table()
        applied: List[int] = []

        for step in self.steps:
            try:
                with write_transaction(self.engine) as conn:
                    # Re-read inside the transaction: another opener may
                    # have applied this step since the last check.
                    if self._read_version(conn) >= step.version:
                        continue
                    step.apply(conn)
                    conn.execute(
                        text(
                            "INSERT INTO schema_migrations (version, applied_at) "
                            "VALUES (:version, :applied_at)"
                        ),
                        {"version": step.version, "applied_at": utc_now_ms()},
                    )
            except Exception as e:
                log.log_error(
                    e,
                    {"operation": "migration_step", "version": step.version, "name": step.name},
                )
                raise MigrationError(
                    f"Migration {step.version} ({step.name}) failed: {e}",
                    version=step.version,
                )

            applied.append(step.version)
            log.log_operation(
                "migration_applied", {"version": step.version, "name": step.name}
            )

        if not applied:
            log.log_debug("Schema up to date", {"version": self.current_version()})

        return applied
