#!/usr/bin/env python3
"""
manager.py
--------------------
Database manager for the Daybook journal store.

Provides the DaybookDB class for interacting with the SQLite database.
Handles:
    - Initialization of the database engine and sessionmaker
    - Forward-only schema migrations before first use
    - Entry, mood, AI operation and settings operations
    - Full-text search over entries
    - Writing statistics
    - Bundle export and import
    - Delegation to an injected secret store

Key Features:
    - Transaction management with automatic rollback
    - Transactional DDL and enforced foreign keys on every connection
    - Search index kept in lockstep with entries inside each transaction
    - Retry logic for database lock handling
    - Validation of dates at the edge

Core Operations:
    Entries:
        - upsert_entry / upsert_entry_mood: create or update by date
        - get_entry / list_entries / list_entries_by_mood
        - delete_entry: cascades to AI operations and the index
        - search_entries: ranked full-text search

    Audit trail:
        - record_ai_operation / list_ai_operations / delete_ai_operations_for

    Settings:
        - get_setting / save_setting (+ JSON variants)

    Maintenance:
        - writing_stats, export_all, import_data, rebuild_search_index,
          check_index_consistency, migration_status

Notes
==============
- Each facade method runs in its own session_scope (one transaction)
- Managers are also usable directly inside session_scope for multi-step work
- Timestamps are integer epoch milliseconds (UTC)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

# --- Third party ---
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

# --- Local imports ---
from daybook.core.exceptions import DatabaseError, MigrationError, SecretStoreError
from daybook.core.logging_manager import DaybookLogger, safe_logger
from daybook.core.paths import resolve_db_path
from daybook.core.secrets import SecretStore
from daybook.search.search_index import SearchIndexManager

from .export_manager import ExportManager, ImportOptions
from .managers import AIOperationManager, EntryManager, SettingsManager
from .migrations import LATEST_VERSION, WRITE_LOCK_OPTION, Migrator
from .models import AIOperation, DiaryEntry
from .query_analytics import QueryAnalytics, WritingStats


# Seconds a connection waits on another writer before "database is locked"
BUSY_TIMEOUT_SECONDS = 30


def _configure_sqlite(engine: Engine) -> None:
    """
    Make pysqlite connections run DDL and SAVEPOINTs transactionally.

    The driver's own transaction handling is disabled and BEGIN is
    emitted by SQLAlchemy instead: BEGIN IMMEDIATE for connections
    flagged with WRITE_LOCK_OPTION, a deferred BEGIN otherwise. Concurrent
    writers therefore queue on the busy timeout instead of failing an
    upgrade from a read lock. Foreign keys are enforced per connection.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(WRITE_LOCK_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


# ----- Main Database Manager -----
class DaybookDB:
    """
    Main database manager for the Daybook journal store.

    Attributes:
        - db_path (Path): Filesystem path to the SQLite database file.
        - engine (Engine): SQLAlchemy engine instance.
        - SessionLocal (sessionmaker): SQLAlchemy session factory.
        - migrator (Migrator): Schema migrator bound to the engine.

    Usage:
        db = DaybookDB("~/path/to/daybook.db")
        entry = db.upsert_entry("2026-01-15", '{"type":"doc"}')

        with db.session_scope() as session:
            entries = EntryManager(session, db.logger).list_for_month("2026-01")
    """

    # ---- Initialization ----
    def __init__(
        self,
        db_path: Union[str, Path],
        log_dir: Optional[Union[str, Path]] = None,
        secret_store: Optional[SecretStore] = None,
    ) -> None:
        """
        Open the database and bring its schema up to date.

        Args:
            db_path (str | Path): Path to the SQLite file.
            log_dir (str | Path): Directory for log files (optional)
            secret_store: Credential store for provider API keys (optional)

        Raises:
            MigrationError: If any migration step fails
            DatabaseError: If the engine cannot be set up
        """
        self.db_path = Path(db_path).expanduser().resolve()
        self.secret_store = secret_store

        # --- Logging ---
        if log_dir:
            self.log_dir = Path(log_dir).expanduser().resolve()
            self.logger: Optional[DaybookLogger] = DaybookLogger(
                self.log_dir,
                component_name="database",
            )
        else:
            self.log_dir = None
            self.logger = None

        # Initialize service components
        self.export_manager = ExportManager(self.logger)
        self.query_analytics = QueryAnalytics(self.logger)

        self._setup_engine()

    def _setup_engine(self) -> None:
        """Initialize database engine, session factory and schema."""
        log = safe_logger(self.logger)
        try:
            log.log_operation("database_init_start", {"db_path": str(self.db_path)})

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                pool_pre_ping=True,
                connect_args={"timeout": BUSY_TIMEOUT_SECONDS},
            )
            _configure_sqlite(self.engine)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )

            self.migrator = Migrator(self.engine, self.logger)
            applied = self.migrator.run()

            log.log_operation(
                "database_init_complete",
                {"applied_migrations": applied, "schema_version": LATEST_VERSION},
            )

        except MigrationError:
            self._dispose_engine()
            raise
        except Exception as e:
            log.log_error(e, {"operation": "database_init"})
            self._dispose_engine()
            raise DatabaseError(f"Database initialization failed: {e}")

    def _dispose_engine(self) -> None:
        engine = getattr(self, "engine", None)
        if engine is not None:
            engine.dispose()

    def close(self) -> None:
        """Release pooled connections and log files."""
        self._dispose_engine()
        if self.logger:
            self.logger.close()

    def __enter__(self) -> "DaybookDB":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    # ---- Session Management ----
    @contextmanager
    def session_scope(self, write: bool = True) -> Iterator[Session]:
        """
        Provide a transactional scope around operations with logging.

        Args:
            write: Take the database write lock when the transaction
                begins. Pass False for read-only work so readers do not
                queue behind writers.

        Usage:
            with db.session_scope() as session:
                EntryManager(session, db.logger).upsert(...)
        """
        session = self.SessionLocal()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        log = safe_logger(self.logger)
        log.log_debug("session_start", {"session_id": session_id})

        try:
            if write:
                session.connection(execution_options={WRITE_LOCK_OPTION: True})
            yield session
            session.commit()
            log.log_debug("session_commit", {"session_id": session_id})

        except Exception as e:
            session.rollback()
            log.log_error(e, {"operation": "session_rollback", "session_id": session_id})
            raise
        finally:
            session.close()
            log.log_debug("session_close", {"session_id": session_id})

    def get_session(self) -> Session:
        """Create and return a new SQLAlchemy session."""
        return self.SessionLocal()

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def upsert_entry(self, entry_date: str, content_json: str) -> DiaryEntry:
        """Create or update the entry for a date."""
        with self.session_scope() as session:
            return EntryManager(session, self.logger).upsert(entry_date, content_json)

    def upsert_entry_mood(
        self,
        entry_date: str,
        mood: Optional[str],
        mood_emoji: Optional[str] = None,
    ) -> DiaryEntry:
        """Set (or clear, with None) the mood for a date."""
        with self.session_scope() as session:
            return EntryManager(session, self.logger).upsert_mood(
                entry_date, mood, mood_emoji
            )

    def get_entry(self, entry_date: str) -> Optional[DiaryEntry]:
        with self.session_scope(write=False) as session:
            return EntryManager(session, self.logger).get(entry_date)

    def list_entries(self, month: str) -> List[DiaryEntry]:
        """Entries within a YYYY-MM month, newest first."""
        with self.session_scope(write=False) as session:
            return EntryManager(session, self.logger).list_for_month(month)

    def list_entries_by_mood(self, month: str, mood: str) -> List[DiaryEntry]:
        with self.session_scope(write=False) as session:
            return EntryManager(session, self.logger).list_by_mood(month, mood)

    def delete_entry(self, entry_date: str) -> bool:
        """Delete an entry with its AI operations. Returns False if absent."""
        with self.session_scope() as session:
            return EntryManager(session, self.logger).delete(entry_date)

    def count_entries(self) -> int:
        with self.session_scope(write=False) as session:
            return EntryManager(session, self.logger).count()

    def search_entries(self, query: str, limit: Optional[int] = None) -> List[DiaryEntry]:
        """
        Full-text search over entry content and mood.

        Empty or whitespace-only queries return an empty list.
        """
        with self.session_scope(write=False) as session:
            return SearchIndexManager(session, self.logger).search(query, limit)

    # -------------------------------------------------------------------------
    # AI operation audit trail
    # -------------------------------------------------------------------------

    def record_ai_operation(
        self,
        entry_id: str,
        op_type: str,
        original_text: str,
        result_text: str,
        provider: str,
        model: str,
    ) -> AIOperation:
        """
        Append an audit record.

        Raises:
            EntryNotFoundError: If entry_id does not exist
        """
        with self.session_scope() as session:
            return AIOperationManager(session, self.logger).record(
                entry_id, op_type, original_text, result_text, provider, model
            )

    def list_ai_operations(self, entry_id: str) -> List[AIOperation]:
        with self.session_scope(write=False) as session:
            return AIOperationManager(session, self.logger).list_for_entry(entry_id)

    def delete_ai_operations_for(self, entry_id: str) -> int:
        with self.session_scope() as session:
            return AIOperationManager(session, self.logger).delete_for_entry(entry_id)

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def get_setting(self, key: str) -> Optional[str]:
        with self.session_scope(write=False) as session:
            return SettingsManager(session, self.logger).get(key)

    def save_setting(self, key: str, value: str) -> None:
        with self.session_scope() as session:
            SettingsManager(session, self.logger).save(key, value)

    def get_json_setting(self, key: str) -> Optional[Any]:
        with self.session_scope(write=False) as session:
            return SettingsManager(session, self.logger).get_json(key)

    def save_json_setting(self, key: str, value: Any) -> None:
        with self.session_scope() as session:
            SettingsManager(session, self.logger).save_json(key, value)

    def delete_setting(self, key: str) -> bool:
        with self.session_scope() as session:
            return SettingsManager(session, self.logger).delete(key)

    # -------------------------------------------------------------------------
    # Secrets
    # -------------------------------------------------------------------------

    def _require_secret_store(self) -> SecretStore:
        if self.secret_store is None:
            raise SecretStoreError("No secret store configured")
        return self.secret_store

    def get_secret(self, name: str) -> Optional[str]:
        """Read a named credential. Blank values read as absent."""
        value = self._require_secret_store().get(name)
        if value is None or not value.strip():
            return None
        return value

    def set_secret(self, name: str, value: str) -> None:
        self._require_secret_store().set(name, value)

    def delete_secret(self, name: str) -> None:
        self._require_secret_store().delete(name)

    # -------------------------------------------------------------------------
    # Statistics, import/export and maintenance
    # -------------------------------------------------------------------------

    def writing_stats(self, today: Optional[Union[str, date]] = None) -> WritingStats:
        """Total entries plus current and longest streak."""
        with self.session_scope(write=False) as session:
            return self.query_analytics.writing_stats(session, today)

    def export_all(self) -> Dict[str, Any]:
        with self.session_scope(write=False) as session:
            return self.export_manager.export_all(session)

    def export_to_json(self, output_file: Union[str, Path]) -> Path:
        with self.session_scope(write=False) as session:
            return self.export_manager.export_to_json(session, output_file)

    def import_data(
        self,
        bundle: Union[str, Dict[str, Any]],
        options: Optional[ImportOptions] = None,
    ) -> int:
        """
        Merge a bundle (decoded dict or JSON text) into the database.

        Returns:
            Number of entries inserted or overwritten

        Raises:
            SerializationError: If bundle text is not a valid bundle
        """
        if isinstance(bundle, str):
            bundle = self.export_manager.load_bundle(bundle)
        with self.session_scope() as session:
            return self.export_manager.import_bundle(session, bundle, options)

    def import_from_json(
        self,
        input_file: Union[str, Path],
        options: Optional[ImportOptions] = None,
    ) -> int:
        with self.session_scope() as session:
            return self.export_manager.import_from_json(session, input_file, options)

    def rebuild_search_index(self) -> int:
        """Recreate the search index from entries. Returns entries indexed."""
        with self.session_scope() as session:
            return SearchIndexManager(session, self.logger).rebuild_index()

    def check_index_consistency(self) -> Dict[str, List[str]]:
        with self.session_scope(write=False) as session:
            return SearchIndexManager(session, self.logger).check_consistency()

    def schema_version(self) -> int:
        return self.migrator.current_version()

    def migration_status(self) -> Dict[str, Any]:
        """
        Summarize schema state.

        Returns:
            Dictionary with current/latest version, pending versions and
            applied (version, applied_at) history
        """
        return {
            "current_version": self.migrator.current_version(),
            "latest_version": LATEST_VERSION,
            "pending": self.migrator.pending_versions(),
            "history": self.migrator.history(),
        }


def open_and_migrate(
    store_location: Optional[Union[str, Path]] = None,
    **kwargs: Any,
) -> DaybookDB:
    """
    Open (creating if needed) and migrate the journal store.

    Args:
        store_location: Database file path; resolved with resolve_db_path()
            when omitted
        **kwargs: Passed to DaybookDB (log_dir, secret_store)

    Raises:
        MigrationError: If the schema cannot be brought up to date
        FileAccessError: If the data directory cannot be created
    """
    if store_location is None:
        store_location = resolve_db_path()
    return DaybookDB(store_location, **kwargs)
