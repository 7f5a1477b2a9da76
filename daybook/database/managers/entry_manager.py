#!/usr/bin/env python3
"""
entry_manager.py
--------------------
Manager for DiaryEntry CRUD operations.

Every write goes through this manager, and every write updates the
search index through SearchIndexManager in the same session, so the
index and the entries table change together or not at all.

Key Features:
    - Atomic upsert by entry date (single INSERT ... ON CONFLICT statement)
    - Mood-only upsert that leaves content untouched
    - Month and mood listings, newest first
    - Delete with cascade to audit records and index projection
    - Verbatim insert/overwrite for bundle imports

Usage:
    entry_mgr = EntryManager(session, logger)
    entry = entry_mgr.upsert("2026-01-15", '{"type":"doc"}')
"""
from __future__ import annotations

import json
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from daybook.core.exceptions import ValidationError
from daybook.core.logging_manager import DaybookLogger, safe_logger
from daybook.core.validators import DataValidator
from daybook.database.decorators import handle_db_errors, log_database_operation
from daybook.database.models import AIOperation, DiaryEntry, Mood, utc_now_ms
from daybook.search.search_index import SearchIndexManager
from .base_manager import BaseManager

EMPTY_DOCUMENT = json.dumps({})


class EntryManager(BaseManager):
    """
    Manager for DiaryEntry rows and their search projections.

    The entry date is the natural key for every public operation.
    """

    def __init__(self, session: Session, logger: Optional[DaybookLogger] = None):
        """
        Initialize EntryManager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
        """
        super().__init__(session, logger)
        self.index = SearchIndexManager(session, logger)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @handle_db_errors
    def exists(self, entry_date: str) -> bool:
        """Check if an entry exists for a date."""
        entry_date = DataValidator.normalize_date(entry_date)
        return self._get_by_field(DiaryEntry, "entry_date", entry_date) is not None

    @handle_db_errors
    @log_database_operation("get_entry")
    def get(self, entry_date: str) -> Optional[DiaryEntry]:
        """
        Retrieve the entry for a date.

        Raises:
            InvalidDateError: If entry_date is malformed
        """
        entry_date = DataValidator.normalize_date(entry_date)
        return self._get_by_field(DiaryEntry, "entry_date", entry_date)

    @handle_db_errors
    def get_by_id(self, entry_id: str) -> Optional[DiaryEntry]:
        """Retrieve an entry by its id."""
        return self.session.get(DiaryEntry, entry_id)

    @handle_db_errors
    @log_database_operation("list_entries")
    def list_for_month(self, month: str) -> List[DiaryEntry]:
        """
        List entries within a year-month, newest first.

        Args:
            month: YYYY-MM prefix

        Raises:
            InvalidDateError: If month is malformed
        """
        month = DataValidator.normalize_month(month)
        return (
            self.session.query(DiaryEntry)
            .filter(DiaryEntry.entry_date.like(f"{month}-%"))
            .order_by(DiaryEntry.entry_date.desc())
            .all()
        )

    @handle_db_errors
    @log_database_operation("list_entries_by_mood")
    def list_by_mood(self, month: str, mood: str) -> List[DiaryEntry]:
        """List entries within a year-month having a given mood, newest first."""
        month = DataValidator.normalize_month(month)
        return (
            self.session.query(DiaryEntry)
            .filter(DiaryEntry.entry_date.like(f"{month}-%"))
            .filter(DiaryEntry.mood == mood)
            .order_by(DiaryEntry.entry_date.desc())
            .all()
        )

    @handle_db_errors
    def count(self) -> int:
        """Total number of entries."""
        return self._count(DiaryEntry)

    @handle_db_errors
    def all_dates(self) -> List[str]:
        """All entry dates, oldest first."""
        rows = self.session.query(DiaryEntry.entry_date).order_by(DiaryEntry.entry_date).all()
        return [row[0] for row in rows]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _upsert(self, values: Dict[str, Any], update_fields: List[str]) -> DiaryEntry:
        """
        Insert a new entry or update the given fields of the existing one.

        One statement decides between insert and update, so concurrent
        writers to the same date resolve inside the engine. updated_at
        never moves backwards.
        """
        stmt = sqlite_insert(DiaryEntry).values(**values)
        set_ = {field: getattr(stmt.excluded, field) for field in update_fields}
        set_["updated_at"] = func.max(DiaryEntry.updated_at, stmt.excluded.updated_at)
        stmt = stmt.on_conflict_do_update(
            index_elements=[DiaryEntry.entry_date], set_=set_
        ).returning(DiaryEntry)

        def _do_upsert() -> DiaryEntry:
            return self.session.scalars(
                stmt, execution_options={"populate_existing": True}
            ).one()

        entry = self._execute_with_retry(_do_upsert)
        self.index.index_entry(entry)
        return entry

    @handle_db_errors
    @log_database_operation("upsert_entry")
    def upsert(self, entry_date: str, content_json: str) -> DiaryEntry:
        """
        Create or update the entry for a date.

        On update only content and updated_at change; id and created_at
        are preserved. A new entry gets a fresh id, equal created_at and
        updated_at, and no mood.

        Args:
            entry_date: YYYY-MM-DD
            content_json: Serialized document, stored verbatim

        Returns:
            The stored entry
        """
        entry_date = DataValidator.normalize_date(entry_date)
        if content_json is None:
            raise ValidationError("Required field 'content_json' missing or empty")

        now = utc_now_ms()
        return self._upsert(
            {
                "id": str(uuid.uuid4()),
                "entry_date": entry_date,
                "content_json": content_json,
                "mood": None,
                "mood_emoji": None,
                "created_at": now,
                "updated_at": now,
            },
            ["content_json"],
        )

    @handle_db_errors
    @log_database_operation("upsert_entry_mood")
    def upsert_mood(
        self,
        entry_date: str,
        mood: Optional[str],
        mood_emoji: Optional[str],
    ) -> DiaryEntry:
        """
        Set the mood of the entry for a date, creating it if needed.

        Only mood fields and updated_at are touched on update. A new entry
        gets an empty document as content. None clears the mood.

        Raises:
            ValidationError: If mood is not a known category
        """
        entry_date = DataValidator.normalize_date(entry_date)
        mood = DataValidator.normalize_string(mood)
        if mood is not None and mood not in Mood.choices():
            raise ValidationError(
                f"Unknown mood: {mood!r} (expected one of {', '.join(Mood.choices())})"
            )

        now = utc_now_ms()
        return self._upsert(
            {
                "id": str(uuid.uuid4()),
                "entry_date": entry_date,
                "content_json": EMPTY_DOCUMENT,
                "mood": mood,
                "mood_emoji": mood_emoji,
                "created_at": now,
                "updated_at": now,
            },
            ["mood", "mood_emoji"],
        )

    @handle_db_errors
    @log_database_operation("delete_entry")
    def delete(self, entry_date: str) -> bool:
        """
        Delete the entry for a date with its audit records and projection.

        Returns:
            True if an entry was deleted, False if none existed
        """
        entry = self.get(entry_date)
        if entry is None:
            return False

        removed_ops = (
            self.session.query(AIOperation)
            .filter(AIOperation.entry_id == entry.id)
            .delete(synchronize_session=False)
        )
        self.index.remove_entry(entry.id)
        self.session.delete(entry)
        self.session.flush()

        safe_logger(self.logger).log_debug(
            "Entry deleted",
            {"entry_date": entry.entry_date, "ai_operations_removed": removed_ops},
        )
        return True

    # -------------------------------------------------------------------------
    # Verbatim writes (bundle import)
    # -------------------------------------------------------------------------

    def create_from_record(self, record: Dict[str, Any]) -> DiaryEntry:
        """
        Insert an entry exactly as described by an exported record.

        The record's id, timestamps and mood are kept.

        Args:
            record: Normalized entry fields (see ExportManager)
        """
        entry = DiaryEntry(
            id=record["id"],
            entry_date=record["entry_date"],
            content_json=record["content_json"],
            mood=record.get("mood"),
            mood_emoji=record.get("mood_emoji"),
            created_at=record["created_at"],
            updated_at=max(record["updated_at"], record["created_at"]),
        )
        self.session.add(entry)
        self.session.flush()
        self.index.index_entry(entry)
        return entry

    def overwrite_from_record(self, entry: DiaryEntry, record: Dict[str, Any]) -> DiaryEntry:
        """
        Replace content, mood and updated_at of an existing entry.

        id and created_at stay local; updated_at is clamped so it never
        precedes created_at.
        """
        entry.content_json = record["content_json"]
        entry.mood = record.get("mood")
        entry.mood_emoji = record.get("mood_emoji")
        entry.updated_at = max(record["updated_at"], entry.created_at)
        self.session.flush()
        self.index.index_entry(entry)
        return entry
