#!/usr/bin/env python3
"""
search_index.py
---------------
Full-text search shadow index for diary entries using SQLite FTS5.

The index is a derived projection of each entry's content and mood,
keyed by entry id. It is never the source of truth: the entry store
calls index_entry()/remove_entry() inside the same session transaction
as every entry mutation, so the two tables cannot diverge.

Features:
- FTS5 virtual table with Porter stemming and Unicode tokenization
- Explicit, transactional synchronization (no triggers)
- BM25 ranking with date tie-break
- Safe conversion of free text into FTS5 query syntax
- Consistency check between entries and index

Usage:
    index = SearchIndexManager(session, logger)
    index.index_entry(entry)          # after insert/update
    index.remove_entry(entry.id)      # before delete
    results = index.search("coffee")
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import TYPE_CHECKING, Dict, List, Optional

# --- Third party imports ---
from sqlalchemy import select, text
from sqlalchemy.orm import Session

# --- Local imports ---
from daybook.core.logging_manager import DaybookLogger, safe_logger

if TYPE_CHECKING:
    from daybook.database.models import DiaryEntry

FTS_TABLE = "entries_fts"

# Trigger names used by trigger-synchronized builds of the index
LEGACY_SYNC_TRIGGERS = ("entries_ai", "entries_au", "entries_ad")

FTS_CREATE_SQL = f"""
    CREATE VIRTUAL TABLE {FTS_TABLE} USING fts5(
        entry_id UNINDEXED,
        content,
        mood,
        tokenize='porter unicode61'
    )
"""

FTS_POPULATE_SQL = f"""
    INSERT INTO {FTS_TABLE} (entry_id, content, mood)
    SELECT id, content_json, COALESCE(mood, '') FROM entries
"""


def build_match_expression(query: Optional[str]) -> Optional[str]:
    """
    Convert free text into an FTS5 MATCH expression.

    Every whitespace-separated term becomes a quoted phrase, so user input
    can never be parsed as FTS5 operators. Terms are ANDed. A trailing '*'
    is kept as a prefix match. Terms without letters or digits are dropped.

    Args:
        query: Free-text query

    Returns:
        MATCH expression, or None when nothing searchable remains

    Examples:
        >>> build_match_expression("morning coffee")
        '"morning" "coffee"'
        >>> build_match_expression("caf*")
        '"caf"*'
        >>> build_match_expression("   ") is None
        True
    """
    if not query:
        return None

    phrases = []
    for term in query.split():
        prefix = term.endswith("*")
        core = term.rstrip("*")
        if not any(ch.isalnum() for ch in core):
            continue
        phrase = '"' + core.replace('"', '""') + '"'
        phrases.append(phrase + "*" if prefix else phrase)

    return " ".join(phrases) if phrases else None


class SearchIndexManager:
    """Maintains and queries the FTS5 shadow index within a session."""

    def __init__(self, session: Session, logger: Optional[DaybookLogger] = None):
        self.session = session
        self.logger = logger

    # ---- Synchronization ----
    def index_entry(self, entry: "DiaryEntry") -> None:
        """
        Replace the projection for an entry.

        Used for both inserts and updates: any existing row for the id is
        removed before the current content and mood are added.

        Args:
            entry: Persisted entry (flushed)
        """
        self.remove_entry(entry.id)
        self.session.execute(
            text(
                f"INSERT INTO {FTS_TABLE} (entry_id, content, mood) "
                "VALUES (:entry_id, :content, :mood)"
            ),
            {
                "entry_id": entry.id,
                "content": entry.content_json,
                "mood": entry.mood or "",
            },
        )

    def remove_entry(self, entry_id: str) -> int:
        """
        Remove the projection for an entry id.

        Returns:
            Number of index rows removed
        """
        result = self.session.execute(
            text(f"DELETE FROM {FTS_TABLE} WHERE entry_id = :entry_id"),
            {"entry_id": entry_id},
        )
        return result.rowcount

    def populate_index(self) -> int:
        """
        Add projections for every entry.

        Assumes the index is empty.

        Returns:
            Number of entries indexed
        """
        self.session.execute(text(FTS_POPULATE_SQL))
        count = self.session.execute(text(f"SELECT COUNT(*) FROM {FTS_TABLE}")).scalar_one()
        safe_logger(self.logger).log_info(f"Indexed {count} entries")
        return count

    def rebuild_index(self) -> int:
        """
        Recreate the index table and repopulate it from entries.

        Returns:
            Number of entries indexed
        """
        safe_logger(self.logger).log_info("Rebuilding search index...")

        self.session.execute(text(f"DROP TABLE IF EXISTS {FTS_TABLE}"))
        self.session.execute(text(FTS_CREATE_SQL))
        count = self.populate_index()

        safe_logger(self.logger).log_info(f"Index rebuild complete: {count} entries")
        return count

    # ---- Queries ----
    def search(self, query: Optional[str], limit: Optional[int] = None) -> List["DiaryEntry"]:
        """
        Return entries matching a free-text query.

        Results are ordered by BM25 relevance (best first), ties broken by
        entry date, newest first. An empty or whitespace-only query
        returns no results.

        Args:
            query: Free-text query (see build_match_expression)
            limit: Maximum results (None for all)

        Returns:
            Matching entries
        """
        from daybook.database.models import DiaryEntry

        expression = build_match_expression(query)
        if expression is None:
            return []

        sql = (
            "SELECT e.* FROM entries e "
            f"JOIN {FTS_TABLE} ON e.id = {FTS_TABLE}.entry_id "
            f"WHERE {FTS_TABLE} MATCH :query "
            f"ORDER BY bm25({FTS_TABLE}) ASC, e.entry_date DESC"
        )
        params: Dict[str, object] = {"query": expression}
        if limit is not None:
            sql += " LIMIT :limit"
            params["limit"] = limit

        stmt = select(DiaryEntry).from_statement(text(sql))
        return list(self.session.scalars(stmt, params).all())

    def index_exists(self) -> bool:
        """Check if the FTS table exists."""
        result = self.session.execute(
            text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = :name"),
            {"name": FTS_TABLE},
        )
        return result.fetchone() is not None

    def check_consistency(self) -> Dict[str, List[str]]:
        """
        Compare the index against the entries table.

        Returns:
            Dictionary with lists of entry ids:
                - missing: entries without an index row
                - orphaned: index rows without an entry
                - stale: index rows whose content or mood differ from the entry
        """
        missing = self.session.execute(
            text(
                f"SELECT id FROM entries WHERE id NOT IN (SELECT entry_id FROM {FTS_TABLE}) "
                "ORDER BY entry_date"
            )
        ).scalars().all()
        orphaned = self.session.execute(
            text(
                f"SELECT entry_id FROM {FTS_TABLE} "
                "WHERE entry_id NOT IN (SELECT id FROM entries)"
            )
        ).scalars().all()
        stale = self.session.execute(
            text(
                f"SELECT e.id FROM entries e JOIN {FTS_TABLE} f ON f.entry_id = e.id "
                "WHERE f.content != e.content_json OR f.mood != COALESCE(e.mood, '') "
                "ORDER BY e.entry_date"
            )
        ).scalars().all()

        report = {"missing": list(missing), "orphaned": list(orphaned), "stale": list(stale)}
        if any(report.values()):
            safe_logger(self.logger).log_warning("Search index out of sync", report)
        return report
