#!/usr/bin/env python3
"""
test_entry_manager.py
---------------------
Unit tests for EntryManager.

Key areas tested:
    - Upsert keeps id and created_at stable per date
    - Mood-only upserts touch only mood fields
    - Month and mood listings (prefix match, newest first)
    - Delete cascades to AI operations and the search index
"""
import json

import pytest
from sqlalchemy import text

from daybook.core.exceptions import InvalidDateError, ValidationError
from daybook.database.managers.entry_manager import EMPTY_DOCUMENT


class TestUpsert:
    def test_creates_entry(self, entry_manager, coffee_content):
        entry = entry_manager.upsert("2026-01-15", coffee_content)

        assert entry.id
        assert entry.entry_date == "2026-01-15"
        assert entry.content_json == coffee_content
        assert entry.created_at == entry.updated_at
        assert entry.mood is None
        assert entry.mood_emoji is None

    def test_same_date_keeps_identity(self, entry_manager, coffee_content, tea_content):
        first = entry_manager.upsert("2026-01-15", coffee_content)
        first_id, first_created, first_updated = first.id, first.created_at, first.updated_at

        second = entry_manager.upsert("2026-01-15", tea_content)

        assert second.id == first_id
        assert second.created_at == first_created
        assert second.updated_at >= first_updated
        assert second.content_json == tea_content
        assert entry_manager.count() == 1

    def test_facade_upsert_is_stable_across_transactions(self, test_db, coffee_content):
        first = test_db.upsert_entry("2026-01-15", coffee_content)
        second = test_db.upsert_entry("2026-01-15", coffee_content)

        assert second.id == first.id
        assert second.created_at == first.created_at

    def test_invalid_date_rejected(self, entry_manager, coffee_content):
        with pytest.raises(InvalidDateError):
            entry_manager.upsert("2026-02-30", coffee_content)

    def test_missing_content_rejected(self, entry_manager):
        with pytest.raises(ValidationError):
            entry_manager.upsert("2026-01-15", None)

    def test_upsert_keeps_mood(self, entry_manager, coffee_content):
        entry_manager.upsert_mood("2026-01-15", "happy", "😊")
        entry = entry_manager.upsert("2026-01-15", coffee_content)

        assert entry.mood == "happy"
        assert entry.mood_emoji == "😊"


class TestUpsertMood:
    def test_creates_entry_with_empty_document(self, entry_manager):
        entry = entry_manager.upsert_mood("2026-01-15", "amazing", "😄")

        assert entry.content_json == EMPTY_DOCUMENT
        assert json.loads(entry.content_json) == {}
        assert entry.mood == "amazing"

    def test_only_mood_changes(self, entry_manager, coffee_content):
        original = entry_manager.upsert("2026-01-15", coffee_content)
        original_id = original.id

        entry = entry_manager.upsert_mood("2026-01-15", "sad", "😢")

        assert entry.id == original_id
        assert entry.content_json == coffee_content
        assert entry.mood == "sad"
        assert entry.mood_emoji == "😢"

    def test_none_clears_mood(self, entry_manager):
        entry_manager.upsert_mood("2026-01-15", "happy", "😊")
        entry = entry_manager.upsert_mood("2026-01-15", None, None)

        assert entry.mood is None
        assert entry.mood_emoji is None

    def test_unknown_mood_rejected(self, entry_manager):
        with pytest.raises(ValidationError, match="Unknown mood"):
            entry_manager.upsert_mood("2026-01-15", "ecstatic", "🤩")


class TestListing:
    @pytest.fixture
    def populated(self, entry_manager, coffee_content):
        for entry_date in ("2026-01-05", "2026-01-20", "2026-02-01", "2025-01-10", "2026-01-12"):
            entry_manager.upsert(entry_date, coffee_content)
        entry_manager.upsert_mood("2026-01-12", "happy", "😊")
        entry_manager.upsert_mood("2026-02-01", "happy", "😊")
        return entry_manager

    def test_month_prefix_descending(self, populated):
        dates = [e.entry_date for e in populated.list_for_month("2026-01")]
        assert dates == ["2026-01-20", "2026-01-12", "2026-01-05"]

    def test_empty_month(self, populated):
        assert populated.list_for_month("2024-06") == []

    def test_invalid_month_rejected(self, populated):
        with pytest.raises(InvalidDateError):
            populated.list_for_month("2026-1")

    def test_by_mood(self, populated):
        dates = [e.entry_date for e in populated.list_by_mood("2026-01", "happy")]
        assert dates == ["2026-01-12"]

    def test_all_dates_ascending(self, populated):
        assert populated.all_dates() == [
            "2025-01-10",
            "2026-01-05",
            "2026-01-12",
            "2026-01-20",
            "2026-02-01",
        ]

    def test_get_and_exists(self, populated):
        assert populated.exists("2026-01-05")
        assert not populated.exists("2026-01-06")
        assert populated.get("2026-01-06") is None
        entry = populated.get("2026-01-05")
        assert populated.get_by_id(entry.id) is entry


class TestDelete:
    def test_delete_cascades(self, entry_manager, ai_operation_manager, db_session, coffee_content):
        entry = entry_manager.upsert("2026-01-15", coffee_content)
        ai_operation_manager.record(entry.id, "polish", "a", "b", "provider", "model")

        assert entry_manager.delete("2026-01-15") is True

        assert entry_manager.get("2026-01-15") is None
        assert ai_operation_manager.list_for_entry(entry.id) == []
        remaining = db_session.execute(
            text("SELECT COUNT(*) FROM entries_fts WHERE entry_id = :id"), {"id": entry.id}
        ).scalar_one()
        assert remaining == 0

    def test_delete_missing_returns_false(self, entry_manager):
        assert entry_manager.delete("2026-01-15") is False

    def test_facade_delete(self, test_db, coffee_content):
        entry = test_db.upsert_entry("2026-01-15", coffee_content)
        test_db.record_ai_operation(entry.id, "expand", "a", "b", "provider", "model")

        assert test_db.delete_entry("2026-01-15") is True
        assert test_db.delete_entry("2026-01-15") is False
        assert test_db.list_ai_operations(entry.id) == []
        assert test_db.search_entries("coffee") == []
