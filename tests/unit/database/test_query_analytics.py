"""
Tests for writing statistics and streak calculation.
"""
import re
from datetime import date, datetime

import pytest

from daybook.core.exceptions import InvalidDateError
from daybook.database.query_analytics import (
    QueryAnalytics,
    WritingStats,
    calculate_current_streak,
    calculate_longest_streak,
)


class TestCurrentStreak:
    def test_consecutive_days_ending_today(self):
        dates = ["2026-01-01", "2026-01-02", "2026-01-03"]
        assert calculate_current_streak(dates, "2026-01-03") == 3

    def test_datetime_today(self):
        dates = ["2026-01-01", "2026-01-02", "2026-01-03"]
        assert calculate_current_streak(dates, datetime(2026, 1, 3, 8, 30)) == 3

    def test_gap_stops_streak(self):
        assert calculate_current_streak(["2026-01-01", "2026-01-03"], "2026-01-03") == 1

    def test_no_entry_today(self):
        assert calculate_current_streak(["2026-01-01", "2026-01-02"], "2026-01-03") == 0

    def test_future_dates_are_skipped(self):
        dates = ["2026-01-02", "2026-01-03", "2026-01-10"]
        assert calculate_current_streak(dates, date(2026, 1, 3)) == 2

    def test_unparseable_dates_are_ignored(self):
        dates = ["2026-01-02", "garbage", "2026-01-03", "2026-02-31"]
        assert calculate_current_streak(dates, "2026-01-03") == 2

    def test_order_of_input_does_not_matter(self):
        dates = ["2026-01-03", "2026-01-01", "2026-01-02"]
        assert calculate_current_streak(dates, "2026-01-03") == 3

    def test_empty(self):
        assert calculate_current_streak([], "2026-01-03") == 0


class TestLongestStreak:
    def test_single_run(self):
        assert calculate_longest_streak(["2026-01-01", "2026-01-02", "2026-01-03"]) == 3

    def test_gap(self):
        assert calculate_longest_streak(["2026-01-01", "2026-01-03"]) == 1

    def test_best_run_in_the_middle(self):
        dates = [
            "2025-12-30",
            "2026-01-05",
            "2026-01-06",
            "2026-01-07",
            "2026-01-08",
            "2026-01-20",
            "2026-01-21",
        ]
        assert calculate_longest_streak(dates) == 4

    def test_spans_month_and_year_boundaries(self):
        assert calculate_longest_streak(["2025-12-31", "2026-01-01", "2026-01-02"]) == 3

    def test_unparseable_dates_are_ignored(self):
        assert calculate_longest_streak(["2026-01-01", "nope", "2026-01-02"]) == 2

    def test_empty(self):
        assert calculate_longest_streak([]) == 0


class TestQueryAnalytics:
    def test_writing_stats(self, test_db, coffee_content):
        for entry_date in ("2026-01-01", "2026-01-02", "2026-01-03", "2026-01-10"):
            test_db.upsert_entry(entry_date, coffee_content)

        stats = test_db.writing_stats(today="2026-01-03")

        assert stats == WritingStats(total_entries=4, current_streak=3, longest_streak=3)
        assert stats.to_dict() == {
            "total_entries": 4,
            "current_streak": 3,
            "longest_streak": 3,
        }

    def test_accepts_date_and_datetime_today(self, test_db, coffee_content):
        for entry_date in ("2026-01-02", "2026-01-03"):
            test_db.upsert_entry(entry_date, coffee_content)

        assert test_db.writing_stats(today=date(2026, 1, 3)).current_streak == 2
        assert test_db.writing_stats(today=datetime(2026, 1, 3, 23, 59)).current_streak == 2

    @pytest.mark.parametrize("today", ["2026-13-01", "2026-02-30", "yesterday", ""])
    def test_invalid_today_rejected(self, test_db, coffee_content, today):
        test_db.upsert_entry("2026-01-03", coffee_content)
        with pytest.raises(InvalidDateError):
            test_db.writing_stats(today=today)

    def test_empty_database(self, test_db):
        assert test_db.writing_stats().to_dict() == {
            "total_entries": 0,
            "current_streak": 0,
            "longest_streak": 0,
        }

    def test_today_from_storage_clock(self, db_session):
        today = QueryAnalytics.storage_today(db_session)
        assert re.match(r"^\d{4}-\d{2}-\d{2}$", today)

    def test_default_today_counts_todays_entry(self, test_db, db_session, coffee_content):
        today = QueryAnalytics.storage_today(db_session)
        db_session.rollback()
        test_db.upsert_entry(today, coffee_content)

        assert test_db.writing_stats().current_streak == 1
