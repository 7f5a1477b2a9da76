#!/usr/bin/env python3
"""
query_analytics.py
------------------
Writing statistics for the Daybook database.

Streaks are computed over distinct entry dates (YYYY-MM-DD strings).
Dates that do not parse are ignored rather than treated as errors.
"""
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy import text
from sqlalchemy.orm import Session

from daybook.core.logging_manager import DaybookLogger, safe_logger
from daybook.core.validators import DataValidator
from .decorators import handle_db_errors, log_database_operation
from .models import DiaryEntry

ONE_DAY = timedelta(days=1)


@dataclass
class WritingStats:
    """Aggregate writing statistics."""

    total_entries: int
    current_streak: int
    longest_streak: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _valid_dates(dates: Iterable[str]) -> List[date]:
    """Distinct parseable dates, ascending."""
    parsed = {DataValidator.parse_date(value) for value in dates}
    parsed.discard(None)
    return sorted(parsed)


def calculate_current_streak(dates: Iterable[str], today: Union[str, date]) -> int:
    """
    Count consecutive days with an entry ending at today.

    Dates after today are skipped without affecting the streak. The walk
    stops at the first gap.

    Args:
        dates: Entry dates
        today: Reference date (date or YYYY-MM-DD)

    Returns:
        Streak length in days (0 if there is no entry for today)

    Examples:
        >>> calculate_current_streak(["2026-01-01", "2026-01-02", "2026-01-03"], "2026-01-03")
        3
        >>> calculate_current_streak(["2026-01-01", "2026-01-03"], "2026-01-03")
        1
    """
    expected = DataValidator.parse_date(today)
    if expected is None:
        return 0

    streak = 0
    for day in reversed(_valid_dates(dates)):
        if day > expected:
            continue
        if day < expected:
            break
        streak += 1
        expected -= ONE_DAY

    return streak


def calculate_longest_streak(dates: Iterable[str]) -> int:
    """
    Length of the longest run of consecutive days with an entry.

    Examples:
        >>> calculate_longest_streak(["2026-01-01", "2026-01-02", "2026-01-03"])
        3
        >>> calculate_longest_streak(["2026-01-01", "2026-01-03"])
        1
        >>> calculate_longest_streak([])
        0
    """
    ordered = _valid_dates(dates)
    if not ordered:
        return 0

    best = 0
    current_run = 1
    for previous, day in zip(ordered, ordered[1:]):
        if day - previous == ONE_DAY:
            current_run += 1
        else:
            best = max(best, current_run)
            current_run = 1

    return max(best, current_run)


class QueryAnalytics:
    """
    Handles statistics queries over the entries table.
    """

    def __init__(self, logger: Optional[DaybookLogger] = None) -> None:
        """
        Initialize query analytics.

        Args:
            logger: Optional logger for query operations
        """
        self.logger = logger

    @staticmethod
    def storage_today(session: Session) -> str:
        """Current UTC calendar date according to the storage engine."""
        return session.execute(text("SELECT date('now')")).scalar_one()

    @handle_db_errors
    @log_database_operation("writing_stats")
    def writing_stats(
        self, session: Session, today: Optional[Union[str, date]] = None
    ) -> WritingStats:
        """
        Compute total entries and streaks.

        Args:
            session: SQLAlchemy session
            today: Reference date; defaults to the storage engine's clock

        Returns:
            WritingStats

        Raises:
            InvalidDateError: If today is given but is not a calendar date
        """
        if today is not None:
            today = DataValidator.normalize_date(today)

        dates = [row[0] for row in session.query(DiaryEntry.entry_date).all()]
        if today is None:
            today = self.storage_today(session)

        stats = WritingStats(
            total_entries=len(dates),
            current_streak=calculate_current_streak(dates, today),
            longest_streak=calculate_longest_streak(dates),
        )
        safe_logger(self.logger).log_debug("Writing stats computed", stats.to_dict())
        return stats
