#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities for Daybook operations.

Dates and month prefixes are checked here, at the edge, before any
query touches storage.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .exceptions import InvalidDateError, ValidationError

DATE_FORMAT = "%Y-%m-%d"
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")


class DataValidator:
    """Centralized data validation for store operations."""

    @staticmethod
    def validate_required_fields(
        data: Dict[str, Any], required_fields: List[str]
    ) -> None:
        """
        Validate that required fields are present and non-empty.

        Args:
            data: Data dictionary to validate
            required_fields: List of required field names

        Raises:
            ValidationError: If validation fails
        """
        for field in required_fields:
            if field not in data or data[field] is None or data[field] == "":
                raise ValidationError(f"Required field '{field}' missing or empty")

    @staticmethod
    def parse_date(value: Any) -> Optional[date]:
        """
        Parse an entry date without raising.

        Args:
            value: Date string (YYYY-MM-DD), date or datetime

        Returns:
            Parsed date, or None when the value is not a valid calendar date
        """
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str) and _DATE_PATTERN.match(value.strip()):
            try:
                return datetime.strptime(value.strip(), DATE_FORMAT).date()
            except ValueError:
                return None
        return None

    @staticmethod
    def normalize_date(value: Any) -> str:
        """
        Normalize an entry date to its canonical YYYY-MM-DD string.

        Args:
            value: Date string, date or datetime

        Returns:
            Canonical date string

        Raises:
            InvalidDateError: If value is not a valid calendar date
        """
        parsed = DataValidator.parse_date(value)
        if parsed is None:
            raise InvalidDateError(f"Invalid entry date: {value!r}")
        return parsed.strftime(DATE_FORMAT)

    @staticmethod
    def normalize_month(value: Any) -> str:
        """
        Validate a YYYY-MM month prefix.

        Raises:
            InvalidDateError: If value is not a valid year-month
        """
        if not isinstance(value, str) or not _MONTH_PATTERN.match(value.strip()):
            raise InvalidDateError(f"Invalid month: {value!r}")
        month = value.strip()
        try:
            datetime.strptime(f"{month}-01", DATE_FORMAT)
        except ValueError:
            raise InvalidDateError(f"Invalid month: {value!r}")
        return month

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """
        Normalize string value.

        Returns:
            Stripped string, or None for empty input
        """
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @staticmethod
    def normalize_int(value: Any) -> Optional[int]:
        """
        Safely convert value to integer.

        Returns:
            Integer value or None when conversion fails
        """
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (ValueError, TypeError):
            return None
