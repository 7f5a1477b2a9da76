#!/usr/bin/env python3
"""
base_manager.py
--------------------
Base manager providing common helpers for the Daybook entity managers.

Key Features:
    - Session and logger plumbing shared by every manager
    - Retry logic for SQLite lock contention
    - Generic lookup and count helpers

Managers never commit: the caller's session_scope owns the transaction,
so every write a manager performs (including index synchronization)
lands in the same unit of work.

Example:
    class SettingsManager(BaseManager):
        def get(self, key: str) -> Optional[str]:
            setting = self._get_by_field(AppSetting, "key", key)
            return setting.value if setting else None
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from abc import ABC
from typing import Any, Callable, Optional, Type, TypeVar

# --- Third party imports ---
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

# --- Local imports ---
from daybook.core.exceptions import DatabaseError
from daybook.core.logging_manager import DaybookLogger, safe_logger

T = TypeVar("T")


class BaseManager(ABC):
    """
    Abstract base manager providing common utilities.

    Attributes:
        session: SQLAlchemy session for database operations
        logger: Optional logger for operation tracking
    """

    def __init__(self, session: Session, logger: Optional[DaybookLogger] = None):
        """
        Initialize the base manager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
        """
        self.session = session
        self.logger = logger

    def _execute_with_retry(
        self,
        operation: Callable,
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> Any:
        """
        Execute database operation with retry on lock.

        Args:
            operation: Callable that performs the operation
            max_retries: Maximum number of retry attempts
            retry_delay: Base delay between retries (exponential backoff)

        Returns:
            Result of the operation

        Raises:
            OperationalError: If all retries exhausted
        """
        for attempt in range(max_retries):
            try:
                return operation()
            except OperationalError as e:
                error_msg = str(e).lower()

                if (
                    "locked" in error_msg or "busy" in error_msg
                ) and attempt < max_retries - 1:
                    wait_time = retry_delay * (2**attempt)

                    safe_logger(self.logger).log_debug(
                        f"Database locked, retrying in {wait_time}s",
                        {"attempt": attempt + 1, "max_retries": max_retries},
                    )

                    time.sleep(wait_time)
                    continue

                raise

        raise DatabaseError("Retry loop completed without success")

    def _get_by_field(
        self,
        model_class: Type[T],
        field_name: str,
        value: Any,
    ) -> Optional[T]:
        """
        Get entity by a specific field value.

        Returns:
            Entity if found, None otherwise
        """
        if value is None:
            return None
        return self.session.query(model_class).filter_by(**{field_name: value}).first()

    def _count(self, model_class: Type[T], **filters: Any) -> int:
        """Count entities with optional filtering."""
        query = self.session.query(model_class)
        if filters:
            query = query.filter_by(**filters)
        return query.count()
