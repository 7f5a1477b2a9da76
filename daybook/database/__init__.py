#!/usr/bin/env python3
"""
Daybook Database Package
------------------------
Storage core for the Daybook journal.

This package provides the persistent store behind the journal, with
specialized modules for:
- Core database operations and schema migrations
- Entry, AI operation and settings managers
- Bundle export and import
- Writing statistics
"""

from .manager import DaybookDB, open_and_migrate
from daybook.core.exceptions import (
    DatabaseError,
    EntryNotFoundError,
    ExportError,
    MigrationError,
    ValidationError,
)
from .export_manager import ExportManager, ImportOptions, validate_bundle
from .migrations import LATEST_VERSION, Migrator
from .query_analytics import QueryAnalytics, WritingStats
from .decorators import (
    log_database_operation,
    handle_db_errors,
)

__all__ = [
    # Main manager
    "DaybookDB",
    "open_and_migrate",
    # Exceptions
    "DatabaseError",
    "EntryNotFoundError",
    "ExportError",
    "MigrationError",
    "ValidationError",
    # Core modules
    "ExportManager",
    "ImportOptions",
    "validate_bundle",
    "Migrator",
    "LATEST_VERSION",
    "QueryAnalytics",
    "WritingStats",
    # Decorators
    "log_database_operation",
    "handle_db_errors",
]
