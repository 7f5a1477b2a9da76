#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the Daybook project.

This module defines a hierarchy of exceptions used throughout the project
to handle specific error conditions in different subsystems.

Exception Hierarchy:
    Exception (built-in)
    ├── DatabaseError - Base for all storage-related errors
    │   ├── MigrationError - Schema migration failures (fatal at startup)
    │   ├── EntryNotFoundError - Referenced entry has no row
    │   └── ExportError - Bundle export failures
    ├── ValidationError - Data validation failures
    │   └── InvalidDateError - Malformed entry date or month
    ├── SerializationError - Payload is not valid structured data
    ├── FileAccessError - Filesystem access for database or exports
    └── SecretStoreError - Credential storage unavailable or failing

Usage:
    from daybook.core.exceptions import DatabaseError, InvalidDateError

    try:
        db.upsert_entry("2026-01-15", content)
    except InvalidDateError as e:
        logger.error(f"Invalid date: {e}")
    except DatabaseError as e:
        logger.error(f"Database operation failed: {e}")
"""


class DatabaseError(Exception):
    """
    Base exception for storage-related errors.

    Raised when the underlying engine or connection fails. The store does
    not retry or reinterpret these; they surface to the immediate caller.

    Examples:
        >>> raise DatabaseError("Connection to database failed")
        >>> raise DatabaseError("Data integrity violation: UNIQUE constraint failed")

    See Also:
        MigrationError, EntryNotFoundError, ExportError
    """

    pass


class MigrationError(DatabaseError):
    """
    Exception for schema migration failures.

    Raised when a migration step cannot be applied. The failing step is
    rolled back in full and the store refuses to open, so no operation ever
    runs against a partially migrated schema.

    Attributes:
        version: Version number of the failing step (None for bootstrap)

    Examples:
        >>> raise MigrationError("Migration 4 failed: duplicate column", version=4)
    """

    def __init__(self, message: str, version=None) -> None:
        super().__init__(message)
        self.version = version


class EntryNotFoundError(DatabaseError):
    """
    Exception for operations that require an existing entry.

    Raised when a date or id has no matching row, e.g. recording an
    AI operation against an entry that was never saved.

    Examples:
        >>> raise EntryNotFoundError("No entry with id: 3f2a...")
    """

    pass


class ExportError(DatabaseError):
    """
    Exception for bundle export failures.

    Raised when a snapshot cannot be written to its destination:
    - Permission issues
    - Missing parent directories that cannot be created
    - Disk full

    Examples:
        >>> raise ExportError("Cannot write bundle: permission denied")
    """

    pass


class ValidationError(Exception):
    """
    Exception for data validation failures.

    Raised when input data fails validation checks before storage is touched:
    - Missing required fields
    - Unknown mood categories
    - Type mismatches

    Examples:
        >>> raise ValidationError("Unknown mood: 'ecstatic'")
        >>> raise ValidationError("Required field 'entry_date' missing or empty")
    """

    pass


class InvalidDateError(ValidationError):
    """
    Exception for malformed entry dates and month prefixes.

    Entry dates must be calendar dates in YYYY-MM-DD form and month
    prefixes must be YYYY-MM.

    Examples:
        >>> raise InvalidDateError("Invalid entry date: 2026-02-30")
        >>> raise InvalidDateError("Invalid month: 2026-1")
    """

    pass


class SerializationError(Exception):
    """
    Exception for payloads that are not valid structured data.

    Raised when an import bundle or a JSON setting value cannot be
    parsed or encoded.

    Examples:
        >>> raise SerializationError("Bundle is not valid JSON: Expecting value")
        >>> raise SerializationError("Bundle is missing an 'entries' list")
    """

    pass


class FileAccessError(Exception):
    """
    Exception for filesystem access failures.

    Raised when the database directory cannot be created or an import
    bundle cannot be read.

    Examples:
        >>> raise FileAccessError("Cannot create data directory: read-only filesystem")
    """

    pass


class SecretStoreError(Exception):
    """
    Exception for credential storage failures.

    Raised when a secret is requested but no secret store was provided,
    or when the provided store fails.

    Examples:
        >>> raise SecretStoreError("No secret store configured")
    """

    pass
