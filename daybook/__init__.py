"""
Daybook
=======

Local-first storage core for a daily journal.

Entries are keyed by calendar date and kept in a single SQLite file,
together with an AI operation audit trail, application settings and a
full-text search index that is updated in the same transaction as every
entry change.

Main Components:
    - database: SQLAlchemy store, migrations, managers, import/export
    - search: FTS5 shadow index
    - core: Logging, validation, paths, exceptions, secret store interface

Primary Interfaces:
    - daybook.database.DaybookDB: Main database interface
    - daybook.database.cli: Maintenance CLI (`daybook` command)

Example Usage:
    >>> from daybook.database import open_and_migrate
    >>> db = open_and_migrate("/tmp/daybook.db")
    >>> entry = db.upsert_entry("2026-01-15", '{"type":"doc"}')
    >>> db.search_entries("doc")
"""

__version__ = "1.0.0"
