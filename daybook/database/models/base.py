"""
Base Classes
------------

Foundational ORM pieces for the Daybook database.

Classes:
    - Base: Declarative base for all SQLAlchemy models

Functions:
    - utc_now_ms: Current UTC time as integer epoch milliseconds

Tables are created by the migration engine, not by Base.metadata.create_all;
the mappings here must stay in step with the DDL in migrations.py.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time

# --- Third party ---
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Serves as the declarative base for SQLAlchemy models and provides
    access to the metadata object.
    """

    pass


def utc_now_ms() -> int:
    """Return the current UTC time as integer epoch milliseconds."""
    return time.time_ns() // 1_000_000
