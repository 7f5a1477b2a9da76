"""
Database Models Package
------------------------

SQLAlchemy ORM models for the Daybook database.

- base: Base class and timestamp helper
- enums: Enumeration types
- core: DiaryEntry, AIOperation, AppSetting, SchemaMigration

Usage:
    from daybook.database.models import DiaryEntry, Mood
"""
from .base import Base, utc_now_ms
from .enums import Mood
from .core import AIOperation, AppSetting, DiaryEntry, SchemaMigration

__all__ = [
    "Base",
    "utc_now_ms",
    "Mood",
    "DiaryEntry",
    "AIOperation",
    "AppSetting",
    "SchemaMigration",
]
