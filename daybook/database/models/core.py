"""
Core Models
-----------

ORM mappings for the primary Daybook tables.

Models:
    - DiaryEntry: One journal entry per calendar date
    - AIOperation: Append-only audit record of an AI text transformation
    - AppSetting: Key/value configuration blob
    - SchemaMigration: Applied migration version
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Optional

# --- Third party ---
from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

# --- Local imports ---
from .base import Base


class DiaryEntry(Base):
    """
    A single journal entry.

    The entry date is the natural key: there is exactly one entry per
    calendar date. The id is an opaque UUID string assigned on creation
    and never changed.

    Attributes:
        id: Opaque unique identifier (UUID4 string)
        entry_date: Calendar date, YYYY-MM-DD (unique)
        content_json: Structured document payload, stored verbatim
        mood: Optional mood category (see Mood)
        mood_emoji: Optional display glyph for the mood
        created_at: Creation time, epoch milliseconds (immutable)
        updated_at: Last modification time, epoch milliseconds
    """

    __tablename__ = "entries"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    entry_date: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    content_json: Mapped[str] = mapped_column(Text, nullable=False)
    mood: Mapped[Optional[str]] = mapped_column(String, index=True)
    mood_emoji: Mapped[Optional[str]] = mapped_column(String)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<DiaryEntry(id={self.id!r}, entry_date={self.entry_date!r})>"


class AIOperation(Base):
    """
    Audit record of an externally performed text transformation.

    Records are only ever inserted, or removed together with their
    owning entry.

    Attributes:
        id: Opaque unique identifier (UUID4 string)
        entry_id: Owning entry id (cascades on entry deletion)
        op_type: Operation kind (e.g. polish, expand, fix_grammar)
        original_text: Text sent to the provider
        result_text: Text returned by the provider
        provider: Provider name
        model: Model name
        created_at: Creation time, epoch milliseconds
    """

    __tablename__ = "ai_operations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    entry_id: Mapped[str] = mapped_column(
        String, ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    op_type: Mapped[str] = mapped_column(String, nullable=False, index=True)
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    result_text: Mapped[str] = mapped_column(Text, nullable=False)
    provider: Mapped[str] = mapped_column(String, nullable=False)
    model: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<AIOperation(id={self.id!r}, op_type={self.op_type!r})>"


class AppSetting(Base):
    """Opaque key/value pair; writes are upserts."""

    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class SchemaMigration(Base):
    """Applied migration step. Rows are never updated or deleted."""

    __tablename__ = "schema_migrations"

    version: Mapped[int] = mapped_column(Integer, primary_key=True)
    applied_at: Mapped[int] = mapped_column(Integer, nullable=False)
