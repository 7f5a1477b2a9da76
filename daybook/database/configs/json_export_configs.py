#!/usr/bin/env python3
"""
json_export_configs.py
----------------------

Configuration-driven JSON export for database entities.

Each bundle section (entries, ai_operations) is described by an
EntityExportConfig, so export_manager.py builds the bundle with a single
loop and the field lists live next to each other.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple, Type

from ..models import AIOperation, DiaryEntry


@dataclass
class EntityExportConfig:
    """
    Configuration for exporting an entity type to JSON.

    Attributes:
        json_key: Key name in the bundle (e.g., "entries")
        model: SQLAlchemy model class to query
        order_by: Column names giving a stable export order
        serializer: Function that takes an entity instance and returns a dict
    """
    json_key: str
    model: Type
    order_by: Tuple[str, ...]
    serializer: Callable[[Any], Dict[str, Any]]


# ========================================
# Field lists
# ========================================

ENTRY_FIELDS: Tuple[str, ...] = (
    "id",
    "entry_date",
    "content_json",
    "mood",
    "mood_emoji",
    "created_at",
    "updated_at",
)

AI_OPERATION_FIELDS: Tuple[str, ...] = (
    "id",
    "entry_id",
    "op_type",
    "original_text",
    "result_text",
    "provider",
    "model",
    "created_at",
)


# ========================================
# Serializer Functions
# ========================================

def serialize_entry(entry: DiaryEntry) -> Dict[str, Any]:
    """Serialize DiaryEntry entity."""
    return {field: getattr(entry, field) for field in ENTRY_FIELDS}


def serialize_ai_operation(operation: AIOperation) -> Dict[str, Any]:
    """Serialize AIOperation entity."""
    return {field: getattr(operation, field) for field in AI_OPERATION_FIELDS}


# ========================================
# Export Configurations
# ========================================

EXPORT_CONFIGS: List[EntityExportConfig] = [
    EntityExportConfig("entries", DiaryEntry, ("entry_date",), serialize_entry),
    EntityExportConfig(
        "ai_operations", AIOperation, ("created_at", "id"), serialize_ai_operation
    ),
]
