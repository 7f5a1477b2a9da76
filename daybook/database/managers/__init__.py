#!/usr/bin/env python3
"""
managers package
--------------------
Entity managers for the Daybook database.

Each manager wraps one table family, works inside a caller-provided
session and never commits.

Available Managers:
    BaseManager: Abstract base class with common utilities
    EntryManager: Diary entries plus search index synchronization
    AIOperationManager: Append-only AI operation audit trail
    SettingsManager: Key/value application settings

Usage:
    from daybook.database.managers import EntryManager

    entry_mgr = EntryManager(session, logger)
"""
from .base_manager import BaseManager
from .entry_manager import EntryManager
from .ai_operation_manager import AIOperationManager
from .settings_manager import SettingsManager

__all__ = [
    "BaseManager",
    "EntryManager",
    "AIOperationManager",
    "SettingsManager",
]
