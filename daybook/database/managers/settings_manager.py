#!/usr/bin/env python3
"""
settings_manager.py
-------------------
Manager for the app_settings key/value table.

Values are opaque strings; the *_json helpers store small serialized
configuration blobs such as speech-synthesis preferences.
"""
from __future__ import annotations

import json
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from daybook.core.exceptions import SerializationError, ValidationError
from daybook.database.decorators import handle_db_errors, log_database_operation
from daybook.database.models import AppSetting, utc_now_ms
from .base_manager import BaseManager

# Well-known keys
TTS_SETTINGS_KEY = "tts_settings"
AI_SETTINGS_KEY = "ai_settings"


class SettingsManager(BaseManager):
    """Upsert/read access to AppSetting rows."""

    @handle_db_errors
    @log_database_operation("save_setting")
    def save(self, key: str, value: str) -> None:
        """
        Insert or replace a setting.

        Raises:
            ValidationError: If key is empty or value is None
        """
        if not key:
            raise ValidationError("Setting key must not be empty")
        if value is None:
            raise ValidationError(f"Setting value for {key!r} must not be None")

        now = utc_now_ms()
        stmt = sqlite_insert(AppSetting).values(key=key, value=value, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[AppSetting.key],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )
        self._execute_with_retry(lambda: self.session.execute(stmt))

    @handle_db_errors
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None."""
        return self.session.scalar(select(AppSetting.value).where(AppSetting.key == key))

    @handle_db_errors
    def delete(self, key: str) -> bool:
        """Remove a setting. Returns True if it existed."""
        removed = (
            self.session.query(AppSetting)
            .filter(AppSetting.key == key)
            .delete(synchronize_session=False)
        )
        return removed > 0

    def save_json(self, key: str, value: Any) -> None:
        """
        Serialize value to JSON and save it.

        Raises:
            SerializationError: If value is not JSON-serializable
        """
        try:
            encoded = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Setting {key!r} is not JSON-serializable: {e}")
        self.save(key, encoded)

    def get_json(self, key: str) -> Optional[Any]:
        """
        Load and decode a JSON setting.

        Raises:
            SerializationError: If the stored value is not valid JSON
        """
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Setting {key!r} is not valid JSON: {e}")
