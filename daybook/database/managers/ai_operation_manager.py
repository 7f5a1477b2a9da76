#!/usr/bin/env python3
"""
ai_operation_manager.py
-----------------------
Manager for the AI operation audit trail.

Audit records are append-only: they are inserted, listed, and removed
only in bulk together with their owning entry. There is no update path.
"""
from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from daybook.core.exceptions import EntryNotFoundError
from daybook.core.validators import DataValidator
from daybook.database.decorators import handle_db_errors, log_database_operation
from daybook.database.models import AIOperation, DiaryEntry, utc_now_ms
from .base_manager import BaseManager


class AIOperationManager(BaseManager):
    """Insert-only access to AIOperation records."""

    @handle_db_errors
    @log_database_operation("record_ai_operation")
    def record(
        self,
        entry_id: str,
        op_type: str,
        original_text: str,
        result_text: str,
        provider: str,
        model: str,
    ) -> AIOperation:
        """
        Append an audit record for an existing entry.

        Args:
            entry_id: Owning entry id
            op_type: Operation kind (polish, expand, fix_grammar, ...)
            original_text: Text sent to the provider
            result_text: Text returned by the provider
            provider: Provider name
            model: Model name

        Returns:
            The new record

        Raises:
            EntryNotFoundError: If no entry has entry_id
            ValidationError: If op_type, provider or model is empty
        """
        DataValidator.validate_required_fields(
            {"op_type": op_type, "provider": provider, "model": model},
            ["op_type", "provider", "model"],
        )
        if self.session.get(DiaryEntry, entry_id) is None:
            raise EntryNotFoundError(f"No entry with id: {entry_id}")

        operation = AIOperation(
            id=str(uuid.uuid4()),
            entry_id=entry_id,
            op_type=op_type,
            original_text=original_text or "",
            result_text=result_text or "",
            provider=provider,
            model=model,
            created_at=utc_now_ms(),
        )
        self.session.add(operation)
        self.session.flush()
        return operation

    @handle_db_errors
    def get(self, operation_id: str) -> Optional[AIOperation]:
        return self.session.get(AIOperation, operation_id)

    @handle_db_errors
    def exists(self, operation_id: str) -> bool:
        return self.get(operation_id) is not None

    @handle_db_errors
    @log_database_operation("list_ai_operations")
    def list_for_entry(self, entry_id: str) -> List[AIOperation]:
        """Audit records of an entry, newest first."""
        return (
            self.session.query(AIOperation)
            .filter(AIOperation.entry_id == entry_id)
            .order_by(AIOperation.created_at.desc(), AIOperation.id)
            .all()
        )

    @handle_db_errors
    @log_database_operation("delete_ai_operations")
    def delete_for_entry(self, entry_id: str) -> int:
        """
        Remove all audit records of an entry.

        Returns:
            Number of records removed
        """
        return (
            self.session.query(AIOperation)
            .filter(AIOperation.entry_id == entry_id)
            .delete(synchronize_session=False)
        )

    def create_from_record(self, record: Dict[str, Any]) -> AIOperation:
        """Insert an exported record verbatim, keeping its id and timestamp."""
        operation = AIOperation(**record)
        self.session.add(operation)
        self.session.flush()
        return operation
