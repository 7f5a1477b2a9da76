#!/usr/bin/env python3
"""
export_manager.py
-----------------
Bundle export and import for the Daybook database.

A bundle is a single JSON document holding every entry and every AI
operation record, with timestamps as epoch milliseconds:

    {
        "version": "1.0",
        "exported_at": 1767225600000,
        "entries": [...],          # ascending by entry_date
        "ai_operations": [...]     # ascending by created_at
    }

Import Rules:
    1. **Entries** are matched on entry_date, never on id.
       - No local entry: the bundle entry is inserted verbatim
       - Local entry and overwrite=True: content, mood and updated_at
         are replaced; id and created_at stay local
       - Local entry and overwrite=False: skipped
    2. **AI operations** are matched on id and only ever inserted.
       Existing records are left untouched.
    3. **Per-record isolation**: each record is applied inside its own
       SAVEPOINT. A malformed or conflicting record is rolled back,
       logged and skipped; the rest of the bundle still applies.

The returned count covers entries that were inserted or overwritten.

Usage:
    exporter = ExportManager(logger=db.logger)

    with db.session_scope() as session:
        bundle = exporter.export_all(session)
        exporter.export_to_json(session, Path("backup.json"))

    with db.session_scope() as session:
        count = exporter.import_from_json(
            session, Path("backup.json"), ImportOptions(overwrite=True)
        )

See Also:
    - configs/json_export_configs.py: field lists and serializers
    - managers/entry_manager.py: verbatim writes with index sync
"""
import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import asc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from daybook.core.exceptions import (
    DatabaseError,
    ExportError,
    FileAccessError,
    SerializationError,
    ValidationError,
)
from daybook.core.logging_manager import DaybookLogger, safe_logger
from daybook.core.validators import DataValidator

from .configs.json_export_configs import (
    AI_OPERATION_FIELDS,
    EXPORT_CONFIGS,
)
from .decorators import handle_db_errors, log_database_operation
from .managers import AIOperationManager, EntryManager
from .models import utc_now_ms

BUNDLE_VERSION = "1.0"


@dataclass
class ImportOptions:
    """
    Import behavior switches.

    Attributes:
        overwrite: Replace local entries that share a date with the bundle
        include_ai_operations: Import AI operation records
    """

    overwrite: bool = False
    include_ai_operations: bool = True


# ----- Record normalization -----

def _require_text(record: Dict[str, Any], field: str) -> str:
    value = record.get(field)
    if not isinstance(value, str) or not value:
        raise ValidationError(f"Field '{field}' must be a non-empty string")
    return value


def _require_timestamp(record: Dict[str, Any], field: str) -> int:
    value = DataValidator.normalize_int(record.get(field))
    if value is None:
        raise ValidationError(f"Field '{field}' must be an integer timestamp")
    return value


def _optional_text(record: Dict[str, Any], field: str) -> Optional[str]:
    value = record.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Field '{field}' must be a string")
    return value


def normalize_entry_record(record: Any) -> Dict[str, Any]:
    """
    Validate a bundle entry and return the fields to store.

    content_json may be given as a string or as an already-decoded JSON
    value; the latter is re-encoded.

    Raises:
        ValidationError: If the record is not usable
    """
    if not isinstance(record, dict):
        raise ValidationError("Entry record must be an object")

    content = record.get("content_json")
    if content is None:
        raise ValidationError("Field 'content_json' missing")
    if not isinstance(content, str):
        content = json.dumps(content, ensure_ascii=False)

    return {
        "id": _require_text(record, "id"),
        "entry_date": DataValidator.normalize_date(record.get("entry_date")),
        "content_json": content,
        "mood": _optional_text(record, "mood"),
        "mood_emoji": _optional_text(record, "mood_emoji"),
        "created_at": _require_timestamp(record, "created_at"),
        "updated_at": _require_timestamp(record, "updated_at"),
    }


def normalize_ai_operation_record(record: Any) -> Dict[str, Any]:
    """
    Validate a bundle AI operation and return the fields to store.

    Raises:
        ValidationError: If the record is not usable
    """
    if not isinstance(record, dict):
        raise ValidationError("AI operation record must be an object")

    normalized: Dict[str, Any] = {}
    for field in AI_OPERATION_FIELDS:
        if field == "created_at":
            normalized[field] = _require_timestamp(record, field)
        elif field in ("original_text", "result_text"):
            value = _optional_text(record, field)
            if value is None:
                raise ValidationError(f"Field '{field}' missing")
            normalized[field] = value
        else:
            normalized[field] = _require_text(record, field)
    return normalized


def validate_bundle(bundle: Any) -> Dict[str, Any]:
    """
    Check a decoded bundle's envelope.

    Raises:
        SerializationError: If bundle is not an object with an 'entries'
            list (and, when present, an 'ai_operations' list)
    """
    if not isinstance(bundle, dict):
        raise SerializationError("Bundle must be a JSON object")
    if not isinstance(bundle.get("entries"), list):
        raise SerializationError("Bundle is missing an 'entries' list")
    if not isinstance(bundle.get("ai_operations", []), list):
        raise SerializationError("Bundle field 'ai_operations' must be a list")
    return bundle


class ExportManager:
    """
    Handles bundle export and import operations.
    """

    def __init__(self, logger: Optional[DaybookLogger] = None) -> None:
        """
        Initialize export manager.

        Args:
            logger: Optional logger for export operations
        """
        self.logger = logger

    # ---- Export ----
    @handle_db_errors
    @log_database_operation("export_all")
    def export_all(self, session: Session) -> Dict[str, Any]:
        """
        Build a complete, order-stable snapshot of the database.

        Args:
            session: SQLAlchemy session

        Returns:
            Bundle dictionary
        """
        bundle: Dict[str, Any] = {
            "version": BUNDLE_VERSION,
            "exported_at": utc_now_ms(),
        }
        for config in EXPORT_CONFIGS:
            ordering = [asc(getattr(config.model, column)) for column in config.order_by]
            rows = session.query(config.model).order_by(*ordering).all()
            bundle[config.json_key] = [config.serializer(row) for row in rows]

        safe_logger(self.logger).log_info(
            "Bundle built",
            {key: len(bundle[key]) for key in ("entries", "ai_operations")},
        )
        return bundle

    def export_to_json(self, session: Session, output_file: Union[str, Path]) -> Path:
        """
        Write a bundle to a JSON file.

        The document is staged in a temporary file next to the target and
        moved into place once complete.

        Args:
            session: SQLAlchemy session
            output_file: Destination path

        Returns:
            Path to the written file

        Raises:
            ExportError: If the file cannot be written
        """
        output_file = Path(output_file).expanduser()
        bundle = self.export_all(session)

        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                dir=output_file.parent, prefix=".daybook-export-", suffix=".json"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(bundle, f, ensure_ascii=False, indent=2)
                os.replace(temp_name, output_file)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            safe_logger(self.logger).log_error(
                e, {"operation": "export_to_json", "output_file": str(output_file)}
            )
            raise ExportError(f"Failed to write export file {output_file}: {e}")

        safe_logger(self.logger).log_operation(
            "export_to_json",
            {
                "output_file": str(output_file),
                "entries": len(bundle["entries"]),
                "ai_operations": len(bundle["ai_operations"]),
            },
        )
        return output_file

    # ---- Import ----
    @staticmethod
    def load_bundle(text: str) -> Dict[str, Any]:
        """
        Decode and shape-check a bundle document.

        Only the envelope is checked here; individual records are
        validated during import.

        Raises:
            SerializationError: If text is not JSON or fails validate_bundle
        """
        try:
            bundle = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise SerializationError(f"Bundle is not valid JSON: {e}")
        return validate_bundle(bundle)

    def _import_entry(
        self, entries: EntryManager, record: Any, options: ImportOptions
    ) -> bool:
        """Apply one entry record. Returns True if it was inserted or overwritten."""
        normalized = normalize_entry_record(record)
        existing = entries.get(normalized["entry_date"])

        if existing is None:
            entries.create_from_record(normalized)
            return True
        if options.overwrite:
            entries.overwrite_from_record(existing, normalized)
            return True
        return False

    def _import_ai_operation(self, operations: AIOperationManager, record: Any) -> bool:
        """Apply one AI operation record. Returns True if it was inserted."""
        normalized = normalize_ai_operation_record(record)
        if operations.exists(normalized["id"]):
            return False
        operations.create_from_record(normalized)
        return True

    @handle_db_errors
    @log_database_operation("import_bundle")
    def import_bundle(
        self,
        session: Session,
        bundle: Dict[str, Any],
        options: Optional[ImportOptions] = None,
    ) -> int:
        """
        Merge a bundle into the database.

        Args:
            session: SQLAlchemy session (caller commits)
            bundle: Decoded bundle (see load_bundle)
            options: Import behavior, defaults to ImportOptions()

        Returns:
            Number of entries inserted or overwritten

        Raises:
            SerializationError: If bundle fails validate_bundle
        """
        validate_bundle(bundle)
        options = options or ImportOptions()
        log = safe_logger(self.logger)
        entries = EntryManager(session, self.logger)
        operations = AIOperationManager(session, self.logger)

        imported = 0
        skipped = 0
        failed = 0
        for index, record in enumerate(bundle["entries"]):
            try:
                with session.begin_nested():
                    applied = self._import_entry(entries, record, options)
            except (ValidationError, DatabaseError, SQLAlchemyError) as e:
                failed += 1
                log.log_warning(
                    "Skipping entry record", {"index": index, "error": str(e)}
                )
                continue
            if applied:
                imported += 1
            else:
                skipped += 1

        operations_imported = 0
        operations_failed = 0
        if options.include_ai_operations:
            records: List[Any] = bundle.get("ai_operations", [])
            for index, record in enumerate(records):
                try:
                    with session.begin_nested():
                        if self._import_ai_operation(operations, record):
                            operations_imported += 1
                except (ValidationError, DatabaseError, SQLAlchemyError) as e:
                    operations_failed += 1
                    log.log_warning(
                        "Skipping AI operation record", {"index": index, "error": str(e)}
                    )

        log.log_operation(
            "import_summary",
            {
                "entries_imported": imported,
                "entries_skipped": skipped,
                "entries_failed": failed,
                "ai_operations_imported": operations_imported,
                "ai_operations_failed": operations_failed,
                "overwrite": options.overwrite,
            },
        )
        return imported

    def import_from_json(
        self,
        session: Session,
        input_file: Union[str, Path],
        options: Optional[ImportOptions] = None,
    ) -> int:
        """
        Read a bundle file and merge it into the database.

        Raises:
            FileAccessError: If the file cannot be read
            SerializationError: If the file is not a bundle
        """
        input_file = Path(input_file).expanduser()
        try:
            text = input_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FileAccessError(f"Cannot read bundle {input_file}: {e}")

        return self.import_bundle(session, self.load_bundle(text), options)
