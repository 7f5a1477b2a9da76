#!/usr/bin/env python3
"""
logging_manager.py
--------------------
File logging for the Daybook store and its maintenance CLI.

Each DaybookLogger owns two rotating files in its log directory:

    <component>.log   every operation, debug trace and warning
    errors.log        exceptions with context and traceback

Warnings and above are echoed to the console. Store code never checks
whether logging is configured; it goes through safe_logger(), which
hands back a NullLogger when no log directory was given.

Message layout (component log):
    OPERATION - upsert_entry_completed: {"entry_date": "2026-01-15", ...}
    WARNING - Skipping entry record: {"index": 3, "error": "..."}
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

# --- Third party imports ---
import click

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ERROR_LOG_NAME = "errors.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5


def _render(tag: str, message: str, details: Optional[Dict[str, Any]]) -> str:
    if not details:
        return f"{tag} - {message}"
    return f"{tag} - {message}: {json.dumps(details, default=str)}"


def format_cli_error(error: Exception, with_traceback: bool = False) -> str:
    """One-line CLI rendering of an exception, optionally followed by its traceback."""
    message = f"❌ {type(error).__name__}: {error}"
    if with_traceback:
        return f"{message}\n\n{traceback.format_exc()}"
    return message


class DaybookLogger:
    """
    Rotating file logger for one store component.

    Attributes:
        log_dir: Directory holding the log files
        component_name: Component label, also the component log's file name
        main_logger: Operations, debug and warnings
        error_logger: Exceptions only
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "daybook",
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = DEFAULT_BACKUP_COUNT,
    ) -> None:
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.max_bytes = max_bytes
        self.backup_count = backup_count

        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = self._fresh_logger(f"daybook.{component_name}", logging.DEBUG)
        self.main_logger.addHandler(
            self._rotating_handler(self.log_dir / f"{component_name}.log", logging.DEBUG)
        )
        console = logging.StreamHandler()
        console.setLevel(logging.WARNING)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        self.main_logger.addHandler(console)

        # Tracebacks stay out of the console and the component log
        self.error_logger = self._fresh_logger(
            f"daybook.{component_name}.errors", logging.ERROR
        )
        self.error_logger.propagate = False
        self.error_logger.addHandler(
            self._rotating_handler(self.log_dir / ERROR_LOG_NAME, logging.ERROR)
        )

    @staticmethod
    def _fresh_logger(name: str, level: int) -> logging.Logger:
        # Reopening a store in the same process must not stack handlers
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        return logger

    def _rotating_handler(self, path: Path, level: int) -> RotatingFileHandler:
        handler = RotatingFileHandler(
            path,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        return handler

    def close(self) -> None:
        """Flush and detach all handlers so the log files are released."""
        for logger in (self.main_logger, self.error_logger):
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    # ---- Component log ----
    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Record a completed store operation (always written, even when details are empty)."""
        self.main_logger.info(f"OPERATION - {operation}: {json.dumps(details or {}, default=str)}")

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.main_logger.debug(_render("DEBUG", message, details))

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.main_logger.info(_render("INFO", message, details))

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.main_logger.warning(_render("WARNING", message, details))

    # ---- Error log ----
    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Write an exception, its context and the active traceback to errors.log.

        Args:
            error: Exception that occurred
            context: Where it happened (operation, entry_date, session_id, ...)
        """
        self.error_logger.error(f"ERROR - {type(error).__name__}: {error}")
        if context:
            pairs = ", ".join(f"{key}={value}" for key, value in context.items())
            self.error_logger.error(f"Context: {pairs}")
        self.error_logger.error(f"Traceback:\n{traceback.format_exc()}")

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        """
        Log a command failure and return the text to show the user.

        Examples:
            >>> logger.log_cli_error(EntryNotFoundError("No entry for 2026-01-15"))
            '❌ EntryNotFoundError: No entry for 2026-01-15'
        """
        self.log_error(error, context or {"source": "cli"})
        return format_cli_error(error, show_traceback)


class NullLogger:
    """Stand-in with DaybookLogger's interface that discards everything."""

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        return format_cli_error(error, show_traceback)


_null_logger = NullLogger()


def safe_logger(logger: Optional[DaybookLogger]) -> DaybookLogger:
    """
    Return logger, or a shared NullLogger when it is None.

        safe_logger(self.logger).log_warning("Skipping entry record", {"index": 3})
    """
    return logger if logger is not None else _null_logger  # type: ignore[return-value]


def handle_cli_error(
    ctx: "click.Context",
    error: Exception,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
) -> None:
    """
    Report a failed daybook command and exit.

    The full error goes to errors.log through the logger stored in
    ctx.obj (if any); stderr gets the one-line form, plus the traceback
    under --verbose. Never returns.

    Args:
        ctx: Click context whose obj carries 'logger' and 'verbose'
        error: Exception that ended the command
        operation: Command name, e.g. 'import' or 'reindex'
        additional_context: Extra fields for the log (date, month, file path)
        exit_code: Process exit status
    """
    context: Dict[str, Any] = {"operation": operation, **(additional_context or {})}
    message = safe_logger(ctx.obj.get("logger")).log_cli_error(
        error, context, show_traceback=ctx.obj.get("verbose", False)
    )
    click.echo(message, err=True)
    sys.exit(exit_code)
