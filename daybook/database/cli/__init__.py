#!/usr/bin/env python3
"""
Daybook Database Management CLI
-------------------------------

Command-line interface for inspecting and maintaining the journal store.

This module provides the main CLI group and shared context setup
for all database commands.

Command Structure:
    - Setup & Maintenance (init, status, reindex)
    - Query & Browse (show, list, search, stats, delete)
    - Export & Import (export, import)

Usage:
    # Get general help
    daybook --help

    # Use a specific database file
    daybook --db-path ~/journal/daybook.db status
"""
from pathlib import Path

import click

from daybook.core.paths import DB_PATH_ENV, LOG_DIR_ENV, resolve_db_path
from daybook.database import DaybookDB


@click.group()
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False),
    envvar=DB_PATH_ENV,
    default=None,
    help="Path to database file (default: legacy file if present, else app data dir)",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False),
    envvar=LOG_DIR_ENV,
    default=None,
    help="Path to log directory (logging disabled if omitted)",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, db_path, log_dir, verbose):
    """Daybook Database Management CLI"""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path) if db_path else None
    ctx.obj["log_dir"] = Path(log_dir) if log_dir else None
    ctx.obj["verbose"] = verbose


def get_db(ctx) -> DaybookDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        db_path = ctx.obj.get("db_path") or resolve_db_path()
        db = DaybookDB(db_path=db_path, log_dir=ctx.obj.get("log_dir"))
        ctx.obj["db"] = db
        ctx.obj["logger"] = db.logger
        ctx.call_on_close(db.close)
    return ctx.obj["db"]


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init, status, reindex  # noqa: E402
from .query import show, list_entries, search, stats, delete  # noqa: E402
from .export import export, import_bundle  # noqa: E402

cli.add_command(init)
cli.add_command(status)
cli.add_command(reindex)
cli.add_command(show)
cli.add_command(list_entries)
cli.add_command(search)
cli.add_command(stats)
cli.add_command(delete)
cli.add_command(export)
cli.add_command(import_bundle)


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
