"""
Setup & Maintenance Commands
----------------------------

Database initialization and upkeep commands.

Commands:
    - init: Create or migrate the database
    - status: Show schema version, pending migrations and index health
    - reindex: Rebuild the full-text search index
"""
from datetime import datetime, timezone

import click

from daybook.core.exceptions import DatabaseError, FileAccessError
from daybook.core.logging_manager import handle_cli_error
from . import get_db


def _format_ms(timestamp: int) -> str:
    moment = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S UTC")


@click.command()
@click.pass_context
def init(ctx):
    """Create the database (if needed) and apply migrations."""
    try:
        click.echo("🚀 Initializing Daybook database...")
        db = get_db(ctx)
        click.echo(f"🗄️  Database: {db.db_path}")
        click.echo(f"✅ Schema version {db.schema_version()}")

    except (DatabaseError, FileAccessError) as e:
        handle_cli_error(ctx, e, "init")


@click.command()
@click.pass_context
def status(ctx):
    """Show migration status, entry count and index consistency."""
    try:
        db = get_db(ctx)
        migration = db.migration_status()

        click.echo("\n📊 Database Status")
        click.echo("=" * 50)
        click.echo(f"Database: {db.db_path}")
        click.echo(
            f"Schema version: {migration['current_version']}"
            f" (latest {migration['latest_version']})"
        )

        if migration["pending"]:
            pending = ", ".join(str(v) for v in migration["pending"])
            click.echo(f"⚠️  Pending migrations: {pending}")

        click.echo("\nApplied migrations:")
        for version, applied_at in migration["history"]:
            click.echo(f"  • {version}: {_format_ms(applied_at)}")

        click.echo(f"\nEntries: {db.count_entries()}")

        report = db.check_index_consistency()
        problems = {name: ids for name, ids in report.items() if ids}
        if problems:
            click.echo("\n⚠️  Search index out of sync:")
            for name, ids in problems.items():
                click.echo(f"  • {name}: {len(ids)}")
            click.echo("💡 Run 'daybook reindex' to rebuild it")
        else:
            click.echo("✅ Search index in sync")

    except (DatabaseError, FileAccessError) as e:
        handle_cli_error(ctx, e, "status")


@click.command()
@click.pass_context
def reindex(ctx):
    """Rebuild the full-text search index from entries."""
    try:
        db = get_db(ctx)
        click.echo("🔄 Rebuilding search index...")
        count = db.rebuild_search_index()
        click.echo(f"✅ Indexed {count} entries")

    except (DatabaseError, FileAccessError) as e:
        handle_cli_error(ctx, e, "reindex")
