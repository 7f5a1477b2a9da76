"""
Query & Browse Commands
------------------------

Database browsing and query commands.

Commands:
    - show: Display a single entry
    - list: List entries of a month
    - search: Full-text search
    - stats: Writing statistics
    - delete: Delete an entry and its AI operations
"""
import sys

import click

from daybook.core.exceptions import DatabaseError, FileAccessError, ValidationError
from daybook.core.logging_manager import handle_cli_error
from daybook.database.models import Mood
from . import get_db

SNIPPET_LENGTH = 60


def _mood_label(entry) -> str:
    if not entry.mood:
        return ""
    return f" {entry.mood_emoji or ''} {entry.mood}".rstrip()


def _snippet(text: str) -> str:
    flat = " ".join(text.split())
    if len(flat) <= SNIPPET_LENGTH:
        return flat
    return flat[: SNIPPET_LENGTH - 1] + "…"


@click.command("show")
@click.argument("entry_date")
@click.option("--ai", "show_ai", is_flag=True, help="Also list AI operations")
@click.pass_context
def show(ctx, entry_date, show_ai):
    """Display a single entry."""
    try:
        db = get_db(ctx)
        entry = db.get_entry(entry_date)
        if entry is None:
            click.echo(f"❌ No entry found for {entry_date}", err=True)
            sys.exit(1)

        click.echo(f"\n📅 {entry.entry_date}{_mood_label(entry)}")
        click.echo(f"🆔 {entry.id}")
        click.echo(f"\n{entry.content_json}")

        if show_ai:
            operations = db.list_ai_operations(entry.id)
            click.echo(f"\n🤖 AI operations ({len(operations)}):")
            for op in operations:
                click.echo(f"  • {op.op_type} via {op.provider}/{op.model}")

    except (DatabaseError, ValidationError, FileAccessError) as e:
        handle_cli_error(ctx, e, "show", additional_context={"entry_date": entry_date})


@click.command("list")
@click.argument("month")
@click.option(
    "--mood",
    type=click.Choice(Mood.choices()),
    default=None,
    help="Only entries with this mood",
)
@click.pass_context
def list_entries(ctx, month, mood):
    """List entries of a month (YYYY-MM), newest first."""
    try:
        db = get_db(ctx)
        if mood:
            entries = db.list_entries_by_mood(month, mood)
        else:
            entries = db.list_entries(month)

        if not entries:
            click.echo(f"No entries for {month}")
            return

        click.echo(f"\n📅 {month} ({len(entries)} entries):\n")
        for entry in entries:
            click.echo(f"  {entry.entry_date}{_mood_label(entry)}")

    except (DatabaseError, ValidationError, FileAccessError) as e:
        handle_cli_error(ctx, e, "list", additional_context={"month": month})


@click.command("search")
@click.argument("query")
@click.option("--limit", type=int, default=None, help="Maximum number of results")
@click.pass_context
def search(ctx, query, limit):
    """Full-text search over entries, best match first."""
    try:
        db = get_db(ctx)
        results = db.search_entries(query, limit=limit)

        if not results:
            click.echo("No matching entries")
            return

        click.echo(f"\n🔍 {len(results)} result(s) for '{query}':\n")
        for entry in results:
            click.echo(f"  {entry.entry_date}  {_snippet(entry.content_json)}")

    except (DatabaseError, FileAccessError) as e:
        handle_cli_error(ctx, e, "search", additional_context={"query": query})


@click.command("stats")
@click.option("--today", default=None, help="Reference date (YYYY-MM-DD)")
@click.pass_context
def stats(ctx, today):
    """Display writing statistics."""
    try:
        db = get_db(ctx)
        result = db.writing_stats(today)

        click.echo("\n📊 Writing Statistics")
        click.echo("=" * 50)
        click.echo(f"Total entries:  {result.total_entries}")
        click.echo(f"Current streak: {result.current_streak} day(s)")
        click.echo(f"Longest streak: {result.longest_streak} day(s)")

    except (DatabaseError, ValidationError, FileAccessError) as e:
        handle_cli_error(ctx, e, "stats")


@click.command("delete")
@click.argument("entry_date")
@click.confirmation_option(prompt="⚠️  This will delete the entry and its AI history. Continue?")
@click.pass_context
def delete(ctx, entry_date):
    """Delete an entry together with its AI operations."""
    try:
        db = get_db(ctx)
        if db.delete_entry(entry_date):
            click.echo(f"🗑️  Deleted entry {entry_date}")
        else:
            click.echo(f"❌ No entry found for {entry_date}", err=True)
            sys.exit(1)

    except (DatabaseError, ValidationError, FileAccessError) as e:
        handle_cli_error(ctx, e, "delete", additional_context={"entry_date": entry_date})
