"""
Export & Import Commands
------------------------

Bundle transfer commands.

Commands:
    - export: Write all entries and AI operations to a JSON bundle
    - import: Merge a JSON bundle into the database
"""
import click

from daybook.core.exceptions import (
    DatabaseError,
    ExportError,
    FileAccessError,
    SerializationError,
)
from daybook.core.logging_manager import handle_cli_error
from daybook.database.export_manager import ImportOptions
from . import get_db


@click.command("export")
@click.argument("output_file", type=click.Path(dir_okay=False))
@click.pass_context
def export(ctx, output_file):
    """Export the complete database to a JSON bundle."""
    try:
        db = get_db(ctx)
        click.echo(f"📤 Exporting to JSON: {output_file}")
        exported = db.export_to_json(output_file)
        click.echo(f"✅ Export complete: {exported}")

    except (ExportError, DatabaseError, FileAccessError) as e:
        handle_cli_error(
            ctx,
            e,
            "export",
            additional_context={"output_file": output_file},
        )


@click.command("import")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--overwrite", is_flag=True, help="Replace local entries with the same date")
@click.option(
    "--skip-ai-operations",
    is_flag=True,
    help="Do not import AI operation records",
)
@click.pass_context
def import_bundle(ctx, input_file, overwrite, skip_ai_operations):
    """Import a JSON bundle, matching entries by date."""
    try:
        db = get_db(ctx)
        options = ImportOptions(
            overwrite=overwrite,
            include_ai_operations=not skip_ai_operations,
        )
        click.echo(f"📥 Importing from JSON: {input_file}")
        count = db.import_from_json(input_file, options)
        click.echo(f"✅ Imported {count} entries")

    except (SerializationError, FileAccessError, DatabaseError) as e:
        handle_cli_error(
            ctx,
            e,
            "import",
            additional_context={"input_file": input_file},
        )
