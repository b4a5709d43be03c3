"""CSV import command."""

import click
from fincontrol.domain.csv_import import CSVImportService


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_csv(ctx, csv_file: str):
    """Import transactions from a CSV file.

    Columns are matched by header: date, description, doc_number,
    bank_name, category_name, cost_center_name, participant_name,
    wallet_name, value, type, status (Portuguese headers and the headers
    written by 'fincontrol export' work too). Unknown bank, category, cost
    center, participant and wallet names are created.
    """
    store = ctx.obj["store"]
    service = CSVImportService(store)

    try:
        result = service.import_csv(csv_file_path=csv_file)
        click.echo("\nImport complete:")
        click.echo(f"  Imported: {result['imported']} transactions")
        if result["errors"]:
            click.echo(f"  Errors: {len(result['errors'])}")
            for error in result["errors"]:
                click.echo(f"    {error}", err=True)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
