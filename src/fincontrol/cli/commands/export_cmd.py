"""CSV export command."""

import click
from fincontrol.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.registry_resolution import resolve_entry_or_exit
from fincontrol.domain.csv_export import CSVExportService
from fincontrol.domain.entities import RegistryKind, TransactionFilter, TransactionStatus
from fincontrol.domain.errors import DomainError
from fincontrol.domain.registry import RegistryService


@click.command("export")
@click.argument("csv_file", type=click.Path(dir_okay=False, writable=True))
@period_options
@click.option("--bank", help="Bank name or ID")
@click.option("--wallet", help="Wallet name or ID")
@click.option(
    "--status",
    type=click.Choice(["paid", "pending"], case_sensitive=False),
    help="Only paid or only pending entries",
)
@click.pass_context
def export_csv(
    ctx,
    csv_file: str,
    start_date: str | None,
    end_date: str | None,
    bank: str | None,
    wallet: str | None,
    status: str | None,
    **period_kwargs,
):
    """Export transactions to a semicolon separated CSV file.

    Dates are written as DD/MM/YYYY and values as 1.234,56, with a running
    balance column. The file opens directly in spreadsheet applications.
    """
    store = ctx.obj["store"]
    registry_service = RegistryService(store)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(period_kwargs),
    )
    filter = TransactionFilter(
        start_date=start,
        end_date=end,
        bank_id=resolve_entry_or_exit(ctx, registry_service, RegistryKind.BANKS, bank) or None,
        wallet_id=resolve_entry_or_exit(ctx, registry_service, RegistryKind.WALLETS, wallet) or None,
        status=TransactionStatus(status.upper()) if status else None,
    )

    try:
        count = CSVExportService(store).export_csv(csv_file, filter)
    except DomainError as e:
        handle_domain_error(ctx, e)
    except OSError as e:
        click.echo(f"Error: Could not write {csv_file}: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Exported {count} transaction(s) to {csv_file}")


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export_csv)
