"""Cash-flow report command."""

import click
from fincontrol.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.registry_resolution import resolve_entry_or_exit
from fincontrol.domain.cash_flow import Granularity, build_cash_flow
from fincontrol.domain.entities import RegistryKind
from fincontrol.domain.errors import DomainError
from fincontrol.domain.registry import RegistryService
from fincontrol.utils.amount_parser import format_amount
from fincontrol.utils.date_parser import format_date


@click.command("cashflow")
@period_options
@click.option(
    "--granularity",
    type=click.Choice(["monthly", "daily"], case_sensitive=False),
    default="monthly",
    show_default=True,
)
@click.option("--bank", "banks", multiple=True, help="Bank name or ID (repeatable; default all)")
@click.option("--details", is_flag=True, help="List the transactions of each period")
@click.pass_context
def cashflow(
    ctx,
    start_date: str | None,
    end_date: str | None,
    granularity: str,
    banks: tuple[str, ...],
    details: bool,
    **period_kwargs,
):
    """Show opening, income, expense and closing balance per period.

    The first opening balance is the paid balance accumulated before the
    start date. Pending entries inside the range count as projected.
    """
    store = ctx.obj["store"]
    registry_service = RegistryService(store)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(period_kwargs),
    )
    bank_ids = None
    if banks:
        bank_ids = [
            resolve_entry_or_exit(ctx, registry_service, RegistryKind.BANKS, bank)
            for bank in banks
        ]

    try:
        rows = build_cash_flow(
            store.list_transactions(),
            start_date=start,
            end_date=end,
            granularity=Granularity(granularity.upper()),
            bank_ids=bank_ids,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not rows:
        click.echo("No transactions found.")
        return

    click.echo("-" * 90)
    click.echo(
        f"{'Period':<12} {'Opening':>15} {'Income':>15} {'Expense':>15} "
        f"{'Result':>15} {'Closing':>15}"
    )
    click.echo("-" * 90)
    for row in rows:
        click.echo(
            f"{row.period:<12} {format_amount(row.opening):>15} {format_amount(row.income):>15} "
            f"{format_amount(row.expense):>15} {format_amount(row.operational):>15} "
            f"{format_amount(row.closing):>15}"
        )
        if details:
            for txn in row.transactions:
                marker = "" if txn.is_paid else " (pending)"
                click.echo(
                    f"    {format_date(txn.date)}  {format_amount(txn.signed_value):>12}  "
                    f"{txn.description}{marker}"
                )
    click.echo("-" * 90)


def register_commands(cli):
    """Register cashflow command with main CLI."""
    cli.add_command(cashflow)
