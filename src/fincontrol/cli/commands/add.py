"""Add transaction command."""

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.registry_resolution import resolve_entry_or_exit
from fincontrol.domain.entities import RegistryKind, TransactionStatus, TransactionType
from fincontrol.domain.errors import DomainError
from fincontrol.domain.recurrence import Frequency, RecurrenceRule
from fincontrol.domain.registry import RegistryService
from fincontrol.domain.transaction import BatchResult, TransactionService
from fincontrol.domain.transfer import TransferRequest
from fincontrol.utils.amount_parser import format_amount, parse_value
from fincontrol.utils.date_parser import format_date, parse_date


def echo_batch_result(result: BatchResult, noun: str = "transaction") -> None:
    """Print what a write saved, its warnings and any partial failure."""
    click.echo(f"Saved {len(result.saved)} {noun}(s)")
    for txn in result.saved:
        click.echo(
            f"  {txn.id}  {format_date(txn.date)}  {txn.type.value:<6}  "
            f"{format_amount(txn.value):>12}  {txn.status.value:<7}  {txn.description}"
        )
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)
    if result.error is not None:
        click.echo(f"Error: {result.error}", err=True)


@click.command("add")
@click.option(
    "--date",
    required=True,
    help="Transaction date (DD/MM/YYYY, YYYY-MM-DD or relative like 'today')",
)
@click.option("--value", required=True, help="Amount, e.g. 1234.56 or 1.234,56")
@click.option("--description", help="Description (optional for transfers)")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(["credit", "debit"], case_sensitive=False),
    default="debit",
    show_default=True,
    help="Entry direction (ignored for transfers)",
)
@click.option(
    "--status",
    type=click.Choice(["paid", "pending"], case_sensitive=False),
    default="paid",
    show_default=True,
)
@click.option("--bank", help="Bank name or ID (source bank for transfers)")
@click.option("--transfer-to", help="Destination bank name or ID; makes this a transfer")
@click.option("--wallet", help="Wallet name or ID")
@click.option("--category", help="Category name or ID")
@click.option("--cost-center", help="Cost center name or ID")
@click.option("--participant", help="Participant name or ID")
@click.option("--doc-number", default="", help="Document number")
@click.option("--repeat", type=int, help="Number of instances to generate")
@click.option("--until", help="Generate instances up to this date")
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in Frequency], case_sensitive=False),
    default=Frequency.MONTHLY.value,
    show_default=True,
    help="Recurrence frequency (with --repeat or --until)",
)
@click.pass_context
def add_transaction(
    ctx,
    date: str,
    value: str,
    description: str | None,
    txn_type: str,
    status: str,
    bank: str | None,
    transfer_to: str | None,
    wallet: str | None,
    category: str | None,
    cost_center: str | None,
    participant: str | None,
    doc_number: str,
    repeat: int | None,
    until: str | None,
    frequency: str,
):
    """Add a transaction, a transfer, or a recurring series.

    Every instance after the first in a series is created as pending.

    Examples:
        fincontrol add --date 15/01/2024 --value 50,00 --description "Groceries" --bank Itau
        fincontrol add --date today --value 1000 --type credit --description Salary --bank Itau
        fincontrol add --date 2024-01-31 --value 200 --bank Itau --transfer-to Nubank
        fincontrol add --date 2024-01-10 --value 99,90 --description Rent --bank Itau --repeat 12
    """
    store = ctx.obj["store"]
    transaction_service = TransactionService(store)
    registry_service = RegistryService(store)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_value = parse_value(value)
    except ValueError as e:
        click.echo(f"Error: Invalid value: {e}", err=True)
        ctx.exit(1)

    if repeat is not None and until is not None:
        click.echo("Error: Use either --repeat or --until, not both.", err=True)
        ctx.exit(1)

    recurrence = None
    try:
        if until is not None:
            recurrence = RecurrenceRule(Frequency(frequency.upper()), end_date=parse_date(until))
        elif repeat is not None and repeat > 1:
            recurrence = RecurrenceRule(Frequency(frequency.upper()), count=repeat)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)

    bank_id = resolve_entry_or_exit(ctx, registry_service, RegistryKind.BANKS, bank)
    references = dict(
        wallet_id=resolve_entry_or_exit(ctx, registry_service, RegistryKind.WALLETS, wallet),
        category_id=resolve_entry_or_exit(ctx, registry_service, RegistryKind.CATEGORIES, category),
        cost_center_id=resolve_entry_or_exit(
            ctx, registry_service, RegistryKind.COST_CENTERS, cost_center
        ),
        participant_id=resolve_entry_or_exit(
            ctx, registry_service, RegistryKind.PARTICIPANTS, participant
        ),
    )
    txn_status = TransactionStatus(status.upper())

    try:
        if transfer_to:
            request = TransferRequest(
                source_bank_id=bank_id,
                destination_bank_id=resolve_entry_or_exit(
                    ctx, registry_service, RegistryKind.BANKS, transfer_to
                ),
                value=txn_value,
                date=txn_date,
                status=txn_status,
                doc_number=doc_number,
                description=description,
                **references,
            )
            result = transaction_service.create_transfer(request, recurrence)
        else:
            result = transaction_service.create_transaction(
                date=txn_date,
                description=description or "",
                value=txn_value,
                type=TransactionType(txn_type.upper()),
                status=txn_status,
                doc_number=doc_number,
                bank_id=bank_id,
                recurrence=recurrence,
                **references,
            )
    except DomainError as e:
        handle_domain_error(ctx, e)

    echo_batch_result(result)
    if not result.ok:
        ctx.exit(1)


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
