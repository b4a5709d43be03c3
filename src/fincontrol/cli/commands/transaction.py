"""Transaction management commands."""

from decimal import Decimal

import click
from fincontrol.cli.commands.add import echo_batch_result
from fincontrol.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.registry_resolution import resolve_entry_or_exit
from fincontrol.domain.entities import (
    RegistryKind,
    TransactionFilter,
    TransactionStatus,
    TransactionType,
)
from fincontrol.domain.errors import DomainError
from fincontrol.domain.ledger_view import LedgerViewService
from fincontrol.domain.registry import RegistryService
from fincontrol.domain.transaction import TransactionService
from fincontrol.utils.amount_parser import format_amount, parse_value
from fincontrol.utils.date_parser import format_date, parse_date


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@period_options
@click.option("--bank", help="Bank name or ID")
@click.option("--wallet", help="Wallet name or ID")
@click.option(
    "--status",
    type=click.Choice(["paid", "pending"], case_sensitive=False),
    help="Only paid or only pending entries",
)
@click.option("--verbose", "-v", is_flag=True, help="Show every field of each transaction")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    bank: str | None,
    wallet: str | None,
    status: str | None,
    verbose: bool,
    **period_kwargs,
):
    """View transactions with a running balance.

    The balance column starts from the balance accumulated before the
    start date. Pending entries have no balance.
    """
    store = ctx.obj["store"]
    registry_service = RegistryService(store)
    view = LedgerViewService(store)

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
        snapshot = view.refresh(filter)
    except DomainError as e:
        handle_domain_error(ctx, e)

    transactions = snapshot.transactions
    if not transactions:
        click.echo("No transactions found.")
        return

    banks = registry_service.names(RegistryKind.BANKS)

    def balance_of(txn) -> str:
        if txn.id in snapshot.balance_map:
            return format_amount(snapshot.balance_map[txn.id])
        return "(pending)"

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    if start is not None:
        click.echo(f"Balance before {format_date(start)}: {format_amount(snapshot.seed)}")

    if verbose:
        categories = registry_service.names(RegistryKind.CATEGORIES)
        cost_centers = registry_service.names(RegistryKind.COST_CENTERS)
        participants = registry_service.names(RegistryKind.PARTICIPANTS)
        wallets = registry_service.names(RegistryKind.WALLETS)
        click.echo("=" * 100)
        for txn in transactions:
            click.echo(f"\nTransaction ID: {txn.id}")
            click.echo(f"  Date: {format_date(txn.date)}")
            click.echo(f"  Description: {txn.description}")
            click.echo(f"  Value: {format_amount(txn.value)} ({txn.type.value})")
            click.echo(f"  Status: {txn.status.value}")
            click.echo(f"  Balance: {balance_of(txn)}")
            click.echo(f"  Bank: {banks.get(txn.bank_id, '')}")
            click.echo(f"  Wallet: {wallets.get(txn.wallet_id, '')}")
            click.echo(f"  Category: {categories.get(txn.category_id, '')}")
            click.echo(f"  Cost center: {cost_centers.get(txn.cost_center_id, '')}")
            click.echo(f"  Participant: {participants.get(txn.participant_id, '')}")
            if txn.doc_number:
                click.echo(f"  Document: {txn.doc_number}")
            if txn.linked_id:
                click.echo(f"  Transfer: {txn.linked_id}")
            click.echo("-" * 100)
    else:
        click.echo("-" * 120)
        click.echo(
            f"{'ID':<36} {'Date':<10} {'Description':<28} {'Value':>12} "
            f"{'Status':<7} {'Bank':<12} {'Balance':>12}"
        )
        click.echo("-" * 120)
        for txn in transactions:
            value = format_amount(txn.signed_value)
            click.echo(
                f"{txn.id:<36} {format_date(txn.date):<10} {txn.description[:28]:<28} "
                f"{value:>12} {txn.status.value:<7} {banks.get(txn.bank_id, '')[:12]:<12} "
                f"{balance_of(txn):>12}"
            )

    income = sum((txn.value for txn in transactions if txn.type == TransactionType.CREDIT), Decimal("0"))
    expense = sum((txn.value for txn in transactions if txn.type == TransactionType.DEBIT), Decimal("0"))
    click.echo("-" * 120)
    click.echo(
        f"Income: {format_amount(income)} | Expense: {format_amount(expense)} | "
        f"Count: {len(transactions)}"
    )


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--date", help="Transaction date (DD/MM/YYYY, YYYY-MM-DD or relative)")
@click.option("--value", help="Amount, e.g. 1234.56 or 1.234,56")
@click.option("--description", help="Description")
@click.option("--type", "txn_type", type=click.Choice(["credit", "debit"], case_sensitive=False))
@click.option("--status", type=click.Choice(["paid", "pending"], case_sensitive=False))
@click.option("--bank", help="Bank name or ID")
@click.option("--wallet", help="Wallet name or ID, or empty string to clear")
@click.option("--category", help="Category name or ID, or empty string to clear")
@click.option("--cost-center", help="Cost center name or ID, or empty string to clear")
@click.option("--participant", help="Participant name or ID, or empty string to clear")
@click.option("--doc-number", help="Document number")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    date: str | None,
    value: str | None,
    description: str | None,
    txn_type: str | None,
    status: str | None,
    bank: str | None,
    wallet: str | None,
    category: str | None,
    cost_center: str | None,
    participant: str | None,
    doc_number: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Updating one leg of a
    transfer updates the other leg too.

    Examples:
        fincontrol transaction update <id> --value 75,00
        fincontrol transaction update <id> --status paid
        fincontrol transaction update <id> --category ""  # Clear category
    """
    store = ctx.obj["store"]
    transaction_service = TransactionService(store)
    registry_service = RegistryService(store)

    txn_date = None
    if date is not None:
        try:
            txn_date = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    txn_value = None
    if value is not None:
        try:
            txn_value = parse_value(value)
        except ValueError as e:
            click.echo(f"Error: Invalid value: {e}", err=True)
            ctx.exit(1)

    def reference(kind: RegistryKind, given: str | None) -> str | None:
        if given is None:
            return None
        return resolve_entry_or_exit(ctx, registry_service, kind, given)

    try:
        result = transaction_service.update_transaction(
            transaction_id,
            date=txn_date,
            description=description,
            value=txn_value,
            type=TransactionType(txn_type.upper()) if txn_type else None,
            status=TransactionStatus(status.upper()) if status else None,
            doc_number=doc_number,
            bank_id=reference(RegistryKind.BANKS, bank),
            wallet_id=reference(RegistryKind.WALLETS, wallet),
            category_id=reference(RegistryKind.CATEGORIES, category),
            cost_center_id=reference(RegistryKind.COST_CENTERS, cost_center),
            participant_id=reference(RegistryKind.PARTICIPANTS, participant),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    echo_batch_result(result)
    if not result.ok:
        ctx.exit(1)


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option(
    "--both/--single",
    default=True,
    show_default=True,
    help="For a transfer, also delete the other leg",
)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, both: bool, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        fincontrol transaction delete <id>
        fincontrol transaction delete <id> --single
    """
    store = ctx.obj["store"]
    transaction_service = TransactionService(store)

    txn = transaction_service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    prompt = f"Are you sure you want to delete transaction {transaction_id}?"
    if txn.is_transfer and both:
        prompt = f"Are you sure you want to delete transfer {txn.linked_id} (both legs)?"
    if not yes and not click.confirm(prompt):
        click.echo("Deletion cancelled.")
        return

    try:
        deleted = transaction_service.delete_transaction(transaction_id, cascade=both)
    except DomainError as e:
        handle_domain_error(ctx, e)

    for deleted_id in deleted:
        click.echo(f"Deleted transaction {deleted_id}")


@transaction_group.command("dedupe")
@click.option("--yes", "-y", is_flag=True, help="Delete duplicates without asking")
@click.pass_context
def dedupe_transactions(ctx, yes: bool) -> None:
    """Find and delete duplicate transactions.

    Entries with the same date, value, description, bank and type are
    duplicates; the oldest one is kept.
    """
    store = ctx.obj["store"]
    transaction_service = TransactionService(store)

    duplicates = transaction_service.find_duplicates()
    if not duplicates:
        click.echo("No duplicate transactions found.")
        return

    click.echo(f"Found {len(duplicates)} duplicate transaction(s):")
    for txn in duplicates:
        click.echo(
            f"  {txn.id}  {format_date(txn.date)}  {format_amount(txn.value):>12}  {txn.description}"
        )

    if not yes and not click.confirm("Delete them?"):
        click.echo("Nothing deleted.")
        return

    try:
        transaction_service.delete_transactions(txn.id for txn in duplicates)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {len(duplicates)} transaction(s)")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
