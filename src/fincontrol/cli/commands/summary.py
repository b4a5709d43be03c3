"""Summary and expense analysis commands."""

from decimal import Decimal

import click
from fincontrol.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.registry_resolution import resolve_entry_or_exit
from fincontrol.domain.entities import ExpenseGroupBy, RegistryKind, TransactionFilter
from fincontrol.domain.errors import DomainError
from fincontrol.domain.registry import RegistryService
from fincontrol.domain.summary import SummaryService
from fincontrol.utils.amount_parser import format_amount


def _resolve_filter(ctx, store, start_date, end_date, bank, period_kwargs) -> TransactionFilter:
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(period_kwargs),
    )
    bank_id = resolve_entry_or_exit(ctx, RegistryService(store), RegistryKind.BANKS, bank)
    return TransactionFilter(start_date=start, end_date=end, bank_id=bank_id or None)


@click.command("summary")
@period_options
@click.option("--bank", help="Bank name or ID")
@click.pass_context
def summary(ctx, start_date: str | None, end_date: str | None, bank: str | None, **period_kwargs):
    """Show balance, income, expense and pending totals, plus bank balances."""
    store = ctx.obj["store"]
    service = SummaryService(store)
    filter = _resolve_filter(ctx, store, start_date, end_date, bank, period_kwargs)

    try:
        transactions = store.list_transactions(filter)
        totals = service.financial_summary(transactions)
        bank_balances = service.bank_balances(transactions)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo("\nSummary:")
    click.echo("-" * 50)
    click.echo(f"{'Balance (paid)':<30} {format_amount(totals.balance):>19}")
    click.echo(f"{'Income':<30} {format_amount(totals.income):>19}")
    click.echo(f"{'Expense':<30} {format_amount(totals.expense):>19}")
    click.echo(f"{'Pending income':<30} {format_amount(totals.pending_income):>19}")
    click.echo(f"{'Pending expense':<30} {format_amount(totals.pending_expense):>19}")

    if bank_balances:
        click.echo("\nBank balances:")
        click.echo("-" * 50)
        for entry in bank_balances:
            click.echo(f"{entry.name:<30} {format_amount(entry.balance):>19}")


@click.command("expenses")
@period_options
@click.option(
    "--by",
    "group_by",
    type=click.Choice([g.value for g in ExpenseGroupBy], case_sensitive=False),
    default=ExpenseGroupBy.CATEGORY.value,
    show_default=True,
)
@click.option("--monthly", is_flag=True, help="Spread totals over months")
@click.option("--bank", help="Bank name or ID")
@click.pass_context
def expenses(
    ctx,
    start_date: str | None,
    end_date: str | None,
    group_by: str,
    monthly: bool,
    bank: str | None,
    **period_kwargs,
):
    """Analyze expenses by category, cost center or participant."""
    store = ctx.obj["store"]
    service = SummaryService(store)
    filter = _resolve_filter(ctx, store, start_date, end_date, bank, period_kwargs)
    grouping = ExpenseGroupBy(group_by.lower())

    try:
        transactions = store.list_transactions(filter)
        if monthly:
            pivot = service.monthly_expense_pivot(grouping, transactions)
        else:
            groups = service.expense_breakdown(grouping, transactions)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if monthly:
        if not pivot.rows:
            click.echo("No expenses found.")
            return
        header = f"{'':<25}" + "".join(f"{month:>13}" for month in pivot.months) + f"{'Total':>14}"
        click.echo(header)
        click.echo("-" * len(header))
        for row in pivot.rows:
            cells = "".join(
                f"{format_amount(row.monthly_values[month]) if month in row.monthly_values else '-':>13}"
                for month in pivot.months
            )
            click.echo(f"{row.name[:25]:<25}{cells}{format_amount(row.total):>14}")
        click.echo("-" * len(header))
        totals = "".join(f"{format_amount(pivot.month_total(month)):>13}" for month in pivot.months)
        grand_total = sum((row.total for row in pivot.rows), Decimal("0"))
        click.echo(f"{'Total':<25}{totals}{format_amount(grand_total):>14}")
        return

    if not groups:
        click.echo("No expenses found.")
        return

    overall = sum((group.total for group in groups), Decimal("0"))
    click.echo("-" * 60)
    for group in groups:
        share = group.total / overall * 100 if overall else 0
        click.echo(f"{group.name:<35} {format_amount(group.total):>15} {share:>6.1f}%")
    click.echo("-" * 60)
    click.echo(f"{'Total':<35} {format_amount(overall):>15}")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary)
    cli.add_command(expenses)
