"""Cash-flow ladder aggregation."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from fincontrol.domain.entities import CashFlowRow, Transaction, TransactionType

ZERO = Decimal("0")


class Granularity(str, Enum):
    """Period size of a cash-flow row."""

    MONTHLY = "MONTHLY"
    DAILY = "DAILY"


def _in_banks(txn: Transaction, bank_ids: Optional[set[str]]) -> bool:
    return bank_ids is None or txn.bank_id in bank_ids


def historical_opening_balance(
    transactions: Iterable[Transaction],
    start_date: Optional[date],
    bank_ids: Optional[set[str]] = None,
) -> Decimal:
    """Signed PAID sum before ``start_date`` within the bank scope."""
    if start_date is None:
        return ZERO
    return sum(
        (
            txn.signed_value
            for txn in transactions
            if txn.is_paid and txn.date < start_date and _in_banks(txn, bank_ids)
        ),
        ZERO,
    )


def period_key(day: date, granularity: Granularity) -> tuple[str, str]:
    """Return (sortable key, display label) for the period containing a day."""
    if granularity == Granularity.MONTHLY:
        return day.strftime("%Y-%m"), day.strftime("%m/%Y")
    return day.isoformat(), day.strftime("%d/%m/%Y")


def build_cash_flow(
    transactions: Iterable[Transaction],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    granularity: Granularity = Granularity.MONTHLY,
    bank_ids: Optional[Iterable[str]] = None,
) -> list[CashFlowRow]:
    """Bucket transactions into periods and chain opening/closing balances.

    The first opening balance is the historical PAID balance as of
    ``start_date``. Inside the range both PAID and PENDING entries count
    towards income and expense, so the ladder is a projection.

    Args:
        transactions: Whole ledger (needed for the historical balance)
        start_date: Optional inclusive range start
        end_date: Optional inclusive range end
        granularity: MONTHLY or DAILY buckets
        bank_ids: Banks to include; None means every bank

    Returns:
        Rows in chronological order
    """
    scope = set(bank_ids) if bank_ids is not None else None
    transactions = list(transactions)

    running = historical_opening_balance(transactions, start_date, scope)

    in_range = [
        txn
        for txn in transactions
        if (start_date is None or txn.date >= start_date)
        and (end_date is None or txn.date <= end_date)
        and _in_banks(txn, scope)
    ]
    in_range.sort(key=lambda txn: (txn.date, txn.id))

    grouped: dict[str, list[Transaction]] = defaultdict(list)
    labels: dict[str, str] = {}
    for txn in in_range:
        key, label = period_key(txn.date, granularity)
        grouped[key].append(txn)
        labels[key] = label

    rows = []
    for key in sorted(grouped):
        members = grouped[key]
        income = sum(
            (txn.value for txn in members if txn.type == TransactionType.CREDIT), ZERO
        )
        expense = sum(
            (txn.value for txn in members if txn.type == TransactionType.DEBIT), ZERO
        )
        operational = income - expense
        opening = running
        closing = opening + operational
        rows.append(
            CashFlowRow(
                period=labels[key],
                key=key,
                opening=opening,
                income=income,
                expense=expense,
                operational=operational,
                closing=closing,
                transactions=tuple(members),
            )
        )
        running = closing
    return rows
