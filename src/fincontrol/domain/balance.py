"""Running balance computation.

Balances are derived from PAID transactions only. Every function here is a
pure computation over in-memory transactions and never talks to the store.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from fincontrol.domain.entities import PreviousBalances, Transaction

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _in_scope(
    txn: Transaction, bank_id: Optional[str], wallet_id: Optional[str]
) -> bool:
    if bank_id and txn.bank_id != bank_id:
        return False
    if wallet_id and txn.wallet_id != wallet_id:
        return False
    return True


def chronological(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Sort transactions by date, then by id, both ascending."""
    return sorted(transactions, key=lambda txn: (txn.date, txn.id))


def compute_balance_map(
    transactions: Iterable[Transaction],
    bank_id: Optional[str] = None,
    wallet_id: Optional[str] = None,
    seed: Decimal = ZERO,
) -> dict[str, Decimal]:
    """Map each PAID transaction id to the cumulative balance at that point.

    Args:
        transactions: Candidate transactions in any order
        bank_id: Optional bank scope
        wallet_id: Optional wallet scope
        seed: Balance as of just before the first transaction in view

    Returns:
        Dict of transaction id to running balance. PENDING transactions are
        never present.
    """
    scoped = [
        txn
        for txn in transactions
        if txn.is_paid and _in_scope(txn, bank_id, wallet_id)
    ]

    balances: dict[str, Decimal] = {}
    running = seed
    for txn in chronological(scoped):
        running += txn.signed_value
        balances[txn.id] = running
    return balances


def compute_seed_balance(
    transactions: Iterable[Transaction],
    before: date,
    bank_id: Optional[str] = None,
    wallet_id: Optional[str] = None,
) -> Decimal:
    """Sum signed PAID values dated strictly before ``before`` within scope.

    Must be given the whole ledger, not a filtered page, so that a date
    filtered view starts at the true account balance.
    """
    return sum(
        (
            txn.signed_value
            for txn in transactions
            if txn.is_paid and txn.date < before and _in_scope(txn, bank_id, wallet_id)
        ),
        ZERO,
    )


def compute_previous_balances(
    transactions: Iterable[Transaction],
    before: date,
    wallet_id: Optional[str] = None,
) -> PreviousBalances:
    """Compute the overall and per-bank seed balances before a date."""
    total = ZERO
    by_bank: dict[str, Decimal] = {}
    for txn in transactions:
        if not txn.is_paid or txn.date >= before:
            continue
        if not _in_scope(txn, None, wallet_id):
            continue
        total += txn.signed_value
        if txn.bank_id:
            by_bank[txn.bank_id] = by_bank.get(txn.bank_id, ZERO) + txn.signed_value

    logger.debug(
        "Previous balances before %s: total=%s across %d bank(s)",
        before,
        total,
        len(by_bank),
    )
    return PreviousBalances(total=total, by_bank=by_bank)


def resolve_seed(previous: PreviousBalances, bank_id: Optional[str] = None) -> Decimal:
    """Pick the seed for a view.

    The bank-scoped seed wins whenever a bank filter is active. A bank with
    no history before the start date has a seed of zero.
    """
    if bank_id:
        return previous.by_bank.get(bank_id, ZERO)
    return previous.total
