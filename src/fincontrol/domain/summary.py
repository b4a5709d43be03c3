"""Summary and expense analysis domain service."""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from fincontrol.database.base import LedgerStore
from fincontrol.domain.entities import (
    BankBalance,
    ExpenseGroup,
    ExpenseGroupBy,
    ExpensePivot,
    ExpensePivotRow,
    FinancialSummary,
    RegistryKind,
    Transaction,
    TransactionFilter,
    TransactionStatus,
    TransactionType,
)

ZERO = Decimal("0")

GROUP_FIELDS = {
    ExpenseGroupBy.CATEGORY: ("category_id", RegistryKind.CATEGORIES, "No category"),
    ExpenseGroupBy.COST_CENTER: ("cost_center_id", RegistryKind.COST_CENTERS, "No cost center"),
    ExpenseGroupBy.PARTICIPANT: ("participant_id", RegistryKind.PARTICIPANTS, "No participant"),
}


class SummaryService:
    """Service for dashboard totals and expense analysis."""

    def __init__(self, store: LedgerStore):
        """Initialize summary service.

        Args:
            store: Ledger store instance
        """
        self.store = store

    def _transactions(
        self,
        transactions: Optional[Iterable[Transaction]],
        filter: Optional[TransactionFilter],
    ) -> list[Transaction]:
        if transactions is not None:
            return list(transactions)
        return self.store.list_transactions(filter)

    def financial_summary(
        self,
        transactions: Optional[Iterable[Transaction]] = None,
        filter: Optional[TransactionFilter] = None,
    ) -> FinancialSummary:
        """Total a transaction set.

        ``balance`` counts PAID entries only; income and expense count
        both statuses; the pending totals count PENDING entries only.

        Args:
            transactions: Transactions to total; read from the store if None
            filter: Store filter used when transactions is None
        """
        balance = income = expense = pending_income = pending_expense = ZERO
        for txn in self._transactions(transactions, filter):
            if txn.is_paid:
                balance += txn.signed_value
            if txn.type == TransactionType.CREDIT:
                income += txn.value
                if txn.status == TransactionStatus.PENDING:
                    pending_income += txn.value
            else:
                expense += txn.value
                if txn.status == TransactionStatus.PENDING:
                    pending_expense += txn.value

        return FinancialSummary(
            balance=balance,
            income=income,
            expense=expense,
            pending_income=pending_income,
            pending_expense=pending_expense,
        )

    def bank_balances(
        self,
        transactions: Optional[Iterable[Transaction]] = None,
        filter: Optional[TransactionFilter] = None,
    ) -> list[BankBalance]:
        """PAID balance per registered bank, largest first.

        Banks with a zero balance are left out.
        """
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for txn in self._transactions(transactions, filter):
            if txn.is_paid and txn.bank_id:
                totals[txn.bank_id] += txn.signed_value

        balances = [
            BankBalance(bank_id=bank.id, name=bank.name, balance=totals.get(bank.id, ZERO))
            for bank in self.store.list_registry(RegistryKind.BANKS)
        ]
        balances = [b for b in balances if b.balance != 0]
        balances.sort(key=lambda b: b.balance, reverse=True)
        return balances

    def _group_namer(self, group_by: ExpenseGroupBy):
        field_name, kind, fallback = GROUP_FIELDS[group_by]
        names = {entry.id: entry.name for entry in self.store.list_registry(kind)}

        def name_of(txn: Transaction) -> str:
            return names.get(getattr(txn, field_name)) or fallback

        return name_of

    def expense_breakdown(
        self,
        group_by: ExpenseGroupBy = ExpenseGroupBy.CATEGORY,
        transactions: Optional[Iterable[Transaction]] = None,
        filter: Optional[TransactionFilter] = None,
    ) -> list[ExpenseGroup]:
        """Total DEBIT entries per category, cost center or participant.

        Returns:
            Groups sorted by total, largest first
        """
        name_of = self._group_namer(group_by)
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for txn in self._transactions(transactions, filter):
            if txn.type == TransactionType.DEBIT:
                totals[name_of(txn)] += txn.value

        groups = [ExpenseGroup(name=name, total=total) for name, total in totals.items()]
        groups.sort(key=lambda g: g.total, reverse=True)
        return groups

    def monthly_expense_pivot(
        self,
        group_by: ExpenseGroupBy = ExpenseGroupBy.CATEGORY,
        transactions: Optional[Iterable[Transaction]] = None,
        filter: Optional[TransactionFilter] = None,
    ) -> ExpensePivot:
        """Spread DEBIT totals over YYYY-MM columns.

        Rows are sorted by total, largest first; months ascending.
        """
        name_of = self._group_namer(group_by)
        pivot: dict[str, dict[str, Decimal]] = defaultdict(dict)
        months: set[str] = set()
        for txn in self._transactions(transactions, filter):
            if txn.type != TransactionType.DEBIT:
                continue
            month = txn.date.strftime("%Y-%m")
            months.add(month)
            row = pivot[name_of(txn)]
            row[month] = row.get(month, ZERO) + txn.value

        rows = [
            ExpensePivotRow(name=name, monthly_values=values, total=sum(values.values(), ZERO))
            for name, values in pivot.items()
        ]
        rows.sort(key=lambda r: (-r.total, r.name))
        return ExpensePivot(group_by=group_by, months=tuple(sorted(months)), rows=tuple(rows))
