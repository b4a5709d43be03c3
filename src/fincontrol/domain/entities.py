"""Domain model entities for fincontrol.

These are pure data classes representing business concepts, independent of
the storage backend. Engines and services never mutate them in place; new
values are produced with ``dataclasses.replace``.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from fincontrol.domain.errors import ValidationError


class TransactionType(str, Enum):
    """Direction of a ledger entry."""

    CREDIT = "CREDIT"
    DEBIT = "DEBIT"

    @property
    def opposite(self) -> "TransactionType":
        return TransactionType.DEBIT if self is TransactionType.CREDIT else TransactionType.CREDIT


class TransactionStatus(str, Enum):
    """Realized (PAID) or projected (PENDING) entry."""

    PAID = "PAID"
    PENDING = "PENDING"


class RegistryKind(str, Enum):
    """The reference registries a transaction points into."""

    BANKS = "banks"
    CATEGORIES = "categories"
    COST_CENTERS = "cost_centers"
    PARTICIPANTS = "participants"
    WALLETS = "wallets"


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``value`` is always a non-negative magnitude; the sign lives in ``type``.
    ``id`` is empty until the store assigns one.
    """

    id: str
    date: date
    description: str
    value: Decimal
    type: TransactionType
    status: TransactionStatus
    doc_number: str = ""
    bank_id: str = ""
    wallet_id: str = ""
    category_id: str = ""
    cost_center_id: str = ""
    participant_id: str = ""
    linked_id: Optional[str] = None

    def __post_init__(self):
        if self.value < 0:
            raise ValidationError(
                f"Transaction value must be non-negative, got {self.value}"
            )

    @property
    def signed_value(self) -> Decimal:
        """Value with the sign implied by the transaction type."""
        return self.value if self.type == TransactionType.CREDIT else -self.value

    @property
    def is_paid(self) -> bool:
        return self.status == TransactionStatus.PAID

    @property
    def is_transfer(self) -> bool:
        return bool(self.linked_id)


@dataclass(frozen=True)
class Bank:
    """Bank registry entry."""

    id: str
    name: str


@dataclass(frozen=True)
class Category:
    """Category registry entry."""

    id: str
    name: str


@dataclass(frozen=True)
class CostCenter:
    """Cost center registry entry."""

    id: str
    name: str


@dataclass(frozen=True)
class Participant:
    """Participant (payer/payee) registry entry."""

    id: str
    name: str


@dataclass(frozen=True)
class Wallet:
    """Wallet registry entry, optionally tied to a bank."""

    id: str
    name: str
    bank_id: Optional[str] = None


RegistryEntry = Bank | Category | CostCenter | Participant | Wallet

REGISTRY_TYPES: dict[RegistryKind, type] = {
    RegistryKind.BANKS: Bank,
    RegistryKind.CATEGORIES: Category,
    RegistryKind.COST_CENTERS: CostCenter,
    RegistryKind.PARTICIPANTS: Participant,
    RegistryKind.WALLETS: Wallet,
}


@dataclass(frozen=True)
class WalletExtra:
    """Extra attributes accepted when saving a wallet."""

    bank_id: Optional[str] = None


@dataclass(frozen=True)
class TransactionFilter:
    """Filter applied when listing transactions.

    ``status`` of None means both PAID and PENDING.
    """

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    bank_id: Optional[str] = None
    wallet_id: Optional[str] = None
    status: Optional[TransactionStatus] = None

    def matches(self, txn: Transaction) -> bool:
        if self.start_date is not None and txn.date < self.start_date:
            return False
        if self.end_date is not None and txn.date > self.end_date:
            return False
        if self.bank_id and txn.bank_id != self.bank_id:
            return False
        if self.wallet_id and txn.wallet_id != self.wallet_id:
            return False
        if self.status is not None and txn.status != self.status:
            return False
        return True


@dataclass(frozen=True)
class PreviousBalances:
    """Historical balances accumulated strictly before a start date."""

    total: Decimal = Decimal("0")
    by_bank: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class CashFlowRow:
    """One period of a cash-flow ladder."""

    period: str
    key: str
    opening: Decimal
    income: Decimal
    expense: Decimal
    operational: Decimal
    closing: Decimal
    transactions: tuple[Transaction, ...] = ()


@dataclass(frozen=True)
class FinancialSummary:
    """Dashboard totals over a transaction set."""

    balance: Decimal
    income: Decimal
    expense: Decimal
    pending_income: Decimal
    pending_expense: Decimal


@dataclass(frozen=True)
class BankBalance:
    """Realized balance of a single bank."""

    bank_id: str
    name: str
    balance: Decimal


@dataclass(frozen=True)
class ExpenseGroup:
    """Expense total for one category, cost center or participant."""

    name: str
    total: Decimal


@dataclass(frozen=True)
class ExpensePivotRow:
    """Monthly expense totals for one group."""

    name: str
    monthly_values: dict[str, Decimal]
    total: Decimal


class ExpenseGroupBy(str, Enum):
    """Registry an expense analysis groups by."""

    CATEGORY = "category"
    COST_CENTER = "cost-center"
    PARTICIPANT = "participant"


@dataclass(frozen=True)
class ExpensePivot:
    """Month by group expense table."""

    group_by: ExpenseGroupBy
    months: tuple[str, ...]
    rows: tuple[ExpensePivotRow, ...]

    def month_total(self, month: str) -> Decimal:
        return sum((row.monthly_values.get(month, Decimal("0")) for row in self.rows), Decimal("0"))
