"""CSV export domain service."""

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, Optional

from fincontrol.database.base import LedgerStore
from fincontrol.domain.entities import (
    RegistryKind,
    Transaction,
    TransactionFilter,
    TransactionStatus,
    TransactionType,
)
from fincontrol.domain.ledger_view import LedgerSnapshot, LedgerViewService
from fincontrol.utils.amount_parser import format_amount
from fincontrol.utils.date_parser import format_date

logger = logging.getLogger(__name__)

HEADERS = [
    "Date",
    "Doc Number",
    "Description",
    "Value",
    "Type",
    "Status",
    "Bank",
    "Wallet",
    "Category",
    "Cost Center",
    "Participant",
    "Balance",
]

TYPE_NAMES = {TransactionType.CREDIT: "Credit", TransactionType.DEBIT: "Debit"}
STATUS_NAMES = {TransactionStatus.PAID: "Paid", TransactionStatus.PENDING: "Pending"}
PENDING_MARKER = "(pending)"
BOM = "\ufeff"


class CSVExportService:
    """Service for writing transactions to spreadsheet-friendly CSV."""

    def __init__(self, store: LedgerStore):
        """Initialize CSV export service.

        Args:
            store: Ledger store instance
        """
        self.store = store
        self.ledger_view = LedgerViewService(store)

    def _names(self) -> dict[RegistryKind, dict[str, str]]:
        return {
            kind: {entry.id: entry.name for entry in self.store.list_registry(kind)}
            for kind in RegistryKind
        }

    def rows(
        self,
        transactions: Iterable[Transaction],
        balance_map: dict,
    ) -> list[list[str]]:
        """Build CSV rows (without header) in the given order."""
        names = self._names()
        rows = []
        for txn in transactions:
            if txn.is_paid and txn.id in balance_map:
                balance = format_amount(balance_map[txn.id])
            else:
                balance = PENDING_MARKER
            rows.append(
                [
                    format_date(txn.date),
                    txn.doc_number,
                    txn.description,
                    format_amount(txn.value),
                    TYPE_NAMES[txn.type],
                    STATUS_NAMES[txn.status],
                    names[RegistryKind.BANKS].get(txn.bank_id, ""),
                    names[RegistryKind.WALLETS].get(txn.wallet_id, ""),
                    names[RegistryKind.CATEGORIES].get(txn.category_id, ""),
                    names[RegistryKind.COST_CENTERS].get(txn.cost_center_id, ""),
                    names[RegistryKind.PARTICIPANTS].get(txn.participant_id, ""),
                    balance,
                ]
            )
        return rows

    def _render(self, snapshot: LedgerSnapshot) -> str:
        buffer = io.StringIO()
        buffer.write(BOM)
        writer = csv.writer(buffer, delimiter=";", lineterminator="\n")
        writer.writerow(HEADERS)
        writer.writerows(self.rows(snapshot.transactions, snapshot.balance_map))
        return buffer.getvalue()

    def _snapshot(self, filter: Optional[TransactionFilter]) -> LedgerSnapshot:
        if filter is None:
            filter = TransactionFilter()
        return self.ledger_view.fetch(filter)

    def render(self, filter: Optional[TransactionFilter] = None) -> str:
        """Render the filtered ledger as CSV text, BOM included."""
        return self._render(self._snapshot(filter))

    def export_csv(
        self, csv_file_path: str, filter: Optional[TransactionFilter] = None
    ) -> int:
        """Write the filtered ledger to a file.

        Returns:
            Number of transactions written
        """
        snapshot = self._snapshot(filter)
        path = Path(csv_file_path)
        path.write_text(self._render(snapshot), encoding="utf-8")
        logger.info("Exported %d transaction(s) to %s", len(snapshot.transactions), path)
        return len(snapshot.transactions)
