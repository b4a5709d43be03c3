"""Transaction domain service."""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from fincontrol.database.base import LedgerStore
from fincontrol.domain.balance import chronological
from fincontrol.domain.entities import (
    RegistryKind,
    Transaction,
    TransactionFilter,
    TransactionStatus,
    TransactionType,
)
from fincontrol.domain.errors import (
    NotFoundError,
    PartialBatchError,
    ValidationError,
    registry_entry_not_found,
    transaction_not_found,
)
from fincontrol.domain.recurrence import RecurrenceRule, expand, expand_transfer
from fincontrol.domain.transfer import (
    TransferRequest,
    delete_targets,
    edit_transfer,
    find_counterpart,
    request_from_legs,
)

logger = logging.getLogger(__name__)

REFERENCE_KINDS = {
    "bank_id": RegistryKind.BANKS,
    "wallet_id": RegistryKind.WALLETS,
    "category_id": RegistryKind.CATEGORIES,
    "cost_center_id": RegistryKind.COST_CENTERS,
    "participant_id": RegistryKind.PARTICIPANTS,
}


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a write that may touch several transactions.

    ``saved`` lists what reached the store. When ``error`` is set the write
    stopped part way and nothing was rolled back.
    """

    saved: tuple[Transaction, ...] = ()
    error: Optional[PartialBatchError] = None
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None


def duplicate_key(txn: Transaction) -> str:
    """Key under which two transactions count as duplicates."""
    value = txn.value.quantize(Decimal("0.01"))
    description = txn.description.strip().lower()
    return f"{txn.date.isoformat()}|{value}|{description}|{txn.bank_id}|{txn.type.value}"


class TransactionService:
    """Service for managing transactions and transfers."""

    def __init__(self, store: LedgerStore):
        """Initialize transaction service.

        Args:
            store: Ledger store instance
        """
        self.store = store

    def _bank_names(self) -> dict[str, str]:
        return {bank.id: bank.name for bank in self.store.list_registry(RegistryKind.BANKS)}

    def _check_references(self, txn: Transaction) -> None:
        for field_name, kind in REFERENCE_KINDS.items():
            entry_id = getattr(txn, field_name)
            if not entry_id:
                continue
            if all(entry.id != entry_id for entry in self.store.list_registry(kind)):
                raise NotFoundError(registry_entry_not_found(kind.value, entry_id))

    def save_transactions(
        self, transactions: list[Transaction], warnings: tuple[str, ...] = ()
    ) -> BatchResult:
        """Persist prepared transactions, reporting partial batch failures."""
        if len(transactions) == 1:
            saved = self.store.upsert_transaction(transactions[0])
            return BatchResult(saved=(saved,), warnings=warnings)
        try:
            saved_many = self.store.upsert_many_transactions(transactions)
        except PartialBatchError as e:
            logger.warning(
                "Batch write stopped after %d of %d transaction(s): %s",
                len(e.saved),
                len(transactions),
                e,
            )
            return BatchResult(saved=tuple(e.saved), error=e, warnings=warnings)
        return BatchResult(saved=tuple(saved_many), warnings=warnings)

    def create_transaction(
        self,
        date: date,
        description: str,
        value: Decimal,
        type: TransactionType,
        status: TransactionStatus = TransactionStatus.PAID,
        doc_number: str = "",
        bank_id: str = "",
        wallet_id: str = "",
        category_id: str = "",
        cost_center_id: str = "",
        participant_id: str = "",
        recurrence: Optional[RecurrenceRule] = None,
    ) -> BatchResult:
        """Create a transaction, or a recurring series of them.

        Args:
            date: Transaction date (first instance for a series)
            description: Description
            value: Non-negative amount
            type: CREDIT or DEBIT
            status: PAID or PENDING
            doc_number: Optional document number
            bank_id: Optional bank ID
            wallet_id: Optional wallet ID
            category_id: Optional category ID
            cost_center_id: Optional cost center ID
            participant_id: Optional participant ID
            recurrence: Optional recurrence rule

        Returns:
            BatchResult with the stored transactions

        Raises:
            ValidationError: If the description is blank or the value negative
            NotFoundError: If a referenced registry entry does not exist
        """
        if not description or not description.strip():
            raise ValidationError("Description cannot be empty")

        template = Transaction(
            id="",
            date=date,
            description=description.strip(),
            value=value,
            type=type,
            status=status,
            doc_number=doc_number,
            bank_id=bank_id,
            wallet_id=wallet_id,
            category_id=category_id,
            cost_center_id=cost_center_id,
            participant_id=participant_id,
        )
        self._check_references(template)

        instances = expand(template, recurrence)
        if not instances:
            raise ValidationError("Recurrence produced no dates")
        return self.save_transactions(instances)

    def create_transfer(
        self,
        request: TransferRequest,
        recurrence: Optional[RecurrenceRule] = None,
    ) -> BatchResult:
        """Create a transfer (two linked legs), or a recurring series of them.

        Raises:
            ValidationError: If the banks are missing or equal
            NotFoundError: If a referenced registry entry does not exist
        """
        pairs = expand_transfer(request, recurrence, bank_names=self._bank_names())
        if not pairs:
            raise ValidationError("Recurrence produced no dates")
        for leg in pairs[0].legs():
            self._check_references(leg)

        legs = [leg for pair in pairs for leg in pair.legs()]
        return self.save_transactions(legs)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.store.get_transaction(transaction_id)

    def _require(self, transaction_id: str) -> Transaction:
        txn = self.store.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def counterpart_of(self, txn: Transaction) -> Optional[Transaction]:
        """Find the other leg of a transfer, or None."""
        if not txn.linked_id:
            return None
        return find_counterpart(txn, self.store.find_linked(txn.linked_id))

    def update_transaction(
        self,
        transaction_id: str,
        date: Optional[date] = None,
        description: Optional[str] = None,
        value: Optional[Decimal] = None,
        type: Optional[TransactionType] = None,
        status: Optional[TransactionStatus] = None,
        doc_number: Optional[str] = None,
        bank_id: Optional[str] = None,
        wallet_id: Optional[str] = None,
        category_id: Optional[str] = None,
        cost_center_id: Optional[str] = None,
        participant_id: Optional[str] = None,
    ) -> BatchResult:
        """Update transaction fields. None leaves a field unchanged.

        Editing one leg of a transfer updates both legs. The bank given for
        a leg stays on that leg; the type of a leg cannot change.

        Raises:
            NotFoundError: If the transaction or a referenced entry is missing
            ValidationError: If the new values are invalid
        """
        txn = self._require(transaction_id)

        if txn.is_transfer:
            if type is not None and type != txn.type:
                raise ValidationError("Cannot change the type of a transfer leg")
            counterpart = self.counterpart_of(txn)
            if txn.type == TransactionType.DEBIT:
                request = request_from_legs(txn, counterpart or txn)
            else:
                request = request_from_legs(counterpart or txn, txn)
            changes = {
                "date": date,
                "value": value,
                "status": status,
                "doc_number": doc_number,
                "wallet_id": wallet_id,
                "category_id": category_id,
                "cost_center_id": cost_center_id,
                "participant_id": participant_id,
                "description": description,
            }
            if bank_id is not None:
                key = "source_bank_id" if txn.type == TransactionType.DEBIT else "destination_bank_id"
                changes[key] = bank_id
            request = replace(request, **{k: v for k, v in changes.items() if v is not None})
            return self.update_transfer(transaction_id, request)

        changes = {
            "date": date,
            "description": description.strip() if description is not None else None,
            "value": value,
            "type": type,
            "status": status,
            "doc_number": doc_number,
            "bank_id": bank_id,
            "wallet_id": wallet_id,
            "category_id": category_id,
            "cost_center_id": cost_center_id,
            "participant_id": participant_id,
        }
        updated = replace(txn, **{k: v for k, v in changes.items() if v is not None})
        if not updated.description:
            raise ValidationError("Description cannot be empty")
        self._check_references(updated)
        return self.save_transactions([updated])

    def update_transfer(self, transaction_id: str, request: TransferRequest) -> BatchResult:
        """Apply transfer form state to a transaction and its counterpart.

        A plain transaction becomes the DEBIT leg of a new transfer. When an
        existing transfer has lost its counterpart only the edited leg is
        saved and the result carries a warning.

        Raises:
            NotFoundError: If the transaction is missing
            ValidationError: If the request is invalid
        """
        txn = self._require(transaction_id)
        counterpart = self.counterpart_of(txn)

        outcome = edit_transfer(txn, counterpart, request, bank_names=self._bank_names())
        for leg in outcome.legs:
            self._check_references(leg)
        return self.save_transactions(list(outcome.legs), warnings=outcome.warnings)

    def delete_transaction(self, transaction_id: str, cascade: bool = True) -> list[str]:
        """Delete a transaction.

        Args:
            transaction_id: Transaction ID to delete
            cascade: For a transfer leg, also delete the counterpart

        Returns:
            IDs that were deleted

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        txn = self._require(transaction_id)
        candidates = self.store.find_linked(txn.linked_id) if txn.linked_id else []
        ids = delete_targets(txn, candidates, cascade)
        self.store.delete_transactions(ids)
        return ids

    def delete_transactions(self, ids: Iterable[str]) -> None:
        """Delete several transactions by id. Blank ids are ignored."""
        self.store.delete_transactions(list(ids))

    def list_transactions(
        self, filter: Optional[TransactionFilter] = None
    ) -> list[Transaction]:
        """List transactions with filters, newest first."""
        return self.store.list_transactions(filter)

    def find_duplicates(
        self, transactions: Optional[Iterable[Transaction]] = None
    ) -> list[Transaction]:
        """Find repeated entries.

        Transactions sharing date, value, description (trimmed, case
        insensitive), bank and type are duplicates. The oldest by id is
        kept and the later ones are returned.

        Args:
            transactions: Candidates; the whole ledger if None
        """
        if transactions is None:
            transactions = self.store.list_transactions()

        seen: set[str] = set()
        duplicates = []
        for txn in chronological(transactions):
            key = duplicate_key(txn)
            if key in seen:
                duplicates.append(txn)
            else:
                seen.add(key)
        return duplicates

    def remove_duplicates(
        self, transactions: Optional[Iterable[Transaction]] = None
    ) -> list[str]:
        """Delete duplicates found by find_duplicates and return their ids."""
        ids = [txn.id for txn in self.find_duplicates(transactions)]
        if ids:
            self.store.delete_transactions(ids)
        return ids
