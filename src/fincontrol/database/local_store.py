"""Local JSON-file ledger store.

Keeps every collection in a single JSON document on disk. Used when no
relational database is configured.
"""

import json
import logging
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

from fincontrol.database.base import LedgerStore
from fincontrol.database.mappers import (
    registry_from_dict,
    registry_to_dict,
    transaction_from_dict,
    transaction_to_dict,
)
from fincontrol.domain.entities import (
    RegistryEntry,
    RegistryKind,
    Transaction,
    TransactionFilter,
)
from fincontrol.domain.errors import (
    NotFoundError,
    ReferentialIntegrityError,
    StoreUnavailableError,
    registry_delete_blocked,
    registry_entry_not_found,
)

logger = logging.getLogger(__name__)

REFERENCE_FIELDS = {
    RegistryKind.BANKS: "bank_id",
    RegistryKind.CATEGORIES: "category_id",
    RegistryKind.COST_CENTERS: "cost_center_id",
    RegistryKind.PARTICIPANTS: "participant_id",
    RegistryKind.WALLETS: "wallet_id",
}


def _empty_document() -> dict[str, list]:
    document: dict[str, list] = {"transactions": []}
    for kind in RegistryKind:
        document[kind.value] = []
    return document


class LocalFileStore(LedgerStore):
    """LedgerStore backed by a JSON file."""

    def __init__(self, path: str):
        """Initialize local store.

        Args:
            path: Path to the JSON document. Created on first write.
        """
        self.path = Path(path)
        self._document: Optional[dict[str, list]] = None

    def _load(self) -> dict[str, list]:
        if self._document is None:
            if not self.path.exists():
                self._document = _empty_document()
            else:
                try:
                    with open(self.path, "r", encoding="utf-8") as f:
                        loaded = json.load(f)
                except (OSError, json.JSONDecodeError) as e:
                    raise StoreUnavailableError(
                        f"Could not read local store {self.path}: {e}"
                    ) from e
                document = _empty_document()
                document.update(loaded)
                self._document = document
        return self._document

    def _save(self) -> None:
        document = self._load()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.path)
        except OSError as e:
            # Staged changes never reached disk; reload on next read.
            self._document = None
            raise StoreUnavailableError(
                f"Could not write local store {self.path}: {e}"
            ) from e

    def connect(self) -> None:
        """Load the document from disk."""
        self._load()

    def disconnect(self) -> None:
        """Drop the in-memory copy."""
        self._document = None

    def initialize_schema(self) -> None:
        """Create the file if it does not exist yet."""
        if not self.path.exists():
            self._load()
            self._save()

    # Transaction operations
    def _transactions(self) -> list[Transaction]:
        return [transaction_from_dict(d) for d in self._load()["transactions"]]

    def list_transactions(
        self, filter: Optional[TransactionFilter] = None
    ) -> list[Transaction]:
        """List transactions, newest first."""
        transactions = self._transactions()
        if filter is not None:
            transactions = [txn for txn in transactions if filter.matches(txn)]
        return sorted(transactions, key=lambda txn: (txn.date, txn.id), reverse=True)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        for data in self._load()["transactions"]:
            if data["id"] == transaction_id:
                return transaction_from_dict(data)
        return None

    def find_linked(self, linked_id: str) -> list[Transaction]:
        """List transactions sharing a transfer linked_id."""
        return sorted(
            (txn for txn in self._transactions() if txn.linked_id == linked_id),
            key=lambda txn: txn.id,
        )

    def _stage_transaction(self, transaction: Transaction) -> Transaction:
        rows: list[dict[str, Any]] = self._load()["transactions"]
        saved = transaction
        if not saved.id:
            saved = replace(saved, id=str(uuid.uuid4()))
        data = transaction_to_dict(saved)
        for index, existing in enumerate(rows):
            if existing["id"] == saved.id:
                rows[index] = data
                break
        else:
            rows.append(data)
        return saved

    def upsert_transaction(self, transaction: Transaction) -> Transaction:
        """Insert or update a transaction."""
        saved = self._stage_transaction(transaction)
        self._save()
        logger.info("Saved transaction %s", saved.id)
        return saved

    def upsert_many_transactions(self, transactions: list[Transaction]) -> list[Transaction]:
        """Insert or update a batch of transactions with a single write."""
        saved = [self._stage_transaction(txn) for txn in transactions]
        self._save()
        logger.info("Saved %d transaction(s)", len(saved))
        return saved

    def delete_transactions(self, ids: list[str]) -> None:
        """Delete transactions by id."""
        valid_ids = {i for i in ids if i and i.strip()}
        if not valid_ids:
            return
        document = self._load()
        document["transactions"] = [
            d for d in document["transactions"] if d["id"] not in valid_ids
        ]
        self._save()
        logger.info("Deleted %d transaction(s)", len(valid_ids))

    # Registry operations
    def list_registry(self, kind: RegistryKind) -> list[RegistryEntry]:
        """List registry entries ordered by name, then id."""
        entries = [registry_from_dict(kind, d) for d in self._load()[kind.value]]
        return sorted(entries, key=lambda entry: (entry.name, entry.id))

    def upsert_registry_entry(
        self, kind: RegistryKind, entry: RegistryEntry
    ) -> RegistryEntry:
        """Insert or update a registry entry."""
        rows: list[dict[str, Any]] = self._load()[kind.value]
        entry_id = entry.id or str(uuid.uuid4())
        data = registry_to_dict(entry)
        data["id"] = entry_id
        for index, existing in enumerate(rows):
            if existing["id"] == entry_id:
                rows[index] = data
                break
        else:
            rows.append(data)
        self._save()
        saved = registry_from_dict(kind, data)
        logger.info("Saved %s entry %s (%s)", kind.value, saved.id, saved.name)
        return saved

    def delete_registry_entry(self, kind: RegistryKind, entry_id: str) -> None:
        """Delete a registry entry that nothing references."""
        document = self._load()
        if not any(d["id"] == entry_id for d in document[kind.value]):
            raise NotFoundError(registry_entry_not_found(kind.value, entry_id))

        field_name = REFERENCE_FIELDS[kind]
        references = sum(
            1 for d in document["transactions"] if d.get(field_name) == entry_id
        )
        if kind == RegistryKind.BANKS:
            references += sum(
                1
                for d in document[RegistryKind.WALLETS.value]
                if d.get("bank_id") == entry_id
            )
        if references > 0:
            raise ReferentialIntegrityError(
                registry_delete_blocked(kind.value, entry_id, references)
            )

        document[kind.value] = [d for d in document[kind.value] if d["id"] != entry_id]
        self._save()
        logger.info("Deleted %s entry %s", kind.value, entry_id)
