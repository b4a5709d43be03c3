"""Abstract ledger store interface."""

from abc import ABC, abstractmethod
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from fincontrol.domain.entities import (
    RegistryEntry,
    RegistryKind,
    Transaction,
    TransactionFilter,
)


class LedgerStore(ABC):
    """Abstract storage backend for transactions and registries.

    Implementations own persisted identity: they assign ``id`` to entries
    saved with an empty id and never change it afterwards.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the backend."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the backend."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize storage schema (create tables or files)."""
        pass

    # Transaction operations
    @abstractmethod
    def list_transactions(
        self, filter: Optional[TransactionFilter] = None
    ) -> list[Transaction]:
        """List transactions, newest first (date then id, descending)."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def find_linked(self, linked_id: str) -> list[Transaction]:
        """List transactions sharing a transfer linked_id."""
        pass

    @abstractmethod
    def upsert_transaction(self, transaction: Transaction) -> Transaction:
        """Insert or update a transaction. Assigns an id when it is empty."""
        pass

    @abstractmethod
    def upsert_many_transactions(
        self, transactions: list[Transaction]
    ) -> list[Transaction]:
        """Insert or update a batch of transactions."""
        pass

    @abstractmethod
    def delete_transactions(self, ids: list[str]) -> None:
        """Delete transactions by id. Blank ids are ignored."""
        pass

    # Registry operations
    @abstractmethod
    def list_registry(self, kind: RegistryKind) -> list[RegistryEntry]:
        """List registry entries ordered by name."""
        pass

    @abstractmethod
    def upsert_registry_entry(
        self, kind: RegistryKind, entry: RegistryEntry
    ) -> RegistryEntry:
        """Insert or update a registry entry. Assigns an id when it is empty."""
        pass

    @abstractmethod
    def delete_registry_entry(self, kind: RegistryKind, entry_id: str) -> None:
        """Delete a registry entry.

        Raises:
            ReferentialIntegrityError: If the entry is still referenced
        """
        pass
