"""Registry domain service (banks, categories, cost centers, participants, wallets)."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from fincontrol.database.base import LedgerStore
from fincontrol.domain.entities import (
    REGISTRY_TYPES,
    RegistryEntry,
    RegistryKind,
    WalletExtra,
)
from fincontrol.domain.errors import (
    NotFoundError,
    ValidationError,
    registry_entry_not_found,
)

logger = logging.getLogger(__name__)

HEADER_PREFIXES = ("id", "name")


class RegistryService:
    """Service for managing the reference registries."""

    def __init__(self, store: LedgerStore):
        """Initialize registry service.

        Args:
            store: Ledger store instance
        """
        self.store = store

    def _build(
        self,
        kind: RegistryKind,
        entry_id: str,
        name: str,
        extra: Optional[WalletExtra],
    ) -> RegistryEntry:
        entry_type = REGISTRY_TYPES[kind]
        if kind == RegistryKind.WALLETS:
            bank_id = extra.bank_id if extra is not None else None
            if bank_id and self.get(RegistryKind.BANKS, bank_id) is None:
                raise NotFoundError(registry_entry_not_found(RegistryKind.BANKS.value, bank_id))
            return entry_type(id=entry_id, name=name, bank_id=bank_id or None)
        if extra is not None:
            raise ValidationError(f"{kind.value} entries take no extra attributes")
        return entry_type(id=entry_id, name=name)

    def create(
        self,
        kind: RegistryKind,
        name: str,
        extra: Optional[WalletExtra] = None,
    ) -> RegistryEntry:
        """Create a registry entry.

        Args:
            kind: Registry to add to
            name: Entry name
            extra: Wallet attributes (only valid for wallets)

        Returns:
            The stored entry with its assigned id

        Raises:
            ValidationError: If the name is blank or already used
            NotFoundError: If a wallet references an unknown bank
        """
        name = name.strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        if self.find_by_name(kind, name) is not None:
            raise ValidationError(f"{kind.value} entry '{name}' already exists")

        return self.store.upsert_registry_entry(kind, self._build(kind, "", name, extra))

    def rename(
        self,
        kind: RegistryKind,
        entry_id: str,
        name: str,
        extra: Optional[WalletExtra] = None,
    ) -> RegistryEntry:
        """Rename an entry (and, for wallets, optionally move it to a bank).

        Raises:
            NotFoundError: If the entry does not exist
            ValidationError: If the name is blank or used by another entry
        """
        current = self.get(kind, entry_id)
        if current is None:
            raise NotFoundError(registry_entry_not_found(kind.value, entry_id))

        name = name.strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        existing = self.find_by_name(kind, name)
        if existing is not None and existing.id != entry_id:
            raise ValidationError(f"{kind.value} entry '{name}' already exists")

        if kind == RegistryKind.WALLETS and extra is None:
            extra = WalletExtra(bank_id=current.bank_id)
        return self.store.upsert_registry_entry(kind, self._build(kind, entry_id, name, extra))

    def get(self, kind: RegistryKind, entry_id: str) -> Optional[RegistryEntry]:
        """Get an entry by id, or None."""
        for entry in self.store.list_registry(kind):
            if entry.id == entry_id:
                return entry
        return None

    def find_by_name(self, kind: RegistryKind, name: str) -> Optional[RegistryEntry]:
        """Find an entry by name, ignoring case and surrounding spaces."""
        wanted = name.strip().lower()
        for entry in self.store.list_registry(kind):
            if entry.name.strip().lower() == wanted:
                return entry
        return None

    def list(self, kind: RegistryKind) -> list[RegistryEntry]:
        """List entries of a registry ordered by name."""
        return self.store.list_registry(kind)

    def names(self, kind: RegistryKind) -> dict[str, str]:
        """Map entry ids to names for display."""
        return {entry.id: entry.name for entry in self.store.list_registry(kind)}

    def delete(self, kind: RegistryKind, entry_id: str) -> None:
        """Delete an entry.

        Raises:
            NotFoundError: If the entry does not exist
            ReferentialIntegrityError: If transactions (or wallets) still use it
        """
        self.store.delete_registry_entry(kind, entry_id)

    def resolve_or_create(self, kind: RegistryKind, name: Optional[str]) -> str:
        """Return the id of the entry called ``name``, creating it if absent.

        A blank name resolves to "" (unassigned).
        """
        if not name or not name.strip():
            return ""
        entry = self.find_by_name(kind, name)
        if entry is None:
            entry = self.store.upsert_registry_entry(
                kind, self._build(kind, "", name.strip(), None)
            )
            logger.info("Created %s entry '%s' on demand", kind.value, entry.name)
        return entry.id

    def import_names(self, kind: RegistryKind, lines: Iterable[str]) -> list[RegistryEntry]:
        """Create one entry per non-empty line.

        Lines starting with lowercase "id" or "name" are treated as headers
        and skipped. Names already present (or repeated in the input) are
        skipped too.

        Returns:
            Entries that were created
        """
        known = {entry.name.strip().lower() for entry in self.store.list_registry(kind)}
        created = []
        for line in lines:
            name = line.strip()
            if not name or name.startswith(HEADER_PREFIXES):
                continue
            if name.lower() in known:
                continue
            known.add(name.lower())
            created.append(
                self.store.upsert_registry_entry(kind, self._build(kind, "", name, None))
            )
        logger.info("Imported %d %s entries", len(created), kind.value)
        return created
