"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic. The domain represents an
unassigned reference as an empty string, the database as NULL.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from fincontrol.domain import entities as domain
from fincontrol.database.models import (
    Transaction as ORMTransaction,
    Wallet as ORMWallet,
)


def _nullable(value: Optional[str]) -> Optional[str]:
    return value or None


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        description=orm_transaction.description or "",
        doc_number=orm_transaction.doc_number or "",
        value=Decimal(orm_transaction.value),
        type=domain.TransactionType(orm_transaction.type),
        status=domain.TransactionStatus(orm_transaction.status),
        bank_id=orm_transaction.bank_id or "",
        wallet_id=orm_transaction.wallet_id or "",
        category_id=orm_transaction.category_id or "",
        cost_center_id=orm_transaction.cost_center_id or "",
        participant_id=orm_transaction.participant_id or "",
        linked_id=orm_transaction.linked_id or None,
    )


def apply_transaction(orm_transaction: ORMTransaction, txn: domain.Transaction) -> None:
    """Copy domain Transaction fields onto a SQLAlchemy row."""
    orm_transaction.date = txn.date
    orm_transaction.description = txn.description
    orm_transaction.doc_number = _nullable(txn.doc_number)
    orm_transaction.value = txn.value
    orm_transaction.type = txn.type.value
    orm_transaction.status = txn.status.value
    orm_transaction.bank_id = _nullable(txn.bank_id)
    orm_transaction.wallet_id = _nullable(txn.wallet_id)
    orm_transaction.category_id = _nullable(txn.category_id)
    orm_transaction.cost_center_id = _nullable(txn.cost_center_id)
    orm_transaction.participant_id = _nullable(txn.participant_id)
    orm_transaction.linked_id = _nullable(txn.linked_id)


def registry_to_domain(kind: domain.RegistryKind, orm_entry) -> domain.RegistryEntry:
    """Convert a SQLAlchemy registry row to its domain entity."""
    if kind == domain.RegistryKind.WALLETS:
        return domain.Wallet(
            id=orm_entry.id, name=orm_entry.name, bank_id=orm_entry.bank_id or None
        )
    entity_type = domain.REGISTRY_TYPES[kind]
    return entity_type(id=orm_entry.id, name=orm_entry.name)


def apply_registry_entry(orm_entry, entry: domain.RegistryEntry) -> None:
    """Copy domain registry fields onto a SQLAlchemy row."""
    orm_entry.name = entry.name
    if isinstance(orm_entry, ORMWallet):
        orm_entry.bank_id = _nullable(getattr(entry, "bank_id", None))


def transaction_to_dict(txn: domain.Transaction) -> dict:
    """Serialize a domain Transaction to a JSON-compatible dict."""
    return {
        "id": txn.id,
        "date": txn.date.isoformat(),
        "description": txn.description,
        "doc_number": txn.doc_number,
        "value": str(txn.value),
        "type": txn.type.value,
        "status": txn.status.value,
        "bank_id": txn.bank_id,
        "wallet_id": txn.wallet_id,
        "category_id": txn.category_id,
        "cost_center_id": txn.cost_center_id,
        "participant_id": txn.participant_id,
        "linked_id": txn.linked_id,
    }


def transaction_from_dict(data: dict) -> domain.Transaction:
    """Deserialize a domain Transaction from a JSON dict."""
    return domain.Transaction(
        id=data["id"],
        date=date.fromisoformat(data["date"]),
        description=data.get("description") or "",
        doc_number=data.get("doc_number") or "",
        value=Decimal(data["value"]),
        type=domain.TransactionType(data["type"]),
        status=domain.TransactionStatus(data["status"]),
        bank_id=data.get("bank_id") or "",
        wallet_id=data.get("wallet_id") or "",
        category_id=data.get("category_id") or "",
        cost_center_id=data.get("cost_center_id") or "",
        participant_id=data.get("participant_id") or "",
        linked_id=data.get("linked_id") or None,
    )


def registry_to_dict(entry: domain.RegistryEntry) -> dict:
    """Serialize a registry entry to a JSON-compatible dict."""
    data = {"id": entry.id, "name": entry.name}
    if isinstance(entry, domain.Wallet):
        data["bank_id"] = entry.bank_id
    return data


def registry_from_dict(kind: domain.RegistryKind, data: dict) -> domain.RegistryEntry:
    """Deserialize a registry entry from a JSON dict."""
    if kind == domain.RegistryKind.WALLETS:
        return domain.Wallet(
            id=data["id"], name=data["name"], bank_id=data.get("bank_id") or None
        )
    return domain.REGISTRY_TYPES[kind](id=data["id"], name=data["name"])
