"""CSV import domain service."""

import csv
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from fincontrol.database.base import LedgerStore
from fincontrol.domain.entities import (
    RegistryKind,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from fincontrol.domain.errors import DomainError, ValidationError
from fincontrol.domain.registry import RegistryService
from fincontrol.domain.transaction import TransactionService
from fincontrol.utils.amount_parser import parse_amount
from fincontrol.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

# Accepted column headers per record key, compared lowercased
FIELD_ALIASES = {
    "date": ("date", "data"),
    "description": ("description", "descrição", "descricao"),
    "doc_number": ("doc_number", "doc number", "nº documento", "documento"),
    "bank_name": ("bank_name", "bank", "banco"),
    "category_name": ("category_name", "category", "categoria"),
    "cost_center_name": ("cost_center_name", "cost center", "centro de custo"),
    "participant_name": ("participant_name", "participant", "participante"),
    "wallet_name": ("wallet_name", "wallet", "carteira"),
    "value": ("value", "valor", "valor (r$)"),
    "type": ("type", "tipo"),
    "status": ("status", "situação", "situacao"),
}

TYPE_LABELS = {
    "credit": TransactionType.CREDIT,
    "crédito": TransactionType.CREDIT,
    "credito": TransactionType.CREDIT,
    "receita": TransactionType.CREDIT,
    "c": TransactionType.CREDIT,
    "debit": TransactionType.DEBIT,
    "débito": TransactionType.DEBIT,
    "debito": TransactionType.DEBIT,
    "despesa": TransactionType.DEBIT,
    "d": TransactionType.DEBIT,
}

STATUS_LABELS = {
    "paid": TransactionStatus.PAID,
    "pago": TransactionStatus.PAID,
    "pending": TransactionStatus.PENDING,
    "pendente": TransactionStatus.PENDING,
}

REGISTRY_COLUMNS = {
    "bank_name": ("bank_id", RegistryKind.BANKS),
    "category_name": ("category_id", RegistryKind.CATEGORIES),
    "cost_center_name": ("cost_center_id", RegistryKind.COST_CENTERS),
    "participant_name": ("participant_id", RegistryKind.PARTICIPANTS),
    "wallet_name": ("wallet_id", RegistryKind.WALLETS),
}


def normalize_record(row: dict[str, Any]) -> dict[str, str]:
    """Map a raw CSV row onto the import record keys."""
    lookup = {
        (key or "").strip().lower(): (value or "").strip()
        for key, value in row.items()
        if isinstance(value, str) or value is None
    }
    record = {}
    for field_name, aliases in FIELD_ALIASES.items():
        record[field_name] = next((lookup[a] for a in aliases if lookup.get(a)), "")
    return record


def parse_type(label: str) -> Optional[TransactionType]:
    """Parse a type label. Blank returns None.

    Raises:
        ValidationError: If the label is unknown
    """
    if not label:
        return None
    try:
        return TYPE_LABELS[label.strip().lower()]
    except KeyError:
        raise ValidationError(f"Unknown transaction type '{label}'")


def parse_status(label: str) -> TransactionStatus:
    """Parse a status label. Blank means PAID.

    Raises:
        ValidationError: If the label is unknown
    """
    if not label:
        return TransactionStatus.PAID
    try:
        return STATUS_LABELS[label.strip().lower()]
    except KeyError:
        raise ValidationError(f"Unknown transaction status '{label}'")


class CSVImportService:
    """Service for importing transactions from CSV files."""

    def __init__(self, store: LedgerStore):
        """Initialize CSV import service.

        Args:
            store: Ledger store instance
        """
        self.store = store
        self.transaction_service = TransactionService(store)
        self.registry_service = RegistryService(store)

    def build_transaction(self, record: dict[str, str]) -> Transaction:
        """Turn a normalized record into an unsaved transaction.

        Registry names are resolved to ids, creating entries that do not
        exist yet. A blank type is taken from the sign of the value.

        Raises:
            ValidationError: If a required field is missing or malformed
        """
        if not record.get("date"):
            raise ValidationError("Missing date")
        if not record.get("value"):
            raise ValidationError("Missing value")

        try:
            txn_date = parse_date(record["date"])
            amount = parse_amount(record["value"])
        except ValueError as e:
            raise ValidationError(str(e))

        txn_type = parse_type(record.get("type", ""))
        if txn_type is None:
            txn_type = TransactionType.DEBIT if amount < 0 else TransactionType.CREDIT
        status = parse_status(record.get("status", ""))

        references = {}
        for column, (field_name, kind) in REGISTRY_COLUMNS.items():
            references[field_name] = self.registry_service.resolve_or_create(
                kind, record.get(column)
            )

        return Transaction(
            id="",
            date=txn_date,
            description=record.get("description", ""),
            value=abs(amount),
            type=txn_type,
            status=status,
            doc_number=record.get("doc_number", ""),
            **references,
        )

    def import_records(self, records: Iterable[dict[str, Any]], first_row: int = 1) -> dict[str, Any]:
        """Import loose records.

        Args:
            records: Dicts keyed by record keys or by known column headers
            first_row: Number reported for the first record in errors

        Returns:
            Dict with import statistics:
            - imported: number of transactions saved
            - errors: list of error messages (bad rows and store failures)
        """
        errors = []
        prepared = []
        for row_num, row in enumerate(records, start=first_row):
            try:
                prepared.append(self.build_transaction(normalize_record(row)))
            except ValidationError as e:
                errors.append(f"Row {row_num}: {e}")

        imported = 0
        if prepared:
            result = self.transaction_service.save_transactions(prepared)
            imported = len(result.saved)
            if result.error is not None:
                errors.append(str(result.error))

        logger.info("Imported %d transaction(s), %d error(s)", imported, len(errors))
        return {"imported": imported, "errors": errors}

    def import_csv(self, csv_file_path: str) -> dict[str, Any]:
        """Import transactions from a CSV file.

        The file may be UTF-8 (with or without BOM) or Latin-1, separated by
        ";", "," or tabs.

        Raises:
            FileNotFoundError: If CSV file doesn't exist
            ValidationError: If the file has no header row
        """
        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        raw = csv_path.read_bytes()
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            text = raw.decode("latin-1")

        lines = text.splitlines()
        sample = "\n".join(lines[:5])
        try:
            delimiter = csv.Sniffer().sniff(sample, delimiters=";,\t").delimiter
        except csv.Error:
            delimiter = ";"

        reader = csv.DictReader(lines, delimiter=delimiter)
        if not reader.fieldnames:
            raise ValidationError("CSV file has no columns")

        try:
            # Header is row 1
            return self.import_records(reader, first_row=2)
        except DomainError:
            logger.error("Import of %s aborted", csv_file_path)
            raise
