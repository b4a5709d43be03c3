"""Tests for CSV export service."""

import csv
from datetime import date

import pytest

from fincontrol.domain.csv_export import BOM, HEADERS, PENDING_MARKER
from fincontrol.domain.entities import TransactionFilter, TransactionStatus, TransactionType


@pytest.fixture
def ledger(temp_db, sample_registries, make_transaction):
    ids = sample_registries
    temp_db.upsert_many_transactions(
        [
            make_transaction("e1", date(2023, 12, 31), "1000", TransactionType.CREDIT, bank_id=ids["Itau"]),
            make_transaction(
                "e2",
                date(2024, 1, 10),
                "1234.5",
                TransactionType.DEBIT,
                description="Rent; January",
                bank_id=ids["Itau"],
                wallet_id=ids["Personal"],
                category_id=ids["Food"],
                cost_center_id=ids["Home"],
                participant_id=ids["Alice"],
                doc_number="77",
            ),
            make_transaction(
                "e3",
                date(2024, 1, 12),
                "50",
                TransactionType.DEBIT,
                TransactionStatus.PENDING,
                bank_id=ids["Nubank"],
            ),
        ]
    )
    return ids


def _parse(text):
    assert text.startswith(BOM)
    return list(csv.reader(text[len(BOM):].splitlines(), delimiter=";"))


class TestRender:
    """Tests for rendering CSV text."""

    def test_header_and_rows(self, csv_export_service, ledger):
        rows = _parse(csv_export_service.render())

        assert rows[0] == HEADERS
        assert len(rows) == 4

    def test_row_contents(self, csv_export_service, ledger):
        rows = _parse(csv_export_service.render())
        rent = next(r for r in rows if r[2] == "Rent; January")

        assert rent == [
            "10/01/2024",
            "77",
            "Rent; January",
            "1.234,50",
            "Debit",
            "Paid",
            "Itau",
            "Personal",
            "Food",
            "Home",
            "Alice",
            "-234,50",
        ]

    def test_pending_has_marker(self, csv_export_service, ledger):
        rows = _parse(csv_export_service.render())
        pending = next(r for r in rows if r[5] == "Pending")

        assert pending[-1] == PENDING_MARKER
        assert pending[6] == "Nubank"

    def test_filtered_balance_is_seeded(self, csv_export_service, ledger):
        rows = _parse(
            csv_export_service.render(TransactionFilter(start_date=date(2024, 1, 1), bank_id=ledger["Itau"]))
        )

        assert len(rows) == 2
        assert rows[1][-1] == "-234,50"

    def test_empty_ledger(self, csv_export_service):
        assert _parse(csv_export_service.render()) == [HEADERS]


def test_export_writes_file(csv_export_service, ledger, tmp_path):
    path = tmp_path / "out.csv"

    count = csv_export_service.export_csv(str(path))

    assert count == 3
    text = path.read_text(encoding="utf-8")
    assert _parse(text)[0] == HEADERS


def test_export_reimports(csv_export_service, csv_import_service, ledger, tmp_path):
    path = tmp_path / "out.csv"
    csv_export_service.export_csv(str(path))
    csv_import_service.transaction_service.delete_transactions(
        [t.id for t in csv_import_service.transaction_service.list_transactions()]
    )

    result = csv_import_service.import_csv(str(path))

    assert result == {"imported": 3, "errors": []}
    reimported = csv_import_service.transaction_service.list_transactions()
    rent = next(t for t in reimported if t.description == "Rent; January")
    assert rent.category_id == ledger["Food"]
    assert rent.doc_number == "77"
