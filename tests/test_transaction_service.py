"""Tests for TransactionService."""

from datetime import date
from decimal import Decimal

import pytest

from fincontrol.domain.entities import RegistryKind, TransactionStatus, TransactionType
from fincontrol.domain.errors import NotFoundError, PartialBatchError, ValidationError
from fincontrol.domain.recurrence import Frequency, RecurrenceRule
from fincontrol.domain.transaction import BatchResult, TransactionService, duplicate_key
from fincontrol.domain.transfer import TransferRequest, check_pair


@pytest.fixture
def transfer(transaction_service, sample_registries):
    """Create a 300.00 transfer from Itau to Nubank and return its legs."""
    result = transaction_service.create_transfer(
        TransferRequest(
            source_bank_id=sample_registries["Itau"],
            destination_bank_id=sample_registries["Nubank"],
            value=Decimal("300.00"),
            date=date(2024, 2, 1),
        )
    )
    debit, credit = sorted(result.saved, key=lambda t: t.type.value, reverse=True)
    return debit, credit


class TestCreateTransaction:
    """Tests for creating plain transactions."""

    def test_create(self, transaction_service, sample_registries):
        result = transaction_service.create_transaction(
            date=date(2024, 1, 10),
            description="  Lunch  ",
            value=Decimal("25.50"),
            type=TransactionType.DEBIT,
            bank_id=sample_registries["Itau"],
            category_id=sample_registries["Food"],
        )

        assert result.ok
        assert len(result.saved) == 1
        txn = result.saved[0]
        assert txn.id
        assert txn.description == "Lunch"
        assert txn.status == TransactionStatus.PAID
        assert transaction_service.get_transaction(txn.id) == txn

    def test_blank_description(self, transaction_service):
        with pytest.raises(ValidationError, match="Description"):
            transaction_service.create_transaction(
                date(2024, 1, 1), "   ", Decimal("1"), TransactionType.CREDIT
            )

    def test_negative_value(self, transaction_service):
        with pytest.raises(ValidationError):
            transaction_service.create_transaction(
                date(2024, 1, 1), "Refund", Decimal("-1"), TransactionType.CREDIT
            )

    def test_unknown_reference(self, transaction_service):
        with pytest.raises(NotFoundError):
            transaction_service.create_transaction(
                date(2024, 1, 1), "Lunch", Decimal("1"), TransactionType.DEBIT, bank_id="nope"
            )

    def test_recurring_series(self, transaction_service):
        result = transaction_service.create_transaction(
            date(2024, 1, 15),
            "Gym",
            Decimal("80"),
            TransactionType.DEBIT,
            recurrence=RecurrenceRule(Frequency.WEEKLY, count=3),
        )

        stored = transaction_service.list_transactions()
        assert len(result.saved) == 3
        assert [t.date for t in reversed(stored)] == [
            date(2024, 1, 15),
            date(2024, 1, 22),
            date(2024, 1, 29),
        ]
        assert sorted(t.description for t in stored) == ["Gym (1/3)", "Gym (2/3)", "Gym (3/3)"]

    def test_recurrence_without_dates(self, transaction_service):
        rule = RecurrenceRule(Frequency.MONTHLY, end_date=date(2023, 1, 1))

        with pytest.raises(ValidationError, match="no dates"):
            transaction_service.create_transaction(
                date(2024, 1, 1), "Rent", Decimal("1"), TransactionType.DEBIT, recurrence=rule
            )

        assert transaction_service.list_transactions() == []


class TestTransfers:
    """Tests for transfer creation, editing and deletion."""

    def test_create_transfer(self, transfer, sample_registries):
        debit, credit = transfer

        check_pair(debit, credit)
        assert debit.bank_id == sample_registries["Itau"]
        assert credit.bank_id == sample_registries["Nubank"]
        assert debit.description == "Transfer to Nubank"
        assert credit.description == "Transfer from Itau"

    def test_recurring_transfer(self, transaction_service, sample_registries):
        result = transaction_service.create_transfer(
            TransferRequest(
                sample_registries["Itau"],
                sample_registries["Nubank"],
                Decimal("50"),
                date(2024, 1, 1),
            ),
            recurrence=RecurrenceRule(Frequency.MONTHLY, count=2),
        )

        assert len(result.saved) == 4
        assert len({t.linked_id for t in result.saved}) == 2

    def test_transfer_unknown_bank(self, transaction_service, sample_registries):
        request = TransferRequest(sample_registries["Itau"], "ghost", Decimal("1"), date(2024, 1, 1))

        with pytest.raises(NotFoundError):
            transaction_service.create_transfer(request)

    def test_update_one_leg_updates_both(self, transaction_service, transfer):
        debit, credit = transfer

        result = transaction_service.update_transaction(
            credit.id, value=Decimal("450"), date=date(2024, 2, 5)
        )

        assert result.ok and result.warnings == ()
        new_debit = transaction_service.get_transaction(debit.id)
        new_credit = transaction_service.get_transaction(credit.id)
        check_pair(new_debit, new_credit)
        assert new_debit.value == Decimal("450")
        assert new_credit.date == date(2024, 2, 5)

    def test_update_leg_bank_stays_on_leg(self, transaction_service, transfer, registry_service):
        debit, credit = transfer
        inter = registry_service.create(RegistryKind.BANKS, "Inter")

        transaction_service.update_transaction(credit.id, bank_id=inter.id)

        assert transaction_service.get_transaction(credit.id).bank_id == inter.id
        assert transaction_service.get_transaction(debit.id).bank_id == debit.bank_id

    def test_cannot_change_leg_type(self, transaction_service, transfer):
        debit, _ = transfer

        with pytest.raises(ValidationError):
            transaction_service.update_transaction(debit.id, type=TransactionType.CREDIT)

    def test_orphan_leg_update_warns(self, transaction_service, transfer):
        debit, credit = transfer
        transaction_service.delete_transaction(credit.id, cascade=False)

        result = transaction_service.update_transaction(debit.id, value=Decimal("10"))

        assert result.ok
        assert len(result.saved) == 1
        assert len(result.warnings) == 1
        assert transaction_service.get_transaction(debit.id).value == Decimal("10")
        assert transaction_service.get_transaction(credit.id) is None

    def test_plain_becomes_transfer(self, transaction_service, sample_registries):
        plain = transaction_service.create_transaction(
            date(2024, 3, 1), "Move", Decimal("70"), TransactionType.DEBIT
        ).saved[0]

        result = transaction_service.update_transfer(
            plain.id,
            TransferRequest(
                sample_registries["Itau"],
                sample_registries["Nubank"],
                Decimal("70"),
                date(2024, 3, 1),
            ),
        )

        assert len(result.saved) == 2
        debit = transaction_service.get_transaction(plain.id)
        assert debit.type == TransactionType.DEBIT
        assert transaction_service.counterpart_of(debit) is not None

    def test_delete_cascade(self, transaction_service, transfer):
        debit, credit = transfer

        deleted = transaction_service.delete_transaction(debit.id)

        assert sorted(deleted) == sorted([debit.id, credit.id])
        assert transaction_service.list_transactions() == []

    def test_delete_single_leg(self, transaction_service, transfer):
        debit, credit = transfer

        assert transaction_service.delete_transaction(debit.id, cascade=False) == [debit.id]
        assert transaction_service.get_transaction(credit.id) is not None

    def test_delete_missing(self, transaction_service):
        with pytest.raises(NotFoundError):
            transaction_service.delete_transaction("missing")


class TestUpdateTransaction:
    """Tests for editing plain transactions."""

    def test_update_fields(self, transaction_service, sample_registries):
        txn = transaction_service.create_transaction(
            date(2024, 1, 1), "Lunch", Decimal("20"), TransactionType.DEBIT
        ).saved[0]

        transaction_service.update_transaction(
            txn.id,
            description="Dinner",
            status=TransactionStatus.PENDING,
            category_id=sample_registries["Food"],
        )

        updated = transaction_service.get_transaction(txn.id)
        assert updated.description == "Dinner"
        assert updated.status == TransactionStatus.PENDING
        assert updated.category_id == sample_registries["Food"]
        assert updated.value == Decimal("20")

    def test_clear_reference(self, transaction_service, sample_registries):
        txn = transaction_service.create_transaction(
            date(2024, 1, 1),
            "Lunch",
            Decimal("20"),
            TransactionType.DEBIT,
            category_id=sample_registries["Food"],
        ).saved[0]

        transaction_service.update_transaction(txn.id, category_id="")

        assert transaction_service.get_transaction(txn.id).category_id == ""

    def test_update_missing(self, transaction_service):
        with pytest.raises(NotFoundError):
            transaction_service.update_transaction("missing", description="x")


class TestDuplicates:
    """Tests for duplicate detection."""

    def test_key_normalizes_description_and_value(self, make_transaction):
        first = make_transaction("a", value="10", description=" Coffee ")
        second = make_transaction("b", value="10.00", description="coffee")

        assert duplicate_key(first) == duplicate_key(second)

    def test_find_and_remove(self, transaction_service, temp_db, make_transaction):
        temp_db.upsert_many_transactions(
            [
                make_transaction("a1", description="Coffee", bank_id="b1"),
                make_transaction("a2", description="coffee ", bank_id="b1"),
                make_transaction("a3", description="Coffee", bank_id="b2"),
                make_transaction("a4", description="Coffee", bank_id="b1", type=TransactionType.DEBIT),
                make_transaction("a5", description="COFFEE", bank_id="b1"),
            ]
        )

        duplicates = transaction_service.find_duplicates()

        assert [t.id for t in duplicates] == ["a2", "a5"]
        assert transaction_service.remove_duplicates() == ["a2", "a5"]
        assert transaction_service.find_duplicates() == []
        assert len(transaction_service.list_transactions()) == 3

    def test_no_duplicates(self, transaction_service):
        assert transaction_service.remove_duplicates() == []


class TestSaveTransactions:
    """Tests for batch write reporting."""

    def test_partial_failure_is_reported(self, temp_db, make_transaction, monkeypatch):
        saved = [make_transaction("kept")]

        def failing_batch(transactions):
            raise PartialBatchError("Database error: disk full", saved=saved)

        monkeypatch.setattr(temp_db, "upsert_many_transactions", failing_batch)
        service = TransactionService(temp_db)

        result = service.save_transactions([make_transaction("a"), make_transaction("b")])

        assert isinstance(result, BatchResult)
        assert not result.ok
        assert result.saved == tuple(saved)
        assert "disk full" in str(result.error)
