"""Tests for the cash-flow ladder."""

from datetime import date
from decimal import Decimal

from fincontrol.domain.cash_flow import (
    Granularity,
    build_cash_flow,
    historical_opening_balance,
    period_key,
)
from fincontrol.domain.entities import TransactionStatus, TransactionType

CREDIT = TransactionType.CREDIT
DEBIT = TransactionType.DEBIT
PENDING = TransactionStatus.PENDING


def _ledger(make_transaction):
    return [
        make_transaction("h1", date(2023, 12, 10), "1000", CREDIT, bank_id="b1"),
        make_transaction("h2", date(2023, 12, 11), "400", DEBIT, PENDING, bank_id="b1"),
        make_transaction("h3", date(2023, 12, 12), "50", CREDIT, bank_id="b2"),
        make_transaction("j1", date(2024, 1, 5), "300", CREDIT, bank_id="b1"),
        make_transaction("j2", date(2024, 1, 20), "120", DEBIT, bank_id="b2"),
        make_transaction("f1", date(2024, 2, 3), "80", DEBIT, PENDING, bank_id="b1"),
        make_transaction("m1", date(2024, 3, 1), "10", CREDIT, bank_id="b1"),
    ]


class TestBuildCashFlow:
    """Tests for build_cash_flow."""

    def test_monthly_ladder(self, make_transaction):
        rows = build_cash_flow(_ledger(make_transaction), start_date=date(2024, 1, 1))

        assert [r.period for r in rows] == ["01/2024", "02/2024", "03/2024"]
        january, february, march = rows
        assert january.opening == Decimal("1050")
        assert january.income == Decimal("300")
        assert january.expense == Decimal("120")
        assert january.operational == Decimal("180")
        assert january.closing == Decimal("1230")
        assert february.expense == Decimal("80")
        assert february.closing == Decimal("1150")
        assert march.closing == Decimal("1160")

    def test_ladder_continuity(self, make_transaction):
        rows = build_cash_flow(_ledger(make_transaction), start_date=date(2024, 1, 1))

        for previous, current in zip(rows, rows[1:]):
            assert current.opening == previous.closing
        for row in rows:
            assert row.closing == row.opening + row.income - row.expense

    def test_without_start_date_opens_at_zero(self, make_transaction):
        rows = build_cash_flow(_ledger(make_transaction))

        assert rows[0].period == "12/2023"
        assert rows[0].opening == Decimal("0")

    def test_end_date_limits_range(self, make_transaction):
        rows = build_cash_flow(
            _ledger(make_transaction),
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
        )

        assert [r.key for r in rows] == ["2024-01"]

    def test_bank_scope(self, make_transaction):
        rows = build_cash_flow(
            _ledger(make_transaction),
            start_date=date(2024, 1, 1),
            bank_ids=["b2"],
        )

        assert len(rows) == 1
        assert rows[0].opening == Decimal("50")
        assert rows[0].closing == Decimal("-70")

    def test_daily_labels(self, make_transaction):
        rows = build_cash_flow(
            _ledger(make_transaction),
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
            granularity=Granularity.DAILY,
        )

        assert [r.period for r in rows] == ["05/01/2024", "20/01/2024"]
        assert rows[0].transactions[0].id == "j1"

    def test_empty(self):
        assert build_cash_flow([], start_date=date(2024, 1, 1)) == []


def test_historical_opening_balance_counts_paid_only(make_transaction):
    ledger = _ledger(make_transaction)

    assert historical_opening_balance(ledger, date(2024, 1, 1)) == Decimal("1050")
    assert historical_opening_balance(ledger, date(2024, 1, 1), {"b1"}) == Decimal("1000")
    assert historical_opening_balance(ledger, None) == Decimal("0")


def test_period_key():
    assert period_key(date(2024, 3, 9), Granularity.MONTHLY) == ("2024-03", "03/2024")
    assert period_key(date(2024, 3, 9), Granularity.DAILY) == ("2024-03-09", "09/03/2024")
