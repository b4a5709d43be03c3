"""Integration tests for the command line interface."""

import re

import pytest

from fincontrol.cli.main import cli
from fincontrol.database.factories import create_sqlite_store
from fincontrol.domain.entities import TransactionStatus, TransactionType

ID_PATTERN = re.compile(r"^  ([0-9a-f-]{36})  ", re.MULTILINE)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "cli.db")


@pytest.fixture
def run(cli_runner, db_path):
    """Invoke the CLI against a throwaway database."""

    def invoke(*args, input=None):
        return cli_runner.invoke(cli, ["--db-path", db_path, *args], input=input)

    return invoke


@pytest.fixture
def banks(run):
    run("bank", "create", "Itau")
    run("bank", "create", "Nubank")


def _saved_ids(output):
    return ID_PATTERN.findall(output)


def _stored(db_path):
    store = create_sqlite_store(database_path=db_path)
    try:
        return store.list_transactions()
    finally:
        store.disconnect()


class TestRegistryCommands:
    """Tests for the registry command groups."""

    def test_create_and_list(self, run):
        result = run("category", "create", "Food")

        assert result.exit_code == 0
        assert "Created category 'Food' (ID: " in result.output
        listing = run("category", "list")
        assert "Food" in listing.output

    def test_empty_list(self, run):
        result = run("participant", "list")

        assert result.exit_code == 0
        assert "No participants found." in result.output

    def test_duplicate_name(self, run):
        run("bank", "create", "Itau")

        result = run("bank", "create", "itau")

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_wallet_with_bank(self, run, banks):
        result = run("wallet", "create", "Personal", "--bank", "itau")

        assert result.exit_code == 0
        assert "Bank: Itau" in run("wallet", "list").output

    def test_wallet_with_unknown_bank(self, run):
        result = run("wallet", "create", "Personal", "--bank", "Ghost")

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_rename_and_delete(self, run):
        run("cost-center", "create", "Home")

        renamed = run("cost-center", "rename", "home", "House")
        deleted = run("cost-center", "delete", "House")

        assert renamed.exit_code == 0
        assert "Renamed cost-center to 'House'" in renamed.output
        assert deleted.exit_code == 0
        assert "No cost centers found." in run("cost-center", "list").output

    def test_delete_referenced_entry(self, run, banks):
        run("add", "--date", "2024-01-01", "--value", "10", "--description", "Fee", "--bank", "Itau")

        result = run("bank", "delete", "Itau")

        assert result.exit_code == 1
        assert "referenced" in result.output

    def test_import_names(self, run, tmp_path):
        names = tmp_path / "categories.txt"
        names.write_text("name\nFood\nRent\n\nfood\n", encoding="utf-8")

        result = run("category", "import", str(names))

        assert result.exit_code == 0
        assert "Imported 2 categories" in result.output


class TestAddCommand:
    """Tests for the add command."""

    def test_add_transaction(self, run, banks, db_path):
        result = run(
            "add",
            "--date", "15/01/2024",
            "--value", "1.234,56",
            "--description", "Rent",
            "--bank", "Itau",
            "--category", "",
        )

        assert result.exit_code == 0
        assert "Saved 1 transaction(s)" in result.output
        (txn,) = _stored(db_path)
        assert txn.value.to_eng_string() == "1234.56"
        assert txn.type == TransactionType.DEBIT

    def test_add_transfer(self, run, banks, db_path):
        result = run("add", "--date", "2024-02-01", "--value", "300", "--bank", "Itau", "--transfer-to", "Nubank")

        assert result.exit_code == 0
        assert "Saved 2 transaction(s)" in result.output
        legs = _stored(db_path)
        assert {t.type for t in legs} == {TransactionType.CREDIT, TransactionType.DEBIT}
        assert legs[0].linked_id == legs[1].linked_id
        assert {t.description for t in legs} == {"Transfer to Nubank", "Transfer from Itau"}

    def test_add_recurring(self, run, db_path):
        result = run(
            "add",
            "--date", "2024-01-15",
            "--value", "50",
            "--description", "Gym",
            "--repeat", "3",
            "--frequency", "weekly",
        )

        assert result.exit_code == 0
        stored = sorted(_stored(db_path), key=lambda t: t.date)
        assert [t.description for t in stored] == ["Gym (1/3)", "Gym (2/3)", "Gym (3/3)"]
        assert [t.status for t in stored] == [
            TransactionStatus.PAID,
            TransactionStatus.PENDING,
            TransactionStatus.PENDING,
        ]

    def test_add_until(self, run, db_path):
        result = run(
            "add", "--date", "2024-01-31", "--value", "10", "--description", "Fee", "--until", "2024-03-31"
        )

        assert result.exit_code == 0
        assert len(_stored(db_path)) == 3

    def test_repeat_and_until_conflict(self, run):
        result = run(
            "add", "--date", "2024-01-01", "--value", "1", "--description", "x",
            "--repeat", "2", "--until", "2024-05-01",
        )

        assert result.exit_code == 1
        assert "either --repeat or --until" in result.output

    def test_invalid_value(self, run):
        result = run("add", "--date", "2024-01-01", "--value", "-5", "--description", "x")

        assert result.exit_code == 1
        assert "Invalid value" in result.output

    def test_invalid_date(self, run):
        result = run("add", "--date", "someday", "--value", "5", "--description", "x")

        assert result.exit_code == 1
        assert "Invalid date format" in result.output

    def test_missing_description(self, run):
        result = run("add", "--date", "2024-01-01", "--value", "5")

        assert result.exit_code == 1
        assert "Description cannot be empty" in result.output

    def test_unknown_bank(self, run):
        result = run("add", "--date", "2024-01-01", "--value", "5", "--description", "x", "--bank", "Ghost")

        assert result.exit_code == 1
        assert "'Ghost' not found" in result.output


class TestTransactionCommands:
    """Tests for the transaction command group."""

    def test_list_with_balance(self, run, banks):
        run("add", "--date", "2023-12-01", "--value", "1000", "--type", "credit", "--description", "Salary", "--bank", "Itau")
        run("add", "--date", "2024-01-03", "--value", "200", "--description", "Market", "--bank", "Itau")
        run("add", "--date", "2024-01-05", "--value", "90", "--description", "Later", "--status", "pending")

        result = run("transaction", "list", "--start-date", "01/01/2024")

        assert result.exit_code == 0
        assert "Found 2 transaction(s)" in result.output
        assert "Balance before 01/01/2024: 1.000,00" in result.output
        assert "800,00" in result.output
        assert "(pending)" in result.output
        assert "Income: 0,00 | Expense: 290,00 | Count: 2" in result.output

    def test_list_empty(self, run):
        result = run("transaction", "list")

        assert result.exit_code == 0
        assert "No transactions found." in result.output

    def test_list_verbose(self, run):
        run("add", "--date", "2024-01-03", "--value", "5", "--type", "credit", "--description", "Tip", "--doc-number", "A1")

        result = run("transaction", "list", "-v")

        assert "Description: Tip" in result.output
        assert "Document: A1" in result.output

    def test_list_conflicting_periods(self, run):
        result = run("transaction", "list", "--this-month", "--last-month")

        assert result.exit_code == 1
        assert "Only one period option" in result.output

    def test_update(self, run, db_path):
        added = run("add", "--date", "2024-01-03", "--value", "5", "--description", "Tip")
        (txn_id,) = _saved_ids(added.output)

        result = run("transaction", "update", txn_id, "--value", "7,50", "--status", "pending")

        assert result.exit_code == 0
        (txn,) = _stored(db_path)
        assert str(txn.value) == "7.50"
        assert txn.status == TransactionStatus.PENDING

    def test_update_transfer_leg(self, run, banks, db_path):
        added = run("add", "--date", "2024-02-01", "--value", "300", "--bank", "Itau", "--transfer-to", "Nubank")
        first_id = _saved_ids(added.output)[0]

        result = run("transaction", "update", first_id, "--value", "450")

        assert result.exit_code == 0
        assert "Saved 2 transaction(s)" in result.output
        assert {str(t.value) for t in _stored(db_path)} == {"450.00"}

    def test_update_missing(self, run):
        result = run("transaction", "update", "missing", "--value", "1")

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_delete_transfer_both_legs(self, run, banks, db_path):
        added = run("add", "--date", "2024-02-01", "--value", "300", "--bank", "Itau", "--transfer-to", "Nubank")
        first_id = _saved_ids(added.output)[0]

        result = run("transaction", "delete", first_id, "--yes")

        assert result.exit_code == 0
        assert result.output.count("Deleted transaction") == 2
        assert _stored(db_path) == []

    def test_delete_single_leg(self, run, banks, db_path):
        added = run("add", "--date", "2024-02-01", "--value", "300", "--bank", "Itau", "--transfer-to", "Nubank")
        first_id = _saved_ids(added.output)[0]

        result = run("transaction", "delete", first_id, "--single", "--yes")

        assert result.exit_code == 0
        assert len(_stored(db_path)) == 1

    def test_delete_cancelled(self, run, db_path):
        added = run("add", "--date", "2024-01-03", "--value", "5", "--description", "Tip")
        (txn_id,) = _saved_ids(added.output)

        result = run("transaction", "delete", txn_id, input="n\n")

        assert "Deletion cancelled." in result.output
        assert len(_stored(db_path)) == 1

    def test_dedupe(self, run, db_path):
        for description in ("Coffee", "coffee", "Tea"):
            run("add", "--date", "2024-01-03", "--value", "5", "--description", description)

        result = run("transaction", "dedupe", "--yes")

        assert "Found 1 duplicate transaction(s):" in result.output
        assert "Deleted 1 transaction(s)" in result.output
        assert len(_stored(db_path)) == 2
        assert "No duplicate transactions found." in run("transaction", "dedupe").output


class TestReportCommands:
    """Tests for cashflow, summary and expenses."""

    @pytest.fixture
    def ledger(self, run, banks):
        run("category", "create", "Food")
        run("add", "--date", "2023-12-20", "--value", "1000", "--type", "credit", "--description", "Salary", "--bank", "Itau")
        run("add", "--date", "2024-01-10", "--value", "300", "--description", "Market", "--bank", "Itau", "--category", "Food")
        run("add", "--date", "2024-02-10", "--value", "100", "--description", "Bill", "--bank", "Nubank", "--status", "pending")

    def test_cashflow(self, run, ledger):
        result = run("cashflow", "--start-date", "2024-01-01")

        assert result.exit_code == 0
        lines = [line.split() for line in result.output.splitlines() if line.startswith(("01/2024", "02/2024"))]
        assert lines[0] == ["01/2024", "1.000,00", "0,00", "300,00", "-300,00", "700,00"]
        assert lines[1] == ["02/2024", "700,00", "0,00", "100,00", "-100,00", "600,00"]

    def test_cashflow_daily_details(self, run, ledger):
        result = run("cashflow", "--granularity", "daily", "--details", "--bank", "Nubank")

        assert "10/02/2024" in result.output
        assert "Bill (pending)" in result.output

    def test_cashflow_empty(self, run):
        assert "No transactions found." in run("cashflow").output

    def test_summary(self, run, ledger):
        result = run("summary")

        assert result.exit_code == 0
        assert "Balance (paid)" in result.output
        assert "700,00" in result.output
        assert "Bank balances:" in result.output

    def test_expenses(self, run, ledger):
        result = run("expenses", "--by", "category")

        assert result.exit_code == 0
        assert "Food" in result.output
        assert "No category" in result.output

    def test_expenses_monthly(self, run, ledger):
        result = run("expenses", "--monthly")

        assert "2024-01" in result.output
        assert "2024-02" in result.output

    def test_no_expenses(self, run):
        assert "No expenses found." in run("expenses").output


class TestImportExportCommands:
    """Tests for CSV import and export commands."""

    def test_import(self, run, tmp_path, db_path):
        csv_file = tmp_path / "in.csv"
        csv_file.write_text(
            "date;description;value;type;bank_name\n"
            "2024-01-01;Salary;5000;credit;Itau\n"
            "bad;Broken;1;debit;Itau\n",
            encoding="utf-8",
        )

        result = run("import", str(csv_file))

        assert result.exit_code == 0
        assert "Imported: 1 transactions" in result.output
        assert "Errors: 1" in result.output
        assert "Itau" in run("bank", "list").output

    def test_export(self, run, tmp_path):
        run("add", "--date", "2024-01-03", "--value", "5", "--description", "Tip")
        out = tmp_path / "out.csv"

        result = run("export", str(out), "--start-date", "2024-01-01")

        assert result.exit_code == 0
        assert f"Exported 1 transaction(s) to {out}" in result.output
        assert out.read_text(encoding="utf-8-sig").startswith("Date;Doc Number;Description")


def test_local_storage_backend(cli_runner, tmp_path):
    path = str(tmp_path / "ledger.json")

    created = cli_runner.invoke(cli, ["--storage", "local", "--db-path", path, "bank", "create", "Itau"])
    listed = cli_runner.invoke(cli, ["--storage", "local", "--db-path", path, "bank", "list"])

    assert created.exit_code == 0
    assert "Itau" in listed.output


def test_help_does_not_open_store(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "cashflow" in result.output
