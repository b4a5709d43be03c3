"""Shared pytest fixtures for fincontrol tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from fincontrol.database.factories import create_sqlite_store
from fincontrol.database.local_store import LocalFileStore
from fincontrol.domain.csv_export import CSVExportService
from fincontrol.domain.csv_import import CSVImportService
from fincontrol.domain.entities import (
    RegistryKind,
    Transaction,
    TransactionStatus,
    TransactionType,
    WalletExtra,
)
from fincontrol.domain.registry import RegistryService
from fincontrol.domain.summary import SummaryService
from fincontrol.domain.transaction import TransactionService
from fincontrol.logging_config import reset_logging


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep user settings and CLI logging setup out of tests."""
    for name in ("FINCONTROL_STORAGE", "FINCONTROL_DATABASE_URL", "FINCONTROL_DB_PATH"):
        monkeypatch.delenv(name, raising=False)
    yield
    reset_logging()


@pytest.fixture
def temp_db():
    """Create a temporary SQLite store for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for tests that need it
    store.database_path = db_path
    store.connect()
    store.initialize_schema()

    yield store

    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def local_store(tmp_path):
    """Create a local JSON-file store for testing."""
    store = LocalFileStore(str(tmp_path / "ledger.json"))
    store.connect()
    store.initialize_schema()
    yield store
    store.disconnect()


@pytest.fixture(params=["sql", "local"])
def any_store(request):
    """Run a test against both storage backends."""
    return request.getfixturevalue("temp_db" if request.param == "sql" else "local_store")


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary store."""
    return TransactionService(temp_db)


@pytest.fixture
def registry_service(temp_db):
    """Create a RegistryService with a temporary store."""
    return RegistryService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService with a temporary store."""
    return SummaryService(temp_db)


@pytest.fixture
def csv_import_service(temp_db):
    """Create a CSVImportService with a temporary store."""
    return CSVImportService(temp_db)


@pytest.fixture
def csv_export_service(temp_db):
    """Create a CSVExportService with a temporary store."""
    return CSVExportService(temp_db)


@pytest.fixture
def sample_registries(registry_service):
    """Create a small set of registry entries and return their IDs by name."""
    itau = registry_service.create(RegistryKind.BANKS, "Itau")
    nubank = registry_service.create(RegistryKind.BANKS, "Nubank")
    return {
        "Itau": itau.id,
        "Nubank": nubank.id,
        "Food": registry_service.create(RegistryKind.CATEGORIES, "Food").id,
        "Salary": registry_service.create(RegistryKind.CATEGORIES, "Salary").id,
        "Home": registry_service.create(RegistryKind.COST_CENTERS, "Home").id,
        "Alice": registry_service.create(RegistryKind.PARTICIPANTS, "Alice").id,
        "Personal": registry_service.create(
            RegistryKind.WALLETS, "Personal", WalletExtra(bank_id=itau.id)
        ).id,
    }


@pytest.fixture
def make_transaction():
    """Return a factory for in-memory transactions with sensible defaults."""

    def factory(
        id: str = "t1",
        on: date = date(2024, 1, 1),
        value: str = "100.00",
        type: TransactionType = TransactionType.CREDIT,
        status: TransactionStatus = TransactionStatus.PAID,
        description: str = "Entry",
        **fields,
    ) -> Transaction:
        return Transaction(
            id=id,
            date=on,
            description=description,
            value=Decimal(value),
            type=type,
            status=status,
            **fields,
        )

    return factory


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
