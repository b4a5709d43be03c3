"""Store factory functions for creating ledger store instances."""

import logging
from typing import Optional

from fincontrol.config import StorageBackend, StoreConfig, load_config
from fincontrol.database.base import LedgerStore
from fincontrol.database.local_store import LocalFileStore
from fincontrol.database.sqlalchemy_db import SQLAlchemyStore

logger = logging.getLogger(__name__)


def create_store(config: Optional[StoreConfig] = None) -> LedgerStore:
    """Create the ledger store selected by the configuration.

    Args:
        config: Resolved settings. If None, settings are loaded from the
            environment (see load_config).

    Returns:
        LedgerStore for the configured backend
    """
    if config is None:
        config = load_config()

    if config.backend == StorageBackend.LOCAL:
        logger.debug("Using local store at %s", config.data_path)
        return LocalFileStore(config.data_path)

    logger.debug("Using SQL store at %s", config.database_url)
    return SQLAlchemyStore(config.database_url)


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyStore:
    """Create a SQLite-backed store.

    Args:
        database_path: Path to SQLite database file. If None, checks
            FINCONTROL_DB_PATH, then defaults to ~/.fincontrol/fincontrol.db

    Returns:
        SQLAlchemyStore configured for SQLite
    """
    config = load_config(backend=StorageBackend.SQL.value, data_path=database_path)
    return SQLAlchemyStore(config.database_url)
