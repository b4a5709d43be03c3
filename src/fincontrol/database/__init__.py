"""Storage layer for fincontrol application."""

from fincontrol.database.base import LedgerStore
from fincontrol.database.factories import create_sqlite_store, create_store

__all__ = ["LedgerStore", "create_sqlite_store", "create_store"]
