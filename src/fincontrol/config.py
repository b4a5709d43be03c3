"""Configuration for selecting and locating the storage backend."""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from fincontrol.domain.errors import ValidationError

DEFAULT_DIR = ".fincontrol"


class StorageBackend(str, Enum):
    """Where the ledger lives. Chosen once at startup."""

    SQL = "sql"
    LOCAL = "local"


@dataclass(frozen=True)
class StoreConfig:
    """Resolved storage settings."""

    backend: StorageBackend
    database_url: Optional[str] = None
    data_path: Optional[str] = None


def _default_path(filename: str) -> str:
    # Default to ~/.fincontrol/<filename>
    db_dir = Path.home() / DEFAULT_DIR
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / filename)


def load_config(
    backend: Optional[str] = None,
    database_url: Optional[str] = None,
    data_path: Optional[str] = None,
) -> StoreConfig:
    """Resolve storage settings.

    Explicit arguments win, then the FINCONTROL_STORAGE,
    FINCONTROL_DATABASE_URL and FINCONTROL_DB_PATH environment variables,
    then defaults under ~/.fincontrol.

    Raises:
        ValidationError: If the backend name is unknown
    """
    backend = backend or os.environ.get("FINCONTROL_STORAGE") or StorageBackend.SQL.value
    try:
        storage = StorageBackend(backend.lower())
    except ValueError:
        raise ValidationError(
            f"Unknown storage backend '{backend}'. Supported: sql, local"
        )

    if database_url is None:
        database_url = os.environ.get("FINCONTROL_DATABASE_URL")
    if data_path is None:
        data_path = os.environ.get("FINCONTROL_DB_PATH")

    if storage == StorageBackend.SQL:
        if database_url is None:
            path = data_path or _default_path("fincontrol.db")
            database_url = f"sqlite:///{path}"
        return StoreConfig(backend=storage, database_url=database_url, data_path=data_path)

    if data_path is None:
        data_path = _default_path("fincontrol.json")
    return StoreConfig(backend=storage, data_path=data_path)
