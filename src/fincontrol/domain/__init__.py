"""Domain layer for fincontrol application."""

import importlib

_SERVICES = {
    "BatchResult": "fincontrol.domain.transaction",
    "TransactionService": "fincontrol.domain.transaction",
    "RegistryService": "fincontrol.domain.registry",
    "SummaryService": "fincontrol.domain.summary",
    "CSVImportService": "fincontrol.domain.csv_import",
    "CSVExportService": "fincontrol.domain.csv_export",
    "LedgerViewService": "fincontrol.domain.ledger_view",
    "RequestSequencer": "fincontrol.domain.ledger_view",
}

__all__ = list(_SERVICES)


# Import services lazily to avoid circular dependencies with the database layer
def __getattr__(name):
    if name in _SERVICES:
        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
