"""Services package."""

from debtwise.services.contacts import (
    ContactSourceError,
    ContactSourceInterface,
    StaticContactSource,
    suggest_counterparties,
)
from debtwise.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    JsonLinesAuditStorage,
    LedgerStorageInterface,
    SnapshotCorruptedError,
    StorageError,
)

__all__ = [
    # Contact sources
    "ContactSourceError",
    "ContactSourceInterface",
    "StaticContactSource",
    "suggest_counterparties",
    # Storage services
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
    "JsonLinesAuditStorage",
    "LedgerStorageInterface",
    "SnapshotCorruptedError",
    "StorageError",
]
