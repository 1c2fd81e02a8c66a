"""
Storage Services Package

Provides abstract interfaces and concrete implementations for ledger
snapshots and the audit trail. JSON files are the default backend, but
the interfaces are designed to be swappable.
"""

from debtwise.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
    SnapshotCorruptedError,
    StorageError,
)
from debtwise.services.storage.json_file import (
    JsonFileLedgerStorage,
    JsonLinesAuditStorage,
)
from debtwise.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "SnapshotCorruptedError",
    "StorageError",
    # JSON file implementation
    "JsonFileLedgerStorage",
    "JsonLinesAuditStorage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
]
