"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON file for a key-value store or database later
2. Use in-memory storage for testing
3. Keep ledger logic decoupled from where snapshots live

The interface is intentionally tiny. The ledger is persisted as one
snapshot (debts + groups) at points the host chooses; there is no
per-record storage and no query layer.
"""

from abc import ABC, abstractmethod
from typing import Optional

from debtwise.models.audit import AuditEvent
from debtwise.models.ledger import LedgerSnapshot


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger snapshot storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load_snapshot(self) -> Optional[LedgerSnapshot]:
        """
        Load the last saved snapshot.

        Returns:
            The snapshot, or None if nothing has been saved yet

        Raises:
            SnapshotCorruptedError: If stored data can't be parsed
            StorageError: If the backend can't be read
        """
        pass

    @abstractmethod
    def save_snapshot(self, snapshot: LedgerSnapshot) -> None:
        """
        Replace the stored snapshot.

        Raises:
            StorageError: If save fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity, in chronological order.
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SnapshotCorruptedError(StorageError):
    """Stored snapshot exists but is not a valid ledger."""
    pass
