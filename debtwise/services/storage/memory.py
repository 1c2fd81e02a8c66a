"""In-memory storage backends (tests and ephemeral sessions)."""

from typing import Optional

from debtwise.models.audit import AuditEvent
from debtwise.models.ledger import LedgerSnapshot
from debtwise.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Keeps the last saved snapshot as a deep copy."""

    def __init__(self, snapshot: Optional[LedgerSnapshot] = None):
        self._snapshot = snapshot.model_copy(deep=True) if snapshot else None
        self.save_count = 0

    def load_snapshot(self) -> Optional[LedgerSnapshot]:
        if self._snapshot is None:
            return None
        return self._snapshot.model_copy(deep=True)

    def save_snapshot(self, snapshot: LedgerSnapshot) -> None:
        self._snapshot = snapshot.model_copy(deep=True)
        self.save_count += 1


class InMemoryAuditStorage(AuditStorageInterface):

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        return [
            event for event in self.events
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
