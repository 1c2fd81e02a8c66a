"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON document is used as the ledger store because:
1. The persisted layout is already two JSON collections (debts, groups)
2. No database setup required for a single-user ledger
3. The file doubles as a human-readable backup

Snapshots are written to a temporary file next to the target and then
moved into place, so a crash mid-write never leaves a half-written ledger.

The audit trail is a separate JSON-lines file: one event per line,
append-only.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from debtwise.models.audit import AuditEvent
from debtwise.models.ledger import LedgerSnapshot
from debtwise.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
    SnapshotCorruptedError,
    StorageError,
)


logger = structlog.get_logger(__name__)


class JsonFileLedgerStorage(LedgerStorageInterface):
    """
    Ledger snapshot stored as one JSON file.

    Layout: {"debts": [...], "groups": [...]} with camelCase keys.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load_snapshot(self) -> Optional[LedgerSnapshot]:
        if not self._path.exists():
            return None

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read ledger file {self._path}: {e}")

        try:
            return LedgerSnapshot.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            raise SnapshotCorruptedError(
                f"Ledger file {self._path} is not a valid snapshot: {e}"
            )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_atomic(self, content: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(tmp_path, self._path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def save_snapshot(self, snapshot: LedgerSnapshot) -> None:
        content = snapshot.model_dump_json(by_alias=True, indent=2)
        try:
            self._write_atomic(content)
        except OSError as e:
            raise StorageError(f"Failed to write ledger file {self._path}: {e}")


class JsonLinesAuditStorage(AuditStorageInterface):
    """Append-only audit trail, one JSON event per line."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(event.to_json_line() + "\n")
            return True
        except OSError as e:
            # Don't raise - audit logging should not break the main flow
            logger.warning("audit_write_failed", error=str(e), path=str(self._path))
            return False

    def _read_events(self) -> list[AuditEvent]:
        if not self._path.exists():
            return []

        try:
            lines = self._path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise StorageError(f"Failed to read audit file {self._path}: {e}")

        events = []
        for line in lines:
            if not line.strip():
                continue
            try:
                events.append(AuditEvent.model_validate(json.loads(line)))
            except (ValueError, ValidationError):
                # Skip malformed lines
                continue
        return events

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            event for event in self._read_events()
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = self._read_events()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
