"""
Audit Models for DebtWise

Every ledger mutation is recorded as an audit event. The ledger itself
only keeps the current state; the audit trail is how you find out how
it got there (which payment was applied, which group was removed, which
import replaced everything).

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Debt lifecycle
    DEBTS_ADDED = "debts_added"
    DEBT_EDITED = "debt_edited"
    DEBT_SETTLED = "debt_settled"
    DEBT_DELETED = "debt_deleted"
    MANUAL_FEE_UPDATED = "manual_fee_updated"
    DEBT_NOT_FOUND = "debt_not_found"

    # Groups
    GROUP_ADDED = "group_added"
    GROUP_REMOVED = "group_removed"
    GROUP_REMOVAL_REJECTED = "group_removal_rejected"

    # Backup
    DATA_IMPORTED = "data_imported"
    IMPORT_REJECTED = "import_rejected"
    DATA_EXPORTED = "data_exported"

    # Persistence
    SNAPSHOT_SAVED = "snapshot_saved"
    SNAPSHOT_LOADED = "snapshot_loaded"
    STORAGE_FAILED = "storage_failed"

    # System events
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every ledger mutation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'debt', 'group', 'ledger')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one split bill fan-out)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """Serialize as one line of a JSON-lines audit file."""
        return json.dumps(self.to_log_dict(), default=str)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.debt_settled(debt_id, paid, remaining, settled)
        event = AuditEventBuilder.group_removed(group_id, reassigned=3)
    """

    @staticmethod
    def debts_added(
        debt_ids: list[str],
        names: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBTS_ADDED,
            entity_type="debt",
            entity_id=debt_ids[0] if len(debt_ids) == 1 else None,
            correlation_id=correlation_id,
            description=f"{len(debt_ids)} debt(s) added",
            details={
                "debt_ids": debt_ids,
                "names": names,
            },
            is_user_action=True,
        )

    @staticmethod
    def debt_edited(debt_id: str, original_amount: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_EDITED,
            entity_type="debt",
            entity_id=debt_id,
            description="Debt edited; principal reset",
            details={"original_amount": original_amount},
            is_user_action=True,
        )

    @staticmethod
    def debt_settled(
        debt_id: str,
        paid_amount: float,
        remaining: float,
        is_settled: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_SETTLED,
            entity_type="debt",
            entity_id=debt_id,
            description=(
                "Debt fully settled" if is_settled
                else f"Partial payment recorded, {remaining:.2f} remaining"
            ),
            details={
                "paid_amount": paid_amount,
                "remaining": remaining,
                "is_settled": is_settled,
            },
            is_user_action=True,
        )

    @staticmethod
    def debt_deleted(debt_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_DELETED,
            entity_type="debt",
            entity_id=debt_id,
            description="Debt deleted",
            is_user_action=True,
        )

    @staticmethod
    def manual_fee_updated(debt_id: str, adjustment: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MANUAL_FEE_UPDATED,
            entity_type="debt",
            entity_id=debt_id,
            description=f"Manual fee adjustment set to {adjustment:.2f}",
            details={"manual_adjustment": adjustment},
            is_user_action=True,
        )

    @staticmethod
    def debt_not_found(debt_id: str, operation: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="debt",
            entity_id=debt_id,
            description=f"{operation} ignored: unknown debt",
            details={"operation": operation},
        )

    @staticmethod
    def group_added(group_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GROUP_ADDED,
            entity_type="group",
            entity_id=group_id,
            description=f"Group added: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def group_removed(group_id: str, reassigned: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GROUP_REMOVED,
            entity_type="group",
            entity_id=group_id,
            description=f"Group removed; {reassigned} debt(s) moved to Personal",
            details={"reassigned_debts": reassigned},
            is_user_action=True,
        )

    @staticmethod
    def group_removal_rejected(group_id: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GROUP_REMOVAL_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="group",
            entity_id=group_id,
            description="Group removal rejected",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def data_imported(debt_count: int, group_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_IMPORTED,
            entity_type="ledger",
            description=f"Ledger replaced from backup: {debt_count} debts, {group_count} groups",
            details={
                "debt_count": debt_count,
                "group_count": group_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            description=f"Import rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def data_exported(debt_count: int, version: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_EXPORTED,
            entity_type="ledger",
            description=f"Ledger exported ({debt_count} debts)",
            details={
                "debt_count": debt_count,
                "version": version,
            },
            is_user_action=True,
        )

    @staticmethod
    def snapshot_saved(debt_count: int, group_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_SAVED,
            entity_type="ledger",
            description="Ledger snapshot saved",
            details={
                "debt_count": debt_count,
                "group_count": group_count,
            },
        )

    @staticmethod
    def snapshot_loaded(debt_count: int, group_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_LOADED,
            entity_type="ledger",
            description="Ledger snapshot loaded",
            details={
                "debt_count": debt_count,
                "group_count": group_count,
            },
        )

    @staticmethod
    def storage_failed(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            description=f"Storage {operation} failed",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
