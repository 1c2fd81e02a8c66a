"""
Data Models Package

This package contains all Pydantic models used by DebtWise.
Everything stored, imported or exported must conform to these schemas.
"""

from debtwise.models.ledger import (
    DEFAULT_DESCRIPTION,
    DEFAULT_ICON,
    PERSONAL_GROUP_ID,
    SPLIT_DESCRIPTION,
    BalanceState,
    Debt,
    DebtDraft,
    DebtType,
    FeeConfig,
    FeeFrequency,
    FeeType,
    Group,
    LedgerExport,
    LedgerSnapshot,
    Payment,
    SplitMode,
    SplitParticipant,
    default_groups,
    new_id,
)
from debtwise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from debtwise.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Ledger models
    "DEFAULT_DESCRIPTION",
    "DEFAULT_ICON",
    "PERSONAL_GROUP_ID",
    "SPLIT_DESCRIPTION",
    "BalanceState",
    "Debt",
    "DebtDraft",
    "DebtType",
    "FeeConfig",
    "FeeFrequency",
    "FeeType",
    "Group",
    "LedgerExport",
    "LedgerSnapshot",
    "Payment",
    "SplitMode",
    "SplitParticipant",
    "default_groups",
    "new_id",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
