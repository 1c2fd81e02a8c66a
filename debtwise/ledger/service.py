"""
Ledger Service

The single owner of the ledger state: the debt collection and the group
collection. Its methods are the ONLY write surface.

DESIGN DECISIONS:
1. Every mutation builds a new list and swaps it in at the end, so an
   operation is either fully applied or not applied at all.
2. Unknown ids on edit / settle / delete are silent no-ops (logged as
   warnings), never crashes.
3. Persistence is explicit. Mutations never save; the host calls save()
   and load() at the points it chooses.
4. Time is injected. Operations that need "now" accept it, and fall back
   to the service clock, never to a global clock read inside the engines.

NOT thread-safe: one writer at a time. A concurrent host must wrap the
service behind a single-writer lock.
"""

import math
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union
from uuid import UUID

import structlog

from debtwise.audit import AuditLogger, create_correlation_id
from debtwise.engines.fees import Moment, effective_amount
from debtwise.ledger.exceptions import ImportValidationError, ProtectedGroupError
from debtwise.ledger.splits import split_bill
from debtwise.models.audit import AuditEventBuilder
from debtwise.models.ledger import (
    PERSONAL_GROUP_ID,
    Debt,
    DebtDraft,
    Group,
    LedgerExport,
    LedgerSnapshot,
    Payment,
    SplitMode,
    SplitParticipant,
    default_groups,
    new_id,
)
from debtwise.models.validation import ValidationResult
from debtwise.services.storage import LedgerStorageInterface, StorageError
from debtwise.validation import ImportValidator


logger = structlog.get_logger(__name__)

DEFAULT_EXPORT_VERSION = "1.0.0"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _ensure_personal_group(groups: Sequence[Group]) -> list[Group]:
    """The reserved Personal group always exists."""
    groups = list(groups)
    if not any(group.id == PERSONAL_GROUP_ID for group in groups):
        groups.insert(0, default_groups()[0])
    return groups


class LedgerService:
    """
    Owns the ledger and exposes the mutation operations.

    Usage:
        ledger = LedgerService(storage=JsonFileLedgerStorage("ledger.json"))
        ledger.load()
        ledger.add_debts([DebtDraft(name="Alex", amount=50)])
        ledger.settle_debt(debt_id, 20, date(2024, 5, 1))
        ledger.save()
    """

    def __init__(
        self,
        debts: Optional[Iterable[Debt]] = None,
        groups: Optional[Iterable[Group]] = None,
        storage: Optional[LedgerStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
        export_version: str = DEFAULT_EXPORT_VERSION,
    ):
        self._debts: list[Debt] = list(debts or [])
        self._groups: list[Group] = _ensure_personal_group(
            default_groups() if groups is None else groups
        )
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock or utc_now
        self._export_version = export_version
        self._validator = ImportValidator()

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def debts(self) -> tuple[Debt, ...]:
        return tuple(self._debts)

    @property
    def groups(self) -> tuple[Group, ...]:
        return tuple(self._groups)

    def now(self) -> datetime:
        return self._clock()

    def _resolve_now(self, now: Optional[Moment]) -> Moment:
        return self._clock() if now is None else now

    def _today(self) -> date:
        now = self._clock()
        return now.date() if isinstance(now, datetime) else now

    def _find_index(self, debt_id: str) -> Optional[int]:
        for index, debt in enumerate(self._debts):
            if debt.id == debt_id:
                return index
        return None

    def get_debt(self, debt_id: str) -> Optional[Debt]:
        index = self._find_index(debt_id)
        return None if index is None else self._debts[index]

    def with_current_amounts(self, now: Optional[Moment] = None) -> list[Debt]:
        """Copies of every debt with the cached amount refreshed as of now."""
        now = self._resolve_now(now)
        return [
            debt.model_copy(update={"amount": effective_amount(debt, now)})
            for debt in self._debts
        ]

    def saved_names(self) -> list[str]:
        """Distinct counterparty names in first-seen order."""
        return list(dict.fromkeys(debt.name for debt in self._debts))

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            debts=[debt.model_copy(deep=True) for debt in self._debts],
            groups=[group.model_copy() for group in self._groups],
        )

    def _not_found(self, debt_id: str, operation: str) -> None:
        self._audit_logger.log(AuditEventBuilder.debt_not_found(debt_id, operation))

    # -------------------------------------------------------------------------
    # Debt mutations
    # -------------------------------------------------------------------------

    def add_debts(
        self,
        drafts: Sequence[DebtDraft],
        correlation_id: Optional[UUID] = None,
    ) -> list[Debt]:
        """
        Create one debt per draft and prepend them to the ledger.

        New debts get fresh ids, an empty history, is_settled=False and
        original_amount equal to the entered amount. A draft without a
        date is dated today by the ledger clock.
        """
        today = self._today()
        created = [
            Debt.model_validate({
                **draft.model_dump(),
                "date": draft.date or today,
                "id": new_id(),
                "original_amount": draft.amount,
                "is_settled": False,
                "history": [],
            })
            for draft in drafts
        ]
        if not created:
            return []

        self._debts = [*created, *self._debts]

        self._audit_logger.log(AuditEventBuilder.debts_added(
            debt_ids=[debt.id for debt in created],
            names=[debt.name for debt in created],
            correlation_id=correlation_id,
        ))
        return created

    def add_split(
        self,
        total: float,
        participants: Sequence[SplitParticipant],
        mode: SplitMode,
        template: DebtDraft,
    ) -> list[Debt]:
        """Split one bill across participants and add the resulting debts."""
        drafts = split_bill(total, participants, mode, template)
        return self.add_debts(drafts, correlation_id=create_correlation_id())

    def edit_debt(self, debt_id: str, draft: DebtDraft) -> Optional[Debt]:
        """
        Replace every editable field of a debt.

        The edited amount becomes the new original_amount, which restarts
        the fee baseline. History, id and settled flag are kept. A draft
        without a date keeps the existing one.
        """
        index = self._find_index(debt_id)
        if index is None:
            self._not_found(debt_id, "edit")
            return None

        existing = self._debts[index]
        updated = Debt.model_validate({
            **existing.model_dump(),
            **draft.model_dump(),
            "date": draft.date or existing.date,
            "original_amount": draft.amount,
        })

        debts = list(self._debts)
        debts[index] = updated
        self._debts = debts

        self._audit_logger.log(
            AuditEventBuilder.debt_edited(debt_id, updated.original_amount)
        )
        return updated

    def settle_debt(
        self,
        debt_id: str,
        amount: float,
        paid_on: date,
        now: Optional[Moment] = None,
    ) -> Optional[Debt]:
        """
        Record a (partial or full) payment.

        remaining = max(0, effective amount as of now - amount). The payment
        is appended to history and the debt is settled once remaining hits 0.
        Overpayment is absorbed: no credit is carried forward.
        """
        index = self._find_index(debt_id)
        if index is None:
            self._not_found(debt_id, "settle")
            return None

        if amount is None or not math.isfinite(amount) or amount <= 0:
            logger.warning("settlement_ignored", debt_id=debt_id, amount=amount)
            return None

        now = self._resolve_now(now)
        debt = self._debts[index]

        current = effective_amount(debt, now)
        remaining = max(0.0, current - amount)
        payment = Payment(amount=amount, date=paid_on)

        updated = debt.model_copy(update={
            "history": [*debt.history, payment],
            "amount": remaining,
            "is_settled": remaining <= 0,
        })

        debts = list(self._debts)
        debts[index] = updated
        self._debts = debts

        self._audit_logger.log(AuditEventBuilder.debt_settled(
            debt_id=debt_id,
            paid_amount=amount,
            remaining=remaining,
            is_settled=updated.is_settled,
        ))
        return updated

    def update_manual_fee(self, debt_id: str, adjustment: float) -> Optional[Debt]:
        """Set the signed manual fee adjustment of a debt."""
        index = self._find_index(debt_id)
        if index is None:
            self._not_found(debt_id, "update_manual_fee")
            return None

        debt = self._debts[index]
        updated = debt.model_copy(update={
            "fee_config": debt.fee_config.model_copy(
                update={"manual_adjustment": adjustment}
            ),
        })

        debts = list(self._debts)
        debts[index] = updated
        self._debts = debts

        self._audit_logger.log(AuditEventBuilder.manual_fee_updated(debt_id, adjustment))
        return updated

    def delete_debt(self, debt_id: str) -> bool:
        """Remove a debt permanently. Returns False if it didn't exist."""
        remaining = [debt for debt in self._debts if debt.id != debt_id]
        if len(remaining) == len(self._debts):
            self._not_found(debt_id, "delete")
            return False

        self._debts = remaining
        self._audit_logger.log(AuditEventBuilder.debt_deleted(debt_id))
        return True

    # -------------------------------------------------------------------------
    # Group mutations
    # -------------------------------------------------------------------------

    def add_group(self, name: str, color: str = "blue") -> Group:
        group = Group(name=name, color=color)
        self._groups = [*self._groups, group]
        self._audit_logger.log(AuditEventBuilder.group_added(group.id, group.name))
        return group

    def remove_group(self, group_id: str) -> int:
        """
        Remove a group and move its debts to Personal.

        Returns:
            Number of debts reassigned

        Raises:
            ProtectedGroupError: If group_id is the reserved Personal group
        """
        if group_id == PERSONAL_GROUP_ID:
            error = ProtectedGroupError(group_id)
            self._audit_logger.log(
                AuditEventBuilder.group_removal_rejected(group_id, str(error))
            )
            raise error

        reassigned = 0
        debts = []
        for debt in self._debts:
            if debt.group_id == group_id:
                debt = debt.model_copy(update={"group_id": PERSONAL_GROUP_ID})
                reassigned += 1
            debts.append(debt)

        self._groups = [group for group in self._groups if group.id != group_id]
        self._debts = debts

        self._audit_logger.log(AuditEventBuilder.group_removed(group_id, reassigned))
        return reassigned

    # -------------------------------------------------------------------------
    # Backup
    # -------------------------------------------------------------------------

    def import_data(
        self,
        payload: Union[str, bytes, Mapping[str, Any]],
    ) -> ValidationResult:
        """
        Replace the whole ledger from a backup payload.

        Raises:
            ImportValidationError: If the payload is invalid. The ledger
                                   is left exactly as it was.
        """
        result, snapshot = self._validator.validate(payload)

        if snapshot is None:
            self._audit_logger.log(AuditEventBuilder.import_rejected(
                [issue.model_dump() for issue in result.issues]
            ))
            raise ImportValidationError(result)

        self._debts = list(snapshot.debts)
        self._groups = _ensure_personal_group(snapshot.groups)

        self._audit_logger.log(
            AuditEventBuilder.data_imported(len(self._debts), len(self._groups))
        )
        return result

    def export_data(self, now: Optional[datetime] = None) -> dict:
        """
        Build a backup document.

        Layout: {"debts", "groups", "exportDate", "version"} (camelCase,
        JSON-compatible values).
        """
        export = LedgerExport(
            debts=self._debts,
            groups=self._groups,
            export_date=now or self._clock(),
            version=self._export_version,
        )
        self._audit_logger.log(
            AuditEventBuilder.data_exported(len(self._debts), self._export_version)
        )
        return export.model_dump(mode="json", by_alias=True)

    def backup_filename(self, now: Optional[datetime] = None) -> str:
        moment = now or self._clock()
        return f"debtwise-backup-{moment.date().isoformat()}.json"

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _require_storage(self) -> LedgerStorageInterface:
        if self._storage is None:
            raise StorageError("No ledger storage configured")
        return self._storage

    def save(self) -> None:
        """
        Persist the current snapshot.

        Raises:
            StorageError: If no storage is configured or the write fails
        """
        storage = self._require_storage()
        snapshot = self.snapshot()
        try:
            storage.save_snapshot(snapshot)
        except StorageError as e:
            self._audit_logger.log(AuditEventBuilder.storage_failed("save", str(e)))
            raise

        self._audit_logger.log(
            AuditEventBuilder.snapshot_saved(len(snapshot.debts), len(snapshot.groups))
        )

    def load(self) -> bool:
        """
        Replace in-memory state with the stored snapshot.

        Returns False (state untouched) if nothing has been saved yet.

        Raises:
            StorageError: If the stored snapshot can't be read or parsed
        """
        storage = self._require_storage()
        try:
            snapshot = storage.load_snapshot()
        except StorageError as e:
            self._audit_logger.log(AuditEventBuilder.storage_failed("load", str(e)))
            raise

        if snapshot is None:
            return False

        self._debts = list(snapshot.debts)
        self._groups = _ensure_personal_group(snapshot.groups or default_groups())

        self._audit_logger.log(
            AuditEventBuilder.snapshot_loaded(len(self._debts), len(self._groups))
        )
        return True
