"""
Main Orchestrator for DebtWise

This module ties together all the components and defines the
end-to-end read flow a host renders from:

    ledger state -> fee engine -> effective amounts
                 -> reliability engine -> derived views -> host

DESIGN DECISION: The orchestrator never mutates the ledger.
Mutations go straight to LedgerService; this module only evaluates the
current state for one explicit `now` and forwards text requests to the
optional insight agent.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from debtwise.agents import InsightAgent
from debtwise.audit import AuditLogger
from debtwise.config import get_settings
from debtwise.engines import reliability_scores
from debtwise.engines.fees import Moment, effective_amount
from debtwise.ledger import LedgerService
from debtwise.models.ledger import BalanceState, Debt, DebtType
from debtwise.queries import (
    ALL,
    CategoryTotal,
    ContactTotal,
    DebtFilter,
    MonthlyTrend,
    category_breakdown,
    compute_balances,
    filter_debts,
    monthly_trends,
    top_contacts,
)
from debtwise.services.storage import (
    AuditStorageInterface,
    JsonFileLedgerStorage,
    JsonLinesAuditStorage,
)


class Dashboard(BaseModel):
    """Everything the main screen shows, evaluated at one instant."""

    evaluated_at: datetime
    group_id: str = ALL
    balances: BalanceState
    debts: list[Debt] = Field(default_factory=list)
    reliability: dict[str, float] = Field(default_factory=dict)
    top_contacts: list[ContactTotal] = Field(default_factory=list)
    monthly_trends: list[MonthlyTrend] = Field(default_factory=list)
    categories: list[CategoryTotal] = Field(default_factory=list)


class DashboardFlow:
    """
    Evaluates the ledger for display.

    Flow:
    1. Refresh effective amounts (fee engine)
    2. Score every counterparty (reliability engine)
    3. Build balances, the filtered list and chart series
    """

    def __init__(
        self,
        ledger: LedgerService,
        insight_agent: Optional[InsightAgent] = None,
    ):
        self._ledger = ledger
        self._insight_agent = insight_agent

    def build(
        self,
        now: Optional[datetime] = None,
        criteria: Optional[DebtFilter] = None,
    ) -> Dashboard:
        now = now or self._ledger.now()
        criteria = criteria or DebtFilter()
        debts = self._ledger.debts

        scoped = [
            debt for debt in debts
            if criteria.group_id == ALL or debt.group_id == criteria.group_id
        ]

        return Dashboard(
            evaluated_at=now,
            group_id=criteria.group_id,
            balances=compute_balances(debts, now, criteria.group_id),
            debts=filter_debts(debts, now, criteria),
            reliability=reliability_scores(debts, now),
            top_contacts=top_contacts(scoped, now),
            monthly_trends=monthly_trends(scoped, now),
            categories=category_breakdown(scoped, now),
        )

    async def insights(self, now: Optional[Moment] = None) -> Optional[str]:
        """AI observation over the whole ledger, or None without an agent."""
        if self._insight_agent is None:
            return None
        return await self._insight_agent.debt_insights(
            self._ledger.with_current_amounts(now)
        )

    async def simplify_group(
        self,
        group_id: str,
        now: Optional[Moment] = None,
    ) -> Optional[str]:
        """Settlement plan for the unsettled debts of one group."""
        if self._insight_agent is None:
            return None

        group = next((g for g in self._ledger.groups if g.id == group_id), None)
        group_name = group.name if group else group_id
        active = [
            debt for debt in self._ledger.with_current_amounts(now)
            if debt.group_id == group_id and not debt.is_settled
        ]
        return await self._insight_agent.simplify_group_debts(group_name, active)

    async def nudge(
        self,
        debt_id: str,
        now: Optional[Moment] = None,
    ) -> Optional[str]:
        """Reminder text for one debt's counterparty."""
        if self._insight_agent is None:
            return None

        debt = self._ledger.get_debt(debt_id)
        if debt is None:
            return None

        now = now or self._ledger.now()
        scores = reliability_scores(self._ledger.debts, now)
        return await self._insight_agent.nudge_message(
            name=debt.name,
            amount=effective_amount(debt, now),
            is_owed_to_me=debt.type == DebtType.OWED_TO_ME,
            reliability=scores.get(debt.name, 0.0),
        )


def create_app_components(
    use_storage: bool = True,
    use_ai: bool = True,
) -> tuple[LedgerService, DashboardFlow]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist to the configured JSON files.
                    Set to False for an in-memory ledger.
        use_ai: Whether to attach the insight agent.

    Returns:
        (ledger, dashboard_flow)
    """
    settings = get_settings().ledger

    ledger_storage = None
    audit_storage: Optional[AuditStorageInterface] = None

    if use_storage:
        ledger_storage = JsonFileLedgerStorage(settings.data_file)
        if settings.audit_file:
            audit_storage = JsonLinesAuditStorage(settings.audit_file)

    audit_logger = AuditLogger(audit_storage)

    ledger = LedgerService(
        storage=ledger_storage,
        audit_logger=audit_logger,
        export_version=settings.export_version,
    )
    if ledger_storage is not None:
        ledger.load()

    insight_agent = None
    if use_ai:
        insight_agent = InsightAgent(
            audit_logger=audit_logger,
            currency=settings.default_currency,
        )

    return ledger, DashboardFlow(ledger, insight_agent)
