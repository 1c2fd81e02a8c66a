"""
Derived Views

DESIGN DECISION: Views are DETERMINISTIC projections of the ledger.
Every view takes the raw debts plus an explicit `now`, recomputes
effective amounts through the fee engine, and returns new objects.
Nothing here mutates ledger state or reads the clock.

Views:
- Balances per group scope
- Filtered, date-sorted debt list
- Top contacts, monthly trends, category breakdown
- Per-contact summaries with reliability score and traits
- Running balance trend for one contact
"""

from collections import defaultdict
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field

from debtwise.engines.fees import Moment, effective_amount
from debtwise.engines.reliability import (
    days_since_activity,
    days_to_settle,
    group_by_counterparty,
    progress_ratio,
    score_counterparty,
    trust_label,
)
from debtwise.models.ledger import BalanceState, Debt, DebtType


ALL = "ALL"

FLASH_PAYER_DAYS = 2
EARLY_SETTLER_DAYS = 7
VETERAN_SETTLED = 8
CONSISTENT_SETTLED = 4
PROGRESS_THRESHOLD = 0.3
GHOSTING_DAYS = 15


# =============================================================================
# FILTER CRITERIA
# =============================================================================

class TypeFilter(str, Enum):
    ALL = "ALL"
    I_OWE = "I_OWE"
    OWED_TO_ME = "OWED_TO_ME"


class StatusFilter(str, Enum):
    ACTIVE = "ACTIVE"
    ALL = "ALL"


class DebtFilter(BaseModel):
    """List criteria, combined with AND."""

    type_filter: TypeFilter = TypeFilter.ALL
    status_filter: StatusFilter = StatusFilter.ACTIVE
    group_id: str = Field(
        default=ALL,
        description="Group id, or ALL for every group"
    )


# =============================================================================
# VIEW RESULTS
# =============================================================================

class ContactTotal(BaseModel):
    name: str
    amount: float
    type: DebtType = Field(
        ...,
        description="Direction of the first unsettled debt seen for this name"
    )


class MonthlyTrend(BaseModel):
    month: str = Field(..., description="YYYY-MM")
    owe: float = 0.0
    owed: float = 0.0


class CategoryTotal(BaseModel):
    icon: str
    label: str
    value: float


class ContactSummary(BaseModel):
    """Everything the contacts screen shows for one counterparty."""

    name: str
    total_owed_to_me: float = 0.0
    total_i_owe: float = 0.0
    transactions: list[Debt] = Field(default_factory=list)
    reliability: float = 0.0
    trust_label: str
    traits: list[str] = Field(default_factory=list)


class BalancePoint(BaseModel):
    date: date
    balance: float


# =============================================================================
# VIEWS
# =============================================================================

def refresh_amounts(debts: Iterable[Debt], now: Moment) -> List[Debt]:
    """Copies with the cached amount replaced by the effective amount."""
    return [
        debt.model_copy(update={"amount": effective_amount(debt, now)})
        for debt in debts
    ]


def _active(debts: Iterable[Debt]) -> List[Debt]:
    return [debt for debt in debts if not debt.is_settled]


def compute_balances(
    debts: Iterable[Debt],
    now: Moment,
    group_id: str = ALL,
) -> BalanceState:
    """Unsettled totals for one group, or every group with ALL."""
    scoped = [
        debt for debt in _active(debts)
        if group_id == ALL or debt.group_id == group_id
    ]

    total_i_owe = sum(
        effective_amount(debt, now) for debt in scoped
        if debt.type == DebtType.I_OWE
    )
    total_owed_to_me = sum(
        effective_amount(debt, now) for debt in scoped
        if debt.type == DebtType.OWED_TO_ME
    )

    return BalanceState(
        total_i_owe=total_i_owe,
        total_owed_to_me=total_owed_to_me,
        net_balance=total_owed_to_me - total_i_owe,
    )


def filter_debts(
    debts: Iterable[Debt],
    now: Moment,
    criteria: Optional[DebtFilter] = None,
) -> List[Debt]:
    """
    Debts matching every criterion, newest first.

    Returned debts carry the refreshed amount as of now.
    """
    criteria = criteria or DebtFilter()

    def matches(debt: Debt) -> bool:
        type_match = (
            criteria.type_filter == TypeFilter.ALL
            or debt.type.value == criteria.type_filter.value
        )
        status_match = criteria.status_filter == StatusFilter.ALL or not debt.is_settled
        group_match = criteria.group_id == ALL or debt.group_id == criteria.group_id
        return type_match and status_match and group_match

    selected = [debt for debt in refresh_amounts(debts, now) if matches(debt)]
    return sorted(selected, key=lambda debt: debt.date, reverse=True)


def top_contacts(
    debts: Iterable[Debt],
    now: Moment,
    limit: int = 5,
) -> List[ContactTotal]:
    """Counterparties with the largest unsettled totals."""
    people: Dict[str, ContactTotal] = {}
    for debt in _active(debts):
        if debt.name not in people:
            people[debt.name] = ContactTotal(name=debt.name, amount=0.0, type=debt.type)
        people[debt.name].amount += effective_amount(debt, now)

    ranked = sorted(people.values(), key=lambda person: person.amount, reverse=True)
    return ranked[:limit]


def monthly_trends(debts: Iterable[Debt], now: Moment) -> List[MonthlyTrend]:
    """Unsettled amounts per calendar month of the debt date, oldest first."""
    months: Dict[str, MonthlyTrend] = {}
    for debt in _active(debts):
        key = debt.date.strftime("%Y-%m")
        if key not in months:
            months[key] = MonthlyTrend(month=key)
        if debt.type == DebtType.I_OWE:
            months[key].owe += effective_amount(debt, now)
        else:
            months[key].owed += effective_amount(debt, now)

    return [months[key] for key in sorted(months)]


def category_breakdown(debts: Iterable[Debt], now: Moment) -> List[CategoryTotal]:
    """Unsettled amounts per icon, largest first."""
    totals: Dict[str, float] = defaultdict(float)
    for debt in _active(debts):
        totals[debt.icon] += effective_amount(debt, now)

    categories = [
        CategoryTotal(icon=icon, label=icon[:1].upper() + icon[1:], value=value)
        for icon, value in totals.items()
    ]
    return sorted(categories, key=lambda category: category.value, reverse=True)


def derive_traits(debts: Sequence[Debt], now: Moment) -> List[str]:
    """
    Descriptive badges for one counterparty's debts.

    At most one speed trait and one experience trait; progress and
    ghosting look at active debts only.
    """
    traits = []
    settled = [debt for debt in debts if debt.is_settled]
    active = _active(debts)

    if settled:
        average_days = sum(days_to_settle(debt) for debt in settled) / len(settled)
        if average_days <= FLASH_PAYER_DAYS:
            traits.append("Flash Payer")
        elif average_days <= EARLY_SETTLER_DAYS:
            traits.append("Early Settler")

    if len(settled) >= VETERAN_SETTLED:
        traits.append("Legendary Veteran")
    elif len(settled) >= CONSISTENT_SETTLED:
        traits.append("Consistent Partner")

    if any(progress_ratio(debt, now) > PROGRESS_THRESHOLD for debt in active):
        traits.append("Steady Progress")

    if any(days_since_activity(debt, now) > GHOSTING_DAYS for debt in active):
        traits.append("Ghosting Risk")

    return traits


def contact_summaries(
    debts: Iterable[Debt],
    now: Moment,
    search: str = "",
) -> List[ContactSummary]:
    """
    Per-counterparty history, most transactions first.

    `search` is a case-insensitive substring match on the name.
    """
    search = (search or "").strip().lower()
    summaries = []

    for name, contact_debts in group_by_counterparty(debts).items():
        if search not in name.lower():
            continue

        score = score_counterparty(contact_debts, now)
        summary = ContactSummary(
            name=name,
            transactions=refresh_amounts(contact_debts, now),
            reliability=score,
            trust_label=trust_label(score),
            traits=derive_traits(contact_debts, now),
        )
        for debt in summary.transactions:
            if debt.is_settled:
                continue
            if debt.type == DebtType.OWED_TO_ME:
                summary.total_owed_to_me += debt.amount
            else:
                summary.total_i_owe += debt.amount
        summaries.append(summary)

    return sorted(summaries, key=lambda s: len(s.transactions), reverse=True)


def contact_balance_trend(debts: Iterable[Debt], name: str) -> List[BalancePoint]:
    """
    Running signed balance of one contact's principals by debt date.

    Owed-to-me adds, I-owe subtracts.
    """
    person = sorted(
        (debt for debt in debts if debt.name == name),
        key=lambda debt: debt.date,
    )

    points = []
    running = 0.0
    for debt in person:
        if debt.type == DebtType.OWED_TO_ME:
            running += debt.original_amount
        else:
            running -= debt.original_amount
        points.append(BalancePoint(date=debt.date, balance=running))
    return points
