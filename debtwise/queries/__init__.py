"""Derived views over the ledger."""

from debtwise.queries.views import (
    ALL,
    BalancePoint,
    CategoryTotal,
    ContactSummary,
    ContactTotal,
    DebtFilter,
    MonthlyTrend,
    StatusFilter,
    TypeFilter,
    category_breakdown,
    compute_balances,
    contact_balance_trend,
    contact_summaries,
    derive_traits,
    filter_debts,
    monthly_trends,
    refresh_amounts,
    top_contacts,
)

__all__ = [
    "ALL",
    "BalancePoint",
    "CategoryTotal",
    "ContactSummary",
    "ContactTotal",
    "DebtFilter",
    "MonthlyTrend",
    "StatusFilter",
    "TypeFilter",
    "category_breakdown",
    "compute_balances",
    "contact_balance_trend",
    "contact_summaries",
    "derive_traits",
    "filter_debts",
    "monthly_trends",
    "refresh_amounts",
    "top_contacts",
]
