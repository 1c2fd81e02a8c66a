"""
Fee Accrual Engine

Computes how much automatic fee / interest a debt has accumulated as of
an explicit `now`, and the resulting outstanding balance.

RULES:
- Fees only start after the grace period: the expected return date if
  there is one, otherwise the debt's own date.
- Percentage fees are always charged on the ORIGINAL principal.
  There is no compounding on the fee-inflated balance.
- Monthly periods are calendar-month differences (year*12 + month),
  ignoring the day of month. Not days / 30.
- The manual adjustment is always added, enabled or not.

Everything here is pure: no clock reads, no I/O, no mutation.
"""

import math
from datetime import date, datetime, time
from typing import Union

from pydantic import BaseModel

from debtwise.models.ledger import Debt, FeeConfig, FeeFrequency, FeeType


Moment = Union[date, datetime]

SECONDS_PER_DAY = 24 * 60 * 60


class FeeBreakdown(BaseModel):
    """Where a debt's outstanding balance comes from."""

    original_amount: float
    automatic_fees: float
    manual_adjustment: float
    total_fees: float
    total_paid: float
    remaining: float


def as_datetime(moment: Moment) -> datetime:
    """Promote a plain calendar date to midnight of that day."""
    if isinstance(moment, datetime):
        return moment
    return datetime.combine(moment, time.min)


def start_of_day(day: date, reference: datetime) -> datetime:
    """Midnight of `day`, in the same timezone (or naivety) as `reference`."""
    return datetime.combine(day, time.min, tzinfo=reference.tzinfo)


def grace_end(debt: Debt) -> date:
    return debt.expected_return_date or debt.date


def _per_period_fee(debt: Debt, config: FeeConfig) -> float:
    if config.type == FeeType.FIXED:
        return config.value
    return debt.original_amount * (config.value / 100)


def automatic_fees(debt: Debt, now: Moment) -> float:
    """
    Automatic fee accrued by `now`, excluding the manual adjustment.

    Returns 0 while fees are disabled or the grace period hasn't ended.
    """
    config = debt.fee_config
    if not config.enabled:
        return 0.0

    current = as_datetime(now)
    deadline = start_of_day(grace_end(debt), current)

    if current <= deadline:
        return 0.0

    elapsed = abs((current - deadline).total_seconds())
    late_days = math.ceil(elapsed / SECONDS_PER_DAY)
    per_period = _per_period_fee(debt, config)

    if config.frequency == FeeFrequency.ONCE:
        return per_period

    if config.frequency == FeeFrequency.WEEKLY:
        return (late_days // 7) * per_period

    # MONTHLY
    months = (current.year - deadline.year) * 12 + (current.month - deadline.month)
    return max(0, months) * per_period


def accrued_fees(debt: Debt, now: Moment) -> float:
    """Total fee contribution: automatic fees plus the manual adjustment."""
    return automatic_fees(debt, now) + debt.fee_config.manual_adjustment


def total_paid(debt: Debt) -> float:
    return debt.total_paid


def effective_amount(debt: Debt, now: Moment) -> float:
    """
    Outstanding balance as of `now`.

    max(0, original + fees - paid). Overpayment never produces a negative
    balance, and a non-numeric intermediate (NaN) clamps to 0.
    """
    remaining = debt.original_amount + accrued_fees(debt, now) - total_paid(debt)
    if math.isnan(remaining) or remaining < 0:
        return 0.0
    return remaining


def fee_breakdown(debt: Debt, now: Moment) -> FeeBreakdown:
    auto = automatic_fees(debt, now)
    manual = debt.fee_config.manual_adjustment
    return FeeBreakdown(
        original_amount=debt.original_amount,
        automatic_fees=auto,
        manual_adjustment=manual,
        total_fees=auto + manual,
        total_paid=total_paid(debt),
        remaining=effective_amount(debt, now),
    )
