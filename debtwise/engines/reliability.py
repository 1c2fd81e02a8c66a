"""Reliability scoring engine - per-counterparty trust score from ledger history"""

import math
from collections import defaultdict
from typing import Dict, Iterable, List

from debtwise.engines.fees import Moment, as_datetime, effective_amount, start_of_day
from debtwise.models.ledger import Debt

SECONDS_PER_DAY = 24 * 60 * 60

RECENT_WINDOW_DAYS = 45
RECENT_BONUS = 1.5

COMMITMENT_WEIGHT = 0.8
DECAY_GRACE_DAYS = 14
DECAY_SPAN_DAYS = 60

EXPERIENCE_STEP = 0.02
EXPERIENCE_CAP = 1.2


def last_activity_date(debt: Debt):
    """Date of the last history entry (insertion order), else the debt date."""
    last = debt.last_payment
    return last.date if last else debt.date


def days_to_settle(debt: Debt) -> float:
    """Days between the debt date and its last recorded payment"""
    return float((last_activity_date(debt) - debt.date).days)


def days_since_activity(debt: Debt, now: Moment) -> float:
    """Fractional days from the start of the last activity day until now"""
    current = as_datetime(now)
    last = start_of_day(last_activity_date(debt), current)
    return (current - last).total_seconds() / SECONDS_PER_DAY


def volume_weight(debt: Debt) -> float:
    """
    Weight favoring larger debts.

    log10(amount + 1) + 1 is 1 for a zero-amount debt, never zero or negative.
    """
    weight = math.log10(debt.original_amount + 1) + 1 if debt.original_amount > -1 else 0.0
    return weight if math.isfinite(weight) else 0.0


def recency_factor(debt: Debt, now: Moment) -> float:
    current = as_datetime(now)
    age_days = (current - start_of_day(debt.date, current)).total_seconds() / SECONDS_PER_DAY
    return RECENT_BONUS if age_days < RECENT_WINDOW_DAYS else 1.0


def success_multiplier(days: float) -> float:
    """
    Reward for how quickly a settled debt was closed.

    - <= 2 days:  1.4
    - <= 7 days:  1.2
    - > 60 days:  0.6
    - otherwise:  1.0
    """
    if days <= 2:
        return 1.4
    elif days <= 7:
        return 1.2
    elif days > 60:
        return 0.6
    return 1.0


def progress_ratio(debt: Debt, now: Moment) -> float:
    """Share of the original principal already paid down, never below 0"""
    if debt.original_amount == 0:
        return 0.0
    ratio = (debt.original_amount - effective_amount(debt, now)) / debt.original_amount
    if not math.isfinite(ratio):
        return 0.0
    return max(0.0, ratio)


def activity_decay(days_idle: float) -> float:
    """Linear decay after two idle weeks, reaching 0 at day 74"""
    if days_idle <= DECAY_GRACE_DAYS:
        return 1.0
    return max(0.0, 1 - (days_idle - DECAY_GRACE_DAYS) / DECAY_SPAN_DAYS)


def score_counterparty(debts: List[Debt], now: Moment) -> float:
    """
    Score one counterparty's full history from 0 (no trust) to 100.

    Each debt contributes weight = volume_weight * recency_factor to the
    maximum possible. Settled debts earn weight * success_multiplier;
    open debts earn weight * progress * 0.8, decayed by inactivity.
    The ratio is scaled by an experience multiplier for settled count.
    """
    weighted_points = 0.0
    max_possible_weight = 0.0

    for debt in debts:
        final_weight = volume_weight(debt) * recency_factor(debt, now)
        max_possible_weight += final_weight

        if debt.is_settled:
            weighted_points += final_weight * success_multiplier(days_to_settle(debt))
        else:
            commitment = final_weight * progress_ratio(debt, now) * COMMITMENT_WEIGHT
            commitment *= activity_decay(days_since_activity(debt, now))
            weighted_points += commitment

    if max_possible_weight <= 0:
        return 0.0

    settled_count = sum(1 for debt in debts if debt.is_settled)
    experience_multiplier = min(EXPERIENCE_CAP, 1 + settled_count * EXPERIENCE_STEP)

    raw_score = (weighted_points / max_possible_weight) * 100
    score = raw_score * experience_multiplier
    if not math.isfinite(score):
        return 0.0

    return max(0.0, min(100.0, score))


def group_by_counterparty(debts: Iterable[Debt]) -> Dict[str, List[Debt]]:
    """Group debts by exact name (no case folding, no fuzzy matching)"""
    contacts: Dict[str, List[Debt]] = defaultdict(list)
    for debt in debts:
        contacts[debt.name].append(debt)
    return dict(contacts)


def reliability_scores(debts: Iterable[Debt], now: Moment) -> Dict[str, float]:
    """Main entry point: score every counterparty in the ledger."""
    return {
        name: score_counterparty(contact_debts, now)
        for name, contact_debts in group_by_counterparty(debts).items()
    }


def trust_label(score: float) -> str:
    """
    Map a score to a display band.

    Bands: Pristine (90+), Reliable (70+), Developing (40+), Delinquent.
    """
    if score >= 90:
        return "Pristine"
    elif score >= 70:
        return "Reliable"
    elif score >= 40:
        return "Developing"
    else:
        return "Delinquent"
