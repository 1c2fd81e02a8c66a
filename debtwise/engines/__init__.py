"""Computational cores: fee accrual and reliability scoring."""

from debtwise.engines.fees import (
    FeeBreakdown,
    accrued_fees,
    automatic_fees,
    effective_amount,
    fee_breakdown,
    total_paid,
)
from debtwise.engines.reliability import (
    reliability_scores,
    score_counterparty,
    trust_label,
)

__all__ = [
    "FeeBreakdown",
    "accrued_fees",
    "automatic_fees",
    "effective_amount",
    "fee_breakdown",
    "total_paid",
    "reliability_scores",
    "score_counterparty",
    "trust_label",
]
