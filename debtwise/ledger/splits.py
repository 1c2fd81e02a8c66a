"""Split-bill derivation: fan one shared bill out into one draft per participant"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Optional, Sequence

from debtwise.models.ledger import (
    DEFAULT_DESCRIPTION,
    SPLIT_DESCRIPTION,
    DebtDraft,
    SplitMode,
    SplitParticipant,
)

CENT = Decimal("0.01")


def round_money(value: float) -> float:
    """
    Round half-up to 2 decimal places.

    Non-finite input rounds to 0 so a bad form value never produces NaN debts.
    """
    if value is None or not math.isfinite(value):
        return 0.0
    try:
        return float(Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return 0.0


def _participant_value(participant: SplitParticipant) -> float:
    value: Optional[float] = participant.value
    if value is None or not math.isfinite(value):
        return 0.0
    return value


def split_bill(
    total: float,
    participants: Sequence[SplitParticipant],
    mode: SplitMode,
    template: DebtDraft,
) -> List[DebtDraft]:
    """
    Derive one debt draft per participant from a shared bill.

    - EQUALLY:    total / number of participants
    - PERCENTAGE: participant.value percent of total
    - EXACT:      participant.value as-is

    Each share is rounded independently, so equal splits may not add back
    up to the exact total (e.g. 100 / 3 -> 33.33 x 3).

    Args:
        total: Bill total (ignored for EXACT)
        participants: Counterparties sharing the bill
        mode: How to divide
        template: Shared fields (type, dates, icon, group, fees, description)

    Returns:
        Drafts in participant order; empty if there are no participants
        or the total is not a number
    """
    if not participants:
        return []
    if mode != SplitMode.EXACT and (total is None or not math.isfinite(total)):
        return []

    description = template.description
    if description == DEFAULT_DESCRIPTION:
        description = SPLIT_DESCRIPTION

    drafts = []
    for participant in participants:
        if mode == SplitMode.EQUALLY:
            share = total / len(participants)
        elif mode == SplitMode.PERCENTAGE:
            share = total * _participant_value(participant) / 100
        else:
            share = _participant_value(participant)

        drafts.append(template.model_copy(update={
            "name": participant.name,
            "amount": round_money(share),
            "description": description,
            "fee_config": template.fee_config.model_copy(),
        }))

    return drafts
