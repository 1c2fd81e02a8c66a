"""Ledger state ownership and mutation operations."""

from debtwise.ledger.exceptions import (
    ImportValidationError,
    LedgerError,
    ProtectedGroupError,
)
from debtwise.ledger.service import LedgerService
from debtwise.ledger.splits import round_money, split_bill

__all__ = [
    "ImportValidationError",
    "LedgerError",
    "LedgerService",
    "ProtectedGroupError",
    "round_money",
    "split_bill",
]
