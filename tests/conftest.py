"""Shared fixtures: ledger factories with a fixed clock, no network."""

from datetime import date, datetime, timezone

import pytest

from debtwise.audit import AuditLogger
from debtwise.ledger import LedgerService
from debtwise.models.ledger import Debt, DebtType, FeeConfig, Payment, new_id
from debtwise.services.storage import InMemoryAuditStorage, InMemoryLedgerStorage


FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def build_debt(
    name: str = "Alex",
    amount: float = 100.0,
    debt_type: DebtType = DebtType.OWED_TO_ME,
    debt_date: date = date(2024, 1, 1),
    settled: bool = False,
    payments: tuple = (),
    **overrides,
) -> Debt:
    """A fully populated debt; payments are (amount, date) pairs."""
    history = [Payment(amount=paid, date=paid_on) for paid, paid_on in payments]
    fields = dict(
        id=new_id(),
        name=name,
        original_amount=amount,
        amount=max(0.0, amount - sum(paid for paid, _ in payments)),
        type=debt_type,
        date=debt_date,
        is_settled=settled,
        history=history,
        fee_config=FeeConfig(),
    )
    fields.update(overrides)
    return Debt(**fields)


@pytest.fixture
def make_debt():
    return build_debt


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def ledger_storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def ledger(audit_storage, ledger_storage):
    """Empty ledger with default groups, in-memory storage and a fixed clock."""
    return LedgerService(
        storage=ledger_storage,
        audit_logger=AuditLogger(audit_storage),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def now():
    return FIXED_NOW
