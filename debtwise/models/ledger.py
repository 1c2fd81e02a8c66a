"""
Core Ledger Models for DebtWise

These models define the shapes of everything the ledger stores:
debts, their settlement history, fee schedules and groups.

DESIGN DECISION: Attributes are snake_case in Python but the persisted
and exported JSON keeps the camelCase layout (originalAmount, isSettled,
feeConfig, ...). Snapshots are always dumped with by_alias=True.

DESIGN DECISION: Missing fields on stored debts are backfilled HERE,
once, when a Debt is validated. Engine code can assume a fully
populated FeeConfig and never re-derives defaults inline.
"""

import datetime as dt
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


PERSONAL_GROUP_ID = "personal"
DEFAULT_ICON = "default"
DEFAULT_DESCRIPTION = "No description"
SPLIT_DESCRIPTION = "Split bill"


def new_id() -> str:
    """Generate a fresh identifier for a debt, payment or group."""
    return uuid4().hex


def blank_to_none(v: Any) -> Any:
    """Map "" (the stored form of "no deadline") to None."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


ReturnDate = Annotated[Optional[dt.date], BeforeValidator(blank_to_none)]


# =============================================================================
# ENUMS
# =============================================================================

class DebtType(str, Enum):
    """Direction of a debt, seen from the ledger owner."""
    I_OWE = "I_OWE"
    OWED_TO_ME = "OWED_TO_ME"


class FeeType(str, Enum):
    """How a single fee period is charged."""
    FIXED = "FIXED"            # flat value per period
    PERCENTAGE = "PERCENTAGE"  # percent of the original principal per period


class FeeFrequency(str, Enum):
    """How often an automatic fee is charged once the grace period ends."""
    ONCE = "ONCE"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class SplitMode(str, Enum):
    """How a shared bill is fanned out into one debt per participant."""
    EQUALLY = "EQUALLY"
    PERCENTAGE = "PERCENTAGE"
    EXACT = "EXACT"


class LedgerModel(BaseModel):
    """Base for every persisted ledger shape (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# ENTITIES
# =============================================================================

class Payment(LedgerModel):
    """
    A single settlement event.

    Payments are immutable once appended to a debt's history.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(default_factory=new_id)
    amount: float = Field(
        ...,
        description="Amount paid (positive)"
    )
    date: date


class FeeConfig(LedgerModel):
    """
    Automatic fee / interest schedule for a debt.

    manual_adjustment is a signed override that is ALWAYS added,
    whether or not automatic fees are enabled.
    """

    enabled: bool = False
    type: FeeType = FeeType.FIXED
    frequency: FeeFrequency = FeeFrequency.ONCE
    value: float = Field(
        default=0.0,
        description="Fixed amount or percentage per period"
    )
    manual_adjustment: float = Field(
        default=0.0,
        description="Signed manual fee override"
    )


class Group(LedgerModel):
    """A scope partitioning debts (e.g. Personal, Roommates, Work)."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(
        default="blue",
        description="Display hint only"
    )


def default_groups() -> list[Group]:
    """Groups every fresh ledger starts with."""
    return [
        Group(id=PERSONAL_GROUP_ID, name="Personal", color="blue"),
        Group(id="roommates", name="Roommates", color="emerald"),
        Group(id="work", name="Work", color="purple"),
    ]


class Debt(LedgerModel):
    """
    A single owed/owing record against one counterparty.

    The counterparty is identified purely by the `name` string. Two debts
    with the same name belong to the same person; there is no separate
    contact entity and no case folding.

    `amount` is a cached "current remaining" value. The authoritative
    figure is always recomputed by the fee engine from original_amount,
    fee_config and history.
    """

    id: str
    name: str = Field(..., min_length=1, max_length=200)
    description: str = DEFAULT_DESCRIPTION
    original_amount: float = Field(
        ...,
        description="Principal at creation (or at the last edit)"
    )
    amount: float = Field(
        ...,
        description="Cached remaining balance, never negative"
    )
    type: DebtType
    date: date
    expected_return_date: ReturnDate = None
    icon: str = DEFAULT_ICON
    is_settled: bool = False
    history: list[Payment] = Field(default_factory=list)
    group_id: str = PERSONAL_GROUP_ID
    fee_config: FeeConfig = Field(default_factory=FeeConfig)

    @model_validator(mode="before")
    @classmethod
    def backfill_missing_fields(cls, data: Any) -> Any:
        """
        Backfill fields older snapshots may not carry.

        originalAmount falls back to amount; icon, history, groupId and
        feeConfig fall back to their defaults.
        """
        if not isinstance(data, dict):
            return data

        data = dict(data)

        if data.get("originalAmount") is None and data.get("original_amount") is None:
            if "amount" in data:
                data["originalAmount"] = data["amount"]

        for camel, snake, default in (
            ("icon", "icon", DEFAULT_ICON),
            ("groupId", "group_id", PERSONAL_GROUP_ID),
        ):
            if not data.get(camel) and not data.get(snake):
                data[camel] = default

        if data.get("history") is None:
            data["history"] = []

        if data.get("feeConfig") is None and data.get("fee_config") is None:
            data["feeConfig"] = FeeConfig()

        return data

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_DESCRIPTION
        return v

    @field_validator("amount")
    @classmethod
    def clamp_amount(cls, v: float) -> float:
        """The cached balance is never negative (NaN is left alone)."""
        if v < 0:
            return 0.0
        return v

    @property
    def total_paid(self) -> float:
        return sum(payment.amount for payment in self.history)

    @property
    def last_payment(self) -> Optional[Payment]:
        """Last entry in insertion order, not necessarily the latest date."""
        return self.history[-1] if self.history else None


class DebtDraft(LedgerModel):
    """
    User input for creating or editing a debt.

    A draft carries every user-editable field. Identity, settlement state
    and history are owned by the ledger and can't be set from a draft.
    """

    name: str = Field(..., min_length=1, max_length=200)
    description: str = DEFAULT_DESCRIPTION
    amount: float
    type: DebtType = DebtType.OWED_TO_ME
    date: Optional[dt.date] = Field(
        default=None,
        description="Debt date; the ledger fills in today when omitted"
    )
    expected_return_date: ReturnDate = None
    icon: str = DEFAULT_ICON
    group_id: str = PERSONAL_GROUP_ID
    fee_config: FeeConfig = Field(default_factory=FeeConfig)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_DESCRIPTION
        return v


class SplitParticipant(BaseModel):
    """One participant of a split bill; value is a percent or an exact amount."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    value: Optional[float] = None


# =============================================================================
# SNAPSHOT / EXPORT MODELS
# =============================================================================

class LedgerSnapshot(LedgerModel):
    """The persisted state layout: two top-level collections."""

    debts: list[Debt] = Field(default_factory=list)
    groups: list[Group] = Field(default_factory=list)


class LedgerExport(LedgerSnapshot):
    """Backup file format written by export and accepted by import."""

    export_date: datetime
    version: str


class BalanceState(LedgerModel):
    """Aggregated unsettled balances for a group scope."""

    total_i_owe: float = 0.0
    total_owed_to_me: float = 0.0
    net_balance: float = 0.0
