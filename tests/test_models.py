"""
Tests for DebtWise models

Test strategy:
1. Unit tests for individual components (models, engines, validators)
2. Service tests for the ledger against in-memory storage
3. No real API calls in tests (use fakes)
"""

import pytest
from datetime import date
from uuid import uuid4

from pydantic import ValidationError

from debtwise.models.ledger import (
    DEFAULT_DESCRIPTION,
    PERSONAL_GROUP_ID,
    Debt,
    DebtDraft,
    DebtType,
    FeeConfig,
    FeeFrequency,
    FeeType,
    LedgerExport,
    Payment,
    default_groups,
)
from debtwise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from debtwise.models.validation import ValidationIssue, ValidationResult


class TestDebtModel:
    """Tests for the Debt model and its backfill."""

    def test_backfills_legacy_record(self):
        """Test that a stored debt missing optional fields is completed."""
        debt = Debt.model_validate({
            "id": "d1",
            "name": "Sam",
            "amount": 40,
            "type": "I_OWE",
            "date": "2024-02-01",
        })
        assert debt.original_amount == 40
        assert debt.icon == "default"
        assert debt.group_id == PERSONAL_GROUP_ID
        assert debt.history == []
        assert debt.fee_config == FeeConfig()
        assert debt.description == DEFAULT_DESCRIPTION

    def test_reads_camel_case_layout(self):
        """Test the persisted camelCase keys map onto snake_case attributes."""
        debt = Debt.model_validate({
            "id": "d2",
            "name": "Sam",
            "originalAmount": 50,
            "amount": 20,
            "type": "OWED_TO_ME",
            "date": "2024-02-01",
            "expectedReturnDate": "2024-03-01",
            "isSettled": False,
            "groupId": "work",
            "feeConfig": {
                "enabled": True,
                "type": "PERCENTAGE",
                "frequency": "WEEKLY",
                "value": 2,
                "manualAdjustment": -5,
            },
        })
        assert debt.original_amount == 50
        assert debt.expected_return_date == date(2024, 3, 1)
        assert debt.group_id == "work"
        assert debt.fee_config.type == FeeType.PERCENTAGE
        assert debt.fee_config.frequency == FeeFrequency.WEEKLY
        assert debt.fee_config.manual_adjustment == -5

    def test_dumps_camel_case_layout(self, make_debt):
        """Test snapshots are written with camelCase keys."""
        data = make_debt().model_dump(by_alias=True, mode="json")
        assert "originalAmount" in data
        assert "isSettled" in data
        assert "manualAdjustment" in data["feeConfig"]

    def test_negative_amount_clamps_to_zero(self):
        """Test that the cached amount is never negative."""
        debt = Debt.model_validate({
            "id": "d3", "name": "Sam", "originalAmount": 10, "amount": -30,
            "type": "I_OWE", "date": "2024-02-01",
        })
        assert debt.amount == 0.0

    def test_missing_name_rejected(self):
        """Test that required fields are enforced."""
        with pytest.raises(ValidationError):
            Debt.model_validate({"id": "x", "amount": 1, "type": "I_OWE", "date": "2024-01-01"})

    def test_last_payment_is_insertion_order(self, make_debt):
        """Test last_payment is the last appended entry, not the latest date."""
        debt = make_debt(payments=((10, date(2024, 3, 1)), (5, date(2024, 2, 1))))
        assert debt.last_payment.date == date(2024, 2, 1)
        assert debt.total_paid == 15

    def test_blank_return_date_loads_as_none(self):
        """Test a stored "" deadline reads as no deadline."""
        debt = Debt.model_validate({
            "id": "x", "name": "Alex", "amount": 10, "type": "I_OWE",
            "date": "2024-01-01", "expectedReturnDate": "",
        })
        assert debt.expected_return_date is None

    def test_name_and_description_keep_whitespace(self):
        """Test stored names and descriptions round-trip unchanged."""
        debt = Debt.model_validate({
            "id": "x", "name": "Alex ", "description": " Lunch", "amount": 10,
            "type": "I_OWE", "date": "2024-01-01",
        })
        assert debt.name == "Alex "
        assert debt.description == " Lunch"

    def test_payment_is_frozen(self):
        """Test that payments can't be changed after creation."""
        payment = Payment(amount=10, date=date(2024, 1, 1))
        with pytest.raises(ValidationError):
            payment.amount = 20


class TestDebtDraft:
    """Tests for user input drafts."""

    def test_blank_description_defaults(self):
        """Test an empty description becomes the placeholder."""
        draft = DebtDraft(name="Alex", amount=10, description="   ")
        assert draft.description == DEFAULT_DESCRIPTION

    def test_blank_return_date_is_none(self):
        """Test form hosts can send an empty deadline."""
        draft = DebtDraft(name="Alex", amount=10, expected_return_date="")
        assert draft.expected_return_date is None

    def test_name_is_kept_verbatim(self):
        """Test that the counterparty name is not trimmed."""
        draft = DebtDraft(name="Alex ", amount=10, type=DebtType.I_OWE)
        assert draft.name == "Alex "

    def test_date_is_optional(self):
        """Test a draft can leave the date for the ledger to fill in."""
        draft = DebtDraft(name="Alex", amount=10)
        assert draft.date is None
        assert DebtDraft(name="Alex", amount=10, date="2024-01-02").date == date(2024, 1, 2)


class TestGroups:
    """Tests for group defaults."""

    def test_default_groups(self):
        """Test a fresh ledger's groups."""
        groups = default_groups()
        assert [g.id for g in groups] == ["personal", "roommates", "work"]
        assert groups[0].id == PERSONAL_GROUP_ID


class TestLedgerExport:
    """Tests for the backup layout."""

    def test_export_keys(self, make_debt, now):
        """Test the top-level keys of a backup."""
        export = LedgerExport(
            debts=[make_debt()],
            groups=default_groups(),
            export_date=now,
            version="1.0.0",
        )
        data = export.model_dump(by_alias=True, mode="json")
        assert set(data) == {"debts", "groups", "exportDate", "version"}


class TestAuditEvent:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.DEBT_SETTLED,
            description="Payment recorded",
        )
        assert event.event_type == AuditEventType.DEBT_SETTLED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.DEBTS_ADDED,
            description="Debt added",
            details={"names": ["Alex"]},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == AuditEventType.DEBTS_ADDED.value
        assert log_dict["details"]["names"] == ["Alex"]

    def test_builder_debts_added(self):
        """Test AuditEventBuilder.debts_added."""
        correlation_id = uuid4()
        event = AuditEventBuilder.debts_added(
            debt_ids=["a", "b"],
            names=["Alex", "Sam"],
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.DEBTS_ADDED
        assert event.correlation_id == correlation_id
        assert event.entity_id is None
        assert event.is_user_action is True

    def test_builder_debt_not_found_is_warning(self):
        """Test unknown ids are logged as warnings."""
        event = AuditEventBuilder.debt_not_found("missing", "settle")
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == "missing"
        assert event.details["operation"] == "settle"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            structure_valid=False,
            records_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="debts",
                    issue_type="missing",
                    message="Invalid backup format: Missing debts",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            structure_valid=True,
            records_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="debts",
                    issue_type="duplicate_id",
                    message="Debt id d1 appears more than once",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
