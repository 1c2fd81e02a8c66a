"""Tests for two-stage import validation."""

import pytest

from debtwise.validation import ImportValidator


VALID_DEBT = {
    "id": "d1",
    "name": "Alex",
    "originalAmount": 50,
    "amount": 50,
    "type": "OWED_TO_ME",
    "date": "2024-01-01",
}


@pytest.fixture
def validator():
    return ImportValidator()


class TestStructureValidation:
    """Stage 1: top-level shape."""

    def test_debts_must_be_present(self, validator):
        """Test a backup without debts fails structure validation."""
        result, snapshot = validator.validate({"groups": []})
        assert snapshot is None
        assert result.structure_valid is False
        assert result.issues[0].message == "Invalid backup format: Missing debts"

    def test_debts_must_be_an_array(self, validator):
        """Test a non-array debts value is rejected."""
        result, snapshot = validator.validate({"debts": "not an array"})
        assert snapshot is None
        assert result.issues[0].issue_type == "invalid_type"

    def test_groups_must_be_an_array_when_present(self, validator):
        """Test groups may be absent but not malformed."""
        result, _ = validator.validate({"debts": [], "groups": {"id": "x"}})
        assert result.is_valid is False
        assert result.issues[0].field == "groups"

    def test_payload_must_be_an_object(self, validator):
        """Test a JSON array is not a backup."""
        result, _ = validator.validate("[1, 2, 3]")
        assert result.is_valid is False

    def test_invalid_json(self, validator):
        """Test unparseable text is reported, not raised."""
        result, snapshot = validator.validate(b"{oops")
        assert snapshot is None
        assert result.issues[0].issue_type == "invalid_json"


class TestRecordValidation:
    """Stage 2: every record parses."""

    def test_valid_backup(self, validator):
        """Test a minimal valid backup."""
        result, snapshot = validator.validate({"debts": [VALID_DEBT]})
        assert result.is_valid is True
        assert result.structure_valid is True
        assert snapshot.groups == []
        assert snapshot.debts[0].name == "Alex"

    def test_bad_record_reports_path(self, validator):
        """Test errors point at the failing record."""
        bad = dict(VALID_DEBT, type="SOMETIMES")
        result, snapshot = validator.validate({"debts": [VALID_DEBT, bad]})
        assert snapshot is None
        assert result.structure_valid is True
        assert result.records_valid is False
        assert result.issues[0].field.startswith("debts[1]")

    def test_bad_group_rejected(self, validator):
        """Test groups are validated too."""
        result, _ = validator.validate({"debts": [], "groups": [{"id": "g", "name": ""}]})
        assert result.is_valid is False
        assert result.issues[0].field.startswith("groups[0]")

    def test_duplicate_ids_are_warnings(self, validator):
        """Test duplicate ids don't block the import."""
        result, snapshot = validator.validate({"debts": [VALID_DEBT, VALID_DEBT]})
        assert result.is_valid is True
        assert snapshot is not None
        assert result.issues[0].severity == "warning"
        assert result.error_count == 0
