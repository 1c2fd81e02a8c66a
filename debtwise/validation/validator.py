"""
Two-Stage Import Validation

DESIGN DECISION: A backup replaces the WHOLE ledger, so it is validated
completely before anything is touched.

STAGE 1 - STRUCTURE:
- The payload is a JSON object
- `debts` is present and is an array
- `groups`, when present, is an array (absent means empty)

STAGE 2 - RECORDS:
- Every debt parses into a Debt (missing optional fields are backfilled,
  missing required fields are errors)
- Every group parses into a Group
- Duplicate debt ids are reported as warnings

Import is all-or-nothing: any error rejects the payload.
"""

import json
from collections import Counter
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from debtwise.models.ledger import Debt, Group, LedgerSnapshot
from debtwise.models.validation import ValidationIssue, ValidationResult


Payload = Union[str, bytes, Mapping[str, Any]]


def _describe_errors(prefix: str, error: ValidationError) -> list[ValidationIssue]:
    issues = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ()))
        issues.append(ValidationIssue(
            field=f"{prefix}.{location}" if location else prefix,
            issue_type="invalid_record",
            message=detail.get("msg", "Invalid value"),
            severity="error",
        ))
    return issues


class ImportValidator:
    """
    Validates an external backup payload.

    validate() never raises; it returns the result and, when valid,
    the parsed snapshot ready to replace the ledger.
    """

    def _parse(self, payload: Payload) -> tuple[Any, list[ValidationIssue]]:
        if isinstance(payload, (str, bytes)):
            try:
                return json.loads(payload), []
            except ValueError as e:
                return None, [ValidationIssue(
                    field="payload",
                    issue_type="invalid_json",
                    message=f"Backup is not valid JSON: {e}",
                    severity="error",
                    suggested_fix="Make sure the file is a DebtWise backup",
                )]
        return payload, []

    def _validate_structure(self, data: Any) -> list[ValidationIssue]:
        """Stage 1: top-level shape only."""
        issues = []

        if not isinstance(data, Mapping):
            issues.append(ValidationIssue(
                field="payload",
                issue_type="invalid_type",
                message="Backup must be a JSON object",
                severity="error",
            ))
            return issues

        if "debts" not in data or data["debts"] is None:
            issues.append(ValidationIssue(
                field="debts",
                issue_type="missing",
                message="Invalid backup format: Missing debts",
                severity="error",
                suggested_fix="Make sure the file is a valid DebtWise backup",
            ))
        elif not isinstance(data["debts"], list):
            issues.append(ValidationIssue(
                field="debts",
                issue_type="invalid_type",
                message="Invalid backup format: debts must be an array",
                severity="error",
            ))

        groups = data.get("groups")
        if groups is not None and not isinstance(groups, list):
            issues.append(ValidationIssue(
                field="groups",
                issue_type="invalid_type",
                message="Invalid backup format: groups must be an array",
                severity="error",
            ))

        return issues

    def _validate_records(
        self,
        data: Mapping[str, Any],
    ) -> tuple[list[Debt], list[Group], list[ValidationIssue]]:
        """Stage 2: every record must parse."""
        debts: list[Debt] = []
        groups: list[Group] = []
        issues: list[ValidationIssue] = []

        for index, raw in enumerate(data["debts"]):
            try:
                debts.append(Debt.model_validate(raw))
            except ValidationError as e:
                issues.extend(_describe_errors(f"debts[{index}]", e))

        for index, raw in enumerate(data.get("groups") or []):
            try:
                groups.append(Group.model_validate(raw))
            except ValidationError as e:
                issues.extend(_describe_errors(f"groups[{index}]", e))

        duplicates = [
            debt_id for debt_id, count in Counter(d.id for d in debts).items()
            if count > 1
        ]
        for debt_id in duplicates:
            issues.append(ValidationIssue(
                field="debts",
                issue_type="duplicate_id",
                message=f"Debt id {debt_id} appears more than once",
                severity="warning",
                suggested_fix="Edits and settlements will only affect the first match",
            ))

        return debts, groups, issues

    def validate(
        self,
        payload: Payload,
    ) -> tuple[ValidationResult, Optional[LedgerSnapshot]]:
        """
        Validate a backup payload (JSON text or an already-parsed mapping).

        Returns: (result, snapshot). snapshot is None unless result.is_valid.
        """
        data, issues = self._parse(payload)
        if not issues:
            issues = self._validate_structure(data)

        structure_valid = not any(issue.severity == "error" for issue in issues)
        if not structure_valid:
            return ValidationResult(
                structure_valid=False,
                records_valid=False,
                is_valid=False,
                issues=issues,
            ), None

        debts, groups, record_issues = self._validate_records(data)
        records_valid = not any(issue.severity == "error" for issue in record_issues)

        result = ValidationResult(
            structure_valid=True,
            records_valid=records_valid,
            is_valid=records_valid,
            issues=record_issues,
        )
        if not records_valid:
            return result, None

        return result, LedgerSnapshot(debts=debts, groups=groups)
