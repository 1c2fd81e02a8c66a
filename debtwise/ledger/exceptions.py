"""Ledger-specific exceptions"""

from debtwise.models.validation import ValidationResult


class LedgerError(Exception):
    """Base exception for ledger operations"""

    pass


class ProtectedGroupError(LedgerError):
    """Attempted to remove the reserved Personal group"""

    def __init__(self, group_id: str):
        self.group_id = group_id
        super().__init__("The 'Personal' group cannot be deleted.")


class ImportValidationError(LedgerError):
    """Backup payload failed validation; the ledger was left untouched"""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(
            "Failed to import data. Please make sure the file is a valid "
            f"DebtWise backup. ({messages})"
        )
