"""Backup payload validation."""

from debtwise.validation.validator import ImportValidator

__all__ = ["ImportValidator"]
