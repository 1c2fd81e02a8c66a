"""
Contact Sources

Counterparty name suggestions for the add-debt flow. Saved names come
from the ledger itself; a platform address book can optionally add more.

DESIGN DECISION: The address book is an optional capability. Hosts that
can't read contacts simply report is_supported() == False, and a source
that fails mid-read degrades to saved names only.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

import structlog


logger = structlog.get_logger(__name__)


class ContactSourceInterface(ABC):
    """Abstract interface for a platform contact picker."""

    @abstractmethod
    def is_supported(self) -> bool:
        """Whether this host can read contacts at all."""
        pass

    @abstractmethod
    def fetch_names(self) -> list[str]:
        """
        Read contact display names.

        Raises:
            ContactSourceError: If the contacts can't be read
        """
        pass


class StaticContactSource(ContactSourceInterface):
    """Fixed list of names. Used by tests and by hosts without a picker."""

    def __init__(self, names: Iterable[str] = (), supported: bool = True):
        self._names = [name.strip() for name in names if name and name.strip()]
        self._supported = supported

    def is_supported(self) -> bool:
        return self._supported

    def fetch_names(self) -> list[str]:
        return list(self._names)


def suggest_counterparties(
    ledger_names: Sequence[str],
    query: str = "",
    source: Optional[ContactSourceInterface] = None,
    exclude: Iterable[str] = (),
) -> list[str]:
    """
    Names matching a search string, saved names first.

    Matching is a case-insensitive substring test. Names already chosen
    (e.g. split participants) are passed in `exclude` and skipped.
    Duplicates are dropped by exact string.
    """
    candidates = list(ledger_names)

    if source is not None and source.is_supported():
        try:
            candidates.extend(source.fetch_names())
        except Exception as e:
            logger.warning("contact_source_failed", error=str(e))

    search = (query or "").strip().lower()
    excluded = set(exclude)

    return [
        name for name in dict.fromkeys(candidates)
        if name not in excluded and search in name.lower()
    ]


# =============================================================================
# EXCEPTIONS
# =============================================================================

class ContactSourceError(Exception):
    """Contact picker failed or was dismissed."""
    pass
