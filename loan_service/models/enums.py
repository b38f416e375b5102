"""Enumeration types for the loan domain."""

from enum import Enum


class LoanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    OVERDUE = "OVERDUE"
    RETURNED = "RETURNED"
    LOST = "LOST"

    @property
    def is_open(self) -> bool:
        """Whether the loan still holds a copy (not returned or lost)."""
        return self in OPEN_STATUSES

    @property
    def is_terminal(self) -> bool:
        return not self.is_open


OPEN_STATUSES = frozenset({LoanStatus.ACTIVE, LoanStatus.OVERDUE})
