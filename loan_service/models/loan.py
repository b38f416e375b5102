"""Loan models."""

from dataclasses import dataclass
from datetime import date, datetime

from loan_service.models.enums import LoanStatus


@dataclass
class Loan:
    """One book copy lent to one user."""

    book_id: int
    user_id: int
    loan_date: date
    due_date: date
    status: LoanStatus = LoanStatus.ACTIVE
    return_date: date | None = None
    days_late: int = 0
    notes: str | None = None
    loan_id: int | None = None  # assigned by the store on insert
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class LoanView:
    """Loan projection returned to callers, enriched with remote book data."""

    loan_id: int
    book_id: int
    book_title: str
    user_id: int
    loan_date: date
    due_date: date
    return_date: date | None
    status: LoanStatus  # display status, see lifecycle.display_status
    days_late: int
    notes: str | None
    overdue: bool


@dataclass
class LoanStatistics:
    """Counts per status; percentages are None when there are no loans."""

    active: int
    returned: int
    lost: int
    overdue: int
    total: int
    pct_active: float | None = None
    pct_returned: float | None = None
    pct_lost: float | None = None
