r"""Loan lifecycle rules.

State machine::

    ACTIVE ──(due date passes, sweep)──> OVERDUE
      │  \                                 │
      │   └──────(return / lost)───────────┤
      ▼                                    ▼
    RETURNED                              LOST

OVERDUE is a cached label over an open loan whose due date has passed; the
sweep persists it, but reads always derive the display status from
``(status, due_date, today)`` so a stale label never leaks. RETURNED and LOST
are absorbing.

All functions take ``today`` explicitly so callers control the clock.
"""

from datetime import date

from loan_service.exceptions import InvalidLoanStateError
from loan_service.models import Loan, LoanStatus


def days_late(loan: Loan, today: date) -> int:
    """Whole days past the due date for an open loan, else 0."""
    if loan.status.is_open and today > loan.due_date:
        return (today - loan.due_date).days
    return 0


def is_overdue(loan: Loan, today: date) -> bool:
    """Open loan whose due date has passed, whether or not the sweep has run."""
    return loan.status.is_open and today > loan.due_date


def display_status(loan: Loan, today: date) -> LoanStatus:
    """Status to present for ``loan`` as of ``today``."""
    if not loan.status.is_open:
        return loan.status
    return LoanStatus.OVERDUE if today > loan.due_date else LoanStatus.ACTIVE


def recompute(loan: Loan, today: date) -> Loan:
    """Refresh ``days_late`` in place.

    Terminal loans keep the lateness frozen when they were closed.
    """
    if loan.status.is_open:
        loan.days_late = days_late(loan, today)
    return loan


def ensure_mutable(loan: Loan) -> None:
    """Raise if the loan is closed and can no longer be edited."""
    if loan.status.is_terminal:
        raise InvalidLoanStateError(
            f"Loan {loan.loan_id} is already closed (status {loan.status.value})"
        )


def register_return(
    loan: Loan,
    today: date,
    lost: bool = False,
    notes: str | None = None,
) -> Loan:
    """Close an open loan as RETURNED or LOST.

    Parameters
    ----------
    loan : Loan
        Loan to close, modified in place.
    today : date
        Return date.
    lost : bool
        Mark the copy as lost instead of returned.
    notes : str | None
        Replaces the loan notes when given.

    Returns
    -------
    Loan
        The same loan instance.

    Raises
    ------
    InvalidLoanStateError
        If the loan is not open.
    """
    if not loan.status.is_open:
        raise InvalidLoanStateError(
            f"Loan {loan.loan_id} is not active (current status {loan.status.value})"
        )

    loan.days_late = days_late(loan, today)
    loan.return_date = today
    loan.status = LoanStatus.LOST if lost else LoanStatus.RETURNED
    if notes is not None:
        loan.notes = notes
    return loan


def promote_overdue(loan: Loan, today: date) -> bool:
    """Flip an ACTIVE past-due loan to OVERDUE.

    Returns True when the status changed.
    """
    recompute(loan, today)
    if loan.status is LoanStatus.ACTIVE and is_overdue(loan, today):
        loan.status = LoanStatus.OVERDUE
        return True
    return False


def reschedule(loan: Loan, due_date: date, today: date, notes: str | None = None) -> Loan:
    """Move the due date of an open loan and refresh its lateness.

    An OVERDUE loan whose new due date is no longer past goes back to ACTIVE.
    """
    ensure_mutable(loan)
    loan.due_date = due_date
    if notes is not None:
        loan.notes = notes
    if loan.status is LoanStatus.OVERDUE and not is_overdue(loan, today):
        loan.status = LoanStatus.ACTIVE
    return recompute(loan, today)
