"""Tests for loan lifecycle rules."""

import warnings
from datetime import date, timedelta
from pathlib import Path

import pytest

from loan_service import lifecycle
from loan_service.exceptions import InvalidLoanStateError
from loan_service.models import Loan, LoanStatus

TODAY = date(2024, 6, 15)


def make_loan(due_in_days: int, status: LoanStatus = LoanStatus.ACTIVE, **kwargs) -> Loan:
    return Loan(
        loan_id=1,
        book_id=1,
        user_id=1,
        loan_date=TODAY - timedelta(days=20),
        due_date=TODAY + timedelta(days=due_in_days),
        status=status,
        **kwargs,
    )


class TestDaysLate:
    def test_on_time(self) -> None:
        assert lifecycle.days_late(make_loan(3), TODAY) == 0

    def test_due_today_is_not_late(self) -> None:
        assert lifecycle.days_late(make_loan(0), TODAY) == 0

    def test_past_due(self) -> None:
        assert lifecycle.days_late(make_loan(-4), TODAY) == 4

    def test_overdue_status_still_counts(self) -> None:
        assert lifecycle.days_late(make_loan(-2, LoanStatus.OVERDUE), TODAY) == 2

    def test_terminal_is_zero(self) -> None:
        loan = make_loan(-4, LoanStatus.RETURNED, return_date=TODAY)
        assert lifecycle.days_late(loan, TODAY) == 0


class TestIsOverdue:
    def test_active_past_due(self) -> None:
        assert lifecycle.is_overdue(make_loan(-1), TODAY)

    def test_active_on_time(self) -> None:
        assert not lifecycle.is_overdue(make_loan(0), TODAY)

    def test_swept_overdue_loan_still_overdue(self) -> None:
        assert lifecycle.is_overdue(make_loan(-1, LoanStatus.OVERDUE), TODAY)

    def test_returned_never_overdue(self) -> None:
        loan = make_loan(-10, LoanStatus.RETURNED, return_date=TODAY)
        assert not lifecycle.is_overdue(loan, TODAY)


class TestDisplayStatus:
    def test_active_past_due_displays_overdue(self) -> None:
        assert lifecycle.display_status(make_loan(-1), TODAY) is LoanStatus.OVERDUE

    def test_stale_overdue_label_displays_active(self) -> None:
        assert lifecycle.display_status(make_loan(5, LoanStatus.OVERDUE), TODAY) is LoanStatus.ACTIVE

    @pytest.mark.parametrize("status", [LoanStatus.RETURNED, LoanStatus.LOST])
    def test_terminal_unchanged(self, status: LoanStatus) -> None:
        loan = make_loan(-1, status, return_date=TODAY)
        assert lifecycle.display_status(loan, TODAY) is status


class TestRegisterReturn:
    def test_return(self) -> None:
        loan = lifecycle.register_return(make_loan(5), TODAY)

        assert loan.status is LoanStatus.RETURNED
        assert loan.return_date == TODAY
        assert loan.days_late == 0

    def test_lost(self) -> None:
        loan = lifecycle.register_return(make_loan(5), TODAY, lost=True)

        assert loan.status is LoanStatus.LOST
        assert loan.return_date == TODAY

    def test_late_return_freezes_lateness(self) -> None:
        loan = lifecycle.register_return(make_loan(-3), TODAY)

        assert loan.days_late == 3
        lifecycle.recompute(loan, TODAY + timedelta(days=10))
        assert loan.days_late == 3

    def test_overdue_loan_can_be_returned(self) -> None:
        loan = lifecycle.register_return(make_loan(-3, LoanStatus.OVERDUE), TODAY)
        assert loan.status is LoanStatus.RETURNED

    def test_notes_replaced_only_when_given(self) -> None:
        loan = lifecycle.register_return(make_loan(5, notes="original"), TODAY)
        assert loan.notes == "original"

        other = lifecycle.register_return(make_loan(5, notes="original"), TODAY, notes="damaged cover")
        assert other.notes == "damaged cover"

    @pytest.mark.parametrize("status", [LoanStatus.RETURNED, LoanStatus.LOST])
    def test_terminal_loans_rejected(self, status: LoanStatus) -> None:
        first_return = TODAY - timedelta(days=2)
        loan = make_loan(5, status, return_date=first_return)

        with pytest.raises(InvalidLoanStateError):
            lifecycle.register_return(loan, TODAY)

        assert loan.status is status
        assert loan.return_date == first_return


class TestPromoteOverdue:
    def test_promotes_past_due(self) -> None:
        loan = make_loan(-1)

        assert lifecycle.promote_overdue(loan, TODAY) is True
        assert loan.status is LoanStatus.OVERDUE
        assert loan.days_late == 1

    def test_keeps_on_time(self) -> None:
        loan = make_loan(1)

        assert lifecycle.promote_overdue(loan, TODAY) is False
        assert loan.status is LoanStatus.ACTIVE

    def test_already_overdue_not_promoted_again(self) -> None:
        loan = make_loan(-3, LoanStatus.OVERDUE, days_late=2)

        assert lifecycle.promote_overdue(loan, TODAY) is False
        assert loan.days_late == 3


class TestReschedule:
    def test_extends_due_date(self) -> None:
        loan = lifecycle.reschedule(make_loan(2), TODAY + timedelta(days=9), TODAY, notes="extended")

        assert loan.due_date == TODAY + timedelta(days=9)
        assert loan.notes == "extended"
        assert loan.days_late == 0

    def test_overdue_loan_back_to_active(self) -> None:
        loan = make_loan(-3, LoanStatus.OVERDUE, days_late=3)

        lifecycle.reschedule(loan, TODAY + timedelta(days=7), TODAY)

        assert loan.status is LoanStatus.ACTIVE
        assert loan.days_late == 0

    def test_closed_loan_rejected(self) -> None:
        loan = make_loan(2, LoanStatus.RETURNED, return_date=TODAY)

        with pytest.raises(InvalidLoanStateError):
            lifecycle.reschedule(loan, TODAY + timedelta(days=7), TODAY)


class TestReturnDateInvariant:
    """return_date is set iff the loan is RETURNED or LOST."""

    @pytest.mark.parametrize("lost", [False, True])
    def test_after_return(self, lost: bool) -> None:
        loan = make_loan(4)
        assert loan.return_date is None

        lifecycle.register_return(loan, TODAY, lost=lost)

        assert (loan.return_date is not None) == loan.status.is_terminal

    def test_promotion_keeps_return_date_empty(self) -> None:
        loan = make_loan(-1)
        lifecycle.promote_overdue(loan, TODAY)
        assert loan.return_date is None


class TestModuleSource:
    def test_compiles_without_warnings(self) -> None:
        """The state diagram in the module docstring has no invalid escapes."""
        source = Path(lifecycle.__file__).read_text(encoding="utf-8")

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(source, lifecycle.__file__, "exec")
