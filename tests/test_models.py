"""Tests for domain models."""

from datetime import date

from loan_service.models import (
    OPEN_STATUSES,
    UNAVAILABLE_TITLE,
    BookSummary,
    Loan,
    LoanStatistics,
    LoanStatus,
)


class TestLoanStatus:
    def test_open_statuses(self) -> None:
        assert OPEN_STATUSES == {LoanStatus.ACTIVE, LoanStatus.OVERDUE}
        assert LoanStatus.ACTIVE.is_open
        assert LoanStatus.OVERDUE.is_open

    def test_terminal_statuses(self) -> None:
        assert LoanStatus.RETURNED.is_terminal
        assert LoanStatus.LOST.is_terminal
        assert not LoanStatus.ACTIVE.is_terminal

    def test_string_value(self) -> None:
        assert LoanStatus("OVERDUE") is LoanStatus.OVERDUE
        assert LoanStatus.LOST == "LOST"


class TestLoan:
    def test_defaults(self) -> None:
        loan = Loan(book_id=1, user_id=2, loan_date=date(2024, 6, 1), due_date=date(2024, 6, 15))

        assert loan.status is LoanStatus.ACTIVE
        assert loan.return_date is None
        assert loan.days_late == 0
        assert loan.notes is None
        assert loan.loan_id is None
        assert loan.created_at is None


class TestBookSummary:
    def test_placeholder(self) -> None:
        summary = BookSummary.placeholder(9)

        assert summary.book_id == 9
        assert summary.title == UNAVAILABLE_TITLE
        assert summary.stock_count is None
        assert summary.available is None


class TestLoanStatistics:
    def test_percentages_default_to_none(self) -> None:
        stats = LoanStatistics(active=0, returned=0, lost=0, overdue=0, total=0)

        assert stats.pct_active is None
        assert stats.pct_returned is None
        assert stats.pct_lost is None
