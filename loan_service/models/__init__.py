"""Domain models for the loan service."""

from loan_service.models.book import UNAVAILABLE_TITLE, BookSummary
from loan_service.models.enums import OPEN_STATUSES, LoanStatus
from loan_service.models.loan import Loan, LoanStatistics, LoanView

__all__ = [
    "BookSummary",
    "Loan",
    "LoanStatistics",
    "LoanStatus",
    "LoanView",
    "OPEN_STATUSES",
    "UNAVAILABLE_TITLE",
]
