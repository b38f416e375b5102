"""Custom exception hierarchy for loan-service."""


class LoanServiceError(Exception):
    """Base exception for all loan-service errors."""


class EntityNotFoundError(LoanServiceError):
    """Raised when a referenced entity does not exist."""


class LoanNotFoundError(EntityNotFoundError):
    """Raised when a loan id is not present in the store."""

    def __init__(self, loan_id: int) -> None:
        super().__init__(f"Loan {loan_id} not found")
        self.loan_id = loan_id


class InvalidLoanStateError(LoanServiceError):
    """Raised when a loan is in an invalid state for the operation."""


class LoanValidationError(LoanServiceError):
    """Raised when request data fails a business validation.

    ``errors`` maps field names to messages.
    """

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class LoanRuleViolation(LoanServiceError):
    """Raised when a loan request breaks a lending rule."""


class BookNotAvailableError(LoanRuleViolation):
    """Raised when the requested book has no lendable copies."""

    def __init__(self, book_id: int) -> None:
        super().__init__(f"Book {book_id} is not available for loan")
        self.book_id = book_id


class UserHasOverdueLoansError(LoanRuleViolation):
    """Raised when the borrower still holds overdue loans."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} has overdue loans")
        self.user_id = user_id


class LoanLimitExceededError(LoanRuleViolation):
    """Raised when the borrower already holds the maximum of open loans."""

    def __init__(self, user_id: int, limit: int) -> None:
        super().__init__(f"User {user_id} has reached the limit of {limit} active loans")
        self.user_id = user_id
        self.limit = limit


class RemoteServiceError(LoanServiceError):
    """Raised when a call to an upstream service fails."""


class RemoteNotFoundError(RemoteServiceError, EntityNotFoundError):
    """Raised when the upstream service reports an unknown id."""


class RemoteUnavailableError(RemoteServiceError):
    """Raised when the upstream service is unreachable or erroring."""


class RemoteRejectedError(RemoteServiceError):
    """Raised when the upstream service refuses a request (4xx other than 404)."""


class ConfigurationError(LoanServiceError):
    """Raised when configuration is invalid or missing."""
