"""Storage interface for loan records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable

from loan_service.models import Loan, LoanStatus


class LoanStore(ABC):
    """Persistent collection of loans keyed by ``loan_id``.

    Implementations hand out detached copies: mutating a returned ``Loan``
    has no effect until it is passed back to :meth:`save`. Each write is
    atomic for a single row; :meth:`save_all` is one bulk write.
    """

    @abstractmethod
    def add(self, loan: Loan) -> Loan:
        """Insert a new loan, assigning ``loan_id`` and timestamps."""

    @abstractmethod
    def save(self, loan: Loan) -> Loan:
        """Overwrite an existing loan (last write wins)."""

    @abstractmethod
    def save_all(self, loans: Iterable[Loan]) -> list[Loan]:
        """Overwrite several existing loans in one write."""

    @abstractmethod
    def get(self, loan_id: int) -> Loan | None:
        """Return the loan or None."""

    @abstractmethod
    def delete(self, loan_id: int) -> bool:
        """Remove a loan; returns False if it did not exist."""

    @abstractmethod
    def list_all(self) -> list[Loan]: ...

    @abstractmethod
    def list_by_user(self, user_id: int) -> list[Loan]: ...

    @abstractmethod
    def list_by_book(self, book_id: int) -> list[Loan]: ...

    @abstractmethod
    def list_by_status(self, *statuses: LoanStatus) -> list[Loan]: ...

    @abstractmethod
    def list_loaned_between(self, start: date, end: date) -> list[Loan]:
        """Loans whose ``loan_date`` falls within ``[start, end]``."""

    @abstractmethod
    def list_late(self) -> list[Loan]:
        """Loans with a recorded ``days_late`` above zero."""

    @abstractmethod
    def count(self) -> int: ...

    @abstractmethod
    def count_by_status(self, *statuses: LoanStatus) -> int: ...

    def count_open_for_user(self, user_id: int) -> int:
        """Number of ACTIVE or OVERDUE loans held by ``user_id``."""
        return sum(1 for loan in self.list_by_user(user_id) if loan.status.is_open)
