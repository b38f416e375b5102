"""In-memory loan store with relationship indexes."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterable

from loan_service.exceptions import LoanNotFoundError
from loan_service.models import Loan, LoanStatus
from loan_service.store.base import LoanStore


@dataclass
class InMemoryLoanStore(LoanStore):
    """Dict-backed store used by tests and local development."""

    loans: dict[int, Loan] = field(default_factory=dict)

    # Relationship indexes
    _user_loans: dict[int, list[int]] = field(default_factory=dict)
    _book_loans: dict[int, list[int]] = field(default_factory=dict)

    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def add(self, loan: Loan) -> Loan:
        """Add a loan to the store."""
        with self._lock:
            now = datetime.now()
            stored = replace(loan, loan_id=next(self._ids), created_at=now, updated_at=now)
            self.loans[stored.loan_id] = stored
            self._user_loans.setdefault(stored.user_id, []).append(stored.loan_id)
            self._book_loans.setdefault(stored.book_id, []).append(stored.loan_id)
            return replace(stored)

    def save(self, loan: Loan) -> Loan:
        with self._lock:
            return replace(self._write(loan))

    def save_all(self, loans: Iterable[Loan]) -> list[Loan]:
        with self._lock:
            pending = list(loans)
            for loan in pending:
                if loan.loan_id not in self.loans:
                    raise LoanNotFoundError(loan.loan_id)
            return [replace(self._write(loan)) for loan in pending]

    def _write(self, loan: Loan) -> Loan:
        current = self.loans.get(loan.loan_id)
        if current is None:
            raise LoanNotFoundError(loan.loan_id)
        stored = replace(loan, created_at=current.created_at, updated_at=datetime.now())
        self.loans[loan.loan_id] = stored
        return stored

    def get(self, loan_id: int) -> Loan | None:
        loan = self.loans.get(loan_id)
        return replace(loan) if loan is not None else None

    def delete(self, loan_id: int) -> bool:
        with self._lock:
            loan = self.loans.pop(loan_id, None)
            if loan is None:
                return False
            self._user_loans[loan.user_id].remove(loan_id)
            self._book_loans[loan.book_id].remove(loan_id)
            return True

    # Query methods
    def list_all(self) -> list[Loan]:
        return [replace(loan) for loan in self.loans.values()]

    def list_by_user(self, user_id: int) -> list[Loan]:
        """Get all loans for a user."""
        loan_ids = self._user_loans.get(user_id, [])
        return [replace(self.loans[lid]) for lid in loan_ids]

    def list_by_book(self, book_id: int) -> list[Loan]:
        """Get all loans for a book."""
        loan_ids = self._book_loans.get(book_id, [])
        return [replace(self.loans[lid]) for lid in loan_ids]

    def list_by_status(self, *statuses: LoanStatus) -> list[Loan]:
        return [replace(loan) for loan in self.loans.values() if loan.status in statuses]

    def list_loaned_between(self, start: date, end: date) -> list[Loan]:
        return [replace(loan) for loan in self.loans.values() if start <= loan.loan_date <= end]

    def list_late(self) -> list[Loan]:
        return [replace(loan) for loan in self.loans.values() if loan.days_late > 0]

    def count(self) -> int:
        return len(self.loans)

    def count_by_status(self, *statuses: LoanStatus) -> int:
        return sum(1 for loan in self.loans.values() if loan.status in statuses)

