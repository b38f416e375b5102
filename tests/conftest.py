"""Pytest configuration and fixtures."""

from datetime import date

import pytest

from loan_service.config import LoanRules
from loan_service.coordinator import LoanCoordinator
from loan_service.exceptions import RemoteNotFoundError, RemoteUnavailableError
from loan_service.gateways import BookAvailabilityGateway
from loan_service.models import BookSummary
from loan_service.store import InMemoryLoanStore

TODAY = date(2024, 6, 15)


class FakeBookGateway(BookAvailabilityGateway):
    """Books service double keeping stock in a dict.

    Set ``fail_on`` to a method name to make it raise ``RemoteUnavailableError``.
    """

    def __init__(self, stock: dict[int, int] | None = None) -> None:
        self.stock = dict(stock or {})
        self.calls: list[tuple[str, int]] = []
        self.fail_on: set[str] = set()

    def _check(self, method: str, book_id: int) -> None:
        self.calls.append((method, book_id))
        if method in self.fail_on:
            raise RemoteUnavailableError(f"{method} failed")
        if book_id not in self.stock:
            raise RemoteNotFoundError(f"Book {book_id} not found")

    def is_available(self, book_id: int) -> bool:
        self._check("is_available", book_id)
        return self.stock[book_id] > 0

    def fetch_summary(self, book_id: int) -> BookSummary:
        self._check("fetch_summary", book_id)
        return BookSummary(
            book_id=book_id,
            title=f"Book {book_id}",
            stock_count=self.stock[book_id],
            available=self.stock[book_id] > 0,
        )

    def decrement_stock(self, book_id: int) -> None:
        self._check("decrement_stock", book_id)
        self.stock[book_id] -= 1

    def increment_stock(self, book_id: int) -> None:
        self._check("increment_stock", book_id)
        self.stock[book_id] += 1

    def called(self, method: str) -> list[int]:
        return [book_id for name, book_id in self.calls if name == method]


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def store() -> InMemoryLoanStore:
    """Create a fresh store for each test."""
    return InMemoryLoanStore()


@pytest.fixture
def books() -> FakeBookGateway:
    """Books 1-10 with five copies each."""
    return FakeBookGateway({book_id: 5 for book_id in range(1, 11)})


@pytest.fixture
def coordinator(store: InMemoryLoanStore, books: FakeBookGateway, today: date) -> LoanCoordinator:
    return LoanCoordinator(store, books, rules=LoanRules(max_active_loans=5), today=lambda: today)
