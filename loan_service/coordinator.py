"""Loan operations coordinating the local store with the Books service."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from loan_service import lifecycle
from loan_service.config import LoanRules
from loan_service.exceptions import (
    BookNotAvailableError,
    LoanLimitExceededError,
    LoanNotFoundError,
    LoanValidationError,
    RemoteServiceError,
    RemoteNotFoundError,
    UserHasOverdueLoansError,
)
from loan_service.gateways import BookAvailabilityGateway, UserDirectoryGateway
from loan_service.models import Loan, LoanStatistics, LoanStatus, LoanView
from loan_service.store import LoanStore

logger = logging.getLogger(__name__)


class LoanCoordinator:
    """Create, return, update and delete loans.

    Local writes and remote stock mutations are not atomic. Creation
    persists the loan before decrementing stock, so a failed decrement
    leaves an ACTIVE row behind and the error reaches the caller. Stock
    release after a return or delete is best-effort: a remote failure is
    logged and the local change stands.

    Parameters
    ----------
    store : LoanStore
        Loan persistence.
    books : BookAvailabilityGateway
        Books service client.
    rules : LoanRules | None
        Lending limits (default: 5 open loans per user).
    today : Callable[[], date]
        Clock used for every date comparison.
    users : UserDirectoryGateway | None
        Users service client, only used by :meth:`upstream_status`.
    """

    def __init__(
        self,
        store: LoanStore,
        books: BookAvailabilityGateway,
        rules: LoanRules | None = None,
        today: Callable[[], date] = date.today,
        users: UserDirectoryGateway | None = None,
    ) -> None:
        self.store = store
        self.books = books
        self.rules = rules or LoanRules()
        self.today = today
        self.users = users

    # ---- mutations

    def create_loan(
        self,
        book_id: int,
        user_id: int,
        due_date: date,
        notes: str | None = None,
    ) -> LoanView:
        """Lend ``book_id`` to ``user_id`` until ``due_date``."""
        logger.info("Creating loan for book %s, user %s", book_id, user_id)
        today = self.today()
        if due_date <= today:
            raise LoanValidationError(
                "Invalid loan request",
                {"dueDate": "The due date must be in the future"},
            )

        self._check_book_available(book_id)
        self._check_no_overdue_loans(user_id, today)
        self._check_loan_limit(user_id)

        book = self.books.fetch_summary_or_placeholder(book_id)

        loan = Loan(
            book_id=book_id,
            user_id=user_id,
            loan_date=today,
            due_date=due_date,
            status=LoanStatus.ACTIVE,
            notes=notes,
        )
        lifecycle.recompute(loan, today)
        saved = self.store.add(loan)
        logger.info("Loan %s created", saved.loan_id, extra=_log_fields(saved))

        try:
            self.books.decrement_stock(book_id)
        except RemoteServiceError:
            # The row is already committed; nothing rolls it back.
            logger.error(
                "Stock decrement failed for book %s after loan %s was saved",
                book_id,
                saved.loan_id,
                extra=_log_fields(saved),
            )
            raise

        return self._view(saved, today, book.title)

    def register_return(
        self,
        loan_id: int,
        notes: str | None = None,
        lost: bool = False,
    ) -> LoanView:
        """Close a loan as RETURNED, or LOST when ``lost`` is set."""
        logger.info("Registering return for loan %s (lost=%s)", loan_id, lost)
        today = self.today()
        loan = self._load(loan_id)

        lifecycle.register_return(loan, today, lost=lost, notes=notes)
        updated = self.store.save(loan)

        # A lost copy never goes back on the shelf.
        if not lost:
            self._release_stock(updated)

        logger.info(
            "Return registered for loan %s as %s",
            loan_id,
            updated.status.value,
            extra=_log_fields(updated),
        )
        return self._view(updated, today)

    def update_loan(self, loan_id: int, due_date: date, notes: str | None = None) -> LoanView:
        """Move the due date and/or notes of an open loan."""
        logger.info("Updating loan %s", loan_id)
        today = self.today()
        loan = self._load(loan_id)
        lifecycle.ensure_mutable(loan)
        if due_date <= today:
            raise LoanValidationError(
                "Invalid loan update",
                {"dueDate": "The due date must be in the future"},
            )

        lifecycle.reschedule(loan, due_date, today, notes=notes)
        return self._view(self.store.save(loan), today)

    def delete_loan(self, loan_id: int) -> None:
        """Delete a loan, releasing its copy first if it is still open."""
        logger.info("Deleting loan %s", loan_id)
        loan = self._load(loan_id)
        if loan.status.is_open:
            self._release_stock(loan)
        self.store.delete(loan_id)

    # ---- reads

    def get_loan(self, loan_id: int) -> LoanView:
        return self._view(self._load(loan_id), self.today())

    def list_loans(self) -> list[LoanView]:
        return self._views(self.store.list_all())

    def list_by_user(self, user_id: int) -> list[LoanView]:
        return self._views(self.store.list_by_user(user_id))

    def list_by_book(self, book_id: int) -> list[LoanView]:
        return self._views(self.store.list_by_book(book_id))

    def list_active(self) -> list[LoanView]:
        """Open loans that are still within their due date."""
        today = self.today()
        loans = self.store.list_by_status(LoanStatus.ACTIVE, LoanStatus.OVERDUE)
        return self._views([loan for loan in loans if not lifecycle.is_overdue(loan, today)])

    def list_overdue(self) -> list[LoanView]:
        """Open loans past their due date, whether or not the sweep has run."""
        today = self.today()
        loans = self.store.list_by_status(LoanStatus.ACTIVE, LoanStatus.OVERDUE)
        return self._views([loan for loan in loans if lifecycle.is_overdue(loan, today)])

    def list_late(self) -> list[LoanView]:
        """Open loans past due as of today, plus closed loans returned late.

        Stored ``days_late`` is only trusted for closed loans; open ones are
        judged against the clock so the result does not depend on the sweep.
        """
        today = self.today()
        open_loans = self.store.list_by_status(LoanStatus.ACTIVE, LoanStatus.OVERDUE)
        late = [loan for loan in open_loans if lifecycle.is_overdue(loan, today)]
        late.extend(loan for loan in self.store.list_late() if loan.status.is_terminal)
        late.sort(key=lambda loan: loan.loan_id)
        return self._views(late)

    def list_loaned_between(self, start: date, end: date) -> list[LoanView]:
        if start > end:
            raise LoanValidationError("Invalid period", {"start": "start must not be after end"})
        return self._views(self.store.list_loaned_between(start, end))

    def has_active_loans(self, user_id: int) -> bool:
        return self.count_active_for_user(user_id) > 0

    def count_active_for_user(self, user_id: int) -> int:
        return self.store.count_open_for_user(user_id)

    def is_book_on_loan(self, book_id: int) -> bool:
        return any(loan.status.is_open for loan in self.store.list_by_book(book_id))

    def statistics(self) -> LoanStatistics:
        """Loan counts per display status with percentages of the total."""
        today = self.today()
        counts = {status: 0 for status in LoanStatus}
        for loan in self.store.list_all():
            counts[lifecycle.display_status(loan, today)] += 1
        total = sum(counts.values())

        stats = LoanStatistics(
            active=counts[LoanStatus.ACTIVE],
            returned=counts[LoanStatus.RETURNED],
            lost=counts[LoanStatus.LOST],
            overdue=counts[LoanStatus.OVERDUE],
            total=total,
        )
        if total > 0:
            stats.pct_active = stats.active * 100.0 / total
            stats.pct_returned = stats.returned * 100.0 / total
            stats.pct_lost = stats.lost * 100.0 / total
        return stats

    def upstream_status(self) -> dict[str, bool]:
        """Reachability of the upstream services."""
        status = {"books": self.books.ping()}
        if self.users is not None:
            status["users"] = self.users.ping()
        return status

    # ---- helpers

    def _load(self, loan_id: int) -> Loan:
        loan = self.store.get(loan_id)
        if loan is None:
            raise LoanNotFoundError(loan_id)
        return loan

    def _check_book_available(self, book_id: int) -> None:
        try:
            available = self.books.is_available(book_id)
        except RemoteNotFoundError as exc:
            raise BookNotAvailableError(book_id) from exc
        if not available:
            raise BookNotAvailableError(book_id)

    def _check_no_overdue_loans(self, user_id: int, today: date) -> None:
        if any(lifecycle.is_overdue(loan, today) for loan in self.store.list_by_user(user_id)):
            raise UserHasOverdueLoansError(user_id)

    def _check_loan_limit(self, user_id: int) -> None:
        if self.store.count_open_for_user(user_id) >= self.rules.max_active_loans:
            raise LoanLimitExceededError(user_id, self.rules.max_active_loans)

    def _release_stock(self, loan: Loan) -> None:
        try:
            self.books.increment_stock(loan.book_id)
        except RemoteServiceError as exc:
            logger.error(
                "Could not return book %s to stock for loan %s, keeping local change: %s",
                loan.book_id,
                loan.loan_id,
                exc,
                extra=_log_fields(loan),
            )

    def _view(self, loan: Loan, today: date, title: str | None = None) -> LoanView:
        if title is None:
            title = self.books.fetch_summary_or_placeholder(loan.book_id).title
        return LoanView(
            loan_id=loan.loan_id,
            book_id=loan.book_id,
            book_title=title,
            user_id=loan.user_id,
            loan_date=loan.loan_date,
            due_date=loan.due_date,
            return_date=loan.return_date,
            status=lifecycle.display_status(loan, today),
            days_late=lifecycle.days_late(loan, today) if loan.status.is_open else loan.days_late,
            notes=loan.notes,
            overdue=lifecycle.is_overdue(loan, today),
        )

    def _views(self, loans: list[Loan]) -> list[LoanView]:
        today = self.today()
        titles: dict[int, str] = {}
        views = []
        for loan in loans:
            if loan.book_id not in titles:
                titles[loan.book_id] = self.books.fetch_summary_or_placeholder(loan.book_id).title
            views.append(self._view(loan, today, titles[loan.book_id]))
        return views


def _log_fields(loan: Loan) -> dict:
    """Structured fields picked up by ``JsonFormatter``."""
    return {"extra": {"loan_id": loan.loan_id, "book_id": loan.book_id, "user_id": loan.user_id}}
