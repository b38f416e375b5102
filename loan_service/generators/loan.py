"""Sample loan histories for local development."""

from datetime import date, timedelta
from typing import Iterator

from loan_service import lifecycle
from loan_service.generators.base import BaseGenerator
from loan_service.models import Loan, LoanStatus


class LoanGenerator(BaseGenerator):
    """Generate loans spread over the recent past.

    Loans go through the lifecycle rules. Batches also keep the lending
    rules: one open loan per book and a cap on open loans per user.
    """

    LOAN_PERIODS_DAYS = [7, 14, 21, 30]

    def __init__(
        self,
        seed: int | None = None,
        returned_rate: float = 0.55,
        lost_rate: float = 0.05,
    ) -> None:
        super().__init__(seed)
        self.returned_rate = returned_rate
        self.lost_rate = lost_rate

    def generate(
        self,
        book_id: int,
        user_id: int,
        today: date,
        max_age_days: int = 90,
        allow_open: bool = True,
    ) -> Loan:
        """Generate one loan as it would look on ``today``.

        Parameters
        ----------
        book_id : int
            Borrowed book.
        user_id : int
            Borrower.
        today : date
            Reference date; loan dates fall within ``max_age_days`` before it.
        max_age_days : int
            Oldest possible loan date, in days before ``today``.
        allow_open : bool
            When False the loan is always closed (RETURNED or LOST).

        Returns
        -------
        Loan
            Unsaved loan (no ``loan_id``).
        """
        # a closed loan needs at least one day between loan and return
        min_age = 0 if allow_open else 1
        loan_date = today - timedelta(days=self.random.randint(min_age, max(max_age_days, min_age)))
        due_date = loan_date + timedelta(days=self.random.choice(self.LOAN_PERIODS_DAYS))
        notes = self.fake.sentence(nb_words=6) if self.random.random() < 0.3 else None

        loan = Loan(
            book_id=book_id,
            user_id=user_id,
            loan_date=loan_date,
            due_date=due_date,
            status=LoanStatus.ACTIVE,
            notes=notes,
        )

        roll = self.random.random()
        closes = roll < self.returned_rate + self.lost_rate or not allow_open
        if closes and loan_date < today:
            returned_on = loan_date + timedelta(days=self.random.randint(1, (today - loan_date).days))
            lifecycle.register_return(loan, returned_on, lost=roll < self.lost_rate)
        else:
            lifecycle.promote_overdue(loan, today)
        return loan

    def generate_batch(
        self,
        count: int,
        today: date,
        num_books: int = 50,
        num_users: int = 20,
        max_active_loans: int = 5,
    ) -> Iterator[Loan]:
        """Generate ``count`` loans over random books and users.

        A book holds at most one open loan and a user at most
        ``max_active_loans``; draws that would break either rule become
        closed loans instead.
        """
        open_books: set[int] = set()
        open_per_user: dict[int, int] = {}
        for _ in range(count):
            book_id = self.random.randint(1, num_books)
            user_id = self.random.randint(1, num_users)
            allow_open = (
                book_id not in open_books
                and open_per_user.get(user_id, 0) < max_active_loans
            )
            loan = self.generate(book_id=book_id, user_id=user_id, today=today, allow_open=allow_open)
            if loan.status.is_open:
                open_books.add(book_id)
                open_per_user[user_id] = open_per_user.get(user_id, 0) + 1
            yield loan
