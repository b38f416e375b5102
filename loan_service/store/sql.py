"""SQLAlchemy-backed loan store (one ``loans`` table)."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable

from sqlalchemy import Date, DateTime, Engine, Enum, Integer, String, create_engine, func, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from loan_service.config import DatabaseConfig
from loan_service.exceptions import LoanNotFoundError
from loan_service.models import Loan, LoanStatus
from loan_service.store.base import LoanStore

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class LoanRecord(Base):
    __tablename__ = "loans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    loan_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    return_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[LoanStatus] = mapped_column(
        Enum(LoanStatus, native_enum=False, length=16), nullable=False, index=True
    )
    days_late: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    def to_loan(self) -> Loan:
        return Loan(
            loan_id=self.id,
            book_id=self.book_id,
            user_id=self.user_id,
            loan_date=self.loan_date,
            due_date=self.due_date,
            return_date=self.return_date,
            status=self.status,
            days_late=self.days_late,
            notes=self.notes,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def apply(self, loan: Loan) -> None:
        """Copy mutable loan fields onto the row."""
        self.due_date = loan.due_date
        self.return_date = loan.return_date
        self.status = loan.status
        self.days_late = loan.days_late
        self.notes = loan.notes


def create_engine_from_config(config: DatabaseConfig) -> Engine:
    """Build an engine; in-memory SQLite shares one connection across threads."""
    if config.is_sqlite and config.url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            config.url,
            echo=config.echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if config.is_sqlite:
        return create_engine(config.url, echo=config.echo, connect_args={"check_same_thread": False})
    return create_engine(config.url, echo=config.echo, pool_pre_ping=True)


class SqlLoanStore(LoanStore):
    """Loan store over a relational database."""

    def __init__(self, engine: Engine, create_schema: bool = True) -> None:
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        if create_schema:
            Base.metadata.create_all(engine)

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "SqlLoanStore":
        return cls(create_engine_from_config(config))

    def add(self, loan: Loan) -> Loan:
        record = LoanRecord(
            book_id=loan.book_id,
            user_id=loan.user_id,
            loan_date=loan.loan_date,
            due_date=loan.due_date,
            return_date=loan.return_date,
            status=loan.status,
            days_late=loan.days_late,
            notes=loan.notes,
        )
        with self._sessions.begin() as session:
            session.add(record)
            session.flush()
            logger.debug("Inserted loan %s", record.id)
            return record.to_loan()

    def save(self, loan: Loan) -> Loan:
        with self._sessions.begin() as session:
            return self._write(session, loan)

    def save_all(self, loans: Iterable[Loan]) -> list[Loan]:
        with self._sessions.begin() as session:
            return [self._write(session, loan) for loan in loans]

    def _write(self, session: Session, loan: Loan) -> Loan:
        record = session.get(LoanRecord, loan.loan_id)
        if record is None:
            raise LoanNotFoundError(loan.loan_id)
        record.apply(loan)
        session.flush()
        return record.to_loan()

    def get(self, loan_id: int) -> Loan | None:
        with self._sessions() as session:
            record = session.get(LoanRecord, loan_id)
            return record.to_loan() if record is not None else None

    def delete(self, loan_id: int) -> bool:
        with self._sessions.begin() as session:
            record = session.get(LoanRecord, loan_id)
            if record is None:
                return False
            session.delete(record)
            return True

    def _select(self, *criteria) -> list[Loan]:
        stmt = select(LoanRecord).where(*criteria).order_by(LoanRecord.id)
        with self._sessions() as session:
            return [record.to_loan() for record in session.scalars(stmt)]

    def list_all(self) -> list[Loan]:
        return self._select()

    def list_by_user(self, user_id: int) -> list[Loan]:
        return self._select(LoanRecord.user_id == user_id)

    def list_by_book(self, book_id: int) -> list[Loan]:
        return self._select(LoanRecord.book_id == book_id)

    def list_by_status(self, *statuses: LoanStatus) -> list[Loan]:
        return self._select(LoanRecord.status.in_(statuses))

    def list_loaned_between(self, start: date, end: date) -> list[Loan]:
        return self._select(LoanRecord.loan_date.between(start, end))

    def list_late(self) -> list[Loan]:
        return self._select(LoanRecord.days_late > 0)

    def count(self) -> int:
        with self._sessions() as session:
            return session.scalar(select(func.count()).select_from(LoanRecord)) or 0

    def count_by_status(self, *statuses: LoanStatus) -> int:
        stmt = select(func.count()).select_from(LoanRecord).where(LoanRecord.status.in_(statuses))
        with self._sessions() as session:
            return session.scalar(stmt) or 0

    def count_open_for_user(self, user_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(LoanRecord)
            .where(
                LoanRecord.user_id == user_id,
                LoanRecord.status.in_((LoanStatus.ACTIVE, LoanStatus.OVERDUE)),
            )
        )
        with self._sessions() as session:
            return session.scalar(stmt) or 0
