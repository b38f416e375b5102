"""Request and response bodies for the loans REST API (camelCase on the wire)."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from loan_service.models import LoanStatistics, LoanStatus, LoanView


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoanCreateRequest(CamelModel):
    book_id: int = Field(..., gt=0, description="Id of the book in the Books service.")
    user_id: int = Field(..., gt=0, description="Id of the borrower in the Users service.")
    due_date: date = Field(..., description="Must be strictly after today.")
    notes: str | None = Field(None, max_length=500)


class LoanUpdateRequest(CamelModel):
    due_date: date = Field(..., description="New due date, strictly after today.")
    notes: str | None = Field(None, max_length=500)


class ReturnRequest(CamelModel):
    notes: str | None = Field(None, max_length=500)
    lost: bool = Field(False, description="The copy was lost; stock is not restored.")


class LoanResponse(CamelModel):
    id: int
    book_id: int
    book_title: str
    user_id: int
    loan_date: date
    due_date: date
    return_date: date | None
    status: LoanStatus
    days_late: int
    notes: str | None
    overdue: bool

    @classmethod
    def from_view(cls, view: LoanView) -> "LoanResponse":
        return cls(
            id=view.loan_id,
            book_id=view.book_id,
            book_title=view.book_title,
            user_id=view.user_id,
            loan_date=view.loan_date,
            due_date=view.due_date,
            return_date=view.return_date,
            status=view.status,
            days_late=view.days_late,
            notes=view.notes,
            overdue=view.overdue,
        )


class StatisticsResponse(CamelModel):
    active: int
    returned: int
    lost: int
    overdue: int
    total: int
    pct_active: float | None = None
    pct_returned: float | None = None
    pct_lost: float | None = None

    @classmethod
    def from_stats(cls, stats: LoanStatistics) -> "StatisticsResponse":
        return cls(
            active=stats.active,
            returned=stats.returned,
            lost=stats.lost,
            overdue=stats.overdue,
            total=stats.total,
            pct_active=stats.pct_active,
            pct_returned=stats.pct_returned,
            pct_lost=stats.pct_lost,
        )
