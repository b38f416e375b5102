"""Loans REST endpoints.

Handlers are plain ``def`` functions: the coordinator blocks on the
database and on the Books service, so FastAPI runs them in its threadpool.
"""

from datetime import date

from fastapi import APIRouter, Depends, Request, Response, status

from loan_service.api.schemas import (
    LoanCreateRequest,
    LoanResponse,
    LoanUpdateRequest,
    ReturnRequest,
    StatisticsResponse,
)
from loan_service.coordinator import LoanCoordinator
from loan_service.models import LoanView

router = APIRouter(prefix="/loans", tags=["loans"])


def get_coordinator(request: Request) -> LoanCoordinator:
    return request.app.state.coordinator


def _many(views: list[LoanView]) -> list[LoanResponse]:
    return [LoanResponse.from_view(view) for view in views]


@router.post("", response_model=LoanResponse, status_code=status.HTTP_201_CREATED)
def create_loan(body: LoanCreateRequest, coordinator: LoanCoordinator = Depends(get_coordinator)):
    view = coordinator.create_loan(body.book_id, body.user_id, body.due_date, body.notes)
    return LoanResponse.from_view(view)


@router.get("", response_model=list[LoanResponse])
def list_loans(coordinator: LoanCoordinator = Depends(get_coordinator)):
    return _many(coordinator.list_loans())


# Fixed paths first so they are not captured by /{loan_id}.


@router.get("/active", response_model=list[LoanResponse])
def list_active(coordinator: LoanCoordinator = Depends(get_coordinator)):
    return _many(coordinator.list_active())


@router.get("/overdue", response_model=list[LoanResponse])
def list_overdue(coordinator: LoanCoordinator = Depends(get_coordinator)):
    return _many(coordinator.list_overdue())


@router.get("/late", response_model=list[LoanResponse])
def list_late(coordinator: LoanCoordinator = Depends(get_coordinator)):
    return _many(coordinator.list_late())


@router.get("/period", response_model=list[LoanResponse])
def list_loaned_between(
    start: date,
    end: date,
    coordinator: LoanCoordinator = Depends(get_coordinator),
):
    return _many(coordinator.list_loaned_between(start, end))


@router.get("/statistics", response_model=StatisticsResponse, response_model_exclude_none=True)
def statistics(coordinator: LoanCoordinator = Depends(get_coordinator)):
    return StatisticsResponse.from_stats(coordinator.statistics())


@router.get("/upstream-status", include_in_schema=False)
def upstream_status(coordinator: LoanCoordinator = Depends(get_coordinator)) -> dict[str, bool]:
    return coordinator.upstream_status()


@router.get("/user/{user_id}", response_model=list[LoanResponse])
def list_by_user(user_id: int, coordinator: LoanCoordinator = Depends(get_coordinator)):
    return _many(coordinator.list_by_user(user_id))


@router.get("/user/{user_id}/active")
def has_active_loans(user_id: int, coordinator: LoanCoordinator = Depends(get_coordinator)) -> bool:
    return coordinator.has_active_loans(user_id)


@router.get("/user/{user_id}/count-active")
def count_active_for_user(user_id: int, coordinator: LoanCoordinator = Depends(get_coordinator)) -> int:
    return coordinator.count_active_for_user(user_id)


@router.get("/book/{book_id}", response_model=list[LoanResponse])
def list_by_book(book_id: int, coordinator: LoanCoordinator = Depends(get_coordinator)):
    return _many(coordinator.list_by_book(book_id))


@router.get("/book/{book_id}/loaned")
def is_book_on_loan(book_id: int, coordinator: LoanCoordinator = Depends(get_coordinator)) -> bool:
    return coordinator.is_book_on_loan(book_id)


@router.get("/{loan_id}", response_model=LoanResponse)
def get_loan(loan_id: int, coordinator: LoanCoordinator = Depends(get_coordinator)):
    return LoanResponse.from_view(coordinator.get_loan(loan_id))


@router.put("/{loan_id}", response_model=LoanResponse)
def update_loan(
    loan_id: int,
    body: LoanUpdateRequest,
    coordinator: LoanCoordinator = Depends(get_coordinator),
):
    return LoanResponse.from_view(coordinator.update_loan(loan_id, body.due_date, body.notes))


@router.delete("/{loan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_loan(loan_id: int, coordinator: LoanCoordinator = Depends(get_coordinator)) -> Response:
    coordinator.delete_loan(loan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{loan_id}/return", response_model=LoanResponse)
def register_return(
    loan_id: int,
    body: ReturnRequest | None = None,
    coordinator: LoanCoordinator = Depends(get_coordinator),
):
    body = body or ReturnRequest()
    view = coordinator.register_return(loan_id, notes=body.notes, lost=body.lost)
    return LoanResponse.from_view(view)
