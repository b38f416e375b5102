"""Map service exceptions to structured JSON error responses."""

import logging
from datetime import datetime
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from loan_service.exceptions import (
    EntityNotFoundError,
    InvalidLoanStateError,
    LoanRuleViolation,
    LoanServiceError,
    LoanValidationError,
    RemoteRejectedError,
    RemoteUnavailableError,
)

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins.
STATUS_BY_ERROR: list[tuple[type[LoanServiceError], HTTPStatus]] = [
    (LoanValidationError, HTTPStatus.BAD_REQUEST),
    (InvalidLoanStateError, HTTPStatus.BAD_REQUEST),
    (LoanRuleViolation, HTTPStatus.CONFLICT),
    (EntityNotFoundError, HTTPStatus.NOT_FOUND),
    (RemoteUnavailableError, HTTPStatus.SERVICE_UNAVAILABLE),
    (RemoteRejectedError, HTTPStatus.BAD_GATEWAY),
]


def status_for(exc: LoanServiceError) -> HTTPStatus:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return HTTPStatus.INTERNAL_SERVER_ERROR


def error_body(
    status: HTTPStatus,
    message: str,
    error: str | None = None,
    errors: dict[str, str] | None = None,
) -> dict:
    body = {
        "timestamp": datetime.now().isoformat(),
        "status": status.value,
        "error": error or status.phrase,
        "message": message,
    }
    if errors:
        body["errors"] = errors
    return body


async def handle_service_error(request: Request, exc: LoanServiceError) -> JSONResponse:
    status = status_for(exc)
    if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    if isinstance(exc, LoanValidationError):
        body = error_body(status, str(exc), error="Validation Error", errors=exc.errors)
    else:
        body = error_body(status, str(exc))
    return JSONResponse(status_code=status, content=body)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {}
    for err in exc.errors():
        # loc is ("body", "dueDate") or ("path", "loan_id")
        field = ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0])
        errors[field] = err["msg"]
    body = error_body(
        HTTPStatus.BAD_REQUEST,
        "Invalid input data",
        error="Validation Error",
        errors=errors,
    )
    return JSONResponse(status_code=HTTPStatus.BAD_REQUEST, content=body)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=status, content=error_body(status, "Internal server error"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LoanServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
