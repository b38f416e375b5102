"""REST surface of the loan service."""

from loan_service.api.app import build_coordinator, create_app

__all__ = ["build_coordinator", "create_app"]
