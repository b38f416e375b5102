"""Sample-data generators."""

from loan_service.generators.loan import LoanGenerator

__all__ = ["LoanGenerator"]
