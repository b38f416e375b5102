"""Loan persistence."""

from loan_service.store.base import LoanStore
from loan_service.store.memory import InMemoryLoanStore
from loan_service.store.sql import SqlLoanStore, create_engine_from_config

__all__ = ["InMemoryLoanStore", "LoanStore", "SqlLoanStore", "create_engine_from_config"]
