"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from loan_service import __version__
from loan_service.api.errors import register_error_handlers
from loan_service.api.routes import router
from loan_service.config import LoanServiceConfig
from loan_service.coordinator import LoanCoordinator
from loan_service.gateways import HttpBookGateway, HttpUserGateway
from loan_service.store import SqlLoanStore
from loan_service.sweeper import DailySweepScheduler, OverdueSweeper

logger = logging.getLogger(__name__)


def build_coordinator(config: LoanServiceConfig) -> LoanCoordinator:
    """Wire the production store and HTTP gateways."""
    return LoanCoordinator(
        store=SqlLoanStore.from_config(config.database),
        books=HttpBookGateway(config.books),
        rules=config.rules,
        users=HttpUserGateway(config.users),
    )


def create_app(
    config: LoanServiceConfig | None = None,
    coordinator: LoanCoordinator | None = None,
) -> FastAPI:
    """Create the loans API.

    Parameters
    ----------
    config : LoanServiceConfig | None
        Service configuration (default: from environment).
    coordinator : LoanCoordinator | None
        Pre-built coordinator, e.g. with in-memory store and fake gateways.
    """
    config = config or LoanServiceConfig.from_env()
    coordinator = coordinator or build_coordinator(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        scheduler = None
        if config.sweeper.enabled:
            sweeper = OverdueSweeper(coordinator.store, today=coordinator.today)
            scheduler = DailySweepScheduler(sweeper, config.sweeper.run_at_time)
            scheduler.start()
        app.state.scheduler = scheduler
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.stop()
            logger.info("Loan service stopped")

    app = FastAPI(title="Loan Service", version=__version__, lifespan=lifespan)
    app.state.coordinator = coordinator
    app.state.config = config
    app.include_router(router)
    register_error_handlers(app)

    @app.get("/health", include_in_schema=False)
    def health() -> dict[str, str]:
        return {"status": "UP"}

    return app
