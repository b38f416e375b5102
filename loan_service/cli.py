"""Command line entry point: ``loan-service serve|sweep``."""

import argparse
import logging
import sys

from loan_service.config import LoanServiceConfig
from loan_service.exceptions import ConfigurationError
from loan_service.logging import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="loan-service", description="Library loans service")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the REST API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8083)

    sub.add_parser("sweep", help="Run the overdue sweep once and exit")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = LoanServiceConfig.from_env()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    setup_logging(config.log_level, config.log_format)

    if args.command == "serve":
        import uvicorn

        from loan_service.api import create_app

        uvicorn.run(create_app(config), host=args.host, port=args.port, log_config=None)
        return 0

    from loan_service.store import SqlLoanStore
    from loan_service.sweeper import OverdueSweeper

    sweeper = OverdueSweeper(SqlLoanStore.from_config(config.database))
    report = sweeper.run_once()
    if report is None:
        return 1
    logger.info("Sweep promoted %d of %d active loans", report.promoted, report.scanned)
    return 0


if __name__ == "__main__":
    sys.exit(main())
