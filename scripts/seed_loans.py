#!/usr/bin/env python3
"""Seed the loans database with sample loans.

Loads generated loans into the database configured by ``DATABASE_URL``,
or writes them to a JSON file with ``--json``. Book stock in the Books
service is not touched.
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loan_service.config import LoanServiceConfig
from loan_service.generators import LoanGenerator
from loan_service.logging import setup_logging
from loan_service.serialization import to_dict
from loan_service.store import SqlLoanStore

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed sample loans")
    parser.add_argument("--count", type=int, default=100, help="Number of loans")
    parser.add_argument("--books", type=int, default=50, help="Book ids 1..N")
    parser.add_argument("--users", type=int, default=20, help="User ids 1..N")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--json", type=Path, default=None, help="Write JSON here instead of the database")
    args = parser.parse_args()

    config = LoanServiceConfig.from_env()
    setup_logging(config.log_level, config.log_format)

    generator = LoanGenerator(seed=args.seed)
    loans = list(
        generator.generate_batch(
            args.count,
            date.today(),
            num_books=args.books,
            num_users=args.users,
            max_active_loans=config.rules.max_active_loans,
        )
    )

    if args.json is not None:
        args.json.parent.mkdir(parents=True, exist_ok=True)
        with open(args.json, "w", encoding="utf-8") as f:
            json.dump([to_dict(loan) for loan in loans], f, indent=2, ensure_ascii=False)
        logger.info("Wrote %d loans to %s", len(loans), args.json)
        return

    store = SqlLoanStore.from_config(config.database)
    for loan in loans:
        store.add(loan)

    by_status: dict[str, int] = {}
    for loan in loans:
        by_status[loan.status.value] = by_status.get(loan.status.value, 0) + 1
    logger.info("Seeded %d loans into %s: %s", len(loans), config.database.url, by_status)


if __name__ == "__main__":
    main()
