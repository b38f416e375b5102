"""Nightly overdue sweep."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable

from loan_service import lifecycle
from loan_service.models import LoanStatus
from loan_service.store import LoanStore

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    """Outcome of one sweep."""

    scanned: int
    promoted: int
    updated: int


class OverdueSweeper:
    """Re-evaluate every ACTIVE loan and promote the overdue ones.

    Writes go through the same ``LoanStore`` as request handlers. The sweep
    takes no table lock: a loan returned while the sweep runs is subject to
    last-write-wins at the row level.
    """

    def __init__(self, store: LoanStore, today: Callable[[], date] = date.today) -> None:
        self.store = store
        self.today = today

    def sweep(self) -> SweepReport:
        """Run one sweep, raising on storage errors."""
        today = self.today()
        active = self.store.list_by_status(LoanStatus.ACTIVE)

        touched = []
        promoted = 0
        for loan in active:
            previous_days_late = loan.days_late
            if lifecycle.promote_overdue(loan, today):
                promoted += 1
                touched.append(loan)
            elif loan.days_late != previous_days_late:
                touched.append(loan)

        if touched:
            self.store.save_all(touched)

        report = SweepReport(scanned=len(active), promoted=promoted, updated=len(touched))
        logger.info(
            "Overdue sweep done: %d scanned, %d promoted, %d updated",
            report.scanned,
            report.promoted,
            report.updated,
        )
        return report

    def run_once(self) -> SweepReport | None:
        """Scheduler entry point: failures are logged and retried next tick."""
        logger.info("Starting overdue sweep")
        try:
            return self.sweep()
        except Exception:
            logger.exception("Overdue sweep failed, will retry at the next scheduled run")
            return None


def seconds_until(run_at: time, now: datetime) -> float:
    """Seconds from ``now`` to the next occurrence of ``run_at``."""
    target = datetime.combine(now.date(), run_at)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class DailySweepScheduler:
    """Background thread running ``sweeper.run_once`` every day at ``run_at``."""

    def __init__(
        self,
        sweeper: OverdueSweeper,
        run_at: time,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.sweeper = sweeper
        self.run_at = run_at
        self.now = now
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="overdue-sweep", daemon=True)
        self._thread.start()
        logger.info("Overdue sweep scheduled daily at %s", self.run_at.strftime("%H:%M"))

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop.wait(seconds_until(self.run_at, self.now())):
            self.sweeper.run_once()
