"""Overdue scanner: reclassifies lapsed schedule items and defaults loans"""

import logging
import threading
import time
from datetime import date, timedelta
from typing import Callable, Optional
from sqlalchemy.orm import sessionmaker
from loan_engine.config import settings
from loan_engine.domain.exceptions import DomainException
from loan_engine.infrastructure.database.repositories import LoanRepository, ScheduleRepository
from loan_engine.infrastructure.database.session import unit_of_work
from loan_engine.infrastructure.observability.logging import log_overdue_scan
from loan_engine.infrastructure.observability.metrics import (
    loans_defaulted_counter,
    overdue_items_counter,
    overdue_scan_failures_counter,
)


class OverdueScanner:
    """
    Periodic batch job.

    Step 1 marks Pending items dated before today as Overdue. Step 2 moves
    Active loans to Defaulted when they hold an Overdue item more than
    ``default_after_days`` old. The steps commit separately: if step 2
    fails, step 1 stays committed.
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        today: Callable[[], date] = date.today,
        default_after_days: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.today = today
        self.default_after_days = (
            settings.default_after_days if default_after_days is None else default_after_days
        )

    def scan_overdue(self, cancel_event: Optional[threading.Event] = None) -> int:
        """Run one pass; returns the number of schedule items marked Overdue"""
        start_time = time.time()
        today = self.today()

        with unit_of_work(self.session_factory, cancel_event=cancel_event) as db:
            items_marked = ScheduleRepository(db).mark_overdue(today)
        overdue_items_counter.inc(items_marked)

        cutoff = today - timedelta(days=self.default_after_days)
        with unit_of_work(self.session_factory, cancel_event=cancel_event) as db:
            loans_defaulted = LoanRepository(db).default_loans_with_overdue_items(cutoff)
        loans_defaulted_counter.inc(loans_defaulted)

        log_overdue_scan(items_marked, loans_defaulted, (time.time() - start_time) * 1000)
        return items_marked

    def run_periodically(self, interval_seconds: Optional[float] = None, stop_event: Optional[threading.Event] = None) -> None:
        """Scan every interval until stop_event is set; a failed pass is logged and the next one still runs"""
        interval = settings.overdue_scan_interval_seconds if interval_seconds is None else interval_seconds
        stop_event = stop_event or threading.Event()

        while not stop_event.is_set():
            try:
                self.scan_overdue(cancel_event=stop_event)
            except DomainException as e:
                overdue_scan_failures_counter.inc()
                logging.error(f"Overdue scan failed: {e}", extra={"step": "overdue_scan", "kind": e.kind})
            except Exception as e:
                overdue_scan_failures_counter.inc()
                logging.exception(f"Overdue scan failed: {e}", extra={"step": "overdue_scan"})
            stop_event.wait(interval)
