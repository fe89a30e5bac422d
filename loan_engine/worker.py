"""Overdue scanner process: runs the scan on a fixed interval until interrupted"""

import logging
import signal
import threading

from loan_engine.config import settings
from loan_engine.infrastructure.observability.logging import setup_logging
from loan_engine.services.overdue import OverdueScanner


def main() -> None:
    setup_logging(settings.log_level)
    stop_event = threading.Event()

    def _stop(signum, frame):
        logging.info("Stopping overdue scanner", extra={"signal": signum})
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    logging.info(
        "Starting overdue scanner",
        extra={"interval_seconds": settings.overdue_scan_interval_seconds},
    )
    OverdueScanner().run_periodically(stop_event=stop_event)


if __name__ == "__main__":
    main()
