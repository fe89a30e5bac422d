"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from loan_engine.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_loan_created(loan_id: str, loan_number: str, principal: Decimal, num_items: int) -> None:
    logging.info(
        "Loan created",
        extra={
            "step": "loan_created",
            "loan_id": loan_id,
            "loan_number": loan_number,
            "principal_amount": str(principal),
            "schedule_items": num_items,
        },
    )


def log_payment_recorded(
    loan_id: str,
    payment_id: str,
    schedule_item_id: str,
    principal: Decimal,
    outstanding_after: Decimal,
    loan_status: str,
) -> None:
    """Log structured payment outcome for reconciliation"""
    logging.info(
        "Payment recorded",
        extra={
            "step": "payment_recorded",
            "loan_id": loan_id,
            "payment_id": payment_id,
            "schedule_item_id": schedule_item_id,
            "principal_amount": str(principal),
            "outstanding_after": str(outstanding_after),
            "loan_status": loan_status,
        },
    )


def log_overdue_scan(items_marked: int, loans_defaulted: int, duration_ms: float) -> None:
    logging.info(
        "Overdue scan completed",
        extra={
            "step": "overdue_scan",
            "items_marked_overdue": items_marked,
            "loans_defaulted": loans_defaulted,
            "duration_ms": duration_ms,
        },
    )
