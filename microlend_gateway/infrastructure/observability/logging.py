"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from microlend_gateway.config import settings


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


def log_loan_issued(request_id: str, loan_id: str, borrower_id: str, total_payable: Decimal, frequency: str) -> None:
    logging.info(
        "Loan issued",
        extra={
            "request_id": request_id,
            "loan_id": loan_id,
            "borrower_id": borrower_id,
            "step": "loan_issued",
            "total_payable": str(total_payable),
            "frequency": frequency,
        },
    )


def log_payment_applied(
    request_id: str,
    loan_id: str,
    amount: Decimal,
    new_balance: Decimal,
    new_status: str,
) -> None:
    """Log the balance change produced by a payment"""
    logging.info(
        "Payment applied",
        extra={
            "request_id": request_id,
            "loan_id": loan_id,
            "step": "payment_applied",
            "amount": str(amount),
            "new_balance": str(new_balance),
            "new_status": new_status,
        },
    )


def log_worklist(request_id: str, reference_date: date, due_count: int, paid_count: int, duration_ms: float) -> None:
    logging.info(
        "Collection worklist built",
        extra={
            "request_id": request_id,
            "step": "worklist_built",
            "reference_date": reference_date.isoformat(),
            "due_count": due_count,
            "paid_count": paid_count,
            "duration_ms": duration_ms,
        },
    )
