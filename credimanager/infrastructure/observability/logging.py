"""JSON logs on stdout; every record carries the service name and a UTC timestamp"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from credimanager.config import settings

LOG_FORMAT = "%(timestamp)s %(level)s %(name)s %(message)s"

# Libraries whose INFO output drowns the reconciliation events
QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore")


class ServiceJsonFormatter(JsonFormatter):
    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Route the root logger to a single JSON handler on stdout"""
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ServiceJsonFormatter(LOG_FORMAT))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_payment_event(
    request_id: str,
    event: str,
    loan_id: str,
    score_delta: Optional[int],
    status: str,
) -> None:
    """One line per payment mutation: which loan, how the score moved, where the loan ended up"""
    logging.info(
        "Payment reconciled",
        extra={
            "request_id": request_id,
            "step": f"payment_{event}",
            "loan_id": loan_id,
            "score_delta": score_delta,
            "loan_status": status,
        },
    )
