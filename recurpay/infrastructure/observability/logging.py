"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from recurpay.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and service name to every record"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Route the root logger to stdout as JSON"""
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    logger.addHandler(handler)


def log_client_event(
    request_id: str,
    client_id: str,
    step: str,
    status: str,
    payment_amount: Any,
    financing_plan: int,
) -> None:
    """Log a client create/update with the figures the calculator produced"""
    logging.info(
        "Client saved",
        extra={
            "request_id": request_id,
            "client_id": client_id,
            "step": step,
            "client_status": status,
            "payment_amount": str(payment_amount),
            "financing_plan": financing_plan,
        },
    )


def log_payment_decision(
    request_id: str,
    client_id: str,
    payment_id: str,
    outcome: str,
    payments_made_count: int,
    client_status: str,
    reason: Optional[str] = None,
) -> None:
    """Log the outcome of an admin payment review or direct registration"""
    logging.info(
        "Payment reviewed",
        extra={
            "request_id": request_id,
            "client_id": client_id,
            "payment_id": payment_id,
            "step": "payment_review",
            "outcome": outcome,
            "payments_made_count": payments_made_count,
            "client_status": client_status,
            "rejection_reason": reason,
        },
    )
