"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from negotiation_gateway.config import settings


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

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_negotiation(
    request_id: str,
    session_id: str,
    operation: str,
    outcome: str,
    stage: int,
    duration_ms: float,
    fallback_reason: str | None = None,
) -> None:
    """Log one engine decision for later analysis of negotiation flow"""
    logging.info(
        "Negotiation step completed",
        extra={
            "request_id": request_id,
            "session_id": session_id,
            "operation": operation,
            "outcome": outcome,
            "stage": stage,
            "fallback_reason": fallback_reason,
            "duration_ms": duration_ms,
        },
    )
