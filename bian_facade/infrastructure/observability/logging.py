"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from bian_facade.config import settings


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
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_retrieval(
    request_id: str,
    correlation_id: str | None,
    customer_id: str,
    source: str,
    outcome: str,
    status_code: int,
    duration_ms: float,
) -> None:
    """Log structured retrieval outcome for tracing across services"""
    level = logging.INFO if status_code < 400 else logging.WARNING
    logging.log(
        level,
        "Facility retrieval completed",
        extra={
            "request_id": request_id,
            "correlation_id": correlation_id,
            "customer_id": customer_id,
            "step": "retrieval_complete",
            "source": source,
            "outcome": outcome,
            "status_code": status_code,
            "duration_ms": duration_ms,
        },
    )
