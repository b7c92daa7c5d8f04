"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from fintalk_gateway.config import settings


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


def log_utterance_processed(
    request_id: str,
    user_id: str,
    mode: str,
    intent: str,
    outcome: str,
    duration_ms: float,
) -> None:
    """Log one processed utterance for analysis"""
    logging.info(
        "Utterance processed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "process_complete",
            "mode": mode,
            "intent": intent,
            "outcome": outcome,
            "duration_ms": duration_ms,
        },
    )


def log_partial_failure(
    user_id: str,
    loan_id: Any,
    completed_step: str,
    failed_step: str,
    error: str,
    request_id: Optional[str] = None,
) -> None:
    """Log a multi-step write whose later step failed after an earlier one succeeded"""
    logging.error(
        "Repayment partial failure",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "repayment_partial_failure",
            "loan_id": str(loan_id),
            "completed_step": completed_step,
            "failed_step": failed_step,
            "error": error,
        },
    )
