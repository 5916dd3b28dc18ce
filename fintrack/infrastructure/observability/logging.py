"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from fintrack.config import settings
from fintrack.domain.models import AuthenticatedUser


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


def log_debt_created(
    request_id: str,
    user_id: str,
    total_amount: Decimal,
    tenor: int,
    duration_ms: float,
) -> None:
    """Log structured debt creation outcome"""
    logging.info(
        "Debt created",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "debt_created",
            "total_amount": str(total_amount),
            "tenor": tenor,
            "duration_ms": duration_ms,
        },
    )


def log_auth_change(token_hint: str, user: Optional[AuthenticatedUser]) -> None:
    """Log sign-in / sign-out transitions published by the auth state store"""
    logging.info(
        "Auth state changed",
        extra={
            "step": "auth_change",
            "token_hint": token_hint,
            "user_id": user.uid if user else None,
            "event": "signed_in" if user else "signed_out",
        },
    )
