"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from pot_ledger.config import settings


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
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_settlement_recorded(
    request_id: str,
    pot_id: str,
    settlement_id: str,
    amount_minor: int,
    currency: str,
    remaining_debts: int,
) -> None:
    """Log structured settlement outcome for auditing"""
    logging.info(
        "Settlement recorded",
        extra={
            "request_id": request_id,
            "pot_id": pot_id,
            "settlement_id": settlement_id,
            "step": "settlement_recorded",
            "amount_minor": amount_minor,
            "currency": currency,
            "remaining_debts": remaining_debts,
        },
    )


def log_invariant_violation(request_id: str, pot_id: str, error: Exception) -> None:
    """Ledger data failed an internal consistency check"""
    logging.error(
        f"Ledger invariant violated: {error}",
        extra={
            "request_id": request_id,
            "pot_id": pot_id,
            "step": "invariant_violation",
        },
    )
