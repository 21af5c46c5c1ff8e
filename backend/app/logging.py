"""Logging configuration for the ledger API.

Services attach the ids of the ledger rows they touched through ``extra=``
(see LEDGER_FIELDS). The JSON format emits them as top-level keys so sales
and payments can be traced per transaction or contract; the standard format
leaves them out of the line.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

LEDGER_FIELDS = (
    "transaction_id",
    "contract_id",
    "installment_id",
    "customer_id",
    "product_sku",
)


def ledger_extra(**ids: Any) -> dict[str, Any]:
    """``extra=`` mapping for a log call, restricted to LEDGER_FIELDS."""
    unknown = set(ids) - set(LEDGER_FIELDS)
    if unknown:
        raise ValueError(f"Unknown ledger log fields: {sorted(unknown)}")
    return {k: v for k, v in ids.items() if v is not None}


def setup_logging(level: str = "INFO", format_type: str = "standard") -> None:
    """Route the ``app`` loggers to stdout as plain lines or JSON objects."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("app").setLevel(log_level)
    # uvicorn access lines duplicate what the services already log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in LEDGER_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        # Money amounts arrive as Decimal
        return json.dumps(log_data, default=str)
