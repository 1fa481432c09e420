"""Structured logging for the contract harness."""
import logging
import json
import time
from typing import Any, Dict, Optional
from contextlib import contextmanager
import os

# Configure log level from environment (default: INFO)
LOG_LEVEL = os.getenv("DAO_HARNESS_LOG_LEVEL", "INFO").upper()

# Create logger
logger = logging.getLogger("daoharness")
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))


# JSON formatter for structured logging
class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


def configure_logging(level: Optional[str] = None) -> logging.Handler:
    """
    Attach a JSON console handler to the harness logger.

    Safe to call more than once; the handler is only added the first time.
    """
    if level:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for existing in logger.handlers:
        if isinstance(existing.formatter, JSONFormatter):
            return existing

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    return handler


def log_action(contract: str, action: str, authorization: str,
               duration_ms: float, success: bool, **kwargs):
    """Log a submitted contract action and its outcome."""
    logger.info(
        f"{contract}::{action} by {authorization} "
        f"{'succeeded' if success else 'failed'}",
        extra={
            "extra_fields": {
                "contract": contract,
                "action": action,
                "authorization": authorization,
                "duration_ms": round(duration_ms, 2),
                "success": success,
                **kwargs
            }
        },
    )


def log_table_read(query: Dict[str, Any], result_count: int, duration_ms: float):
    """Log a table read with its row count."""
    logger.info("Table read", extra={
        "extra_fields": {
            "query": query,
            "result_count": result_count,
            "duration_ms": round(duration_ms, 2),
        }
    })


def log_expected_failure(description: str, text_inside: str, matched: bool,
                         error_message: str, outcome: Optional[str] = None):
    """Log how an expected failure was classified."""
    level = logging.INFO if matched else logging.ERROR
    logger.log(level, f"Expected failure {'matched' if matched else 'MISMATCH'}: {description}", extra={
        "extra_fields": {
            "text_inside": text_inside,
            "matched": matched,
            "outcome": outcome,
            "error_message": error_message[:500],  # Truncate long errors
        }
    })


@contextmanager
def track_duration():
    """Context manager to track operation duration."""
    start_time = time.time()
    yield lambda: (time.time() - start_time) * 1000  # Return duration in ms
