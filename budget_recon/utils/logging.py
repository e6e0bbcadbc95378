"""
Structured logging for the reconciliation service.
"""

import logging
import json
from datetime import datetime
from typing import Optional
from budget_recon.config import get_config


config = get_config()


class StructuredFormatter(logging.Formatter):
    """Formats log records as structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra"):
            log_obj.update(record.extra)

        return json.dumps(log_obj, default=str)


def setup_logging(name: str = __name__) -> logging.Logger:
    """Setup and return a configured logger."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, config.LOG_LEVEL.upper()))

    # setup_logging runs at import time of every module; attach handlers once
    if logger.handlers:
        return logger

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, config.LOG_LEVEL.upper()))
    console_formatter = logging.Formatter(config.LOG_FORMAT)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # File handler with structured JSON
    if config.LOG_FILE:
        file_handler = logging.FileHandler(config.LOG_FILE)
        file_handler.setLevel(getattr(logging, config.LOG_LEVEL.upper()))
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


def log_stage_action(
    logger: logging.Logger,
    stage_name: str,
    action: str,
    details: Optional[dict] = None,
) -> None:
    """Log a pipeline stage action with context."""
    extra = {
        "stage": stage_name,
        "action": action,
    }
    if details:
        extra.update(details)

    logger.info(
        f"[{stage_name}] {action}",
        extra={"extra": extra}
    )


def log_upstream_failure(
    logger: logging.Logger,
    collaborator: str,
    error: Exception,
    fallback: str,
) -> None:
    """Log a failed optional read that was replaced with a neutral default."""
    extra = {
        "type": "degraded_read",
        "collaborator": collaborator,
        "error": str(error),
        "fallback": fallback,
    }
    logger.warning(
        f"Optional read failed: {collaborator} ({error}); using {fallback}",
        extra={"extra": extra}
    )
