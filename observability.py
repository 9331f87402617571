"""Observability utilities for structured logging.

This module provides:
- Structured JSON logging to LOG_DIR (one .jsonl file per logger)
- Log rotation with configurable retention
- Context managers for workflow tracking
- Helper functions for logging complex data structures
"""

import json
import logging
import logging.handlers
import sys
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from normalization_config import LOG_DIR, LOG_RETENTION_DAYS, STRUCTURED_LOG_LEVEL

_log_dir_ready = False


# ============================================================================
# JSON Formatter
# ============================================================================


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON string."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Custom fields passed through extra={"extra_fields": {...}}
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


# ============================================================================
# Logger Setup
# ============================================================================


def _prepare_log_dir() -> Path:
    global _log_dir_ready

    log_dir = Path(LOG_DIR)
    if not _log_dir_ready:
        log_dir.mkdir(parents=True, exist_ok=True)
        cleanup_old_logs(log_dir)
        _log_dir_ready = True
    return log_dir


def setup_structured_logger(name: str) -> logging.Logger:
    """Set up a structured logger that writes JSON lines to LOG_DIR.

    Args:
        name: Logger name (e.g., "normalizer.plan", "normalizer.ingestion")

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, STRUCTURED_LOG_LEVEL, logging.INFO))

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    try:
        log_file = _prepare_log_dir() / f"{name}.jsonl"
        handler: logging.Handler = logging.handlers.TimedRotatingFileHandler(
            filename=log_file,
            when="midnight",
            interval=1,
            backupCount=LOG_RETENTION_DAYS,
            encoding="utf-8",
        )
    except OSError as e:
        # Read-only filesystems still get structured lines on stderr
        print(f"Falling back to stderr logging for {name}: {e}", file=sys.stderr)
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)

    return logger


# ============================================================================
# Cleanup Old Logs
# ============================================================================


def cleanup_old_logs(log_dir: Path) -> None:
    """Remove log files older than LOG_RETENTION_DAYS."""
    cutoff = datetime.now() - timedelta(days=LOG_RETENTION_DAYS)

    for log_file in log_dir.glob("*.jsonl*"):
        try:
            if log_file.stat().st_mtime < cutoff.timestamp():
                log_file.unlink()
        except OSError as e:
            print(f"Failed to remove old log {log_file.name}: {e}", file=sys.stderr)


# ============================================================================
# Context Managers
# ============================================================================


@contextmanager
def log_workflow(logger: logging.Logger, workflow_name: str, **context):
    """Context manager for tracking workflow execution.

    Example:
        with log_workflow(logger, "plan_ingestion", plan_kind="nutrition"):
            # ... workflow code ...
            pass
    """
    start_time = datetime.now(timezone.utc)

    logger.info(
        f"Workflow started: {workflow_name}",
        extra={
            "extra_fields": {
                "workflow": workflow_name,
                "phase": "start",
                **context,
            }
        },
    )

    try:
        yield
        duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
        logger.info(
            f"Workflow completed: {workflow_name}",
            extra={
                "extra_fields": {
                    "workflow": workflow_name,
                    "phase": "complete",
                    "duration_ms": duration_ms,
                    **context,
                }
            },
        )
    except Exception as e:
        duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
        logger.error(
            f"Workflow failed: {workflow_name}",
            extra={
                "extra_fields": {
                    "workflow": workflow_name,
                    "phase": "error",
                    "duration_ms": duration_ms,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    **context,
                }
            },
            exc_info=True,
        )
        raise


# ============================================================================
# Helper Functions
# ============================================================================


def log_data_structure(
    logger: logging.Logger,
    name: str,
    data: Any,
    level: str = "DEBUG",
) -> None:
    """Log a complex data structure with truncation for large payloads.

    Args:
        logger: Logger instance
        name: Description of the data
        data: Data to log (dict, list, etc.)
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    log_method = getattr(logger, level.lower())

    try:
        if isinstance(data, (dict, list)):
            serialized = json.dumps(data, indent=2, default=str)
        else:
            serialized = str(data)
    except (TypeError, ValueError) as e:
        serialized = f"<non-serializable: {type(data).__name__}>"
        logger.warning(f"Failed to serialize {name}: {e}")

    # Truncate if too large (> 5000 chars)
    if len(serialized) > 5000:
        truncated = (
            serialized[:5000] + f"\n... (truncated {len(serialized) - 5000} chars)"
        )
        log_method(
            f"{name} (truncated)",
            extra={
                "extra_fields": {
                    "data_name": name,
                    "data_preview": truncated,
                    "full_size": len(serialized),
                    "truncated": True,
                }
            },
        )
    else:
        log_method(
            name,
            extra={
                "extra_fields": {
                    "data_name": name,
                    "data": serialized,
                    "truncated": False,
                }
            },
        )
