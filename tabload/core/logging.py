"""Logging configuration.

Provides JSON-formatted logs for deployments and a plain console format for
interactive use, plus a timer that reports how long each load took.
"""
import logging
import json
import sys
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import traceback


# Fields callers pass through ``extra=`` that end up as top-level JSON keys
CONTEXT_FIELDS = (
    "request_id", "method", "path", "status_code", "source", "dataset",
    "file", "reader", "rows", "columns", "objects", "bytes", "operation",
    "duration_ms", "error_type",
)


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line.

    Includes timestamp, level, message, module, function and any of the
    known context fields attached to the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string.

        Args:
            record: LogRecord to format

        Returns:
            JSON string with log data
        """
        log_obj: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info)
            }

        for attr in CONTEXT_FIELDS:
            if hasattr(record, attr):
                log_obj[attr] = getattr(record, attr)

        return json.dumps(log_obj, default=str)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that includes fixed context in all log messages.

    Example:
        >>> logger = ContextLogger(base_logger, {"source": "cars.csv"})
        >>> logger.info("Parsing")
        # Output includes source automatically
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.get('extra', {})
        extra.update(self.extra)
        kwargs['extra'] = extra
        return msg, kwargs


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> logging.Logger:
    """Configure package-wide logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Whether to use JSON formatter (True for production)

    Returns:
        Configured root logger

    Example:
        >>> logger = setup_logging(level="DEBUG", json_format=False)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        formatter = JSONFormatter()
    else:
        fmt = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        formatter = logging.Formatter(fmt)

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    return root_logger


def get_logger(name: str, context: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """Get a logger with optional context.

    Args:
        name: Logger name (typically __name__ of module)
        context: Optional context dict to include in all logs

    Returns:
        Logger or ContextLogger if context provided
    """
    logger = logging.getLogger(name)

    if context:
        return ContextLogger(logger, context)

    return logger


class LogTimer:
    """Context manager that times an operation and logs its duration.

    Extra fields can be attached while the block runs (for instance the
    shape of the frame that was read) and are logged with the summary.

    Example:
        >>> with LogTimer(logger, "read_csv", source="cars.csv") as timer:
        ...     df = pd.read_csv("cars.csv")
        ...     timer.update(rows=len(df))
        # Logs: "read_csv completed in 4.2ms"
    """

    def __init__(self, logger: logging.Logger, operation: str, **fields: Any):
        self.logger = logger
        self.operation = operation
        self.fields: Dict[str, Any] = dict(fields)
        self.start_time: Optional[float] = None

    def update(self, **fields: Any) -> None:
        """Attach more fields to the summary record."""
        self.fields.update(fields)

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is None:
            return
        duration = (time.perf_counter() - self.start_time) * 1000
        extra = {"operation": self.operation, "duration_ms": round(duration, 2), **self.fields}

        if exc_type:
            self.logger.error(
                f"{self.operation} failed after {duration:.1f}ms",
                extra={**extra, "error_type": exc_type.__name__},
                exc_info=(exc_type, exc_val, exc_tb)
            )
        else:
            self.logger.info(
                f"{self.operation} completed in {duration:.1f}ms",
                extra=extra
            )
