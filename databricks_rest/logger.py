"""
Structured logging for the Databricks REST client.

As a library the client only emits records on the ``databricks_rest``
logger and leaves handlers and propagation to the host application. The
CLI (or anyone passing enable_console/enable_file) gets the console and
dated file output instead. Request metrics are tracked per endpoint.
"""

import copy
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional
from datetime import datetime
import json

CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class StructuredLogger:
    """
    Logger wrapper adding JSON context to messages and API metrics.
    """

    def __init__(
        self,
        name: str = "databricks_rest",
        level: Optional[str] = None,
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
        enable_console: bool = False,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); the
                logger's existing level is kept when None
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to a dated file
            enable_console: Output logs to stderr
        """
        self.logger = logging.getLogger(name)
        if level is not None:
            self.logger.setLevel(getattr(logging, level.upper()))

        self.metrics = {
            "api_calls": 0,
            "requests_successful": 0,
            "requests_failed": 0,
            "errors_by_type": {},
            "endpoint_success_rate": {},
        }

        self._handlers: List[logging.Handler] = []
        self._previous_propagate = self.logger.propagate

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
            self._attach(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"databricks_rest_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
            self._attach(file_handler)

    def _attach(self, handler: logging.Handler):
        self.logger.addHandler(handler)
        self._handlers.append(handler)
        # Our own handlers write the records; don't print them twice via root
        self.logger.propagate = False

    def close(self):
        """Detach and close the handlers this instance added."""
        for handler in self._handlers:
            self.logger.removeHandler(handler)
            handler.close()
        if self._handlers:
            self.logger.propagate = self._previous_propagate
        self._handlers = []

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if not self.logger.isEnabledFor(level):
            return
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_api_call(self, endpoint: str):
        """Record a request attempt against an endpoint."""
        self.metrics["api_calls"] += 1
        stats = self.metrics["endpoint_success_rate"].setdefault(
            endpoint, {"attempts": 0, "successes": 0}
        )
        stats["attempts"] += 1

    def record_api_success(self, endpoint: str):
        """Record a successful response."""
        self.metrics["requests_successful"] += 1
        if endpoint in self.metrics["endpoint_success_rate"]:
            self.metrics["endpoint_success_rate"][endpoint]["successes"] += 1

    def record_api_failure(self, endpoint: str, error_type: str):
        """Record a failed request."""
        self.metrics["requests_failed"] += 1
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a snapshot of the metrics with per-endpoint success rates."""
        snapshot = copy.deepcopy(self.metrics)
        for stats in snapshot["endpoint_success_rate"].values():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(stats["successes"] / stats["attempts"], 3)
        return snapshot

    def log_metrics_summary(self):
        """Log a summary of current metrics at INFO."""
        metrics = self.get_metrics()

        total = metrics["api_calls"]
        ok = metrics["requests_successful"]
        overall_rate = 0
        if total > 0:
            overall_rate = round(ok / total * 100, 1)

        self.info("=== Databricks API Metrics ===")
        self.info(f"Requests: {ok}/{total} ({overall_rate}% success)")

        if metrics["endpoint_success_rate"]:
            self.info("Endpoint Success Rates:")
            for endpoint, stats in metrics["endpoint_success_rate"].items():
                rate = stats.get("success_rate", 0) * 100
                self.info(f"  {endpoint}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Shared logger for clients built without an explicit one
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "databricks_rest",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the shared logger instance.

    Created on first use, never at import. Without arguments it adds no
    handlers. DATABRICKS_REST_LOG_LEVEL and DATABRICKS_REST_LOG_DIR
    supply the level and file output when not passed explicitly.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        if level is None:
            level = os.getenv("DATABRICKS_REST_LOG_LEVEL")
        log_dir = os.getenv("DATABRICKS_REST_LOG_DIR")
        if log_dir and "log_dir" not in kwargs:
            kwargs["log_dir"] = Path(log_dir)
            kwargs.setdefault("enable_file", True)
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Drop the shared logger and detach any handlers it added."""
    global _global_logger
    if _global_logger is not None:
        _global_logger.close()
    _global_logger = None
