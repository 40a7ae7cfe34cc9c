"""
Structured logging for volunteermatch.

Provides centralized logging with console and optional file output, plus
counters for monitoring recommendation traffic and rationale generator
health.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for recommendation and generator activity.
    """

    def __init__(
        self,
        name: str = "volunteermatch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        self._metrics_lock = threading.Lock()
        self.metrics = {
            "recommendations_served": 0,
            "invalid_requests": 0,
            "clicks_recorded": 0,
            "generator_attempts": 0,
            "generator_successes": 0,
            "generator_failures": 0,
            "errors_by_type": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"volunteermatch_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

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

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_recommendation(self):
        """Increment the served-recommendations counter."""
        with self._metrics_lock:
            self.metrics["recommendations_served"] += 1

    def record_invalid_request(self, error_type: str):
        """Record a request rejected before scoring."""
        with self._metrics_lock:
            self.metrics["invalid_requests"] += 1
            self._bump_error(error_type)

    def record_click(self):
        with self._metrics_lock:
            self.metrics["clicks_recorded"] += 1

    def record_generator_attempt(self):
        """Record a call to the external rationale generator."""
        with self._metrics_lock:
            self.metrics["generator_attempts"] += 1

    def record_generator_success(self):
        with self._metrics_lock:
            self.metrics["generator_successes"] += 1

    def record_generator_failure(self, error_type: str):
        """Record a generator failure that fell back to deterministic rationale."""
        with self._metrics_lock:
            self.metrics["generator_failures"] += 1
            self._bump_error(error_type)

    def _bump_error(self, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a snapshot of current metrics."""
        with self._metrics_lock:
            metrics_copy = dict(self.metrics)
            metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])

        attempts = metrics_copy["generator_attempts"]
        if attempts > 0:
            metrics_copy["generator_success_rate"] = round(
                metrics_copy["generator_successes"] / attempts, 3
            )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Recommendation Metrics ===")
        self.info(f"Recommendations served: {metrics['recommendations_served']}")
        self.info(f"Invalid requests: {metrics['invalid_requests']}")
        self.info(f"Clicks recorded: {metrics['clicks_recorded']}")

        attempts = metrics["generator_attempts"]
        if attempts:
            rate = metrics.get("generator_success_rate", 0) * 100
            self.info(f"Generator: {metrics['generator_successes']}/{attempts} ({rate:.1f}% success)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None
_global_lock = threading.Lock()


def get_logger(
    name: str = "volunteermatch",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    File output is only enabled when a log_dir is given, so library use
    doesn't create a logs/ directory in the caller's working directory.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        with _global_lock:
            if _global_logger is None:
                kwargs.setdefault("enable_file", kwargs.get("log_dir") is not None)
                _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    with _global_lock:
        _global_logger = None
