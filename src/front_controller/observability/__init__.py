"""Observability utilities for the front controller.

This package provides lifecycle observers for monitoring and debugging:
- Prometheus metrics for request, error and fault barrier tracking
- Structured logging with contextual information
"""

from front_controller.observability.logging import LoggingObserver, configure_logging, get_logger
from front_controller.observability.metrics import (
    MetricsObserver,
    record_error,
    record_recovery,
    record_request,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "LoggingObserver",
    "MetricsObserver",
    "record_request",
    "record_error",
    "record_recovery",
]
