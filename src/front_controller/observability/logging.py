"""Structured logging configuration for the front controller.

This module provides structured logging using structlog to emit
JSON-formatted logs with contextual information. Lifecycle events are
logged by the LoggingObserver, which binds:
- Presenter names
- Request methods and parameters keys
- Response types
- Error types and messages

Examples:
    Configure logging::

        from front_controller.observability.logging import configure_logging

        configure_logging(level="INFO", json_output=True)

    Attach lifecycle logging to an application::

        from front_controller.observability.logging import LoggingObserver

        application.events.attach(LoggingObserver())

    Output (JSON)::

        {
            "event": "request.received",
            "presenter": "Article",
            "method": "GET",
            "timestamp": "2024-01-01T00:00:00.000000Z",
            "level": "info"
        }
"""

import logging
import sys
import uuid
from typing import Any

import structlog


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return number


def _renderer(json_output: bool) -> Any:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """Route structlog and the standard library logging to stdout.

    Call once at startup. Events below ``level`` are dropped before any
    processor runs.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines when True, coloured console output otherwise

    Raises:
        ValueError: If ``level`` is not a known level name
    """
    threshold = _level_number(level)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=threshold)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(json_output),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        A structlog logger instance
    """
    return structlog.get_logger(name)


class LoggingObserver:
    """Lifecycle observer that logs every notification.

    Between startup and shutdown a ``lifecycle_id`` is bound to the structlog
    context variables, so every event logged while the application runs can
    be correlated.

    Attributes:
        logger: The structlog logger events are written to.
    """

    def __init__(self, logger: Any = None) -> None:
        self.logger = logger or get_logger("front_controller.lifecycle")

    def on_startup(self, app: Any) -> None:
        structlog.contextvars.bind_contextvars(lifecycle_id=uuid.uuid4().hex)
        self.logger.debug("application.startup")

    def on_request(self, app: Any, request: Any) -> None:
        self.logger.info(
            "request.received",
            presenter=request.presenter_name,
            method=request.method,
            parameters=sorted(request.parameters),
            flags=sorted(request.flags),
        )

    def on_presenter(self, app: Any, presenter: Any) -> None:
        self.logger.debug("presenter.created", presenter_type=type(presenter).__name__)

    def on_response(self, app: Any, response: Any) -> None:
        self.logger.debug("response.ready", response_type=type(response).__name__)

    def on_error(self, app: Any, error: BaseException) -> None:
        self.logger.error(
            "application.error",
            error=str(error),
            error_type=type(error).__name__,
        )

    def on_shutdown(self, app: Any, error: BaseException | None) -> None:
        self.logger.info(
            "application.shutdown",
            failed=error is not None,
            requests=len(app.requests),
        )
        structlog.contextvars.unbind_contextvars("lifecycle_id")


# Pre-configured logger for the package
logger = get_logger("front_controller")
