"""Prometheus metrics for the front controller.

Metrics include:

- Requests processed, by presenter and method
- Unhandled errors, by error type
- Fault barrier recoveries, by outcome
- Lifecycle duration histogram
- Stored and restored requests
- Expired session entries purged

Examples:
    Attach the metrics observer::

        from front_controller.observability.metrics import MetricsObserver

        application.events.attach(MetricsObserver())

    Record a fault barrier outcome by hand::

        record_recovery("recovered")
"""

import time
from typing import Any

from prometheus_client import Counter, Histogram

# Labels: presenter, method
requests_total = Counter(
    "front_controller_requests_total",
    "Total number of application requests processed by the dispatch loop",
    ["presenter", "method"],
)

# Labels: error_type
errors_total = Counter(
    "front_controller_errors_total",
    "Total number of unhandled errors reported in a request lifecycle",
    ["error_type"],
)

# Labels: outcome (recovered, failed)
recoveries_total = Counter(
    "front_controller_fault_barrier_total",
    "Fault barrier recovery attempts by outcome",
    ["outcome"],
)

# Labels: status (ok, failed)
lifecycle_seconds = Histogram(
    "front_controller_lifecycle_seconds",
    "Duration of a full request lifecycle in seconds",
    ["status"],
    buckets=[
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
    ],
)

stored_requests_total = Counter(
    "front_controller_stored_requests_total",
    "Total number of requests persisted in the request store",
)

expired_entries_removed_total = Counter(
    "front_controller_expired_session_entries_removed_total",
    "Total number of expired session entries purged by the cleanup task",
)

# Labels: result (restored, redirected, missing, foreign)
restored_requests_total = Counter(
    "front_controller_restored_requests_total",
    "Lookups of stored requests by result",
    ["result"],
)


def record_request(presenter: str, method: str) -> None:
    """Record a request entering the dispatch loop.

    Examples:
        >>> record_request("Article", "GET")
    """
    requests_total.labels(presenter=presenter, method=method).inc()


def record_error(error: BaseException) -> None:
    errors_total.labels(error_type=type(error).__name__).inc()


def record_recovery(outcome: str) -> None:
    """Record a fault barrier attempt.

    Args:
        outcome: "recovered" or "failed"
    """
    recoveries_total.labels(outcome=outcome).inc()


def record_lifecycle(duration_seconds: float, failed: bool) -> None:
    lifecycle_seconds.labels(status="failed" if failed else "ok").observe(duration_seconds)


def record_stored_request() -> None:
    stored_requests_total.inc()


def record_cleanup(removed: int) -> None:
    if removed > 0:
        expired_entries_removed_total.inc(removed)


def record_restore(result: str) -> None:
    """Record a stored request lookup.

    Args:
        result: restored, redirected, missing or foreign
    """
    restored_requests_total.labels(result=result).inc()


class MetricsObserver:
    """Lifecycle observer feeding the Prometheus metrics.

    A lifecycle that reports an error and still shuts down after the fault
    barrier counts as recovered only when one error was seen; a second error
    means the recovery attempt failed too.
    """

    def __init__(self) -> None:
        self._started: float | None = None
        self._errors = 0

    def on_startup(self, app: Any) -> None:
        self._started = time.perf_counter()
        self._errors = 0

    def on_request(self, app: Any, request: Any) -> None:
        record_request(request.presenter_name, request.method)

    def on_error(self, app: Any, error: BaseException) -> None:
        self._errors += 1
        record_error(error)

    def on_shutdown(self, app: Any, error: BaseException | None) -> None:
        if error is not None and getattr(app.config, "fault_barrier_enabled", False):
            record_recovery("recovered" if self._errors == 1 else "failed")
        if self._started is not None:
            record_lifecycle(time.perf_counter() - self._started, failed=error is not None)
            self._started = None
