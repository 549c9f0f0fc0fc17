"""Lifecycle notifications emitted by the dispatch loop.

Cross-cutting behavior (logging, metrics, profiling) attaches here instead of
being wired into the loop itself. Callbacks run synchronously, in the order
they were registered, and always receive the emitting application first.

Callback signatures per event:

    STARTUP    callback(app)
    SHUTDOWN   callback(app, error)      error is None on success
    REQUEST    callback(app, request)
    PRESENTER  callback(app, presenter)
    RESPONSE   callback(app, response)
    ERROR      callback(app, error)

Examples:
    Subscribing a single callback::

        events = LifecycleEvents()
        events.subscribe(LifecycleEvent.REQUEST, lambda app, request: print(request))

    Attaching an observer object::

        class Profiler:
            def on_startup(self, app):
                self.started = time.perf_counter()

            def on_shutdown(self, app, error):
                print(time.perf_counter() - self.started)

        events.attach(Profiler())
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

LifecycleCallback = Callable[..., Any]


class LifecycleEvent(str, Enum):
    """Points in the request lifecycle that observers can hook into."""

    STARTUP = "startup"
    SHUTDOWN = "shutdown"
    REQUEST = "request"
    PRESENTER = "presenter"
    RESPONSE = "response"
    ERROR = "error"


class LifecycleEvents:
    """Registry of lifecycle callbacks."""

    def __init__(self) -> None:
        self._callbacks: dict[LifecycleEvent, list[LifecycleCallback]] = {
            event: [] for event in LifecycleEvent
        }

    def subscribe(self, event: LifecycleEvent, callback: LifecycleCallback) -> None:
        self._callbacks[LifecycleEvent(event)].append(callback)

    def unsubscribe(self, event: LifecycleEvent, callback: LifecycleCallback) -> bool:
        """Remove a callback. Returns False if it was not registered."""
        callbacks = self._callbacks[LifecycleEvent(event)]
        if callback in callbacks:
            callbacks.remove(callback)
            return True
        return False

    def attach(self, observer: Any) -> None:
        """Subscribe every ``on_<event>`` method that ``observer`` defines."""
        for event in LifecycleEvent:
            method = getattr(observer, f"on_{event.value}", None)
            if callable(method):
                self.subscribe(event, method)

    def emit(self, event: LifecycleEvent, *args: Any) -> None:
        """Call every callback registered for ``event``.

        Callback failures propagate to the emitter.
        """
        for callback in list(self._callbacks[event]):
            callback(*args)

    def callbacks(self, event: LifecycleEvent) -> tuple[LifecycleCallback, ...]:
        return tuple(self._callbacks[LifecycleEvent(event)])
