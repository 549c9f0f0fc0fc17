"""Core dispatch logic of the front controller.

This package contains:
- Application: the dispatch loop and the fault barrier
- RequestStore: session-backed storage of requests for later resumption
- Cleanup: periodic removal of expired session entries

The core is synchronous and framework-agnostic; adapters wrap it for
specific web frameworks.
"""

from front_controller.core.application import Application, LifecycleContext
from front_controller.core.request_store import RequestStore

__all__ = ["Application", "LifecycleContext", "RequestStore"]
