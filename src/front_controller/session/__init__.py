"""Session backends for the request store.

All backends implement the Session and SessionSection protocols defined in
base.py.

Available Backends:
    - MemorySessionStorage: In-memory sessions with per-key expiration
"""

from front_controller.session.base import Session, SessionSection
from front_controller.session.memory import (
    MemorySession,
    MemorySessionSection,
    MemorySessionStorage,
)

__all__ = [
    "Session",
    "SessionSection",
    "MemorySession",
    "MemorySessionSection",
    "MemorySessionStorage",
]
