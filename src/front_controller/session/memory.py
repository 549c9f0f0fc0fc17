"""In-memory session backend with per-key expiration.

The MemorySessionStorage is suitable for:
    - Single-process applications
    - Development and testing

Thread Safety:
    - One threading.Lock per session guards all of its sections
    - The storage lock guards the session registry
    - Expired keys are invisible to readers and are purged lazily or by
      cleanup_expired()

Examples:
    Basic usage::

        from front_controller.session.memory import MemorySessionStorage

        storage = MemorySessionStorage()
        session = storage.open(None)        # new session with a fresh id
        section = session.get_section("front_controller/requests")
        section["abc12"] = "value"
        section.set_expiration(600, "abc12")
"""

import secrets
import threading
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

from front_controller.session.base import Session, SessionSection

Clock = Callable[[], datetime]

DEFAULT_IDLE_TIMEOUT = timedelta(hours=3)


def utc_now() -> datetime:
    return datetime.now(UTC)


class MemorySessionSection(SessionSection):
    """A session namespace held in a dictionary.

    Attributes:
        _data: Values by key.
        _expires: Expiration time by key.
        _section_expires: Expiration time of the whole section, if set.
    """

    def __init__(self, lock: threading.Lock, clock: Clock = utc_now) -> None:
        self._data: dict[str, Any] = {}
        self._expires: dict[str, datetime] = {}
        self._section_expires: datetime | None = None
        self._lock = lock
        self._clock = clock

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return isinstance(key, str) and self._live(key)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if not self._live(key):
                return default
            return self._data[key]

    def __getitem__(self, key: str) -> Any:
        with self._lock:
            if not self._live(key):
                raise KeyError(key)
            return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def __delitem__(self, key: str) -> None:
        with self._lock:
            if not self._live(key):
                raise KeyError(key)
            self._remove(key)

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for key in list(self._data) if self._live(key))

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter([key for key in list(self._data) if self._live(key)])

    def set_expiration(self, seconds: int | None, key: str | None = None) -> None:
        with self._lock:
            expires = None if seconds is None else self._clock() + timedelta(seconds=seconds)
            if key is None:
                self._section_expires = expires
            elif expires is None:
                self._expires.pop(key, None)
            else:
                self._expires[key] = expires

    def cleanup_expired(self) -> int:
        """Remove expired keys. Returns the number of keys removed."""
        with self._lock:
            expired = [key for key in list(self._data) if not self._live(key)]
            return len(expired)

    def _live(self, key: str) -> bool:
        # Caller holds the lock. Expired keys are purged on access.
        if key not in self._data:
            return False
        now = self._clock()
        if self._section_expires is not None and self._section_expires <= now:
            self._data.clear()
            self._expires.clear()
            self._section_expires = None
            return False
        expires = self._expires.get(key)
        if expires is not None and expires <= now:
            self._remove(key)
            return False
        return True

    def _remove(self, key: str) -> None:
        self._data.pop(key, None)
        self._expires.pop(key, None)


class MemorySession(Session):
    """A session made of MemorySessionSection namespaces.

    Attributes:
        id: Session identifier, sent to the client in a cookie.
        last_access: When the session was last opened.
    """

    def __init__(self, session_id: str, clock: Clock = utc_now) -> None:
        self.id = session_id
        self._sections: dict[str, MemorySessionSection] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self.last_access = clock()

    def touch(self) -> None:
        self.last_access = self._clock()

    def get_section(self, namespace: str) -> MemorySessionSection:
        with self._lock:
            section = self._sections.get(namespace)
            if section is None:
                section = MemorySessionSection(self._lock, self._clock)
                self._sections[namespace] = section
            return section

    def has_section(self, namespace: str) -> bool:
        with self._lock:
            return namespace in self._sections

    def cleanup_expired(self) -> int:
        with self._lock:
            sections = list(self._sections.values())
        return sum(section.cleanup_expired() for section in sections)


class MemorySessionStorage:
    """Registry of in-memory sessions keyed by session id.

    Attributes:
        _sessions: Dictionary mapping session ids to MemorySession objects.
        _lock: Lock protecting the _sessions dictionary.
        idle_timeout: Sessions not opened for this long are dropped by
            cleanup_expired().
    """

    def __init__(
        self,
        clock: Clock = utc_now,
        idle_timeout: timedelta = DEFAULT_IDLE_TIMEOUT,
    ) -> None:
        self.idle_timeout = idle_timeout
        self._sessions: dict[str, MemorySession] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def open(self, session_id: str | None) -> MemorySession:
        """Return the session for ``session_id``, or start a new one.

        Unknown ids are not adopted; a fresh id is issued instead so that a
        client cannot choose its own session id.
        """
        with self._lock:
            if session_id is not None and session_id in self._sessions:
                session = self._sessions[session_id]
                session.touch()
                return session

            new_id = secrets.token_urlsafe(24)
            while new_id in self._sessions:
                new_id = secrets.token_urlsafe(24)
            session = MemorySession(new_id, self._clock)
            self._sessions[new_id] = session
            return session

    def get(self, session_id: str) -> MemorySession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def cleanup_expired(self) -> int:
        """Drop idle sessions and remove expired keys from the others.

        A session is idle when it was not opened for ``idle_timeout``; its
        client would get a fresh session on the next request anyway.

        Returns:
            The number of sessions dropped plus the number of keys removed.
        """
        cutoff = self._clock() - self.idle_timeout
        with self._lock:
            idle = [sid for sid, s in self._sessions.items() if s.last_access <= cutoff]
            for sid in idle:
                del self._sessions[sid]
            sessions = list(self._sessions.values())
        return len(idle) + sum(session.cleanup_expired() for session in sessions)
