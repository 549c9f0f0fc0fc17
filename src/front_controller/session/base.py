"""Session protocol used by the request store.

The request store only needs namespaced key-value access with per-key
expiration. Any session backend (signed cookies, Redis, a database) can be
plugged in by implementing these two protocols.

Examples:
    Implementing a custom session section::

        class RedisSessionSection:
            def __init__(self, redis, prefix):
                self.redis = redis
                self.prefix = prefix

            def __contains__(self, key):
                return self.redis.exists(f"{self.prefix}:{key}") > 0

            def get(self, key, default=None):
                raw = self.redis.get(f"{self.prefix}:{key}")
                return default if raw is None else pickle.loads(raw)

            def __setitem__(self, key, value):
                self.redis.set(f"{self.prefix}:{key}", pickle.dumps(value))

            def __delitem__(self, key):
                self.redis.delete(f"{self.prefix}:{key}")

            def set_expiration(self, seconds, key=None):
                self.redis.expire(f"{self.prefix}:{key}", seconds)

Expiration Requirements:
    Implementations MUST treat expired keys as missing in ``__contains__``
    and ``get``. Physically removing them can happen lazily or in a
    background cleanup.

Concurrency:
    A session namespace may be shared by concurrent request lifecycles.
    Implementations must keep individual operations consistent, but callers
    only rely on check-then-write semantics (no compare-and-swap).
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SessionSection(Protocol):
    """A namespace inside a session."""

    def __contains__(self, key: object) -> bool:
        """Return True if ``key`` exists and has not expired."""
        ...

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key``, or ``default``."""
        ...

    def __setitem__(self, key: str, value: Any) -> None:
        ...

    def __delitem__(self, key: str) -> None:
        ...

    def set_expiration(self, seconds: int | None, key: str | None = None) -> None:
        """Expire ``key`` (or the whole section when key is None) after ``seconds``.

        ``None`` removes the expiration.
        """
        ...


@runtime_checkable
class Session(Protocol):
    """A user session made of named sections."""

    def get_section(self, namespace: str) -> SessionSection:
        """Return the section for ``namespace``, creating it when needed."""
        ...
