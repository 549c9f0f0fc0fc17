"""Identity service used to bind stored requests to their owner."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class User(Protocol):
    """Protocol for the current user's identity."""

    def get_id(self) -> Any:
        """Return the identity of the current user, or None when anonymous."""
        ...


class StaticUser:
    """User with a fixed identity, resolved once per request.

    Examples:
        >>> StaticUser(7).get_id()
        7
        >>> StaticUser().is_logged_in
        False
    """

    def __init__(self, identity: Any = None) -> None:
        self.identity = identity

    def get_id(self) -> Any:
        return self.identity

    @property
    def is_logged_in(self) -> bool:
        return self.identity is not None
