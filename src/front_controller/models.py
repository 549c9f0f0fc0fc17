"""Core type definitions for the front controller.

This module provides the data structures passed between the router, the
dispatch loop, presenters and the request store: application requests, the
request log, stored request entries and the tagged outcomes that replace
exception-based control flow for forwards and redirects.

Examples:
    Creating an application request::

        from front_controller.models import Request, RequestMethod

        request = Request(
            presenter_name="Article",
            method=RequestMethod.GET,
            parameters={"action": "show", "id": 12},
        )

    Reporting an internal forward from a presenter::

        from front_controller.models import Continue

        return Continue(request=Request(presenter_name="Error", method="FORWARD"))
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Reserved parameter keys
REQUEST_KEY = "_rid"
ACTION_KEY = "action"
FLASH_KEY = "_fid"

DEFAULT_ACTION = "default"


class RequestMethod(str, Enum):
    """How an application request came to be.

    HTTP methods are used for requests created by the router. FORWARD marks
    internal forwards and REDIRECT marks requests built to construct a
    redirect URL.
    """

    GET = "GET"
    POST = "POST"
    HEAD = "HEAD"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    FORWARD = "FORWARD"
    REDIRECT = "REDIRECT"


class RequestFlag(str, Enum):
    """Boolean flags attached to a request.

    Attributes:
        RESTORED: The request was restored from the request store.
        SECURED: The request arrived over HTTPS.
    """

    RESTORED = "restored"
    SECURED = "secured"


class Request(BaseModel):
    """An application request addressed to a presenter.

    Requests are created by the router or cloned from the request store. They
    are treated as immutable once handed to the dispatch loop.

    Attributes:
        presenter_name: Name of the target presenter, e.g. ``"Admin:Article"``.
        method: A RequestMethod value or any other HTTP method name.
        parameters: Mapping of parameter name to value.
        post: Submitted form data.
        flags: Names of the flags set on the request.
    """

    presenter_name: str = Field(..., min_length=1)
    method: str = Field(default=RequestMethod.GET.value)
    parameters: dict[str, Any] = Field(default_factory=dict)
    post: dict[str, Any] = Field(default_factory=dict)
    flags: set[str] = Field(default_factory=set)

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> str:
        if isinstance(v, RequestMethod):
            return v.value
        if not isinstance(v, str):
            raise ValueError("method must be a string")
        return v.upper()

    @field_validator("flags", mode="before")
    @classmethod
    def normalize_flags(cls, v: Any) -> set[str]:
        return {flag.value if isinstance(flag, RequestFlag) else str(flag) for flag in v}

    def is_method(self, method: str | RequestMethod) -> bool:
        """Check the request method, case-insensitively."""
        if isinstance(method, RequestMethod):
            method = method.value
        return self.method == method.upper()

    def has_flag(self, flag: str | RequestFlag) -> bool:
        return _flag_name(flag) in self.flags

    def set_flag(self, flag: str | RequestFlag, value: bool = True) -> None:
        if value:
            self.flags.add(_flag_name(flag))
        else:
            self.flags.discard(_flag_name(flag))

    def get_parameter(self, name: str, default: Any = None) -> Any:
        return self.parameters.get(name, default)

    def clone(self) -> "Request":
        """Return a deep copy of this request."""
        return self.model_copy(deep=True)


def _flag_name(flag: str | RequestFlag) -> str:
    return flag.value if isinstance(flag, RequestFlag) else flag


class StoredRequestEntry(BaseModel):
    """A request persisted in the session together with its owner.

    Attributes:
        owner_id: Identity that stored the request, or None when it was
            stored anonymously.
        request: The stored request.
    """

    owner_id: Any = None
    request: Request

    def is_readable_by(self, identity: Any) -> bool:
        """Anonymous entries are readable by anyone, others only by their owner.

        Owner and identity must match in type as well as value, so `1` and
        `True` or `1` and `"1"` are different identities.

        Examples:
            >>> entry = StoredRequestEntry(owner_id=None, request=Request(presenter_name="A"))
            >>> entry.is_readable_by(42)
            True
        """
        if self.owner_id is None:
            return True
        return type(self.owner_id) is type(identity) and self.owner_id == identity


class Continue(BaseModel):
    """Keep dispatching with another request."""

    request: Request


class Dispatched(BaseModel):
    """The lifecycle ended; ``response`` was sent, or None if nothing was."""

    response: Any = None


class Redirect(BaseModel):
    """Send the client to another presenter instead of continuing.

    Attributes:
        destination: Target in the form ``":Presenter:action"``. The leading
            colon is optional and an empty action means the default one.
        parameters: Parameters of the target request, action excluded.
    """

    destination: str = Field(..., min_length=1)
    parameters: dict[str, Any] = Field(default_factory=dict)

    model_config = {"arbitrary_types_allowed": True}

    @property
    def presenter_name(self) -> str:
        presenter, _, _ = self.destination.lstrip(":").rpartition(":")
        return presenter or self.destination.lstrip(":")

    @property
    def action(self) -> str:
        presenter, _, action = self.destination.lstrip(":").rpartition(":")
        if not presenter:
            return DEFAULT_ACTION
        return action or DEFAULT_ACTION


Outcome = Continue | Dispatched | Redirect


class RequestLog:
    """Ordered, append-only record of the requests processed in a lifecycle."""

    def __init__(self) -> None:
        self._requests: list[Request] = []

    def append(self, request: Request) -> None:
        self._requests.append(request)

    def last(self) -> Request | None:
        """Return the most recent request, or None if nothing was processed."""
        return self._requests[-1] if self._requests else None

    def as_tuple(self) -> tuple[Request, ...]:
        return tuple(self._requests)

    def __len__(self) -> int:
        return len(self._requests)

    def __iter__(self):
        return iter(self._requests)

    def __getitem__(self, index: int) -> Request:
        return self._requests[index]
