"""Custom exceptions for the front controller.

This module defines the exception hierarchy raised by the dispatch loop, the
request store and the collaborators shipped with this package.

Internal forwards and redirects are not exceptions: presenters and the
request store report them as ``Outcome`` values (see ``models``).

Examples:
    Rejecting an unroutable request::

        from front_controller.exceptions import BadRequestError

        if request is None:
            raise BadRequestError("No route for HTTP request.")

    Mapping a failure to an HTTP status::

        try:
            application.run()
        except BadRequestError as e:
            status = e.status_code  # 404 unless the error carries a code
        except ApplicationError:
            status = 500
"""

from typing import Any


class ApplicationError(Exception):
    """Base exception for all front controller errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)


class BadRequestError(ApplicationError):
    """The request cannot be served, caused by client data.

    Raised for unroutable requests, requests addressed to the error presenter
    directly and unknown presenter names.

    Attributes:
        message: Human-readable error description.
        code: Optional HTTP status code. ``None`` or ``0`` mean "not set".
        cause: The underlying exception, if any.

    Examples:
        >>> BadRequestError("Gone", code=410).status_code
        410
        >>> BadRequestError("No route").status_code
        404
    """

    DEFAULT_CODE = 404

    def __init__(
        self,
        message: str,
        code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the bad request error.

        Args:
            message: Human-readable error description.
            code: Optional HTTP status code.
            cause: The underlying exception, if any.
        """
        super().__init__(message)
        self.code = code
        self.cause = cause

    @property
    def status_code(self) -> int:
        """The HTTP status this error maps to."""
        return self.code or self.DEFAULT_CODE


class InvalidPresenterError(ApplicationError):
    """A presenter name is malformed or cannot be resolved.

    Attributes:
        message: Human-readable error description.
        name: The rejected presenter name.
    """

    def __init__(self, message: str, name: str) -> None:
        super().__init__(message)
        self.name = name


class LoopOverflowError(ApplicationError):
    """Too many requests were processed during one lifecycle.

    This indicates misconfigured presenters that keep forwarding to each
    other. It never depends on client data.

    Attributes:
        message: Human-readable error description.
        max_loop: The configured limit that was exceeded.
    """

    def __init__(self, message: str, max_loop: int) -> None:
        super().__init__(message)
        self.max_loop = max_loop


class InvalidLinkError(ApplicationError):
    """A redirect destination cannot be turned into a URL.

    Attributes:
        message: Human-readable error description.
        destination: The destination that could not be resolved.
    """

    def __init__(self, message: str, destination: str) -> None:
        super().__init__(message)
        self.destination = destination


class SessionError(ApplicationError):
    """Session backend operation failed.

    Attributes:
        message: Human-readable error description.
        cause: The underlying exception that caused the session error.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


def status_code_for(error: Any) -> int:
    """Return the HTTP status code the fault barrier uses for ``error``.

    Examples:
        >>> status_code_for(BadRequestError("Forbidden", code=403))
        403
        >>> status_code_for(RuntimeError("boom"))
        500
    """
    if isinstance(error, BadRequestError):
        return error.status_code
    return 500
