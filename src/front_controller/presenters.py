"""Presenter protocols, the presenter registry and the stock presenters.

A presenter handles one application request and returns a response. The
dispatch loop only needs ``run()``; presenters that also implement the
RichPresenter protocol let the fault barrier forward to the error presenter
through the presenter itself.

Examples:
    Registering presenters::

        from front_controller.presenters import BasePresenter, PresenterRegistry
        from front_controller.responses import TextResponse

        class ArticlePresenter(BasePresenter):
            def action_default(self, request):
                return TextResponse("All articles")

            def action_show(self, request):
                return TextResponse(f"Article {request.get_parameter('id')}")

        registry = PresenterRegistry()
        registry.register("Article", ArticlePresenter)
"""

import re
from collections.abc import Callable
from http import HTTPStatus
from typing import Any, Protocol, runtime_checkable

from front_controller.exceptions import BadRequestError, InvalidPresenterError
from front_controller.models import (
    ACTION_KEY,
    DEFAULT_ACTION,
    Continue,
    Outcome,
    Redirect,
    Request,
    RequestMethod,
)
from front_controller.observability.logging import get_logger
from front_controller.responses import ForwardResponse, Response, TextResponse

logger = get_logger(__name__)

PRESENTER_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9]*(:[a-zA-Z][a-zA-Z0-9]*)*$")


@runtime_checkable
class Presenter(Protocol):
    """Protocol for request handlers."""

    def run(self, request: Request) -> Response | Redirect | None:
        """Handle ``request``.

        Returns:
            A response to send, a ForwardResponse to dispatch another request,
            a Redirect outcome, or None when there is nothing to send.
        """
        ...


@runtime_checkable
class RichPresenter(Presenter, Protocol):
    """Presenter that can forward internally on behalf of the application."""

    def forward(self, destination: str, args: dict[str, Any]) -> Outcome:
        """Build an internal request for ``destination``.

        Returns:
            Continue with the new request when the dispatch loop must
            re-enter with it.
        """
        ...

    def get_last_created_request(self) -> Request | None:
        ...


@runtime_checkable
class PresenterFactory(Protocol):
    """Protocol for resolving presenter names to presenter instances."""

    def get_presenter_class(self, name: str) -> type:
        """Return the class registered for ``name``.

        Raises:
            InvalidPresenterError: If the name is malformed or unknown.
        """
        ...

    def create_presenter(self, name: str) -> Presenter:
        ...


PresenterSource = type | Callable[[], Presenter]


class PresenterRegistry(PresenterFactory):
    """Presenter factory backed by an explicit name registry.

    Attributes:
        _presenters: Dictionary mapping presenter names to classes or
            zero-argument factories.
    """

    def __init__(self, presenters: dict[str, PresenterSource] | None = None) -> None:
        self._presenters: dict[str, PresenterSource] = {}
        for name, source in (presenters or {}).items():
            self.register(name, source)

    def register(self, name: str, source: PresenterSource) -> None:
        """Register a presenter class or factory under ``name``.

        Raises:
            InvalidPresenterError: If the name is malformed.
        """
        self._validate_name(name)
        self._presenters[name] = source

    def get_presenter_class(self, name: str) -> type:
        self._validate_name(name)
        source = self._presenters.get(name)
        if source is None:
            raise InvalidPresenterError(
                f"Cannot load presenter '{name}', presenter is not registered.",
                name=name,
            )
        return source if isinstance(source, type) else type(source)

    def create_presenter(self, name: str) -> Presenter:
        self.get_presenter_class(name)
        presenter = self._presenters[name]()
        if not isinstance(presenter, Presenter):
            raise InvalidPresenterError(
                f"Cannot load presenter '{name}', {type(presenter).__name__} has no run() method.",
                name=name,
            )
        return presenter

    def __contains__(self, name: object) -> bool:
        return name in self._presenters

    def _validate_name(self, name: str) -> None:
        if not isinstance(name, str) or not PRESENTER_NAME_PATTERN.match(name):
            raise InvalidPresenterError(
                f"Presenter name must be alphanumeric string, '{name}' is invalid.",
                name=str(name),
            )


class BasePresenter(RichPresenter):
    """Presenter dispatching to ``action_<name>`` methods.

    Action methods receive the request and may return a Response, a
    Continue or Redirect outcome, or None. A Continue is turned into a
    ForwardResponse.

    Attributes:
        request: The request being handled, None before run().
    """

    def __init__(self) -> None:
        self.request: Request | None = None
        self._last_created_request: Request | None = None

    def run(self, request: Request) -> Response | Redirect | None:
        self.request = request
        action = request.get_parameter(ACTION_KEY) or DEFAULT_ACTION
        handler = getattr(self, f"action_{action}", None)
        if handler is None or not callable(handler):
            raise BadRequestError(
                f"Action '{action}' not found in {type(self).__name__}.", code=404
            )

        result = handler(request)
        if isinstance(result, Continue):
            return ForwardResponse(result.request)
        return result

    def forward(self, destination: str, args: dict[str, Any] | None = None) -> Continue:
        """Create an internal request for ``destination`` (``":Presenter:action"``)."""
        target = Redirect(destination=destination)
        parameters = dict(args or {})
        parameters[ACTION_KEY] = target.action
        request = Request(
            presenter_name=target.presenter_name,
            method=RequestMethod.FORWARD,
            parameters=parameters,
        )
        self._last_created_request = request
        return Continue(request=request)

    def redirect(self, destination: str, args: dict[str, Any] | None = None) -> Redirect:
        return Redirect(destination=destination, parameters=dict(args or {}))

    def get_last_created_request(self) -> Request | None:
        return self._last_created_request


class ErrorPresenter:
    """Renders the failure carried in the ``exception`` parameter.

    Bad requests render their status line; everything else renders a
    generic 500 page and is logged with its traceback.
    """

    def run(self, request: Request) -> TextResponse:
        error = request.get_parameter("exception")
        failed_request = request.get_parameter("request")

        if isinstance(error, BadRequestError):
            code = error.status_code
            if code not in _STATUS_CODES:
                return TextResponse(str(code))
            return TextResponse(f"{code} {HTTPStatus(code).phrase}")

        logger.error(
            "error_presenter.unhandled",
            error=str(error),
            error_type=type(error).__name__,
            presenter=failed_request.presenter_name if failed_request is not None else None,
            exc_info=error if isinstance(error, BaseException) else None,
        )
        status = HTTPStatus.INTERNAL_SERVER_ERROR
        return TextResponse(f"{status.value} {status.phrase}")


_STATUS_CODES = {status.value for status in HTTPStatus}
