"""Front controller dispatch loop.

This module provides the Application class that orchestrates one HTTP
request lifecycle:

1. Route the HTTP request to an application request (or resume a stored one)
2. Create the presenter and run it
3. Dispatch the next request while presenters forward internally
4. Send the final response
5. On failure, reroute to the error presenter once (the fault barrier)

Forwards and redirects travel through the loop as Outcome values
(Continue, Dispatched, Redirect) rather than exceptions.

One Application serves exactly one request lifecycle. Create a new instance
for every HTTP request.

Examples:
    Dispatching a request::

        from front_controller.core.application import Application

        application = Application(
            presenter_factory=registry,
            router=QueryRouter(),
            http_request=http_request,
            http_response=http_response,
            session=session,
            user=StaticUser(None),
            config=ApplicationConfig(catch_exceptions=True, error_presenter="Error"),
        )
        application.events.attach(LoggingObserver())
        application.run()
"""

from datetime import timedelta
from typing import Any

from front_controller.config import ApplicationConfig
from front_controller.core.request_store import RequestStore
from front_controller.events import LifecycleEvent, LifecycleEvents
from front_controller.exceptions import (
    ApplicationError,
    BadRequestError,
    InvalidLinkError,
    InvalidPresenterError,
    LoopOverflowError,
    status_code_for,
)
from front_controller.http import HttpRequest, HttpResponse
from front_controller.models import (
    ACTION_KEY,
    REQUEST_KEY,
    Continue,
    Dispatched,
    Outcome,
    Redirect,
    Request,
    RequestLog,
    RequestMethod,
)
from front_controller.presenters import Presenter, PresenterFactory, RichPresenter
from front_controller.responses import ForwardResponse, RedirectResponse, Response
from front_controller.routing import Router
from front_controller.security import User
from front_controller.session.base import Session


class LifecycleContext:
    """State of one request lifecycle.

    Attributes:
        requests: Every request processed so far, in order.
        presenter: The presenter created last, None before the first one.
    """

    def __init__(self) -> None:
        self.requests = RequestLog()
        self.presenter: Presenter | None = None


class Application:
    """Front controller for a single HTTP request.

    Attributes:
        presenter_factory: Resolves presenter names to presenter instances.
        router: Maps the HTTP request to an application request.
        http_request: The inbound HTTP request.
        http_response: The outbound HTTP response.
        config: Loop limit, fault barrier and request store settings.
        events: Lifecycle notifications for observers.
        request_store: Session-backed store used to resume requests.
        context: Requests processed and the active presenter.
    """

    def __init__(
        self,
        presenter_factory: PresenterFactory,
        router: Router,
        http_request: HttpRequest,
        http_response: HttpResponse,
        session: Session,
        user: User,
        config: ApplicationConfig | None = None,
        events: LifecycleEvents | None = None,
    ) -> None:
        self.presenter_factory = presenter_factory
        self.router = router
        self.http_request = http_request
        self.http_response = http_response
        self.config = config or ApplicationConfig()
        self.events = events or LifecycleEvents()
        self.request_store = RequestStore(session, user, self.config)
        self.context = LifecycleContext()

    @property
    def requests(self) -> tuple[Request, ...]:
        """All requests processed so far, oldest first."""
        return self.context.requests.as_tuple()

    @property
    def presenter(self) -> Presenter | None:
        """The presenter created last."""
        return self.context.presenter

    def run(self) -> None:
        """Dispatch the HTTP request.

        Failures are reported to ERROR observers. With the fault barrier
        enabled, the error presenter gets one chance to render the failure;
        if that fails as well, both failures are reported and the original
        one is raised.

        Raises:
            Exception: The failure that ended the lifecycle, when it could
                not be recovered.
        """
        try:
            self.events.emit(LifecycleEvent.STARTUP, self)
            self._dispatch(self._as_outcome(self.create_initial_request()))
            self.events.emit(LifecycleEvent.SHUTDOWN, self, None)

        except Exception as error:
            self.events.emit(LifecycleEvent.ERROR, self, error)
            if self.config.fault_barrier_enabled:
                try:
                    self.process_exception(error)
                except Exception as recovery_error:
                    self.events.emit(LifecycleEvent.ERROR, self, recovery_error)
                else:
                    self.events.emit(LifecycleEvent.SHUTDOWN, self, error)
                    return

            self.events.emit(LifecycleEvent.SHUTDOWN, self, error)
            raise

    def create_initial_request(self) -> Request | Redirect:
        """Build the first application request from the HTTP request.

        A valid ``_rid`` token in the query replaces the routed request with
        the stored one, or with a Redirect when the stored request belongs to
        another presenter.

        Raises:
            BadRequestError: If nothing matches, the error presenter is
                addressed directly, or the presenter name is invalid.
        """
        request = self.router.match(self.http_request)

        if not isinstance(request, Request):
            raise BadRequestError("No route for HTTP request.")

        error_presenter = self.config.error_presenter
        if (
            error_presenter is not None
            and request.presenter_name.lower() == error_presenter.lower()
        ):
            raise BadRequestError("Invalid request. Presenter is not achievable.")

        token = self.http_request.get_query(REQUEST_KEY)
        if token:
            stored = self.request_store.get_stored_request(token, request)
            if stored is not None:
                return stored

        try:
            self.presenter_factory.get_presenter_class(request.presenter_name)
        except InvalidPresenterError as e:
            raise BadRequestError(e.message, cause=e) from e

        return request

    def process_request(self, request: Request) -> None:
        """Run ``request`` and every request it forwards to.

        Raises:
            LoopOverflowError: If more than ``config.max_loop`` requests are
                processed in this lifecycle.
        """
        self._dispatch(Continue(request=request))

    def process_exception(self, error: Exception) -> None:
        """Reroute ``error`` to the error presenter.

        The status code is set only if nothing has been sent yet. Failures
        raised while rendering the error propagate to the caller.
        """
        error_presenter = self.config.error_presenter
        if error_presenter is None:
            raise ApplicationError("Cannot process exception, no error presenter is configured.")

        if not self.http_response.is_sent():
            self.http_response.set_code(status_code_for(error))

        args: dict[str, Any] = {
            "exception": error,
            "request": self.context.requests.last(),
        }

        presenter = self.context.presenter
        if isinstance(presenter, RichPresenter):
            self._dispatch(presenter.forward(f":{error_presenter}:", args))
        else:
            self.process_request(
                Request(
                    presenter_name=error_presenter,
                    method=RequestMethod.FORWARD,
                    parameters=args,
                )
            )

    def redirect(self, redirect: Redirect) -> RedirectResponse:
        """Send the client to the destination of ``redirect``.

        Raises:
            InvalidLinkError: If the router cannot build a URL for it.
        """
        parameters = dict(redirect.parameters)
        parameters[ACTION_KEY] = redirect.action
        target = Request(
            presenter_name=redirect.presenter_name,
            method=RequestMethod.REDIRECT,
            parameters=parameters,
        )

        url = self.router.construct_url(target, self.http_request)
        if url is None:
            raise InvalidLinkError(
                f"No route for '{redirect.destination}'.",
                destination=redirect.destination,
            )

        # 303 makes the browser follow a POST with a GET
        code = 303 if self.http_request.is_method("POST") else 302
        response = RedirectResponse(url, code)
        self._send(response)
        return response

    def store_request(
        self,
        request: Request,
        expiration: int | timedelta | str | None = None,
    ) -> str:
        """Store ``request`` in the session and return its token."""
        return self.request_store.store_request(request, expiration)

    def get_stored_request(self, token: str, current_request: Request) -> Request | Redirect | None:
        """Load a stored request, see RequestStore.get_stored_request()."""
        return self.request_store.get_stored_request(token, current_request)

    def _dispatch(self, outcome: Outcome) -> None:
        while True:
            if isinstance(outcome, Continue):
                outcome = self._execute(outcome.request)
            elif isinstance(outcome, Redirect):
                self.redirect(outcome)
                return
            else:
                return

    def _execute(self, request: Request) -> Outcome:
        if len(self.context.requests) >= self.config.max_loop:
            raise LoopOverflowError(
                "Too many loops detected in application life cycle.",
                max_loop=self.config.max_loop,
            )

        self.context.requests.append(request)
        self.events.emit(LifecycleEvent.REQUEST, self, request)

        presenter = self.presenter_factory.create_presenter(request.presenter_name)
        self.context.presenter = presenter
        self.events.emit(LifecycleEvent.PRESENTER, self, presenter)

        response = presenter.run(request)

        if isinstance(response, ForwardResponse):
            return Continue(request=response.request)
        if isinstance(response, (Continue, Redirect)):
            return response
        if response is not None:
            self._send(response)
        return Dispatched(response=response)

    def _send(self, response: Response) -> None:
        self.events.emit(LifecycleEvent.RESPONSE, self, response)
        response.send(self.http_request, self.http_response)

    @staticmethod
    def _as_outcome(initial: Request | Redirect) -> Outcome:
        if isinstance(initial, Redirect):
            return initial
        return Continue(request=initial)
