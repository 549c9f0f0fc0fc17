"""ASGI adapter for serving the front controller with Starlette or FastAPI.

This module wraps the synchronous dispatch loop in an ASGI application:
1. Converts the Starlette request to the internal HttpRequest format
2. Opens the client's session (issuing a session cookie when needed)
3. Runs a fresh Application in the thread pool
4. Converts the buffered HttpResponse back to a Starlette response

Examples:
    Standalone::

        from front_controller.adapters.asgi import FrontControllerApp

        app = FrontControllerApp(
            presenter_factory=registry,
            router=QueryRouter(),
            config=ApplicationConfig(catch_exceptions=True, error_presenter="Error"),
        )

    Mounted into FastAPI::

        from fastapi import FastAPI

        api = FastAPI()
        api.mount("/app", app)
"""

from collections.abc import Callable, Sequence
from http import HTTPStatus
from typing import Any
from urllib.parse import parse_qsl

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request as StarletteRequest
from starlette.responses import PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from front_controller.config import ApplicationConfig
from front_controller.core.application import Application
from front_controller.events import LifecycleEvents
from front_controller.exceptions import status_code_for
from front_controller.http import HttpRequest, HttpResponse
from front_controller.observability.logging import get_logger
from front_controller.presenters import PresenterFactory
from front_controller.routing import Router
from front_controller.security import StaticUser, User
from front_controller.session.memory import MemorySession, MemorySessionStorage

logger = get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
_STATUS_CODES = {status.value for status in HTTPStatus}


def anonymous_user(request: StarletteRequest) -> User:
    return StaticUser(None)


class FrontControllerApp:
    """ASGI application dispatching every HTTP request through an Application.

    Attributes:
        presenter_factory: Resolves presenter names to presenters
        router: Maps HTTP requests to application requests
        config: Configuration shared by all lifecycles
        session_storage: Sessions keyed by the session cookie
        user_provider: Returns the identity for a Starlette request
        observer_factories: Called once per lifecycle; each result is
            attached to the lifecycle's events
        session_cookie: Name of the session cookie
    """

    def __init__(
        self,
        presenter_factory: PresenterFactory,
        router: Router,
        config: ApplicationConfig | None = None,
        session_storage: MemorySessionStorage | None = None,
        user_provider: Callable[[StarletteRequest], User] | None = None,
        observer_factories: Sequence[Callable[[], Any]] = (),
        session_cookie: str = "session_id",
    ) -> None:
        self.presenter_factory = presenter_factory
        self.router = router
        self.config = config or ApplicationConfig()
        self.session_storage = (
            session_storage if session_storage is not None else MemorySessionStorage()
        )
        self.user_provider = user_provider or anonymous_user
        self.observer_factories = tuple(observer_factories)
        self.session_cookie = session_cookie

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        request = StarletteRequest(scope, receive)
        response = await self.dispatch(request)
        await response(scope, receive, send)

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        # Nothing to set up; acknowledge startup and shutdown.
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def dispatch(self, request: StarletteRequest) -> Response:
        """Run one request lifecycle and build the Starlette response."""
        http_request = await self._convert_request(request)
        http_response = HttpResponse()

        session_id = request.cookies.get(self.session_cookie)
        session = self.session_storage.open(session_id)
        application = self.create_application(
            http_request,
            http_response,
            session,
            self.user_provider(request),
        )

        try:
            await run_in_threadpool(application.run)
        except Exception as e:
            logger.error(
                "application.unhandled",
                error=str(e),
                error_type=type(e).__name__,
                path=http_request.path,
                exc_info=e,
            )
            code = status_code_for(e)
            status = HTTPStatus(code) if code in _STATUS_CODES else HTTPStatus.INTERNAL_SERVER_ERROR
            response: Response = PlainTextResponse(status.phrase, status_code=status.value)
        else:
            response = self._convert_response(http_response, request.scope.get("root_path", ""))

        if session.id != session_id:
            response.set_cookie(self.session_cookie, session.id, httponly=True, samesite="lax")
        return response

    def create_application(
        self,
        http_request: HttpRequest,
        http_response: HttpResponse,
        session: MemorySession,
        user: User,
    ) -> Application:
        events = LifecycleEvents()
        for factory in self.observer_factories:
            events.attach(factory())

        return Application(
            presenter_factory=self.presenter_factory,
            router=self.router,
            http_request=http_request,
            http_response=http_response,
            session=session,
            user=user,
            config=self.config,
            events=events,
        )

    async def _convert_request(self, request: StarletteRequest) -> HttpRequest:
        """Convert Starlette request to internal HttpRequest format.

        Only URL-encoded form bodies are decoded into ``post``.
        """
        post: dict[str, str] = {}
        content_type = request.headers.get("content-type", "")
        if content_type.split(";")[0].strip().lower() == FORM_CONTENT_TYPE:
            body = await request.body()
            post = dict(parse_qsl(body.decode("utf-8"), keep_blank_values=True))

        return HttpRequest(
            method=request.method,
            path=self._relative_path(request.scope),
            query=dict(request.query_params),
            headers=dict(request.headers.items()),
            post=post,
            cookies=dict(request.cookies),
            secured=request.url.scheme == "https",
        )

    def _convert_response(self, http_response: HttpResponse, root_path: str) -> Response:
        """Convert the internal HttpResponse to a Starlette Response.

        Root-relative redirects are prefixed with the mount path.
        """
        headers = dict(http_response.headers)
        location = headers.get("location")
        if location is not None and location.startswith("/") and root_path:
            headers["location"] = root_path.rstrip("/") + location

        return Response(
            content=http_response.body,
            status_code=http_response.code,
            headers=headers,
        )

    @staticmethod
    def _relative_path(scope: Scope) -> str:
        # Depending on the Starlette version, mounted apps see either the
        # full path or the path below the mount point.
        path = scope.get("path", "/")
        root_path = scope.get("root_path", "")
        if root_path and path.startswith(root_path):
            path = path[len(root_path):]
        return path or "/"
