"""
Pytest configuration and shared fixtures for front_controller tests.
"""

from collections.abc import Callable
from typing import Any

import pytest

from front_controller.config import ApplicationConfig
from front_controller.core.application import Application
from front_controller.events import LifecycleEvents
from front_controller.http import HttpRequest, HttpResponse
from front_controller.models import Request
from front_controller.presenters import ErrorPresenter, PresenterRegistry
from front_controller.responses import TextResponse
from front_controller.routing import QueryRouter
from front_controller.security import StaticUser
from front_controller.session.memory import MemorySession, MemorySessionStorage


class HomepagePresenter:
    """Presenter rendering a fixed page."""

    def run(self, request: Request) -> TextResponse:
        return TextResponse(f"Homepage:{request.get_parameter('action')}")


class RecordingObserver:
    """Records every lifecycle notification as (event, payload) tuples."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def on_startup(self, app: Application) -> None:
        self.calls.append(("startup", None))

    def on_request(self, app: Application, request: Request) -> None:
        self.calls.append(("request", request.presenter_name))

    def on_presenter(self, app: Application, presenter: Any) -> None:
        self.calls.append(("presenter", type(presenter).__name__))

    def on_response(self, app: Application, response: Any) -> None:
        self.calls.append(("response", type(response).__name__))

    def on_error(self, app: Application, error: BaseException) -> None:
        self.calls.append(("error", error))

    def on_shutdown(self, app: Application, error: BaseException | None) -> None:
        self.calls.append(("shutdown", error))

    def events(self, name: str) -> list[Any]:
        return [payload for event, payload in self.calls if event == name]

    @property
    def names(self) -> list[str]:
        return [event for event, _ in self.calls]


@pytest.fixture
def registry() -> PresenterRegistry:
    """Registry with a homepage and the stock error presenter."""
    return PresenterRegistry(
        {
            "Homepage": HomepagePresenter,
            "Error": ErrorPresenter,
        }
    )


@pytest.fixture
def session_storage() -> MemorySessionStorage:
    return MemorySessionStorage()


@pytest.fixture
def session(session_storage: MemorySessionStorage) -> MemorySession:
    return session_storage.open(None)


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def make_application(
    registry: PresenterRegistry,
    session: MemorySession,
    observer: RecordingObserver,
) -> Callable[..., Application]:
    """Factory building an Application around a synthetic HTTP request."""

    def factory(
        query: dict[str, Any] | None = None,
        method: str = "GET",
        config: ApplicationConfig | None = None,
        user: StaticUser | None = None,
        router: Any = None,
        path: str = "/",
    ) -> Application:
        events = LifecycleEvents()
        events.attach(observer)
        return Application(
            presenter_factory=registry,
            router=router or QueryRouter(),
            http_request=HttpRequest(method=method, path=path, query=query),
            http_response=HttpResponse(),
            session=session,
            user=user or StaticUser(None),
            config=config,
            events=events,
        )

    return factory


@pytest.fixture
def barrier_config() -> ApplicationConfig:
    """Configuration with the fault barrier enabled."""
    return ApplicationConfig(catch_exceptions=True, error_presenter="Error")


