"""Scenario 4: Mounting into FastAPI

This module tests the front controller mounted below a FastAPI application:
- Requests below the mount point reach the presenters
- Redirect locations are prefixed with the mount path
- The surrounding FastAPI routes keep working
- Lifecycle observers see every request
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from front_controller.adapters.asgi import FrontControllerApp
from front_controller.config import ApplicationConfig
from front_controller.observability.logging import LoggingObserver
from front_controller.observability.metrics import MetricsObserver
from front_controller.presenters import BasePresenter, ErrorPresenter, PresenterRegistry
from front_controller.responses import TextResponse
from front_controller.routing import QueryRouter


class HomepagePresenter(BasePresenter):
    def action_default(self, request):
        return TextResponse("front controller home")

    def action_moved(self, request):
        return self.redirect(":Homepage:", {"from": "moved"})


class FailingPresenter(BasePresenter):
    def action_default(self, request):
        raise RuntimeError("boom")


@pytest.fixture
def api() -> FastAPI:
    registry = PresenterRegistry(
        {
            "Homepage": HomepagePresenter,
            "Failing": FailingPresenter,
            "Error": ErrorPresenter,
        }
    )
    front = FrontControllerApp(
        presenter_factory=registry,
        router=QueryRouter(),
        config=ApplicationConfig(catch_exceptions=True, error_presenter="Error"),
        observer_factories=[LoggingObserver, MetricsObserver],
    )

    api = FastAPI()

    @api.get("/health")
    async def health():
        return {"status": "ok"}

    api.mount("/site", front)
    return api


@pytest.fixture
def client(api: FastAPI) -> TestClient:
    return TestClient(api, follow_redirects=False)


def test_mounted_homepage(client: TestClient) -> None:
    response = client.get("/site/")

    assert response.status_code == 200
    assert response.text == "front controller home"


def test_redirect_is_prefixed_with_mount_path(client: TestClient) -> None:
    response = client.get("/site/?action=moved")

    assert response.status_code == 302
    assert response.headers["location"] == "/site/?presenter=Homepage&from=moved"


def test_redirect_can_be_followed(client: TestClient) -> None:
    response = client.get("/site/?action=moved", follow_redirects=True)

    assert response.status_code == 200
    assert response.text == "front controller home"


def test_fault_barrier_below_mount(client: TestClient) -> None:
    response = client.get("/site/?presenter=Failing")

    assert response.status_code == 500
    assert response.text == "500 Internal Server Error"


def test_unknown_path_below_mount(client: TestClient) -> None:
    response = client.get("/site/unknown")

    assert response.status_code == 404


def test_fastapi_routes_still_work(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
