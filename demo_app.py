"""Demo FastAPI application serving presenters through the front controller.

This application demonstrates forwards, the fault barrier and resuming a
stored request after signing in.
Run with: python demo_app.py
Then open: http://localhost:8000/?presenter=Article&action=edit&id=1
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from html import escape

import uvicorn
from fastapi import FastAPI

from front_controller.adapters.asgi import FrontControllerApp
from front_controller.config import ApplicationConfig
from front_controller.core.cleanup import start_cleanup_task, stop_cleanup_task
from front_controller.models import REQUEST_KEY, RequestFlag
from front_controller.observability.logging import LoggingObserver, configure_logging
from front_controller.observability.metrics import MetricsObserver
from front_controller.presenters import BasePresenter, ErrorPresenter, PresenterRegistry
from front_controller.responses import TextResponse
from front_controller.routing import QueryRouter
from front_controller.security import StaticUser
from front_controller.session.memory import MemorySessionStorage

IDENTITY_SECTION = "demo/identity"
HTML = "text/html; charset=utf-8"

session_storage = MemorySessionStorage()


class ApplicationWiring:
    """Gives every presenter access to the application that created it."""

    def on_presenter(self, app, presenter):
        presenter.application = app


class HomepagePresenter(BasePresenter):
    def action_default(self, request):
        return TextResponse(
            "<h1>Front controller demo</h1>"
            '<p><a href="/?presenter=Article&action=edit&id=1">Edit article 1</a> (needs sign-in)</p>'
            '<p><a href="/?presenter=Homepage&action=about">About</a> (internal forward)</p>'
            '<p><a href="/?presenter=Homepage&action=crash">Crash</a> (fault barrier)</p>',
            HTML,
        )

    def action_about(self, request):
        return self.forward(":Homepage:info", {"started": datetime.now(UTC).isoformat()})

    def action_info(self, request):
        return TextResponse(f"Forwarded internally at {request.get_parameter('started')}")

    def action_crash(self, request):
        raise RuntimeError("Simulated failure")


class ArticlePresenter(BasePresenter):
    application = None

    def action_edit(self, request):
        user = self.application.request_store.user
        if user.get_id() is None:
            token = self.application.store_request(request)
            return self.redirect(":Sign:in", {"backlink": token})

        restored = " (restored after sign-in)" if request.has_flag(RequestFlag.RESTORED) else ""
        return TextResponse(
            f"<p>{escape(str(user.get_id()))} is editing article "
            f"{escape(str(request.get_parameter('id')))}{restored}</p>",
            HTML,
        )


class SignPresenter(BasePresenter):
    application = None

    def action_in(self, request):
        backlink = request.get_parameter("backlink", "")
        name = request.post.get("name")
        if request.is_method("POST") and name:
            session = self.application.request_store.session
            session.get_section(IDENTITY_SECTION)["user"] = name
            return self.redirect(":Homepage:", {REQUEST_KEY: backlink} if backlink else {})

        return TextResponse(
            f'<form method="post" action="/?presenter=Sign&action=in&backlink={escape(backlink)}">'
            '<input name="name" placeholder="Your name"><button>Sign in</button></form>',
            HTML,
        )


def user_from_session(request):
    session = session_storage.get(request.cookies.get("session_id", ""))
    if session is None:
        return StaticUser(None)
    return StaticUser(session.get_section(IDENTITY_SECTION).get("user"))


registry = PresenterRegistry(
    {
        "Homepage": HomepagePresenter,
        "Article": ArticlePresenter,
        "Sign": SignPresenter,
        "Error": ErrorPresenter,
    }
)

front_controller = FrontControllerApp(
    presenter_factory=registry,
    router=QueryRouter(),
    config=ApplicationConfig(catch_exceptions=True, error_presenter="Error"),
    session_storage=session_storage,
    user_provider=user_from_session,
    observer_factories=[ApplicationWiring, LoggingObserver, MetricsObserver],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = await start_cleanup_task(session_storage, interval_seconds=60)
    yield
    await stop_cleanup_task(task)


# Create FastAPI app
app = FastAPI(
    title="Front Controller Demo",
    description="Presenters served through a front controller",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/api/status")
async def get_status():
    """Health check endpoint, served by FastAPI directly."""
    return {
        "status": "ok",
        "sessions": len(session_storage),
        "timestamp": datetime.now(UTC).isoformat(),
    }


app.mount("/", front_controller)


if __name__ == "__main__":
    configure_logging(level="INFO", json_output=False)

    print("=" * 60)
    print("Front Controller Demo Server")
    print("=" * 60)
    print("\nStarting server at http://localhost:8000")
    print("\nTry these URLs:")
    print("  http://localhost:8000/")
    print("  http://localhost:8000/?presenter=Article&action=edit&id=1")
    print("  http://localhost:8000/api/status")
    print("\nPress Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
