"""Application responses returned by presenters.

A presenter returns one of these from ``run()``. The dispatch loop re-enters
itself for ``ForwardResponse`` and sends every other response to the client.

Examples:
    Forwarding to another presenter::

        from front_controller.models import Request, RequestMethod
        from front_controller.responses import ForwardResponse

        return ForwardResponse(Request(presenter_name="Sign", method=RequestMethod.FORWARD))

    Rendering JSON::

        return JsonResponse({"status": "ok"})
"""

import json
from typing import Any, Protocol, runtime_checkable

from front_controller.http import HttpRequest, HttpResponse
from front_controller.models import Request


@runtime_checkable
class Response(Protocol):
    """Protocol for everything a presenter can hand back to the dispatch loop."""

    def send(self, http_request: HttpRequest, http_response: HttpResponse) -> None:
        """Write this response to the HTTP response."""
        ...


class ForwardResponse:
    """Internal forward to another request. Never sent to the client.

    Attributes:
        request: The request to dispatch next.
    """

    def __init__(self, request: Request) -> None:
        self.request = request

    def send(self, http_request: HttpRequest, http_response: HttpResponse) -> None:
        """Forwards are handled by the dispatch loop and produce no output."""

    def __repr__(self) -> str:
        return f"ForwardResponse(presenter={self.request.presenter_name!r})"


class TextResponse:
    """Plain text (or pre-rendered markup) response."""

    def __init__(self, text: str, content_type: str = "text/plain; charset=utf-8") -> None:
        self.text = text
        self.content_type = content_type

    def send(self, http_request: HttpRequest, http_response: HttpResponse) -> None:
        if not http_response.is_sent():
            http_response.set_header("content-type", self.content_type)
        if http_request.is_method("HEAD"):
            http_response.mark_sent()
            return
        http_response.write(self.text.encode("utf-8"))


class JsonResponse:
    """JSON encoded response."""

    def __init__(self, payload: Any, content_type: str = "application/json") -> None:
        self.payload = payload
        self.content_type = content_type

    def send(self, http_request: HttpRequest, http_response: HttpResponse) -> None:
        if not http_response.is_sent():
            http_response.set_header("content-type", self.content_type)
        if http_request.is_method("HEAD"):
            http_response.mark_sent()
            return
        http_response.write(json.dumps(self.payload, default=str).encode("utf-8"))


class RedirectResponse:
    """Redirects the client to another URL.

    Attributes:
        url: Target URL.
        code: Redirect status code, 302 unless stated otherwise.
    """

    def __init__(self, url: str, code: int = 302) -> None:
        self.url = url
        self.code = code

    def send(self, http_request: HttpRequest, http_response: HttpResponse) -> None:
        http_response.set_code(self.code)
        http_response.set_header("location", self.url)
        http_response.mark_sent()

    def __repr__(self) -> str:
        return f"RedirectResponse(url={self.url!r}, code={self.code})"
