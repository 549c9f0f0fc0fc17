"""Router protocol and a query-parameter router.

Routing algorithms are the business of the hosting application; the
dispatch loop only needs something that turns an HTTP request into an
application request and, for redirects, back into a URL.
"""

from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlencode

from front_controller.http import HttpRequest
from front_controller.models import ACTION_KEY, DEFAULT_ACTION, Request, RequestFlag


@runtime_checkable
class Router(Protocol):
    """Protocol for two-way routers."""

    def match(self, http_request: HttpRequest) -> Request | None:
        """Return the application request for ``http_request``, or None."""
        ...

    def construct_url(self, request: Request, http_request: HttpRequest) -> str | None:
        """Return the URL addressing ``request``, or None if it has none."""
        ...


class QueryRouter(Router):
    """Takes the presenter name and the action from query parameters.

    ``/?presenter=Article&action=show&id=3`` matches presenter ``Article``
    with parameters ``{"action": "show", "id": "3"}``. Missing values fall
    back to the defaults.

    Attributes:
        default_presenter: Presenter used when the query names none.
        default_action: Action used when the query names none.
        presenter_key: Query parameter carrying the presenter name.
        path: The only path this router answers.
    """

    def __init__(
        self,
        default_presenter: str = "Homepage",
        default_action: str = DEFAULT_ACTION,
        presenter_key: str = "presenter",
        path: str = "/",
    ) -> None:
        self.default_presenter = default_presenter
        self.default_action = default_action
        self.presenter_key = presenter_key
        self.path = path

    def match(self, http_request: HttpRequest) -> Request | None:
        if http_request.path != self.path:
            return None

        parameters: dict[str, Any] = dict(http_request.query)
        presenter = parameters.pop(self.presenter_key, None) or self.default_presenter
        if not isinstance(presenter, str):
            return None
        parameters.setdefault(ACTION_KEY, self.default_action)

        flags = {RequestFlag.SECURED.value} if http_request.secured else set()
        return Request(
            presenter_name=presenter,
            method=http_request.method,
            parameters=parameters,
            post=dict(http_request.post),
            flags=flags,
        )

    def construct_url(self, request: Request, http_request: HttpRequest) -> str | None:
        query: dict[str, Any] = {self.presenter_key: request.presenter_name}
        for name, value in request.parameters.items():
            if value is None:
                continue
            if name == ACTION_KEY and value == self.default_action:
                continue
            query[name] = value
        return f"{self.path}?{urlencode(query)}"
