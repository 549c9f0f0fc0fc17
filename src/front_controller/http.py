"""HTTP request and response abstractions used by the dispatch loop.

Framework adapters convert their framework-specific objects into these
classes, so the dispatch loop never depends on a particular web framework.
"""

from typing import Any


class HttpRequest:
    """Abstract inbound HTTP request.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        path: URL path
        query: Query parameters
        headers: Request headers, stored with lowercase names
        post: Submitted form fields
        cookies: Request cookies
        secured: Whether the request arrived over HTTPS
    """

    def __init__(
        self,
        method: str = "GET",
        path: str = "/",
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        post: dict[str, Any] | None = None,
        cookies: dict[str, str] | None = None,
        secured: bool = False,
    ) -> None:
        self.method = method.upper()
        self.path = path or "/"
        self.query = dict(query or {})
        self.headers = {name.lower(): value for name, value in (headers or {}).items()}
        self.post = dict(post or {})
        self.cookies = dict(cookies or {})
        self.secured = secured

    def get_query(self, name: str, default: Any = None) -> Any:
        """Return a query parameter, or ``default`` when it is missing."""
        return self.query.get(name, default)

    def get_header(self, name: str, default: str | None = None) -> str | None:
        """Return a header value. Header names are case-insensitive."""
        return self.headers.get(name.lower(), default)

    def is_method(self, method: str) -> bool:
        return self.method == method.upper()


class HttpResponse:
    """Buffered outbound HTTP response.

    The response is considered sent once ``mark_sent()`` has been called,
    after which the status code can no longer change.

    Attributes:
        code: HTTP status code
        headers: Response headers, stored with lowercase names
        body: Response body as bytes
    """

    def __init__(self) -> None:
        self.code = 200
        self.headers: dict[str, str] = {}
        self.body = b""
        self._sent = False

    def set_code(self, code: int) -> None:
        """Set the HTTP status code.

        Raises:
            ValueError: If the code is not a valid HTTP status code.
            RuntimeError: If the response was already sent.
        """
        if not (100 <= code <= 599):
            raise ValueError(f"Bad HTTP response code {code}")
        if self._sent:
            raise RuntimeError("Cannot set HTTP code after the response has been sent")
        self.code = code

    def set_header(self, name: str, value: str) -> None:
        if self._sent:
            raise RuntimeError("Cannot send header after the response has been sent")
        self.headers[name.lower()] = value

    def get_header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    def write(self, data: bytes) -> None:
        """Append data to the response body and mark the response as sent."""
        self.body += data
        self._sent = True

    def mark_sent(self) -> None:
        self._sent = True

    def is_sent(self) -> bool:
        return self._sent
