"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from wren.http.cookies import SetCookie


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status, headers, and cookies. Each call returns a new ``Response``.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        return replace(self, headers=(*self.headers, (name, value)))

    def with_cookie(self, cookie: SetCookie) -> Response:
        return replace(self, cookies=(*self.cookies, cookie))

    def header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), or None."""
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None

    @property
    def location(self) -> str | None:
        """The ``Location`` header of a redirect."""
        return self.header("location")

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect response.

    Returned by handlers, or carried by ``Halt`` when
    ``RequestContext.redirect()`` ends a request early.
    """

    url: str
    status: int = 302

    def to_response(self) -> Response:
        return Response(status=self.status).with_header("Location", self.url)
