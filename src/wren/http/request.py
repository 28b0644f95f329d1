"""Immutable HTTP request.

Frozen metadata with async body access. The request is honest about
what it is: received data that doesn't change.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import Any

from wren._internal.asgi import Receive
from wren.http.cookies import parse_cookies
from wren.http.forms import FormData, parse_form_data
from wren.http.query import QueryParams

_BODYLESS_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def _decode_headers(raw: tuple[tuple[bytes, bytes], ...]) -> dict[str, str]:
    """Lower-case header names; repeated headers are joined into one value."""
    headers: dict[str, str] = {}
    for name_b, value_b in raw:
        name = name_b.decode("latin-1").lower()
        value = value_b.decode("latin-1")
        if name in headers:
            sep = "; " if name == "cookie" else ", "
            value = f"{headers[name]}{sep}{value}"
        headers[name] = value
    return headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    The body is read asynchronously via ``.body()`` or ``.form()``.
    """

    method: str
    path: str
    headers: Mapping[str, str]
    query: QueryParams
    http_version: str
    client: tuple[str, int] | None
    cookies: Mapping[str, str]

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: mutable cache for body and parsed form data
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string, as the client requested it."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs}"
        return self.path

    # -- Async body access --

    async def body(self) -> bytes:
        """The full request body, read from ASGI once and then cached."""
        cached = self._cache.get("body")
        if cached is None:
            cached = b"".join([chunk async for chunk in self.stream()])
            self._cache["body"] = cached
        return cached

    async def stream(self) -> AsyncGenerator[bytes]:
        """Yield body chunks until the client says there are no more.

        A disconnect ends the stream early; whatever arrived is kept.
        """
        more = True
        while more:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                return
            if chunk := message.get("body", b""):
                yield chunk
            more = message.get("more_body", False)

    async def form(self) -> FormData:
        """Parse the body as URL-encoded form data.

        GET/HEAD/OPTIONS requests never read the body and get an empty
        form. The result is cached.
        """
        if "form" in self._cache:
            return self._cache["form"]
        if self.method in _BODYLESS_METHODS:
            result = FormData()
        else:
            result = parse_form_data(await self.body(), self.content_type)
        self._cache["form"] = result
        return result

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = _decode_headers(tuple(scope.get("headers", ())))
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            cookies=parse_cookies(headers.get("cookie", "")),
            _receive=receive,
        )
