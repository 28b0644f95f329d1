"""Wren exception hierarchy.

Shared across Router, App, dispatcher, and middleware so every module
raises and catches the same types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wren.http.response import Redirect


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when app configuration is invalid.

    Covers unresolvable controllers or actions, unknown validation rules,
    bad rule parameters, and malformed route tables. Never recovered from:
    the request aborts and the session is left untouched.
    """


class StoreUnavailable(WrenError, LookupError):  # noqa: N818
    """No session store is active for the current request.

    The flash protocol cannot keep its invariants without one, so this
    is fatal rather than silently degrading.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the router or handlers. The ASGI handler catches these
    and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class Halt(BaseException):  # noqa: N818
    """Terminate the current request with a redirect.

    Raised by ``RequestContext.redirect()`` and by a failed
    ``RequestContext.validate()``. Derives from ``BaseException`` so an
    ``except Exception`` in application code does not swallow it; the
    dispatcher turns it into the carried response.
    """

    def __init__(self, response: Redirect) -> None:
        super().__init__(response.url)
        self.response = response
