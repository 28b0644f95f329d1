"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    SessionMiddleware -- Signed cookie sessions holding the flash slots
    NullSessionMiddleware -- Write-discarding session for non-interactive apps
"""

from wren.middleware.protocol import Middleware, Next
from wren.middleware.sessions import (
    NullSessionMiddleware,
    SessionConfig,
    SessionMiddleware,
    get_session,
)

__all__ = [
    "Middleware",
    "Next",
    "NullSessionMiddleware",
    "SessionConfig",
    "SessionMiddleware",
    "get_session",
]
