"""Session middleware — signed cookie sessions.

Session data is serialized as JSON and signed using ``itsdangerous``.
The session object is stored in a ContextVar, accessible via
``get_session()`` from any controller or middleware. The flash slots
(``wren.flash``) live inside it.

Non-interactive apps (``AppConfig(interactive=False)``) get
``NullSessionMiddleware`` instead: the session accepts writes and
forgets them, so flash operations are silent no-ops.
"""

import logging
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from itsdangerous import BadData, URLSafeTimedSerializer

from wren.errors import ConfigurationError, StoreUnavailable
from wren.http.cookies import SetCookie
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.protocol import Next

logger = logging.getLogger("wren.sessions")

# Largest name=value pair browsers keep; longer cookies are dropped silently.
MAX_COOKIE_BYTES = 4093


class Session:
    """A dict-backed session for one request.

    Implements the ``SessionStore`` protocol. ``modified`` records
    whether anything was written so the middleware can tell a fresh
    session apart from an untouched one.
    """

    __slots__ = ("_data", "modified")

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data if data is not None else {}
        self.modified = False

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.modified = True

    def delete(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self.modified = True

    def clear(self) -> None:
        self._data.clear()
        self.modified = True

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)


class NullSession(Session):
    """A session that discards every write."""

    __slots__ = ()

    def set(self, key: str, value: Any) -> None:
        pass

    def delete(self, key: str) -> None:
        pass

    def clear(self) -> None:
        pass


# -- Session ContextVar --

_session_var: ContextVar[Session | None] = ContextVar("wren_session", default=None)


def get_session() -> Session:
    """Return the current session.

    Raises ``StoreUnavailable`` if called outside a request with
    session middleware active.
    """
    session = _session_var.get()
    if session is None:
        msg = (
            "No active session. Ensure SessionMiddleware is installed "
            "before accessing the session or flash data."
        )
        raise StoreUnavailable(msg)
    return session


# -- Configuration --


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` is required — sessions are signed, not encrypted.
    """

    secret_key: str
    cookie_name: str = "wren_session"
    max_age: int = 86400  # 24 hours
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"


# -- Middleware --


class SessionMiddleware:
    """Signed cookie session middleware.

    Reads the session cookie, verifies the signature, makes the session
    available via ``get_session()``, then serializes it back to a
    ``Set-Cookie`` header on the response.

    A tampered or expired cookie yields an empty session. An exception
    escaping the inner handler leaves the cookie unchanged, so a request
    that aborts on a configuration error mutates no session state.
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)

        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="wren.session")

    @property
    def config(self) -> SessionConfig:
        return self._config

    def _load_session(self, request: Request) -> Session:
        """Deserialize and verify the session cookie."""
        cookie_value = request.cookies.get(self._config.cookie_name)
        if not cookie_value:
            return Session()

        try:
            data = self._serializer.loads(cookie_value, max_age=self._config.max_age)
        except BadData:
            logger.debug("Discarding session cookie with a bad or expired signature")
            return Session()

        if not isinstance(data, dict):
            return Session()
        return Session(data)

    def _save_session(self, response: Response, session: Session) -> Response:
        """Attach the signed session cookie to *response*.

        Raises:
            StoreUnavailable: If the signed session is too large for a
                cookie. A browser would discard it without telling anyone,
                and the pending flash state with it.
        """
        cfg = self._config
        value = self._serializer.dumps(session.to_dict())
        size = len(cfg.cookie_name) + 1 + len(value)
        if size > MAX_COOKIE_BYTES:
            msg = (
                f"Session cookie {cfg.cookie_name!r} would be {size} bytes, over the "
                f"{MAX_COOKIE_BYTES}-byte limit browsers accept"
            )
            raise StoreUnavailable(msg)
        cookie = SetCookie(
            name=cfg.cookie_name,
            value=value,
            max_age=cfg.max_age,
            path=cfg.path,
            domain=cfg.domain,
            secure=cfg.secure,
            httponly=cfg.httponly,
            samesite=cfg.samesite,
        )
        if not len(session):
            # Everything was drained or cleared; drop the cookie.
            return response.with_cookie(cookie.expired())
        return response.with_cookie(cookie)

    async def __call__(self, request: Request, next: Next) -> Response:
        """Load session, dispatch, then save session to response."""
        session = self._load_session(request)
        token = _session_var.set(session)

        try:
            response = await next(request)
        finally:
            _session_var.reset(token)

        # Refresh the signature timestamp even if nothing changed
        # (sliding expiration), but don't mint cookies for empty sessions.
        if session.modified or len(session):
            return self._save_session(response, session)
        return response


class NullSessionMiddleware:
    """Installs a ``NullSession`` for non-interactive execution."""

    __slots__ = ()

    async def __call__(self, request: Request, next: Next) -> Response:
        token = _session_var.set(NullSession())
        try:
            return await next(request)
        finally:
            _session_var.reset(token)
