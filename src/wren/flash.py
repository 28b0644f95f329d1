"""Flash slots — session state that survives exactly one redirect.

Three slots live in the session under reserved keys:

- ``errors``: field -> message, written by a failed validation.
- ``old_input``: field -> submitted value, written with a redirect.
- ``previous_url``: path+query of the last routed request.

``errors`` and ``old_input`` are drained (read, then cleared) by the
next request that builds a ``RequestContext``. ``previous_url`` is only
ever overwritten, never drained.
"""

import logging
from collections.abc import Mapping
from typing import Any, Protocol

logger = logging.getLogger("wren.flash")

ERRORS_KEY = "_wren.errors"
OLD_INPUT_KEY = "_wren.old_input"
PREVIOUS_URL_KEY = "_wren.previous_url"


class SessionStore(Protocol):
    """The session capability the flash slots are stored in.

    Implemented by ``wren.middleware.sessions.Session`` (signed cookie)
    and ``NullSession`` (non-interactive, every write is a no-op). A
    plain ``dict`` wrapped in ``Session`` is enough for tests.
    """

    def get(self, key: str, default: Any = None) -> Any: ...
    def set(self, key: str, value: Any) -> None: ...
    def delete(self, key: str) -> None: ...


class FlashStore:
    """Typed access to the three flash slots of one session.

    Usage::

        flash = FlashStore(get_session())
        flash.set_errors({"email": "The value for email can not be blank"})

        # next request
        errors = flash.take_errors()   # the mapping above
        flash.take_errors()            # None
    """

    __slots__ = ("_store",)

    def __init__(self, store: SessionStore) -> None:
        self._store = store

    # -- errors --

    def set_errors(self, errors: Mapping[str, str] | None) -> None:
        """Store *errors* for the next request; ``None`` clears the slot."""
        self._put(ERRORS_KEY, errors)

    def take_errors(self) -> dict[str, str] | None:
        """Return the pending errors and clear the slot."""
        return self._take(ERRORS_KEY)

    # -- old input --

    def set_old_input(self, data: Mapping[str, str] | None) -> None:
        """Store submitted input for the next request; ``None`` clears the slot."""
        self._put(OLD_INPUT_KEY, data)

    def take_old_input(self) -> dict[str, str] | None:
        """Return the pending old input and clear the slot."""
        return self._take(OLD_INPUT_KEY)

    # -- previous url --

    def set_previous_url(self, url: str) -> None:
        self._store.set(PREVIOUS_URL_KEY, url)

    def get_previous_url(self) -> str | None:
        """The last routed URL. Reading does not clear it."""
        return self._store.get(PREVIOUS_URL_KEY)

    # -- internal --

    def _put(self, key: str, value: Mapping[str, str] | None) -> None:
        if value is None:
            self._store.delete(key)
            return
        logger.debug("Flashing %s (%d fields)", key, len(value))
        self._store.set(key, dict(value))

    def _take(self, key: str) -> dict[str, str] | None:
        value = self._store.get(key)
        if value is not None:
            self._store.delete(key)
        return value
