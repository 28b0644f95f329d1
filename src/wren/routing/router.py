"""Static route table with previous-URL tracking.

Routes are registered during setup and frozen when the app compiles.
Matching is exact: no parameters, no wildcards, no trailing-slash
folding.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from wren.errors import ConfigurationError, NotFound
from wren.routing.route import Route, RouteMatch

if TYPE_CHECKING:
    from wren.flash import FlashStore

logger = logging.getLogger("wren.routing")

# path -> (controller, action)
type RouteTable = Mapping[str, tuple[str | type, str]]


def normalize_path(raw_uri: str) -> str:
    """Reduce a raw request URI to an absolute path.

    Drops the query string and fragment and guarantees a leading ``/``::

        "/contact?sent=1"  -> "/contact"
        ""                 -> "/"
        "contact"          -> "/contact"
    """
    path = urlsplit(raw_uri or "/").path
    if not path.startswith("/"):
        path = "/" + path
    return path


class Router:
    """Exact-match route table.

    Usage::

        router = Router.from_table({
            "/": ("PageController", "index"),
            "/contact": ("ContactController", "store"),
        })
        router.compile()
        match = router.resolve("/contact?x=1", flash)
    """

    __slots__ = ("_compiled", "_routes")

    def __init__(self) -> None:
        self._routes: dict[str, Route] = {}
        self._compiled = False

    @classmethod
    def from_table(cls, table: RouteTable) -> Router:
        router = cls()
        for path, target in table.items():
            try:
                controller, action = target
            except (TypeError, ValueError):
                msg = f"Route {path!r} must map to a (controller, action) pair, got {target!r}"
                raise ConfigurationError(msg) from None
            router.add(Route(path=path, controller=controller, action=action))
        return router

    def add(self, route: Route) -> None:
        """Add a route. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        if not route.path.startswith("/"):
            msg = f"Route path {route.path!r} must start with '/'"
            raise ConfigurationError(msg)
        if route.path in self._routes:
            msg = f"Duplicate route path {route.path!r}"
            raise ConfigurationError(msg)
        self._routes[route.path] = route

    @property
    def routes(self) -> list[Route]:
        """All registered routes in registration order."""
        return list(self._routes.values())

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, path: str) -> Route:
        """Return the route registered for *path* exactly.

        Raises ``NotFound`` if there is none.
        """
        route = self._routes.get(path)
        if route is None:
            raise NotFound(f"No route matches {path!r}")
        return route

    def resolve(self, raw_uri: str, flash: FlashStore) -> RouteMatch:
        """Match *raw_uri* and rotate the previous-URL slot.

        On a match, the URL stored by the prior request is captured in
        the returned ``RouteMatch`` and *raw_uri* (path+query) becomes
        the previous URL for the next request. A miss raises
        ``NotFound`` and leaves the slot untouched.
        """
        path = normalize_path(raw_uri)
        try:
            route = self.match(path)
        except NotFound:
            logger.debug("No route for %s", path)
            raise

        url = raw_uri if raw_uri.startswith("/") else "/" + raw_uri
        previous_url = flash.get_previous_url()
        flash.set_previous_url(url)
        return RouteMatch(route=route, url=url, previous_url=previous_url)
