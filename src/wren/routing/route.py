"""Route and RouteMatch frozen dataclasses."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Route:
    """A static route: exact path to a controller action.

    ``controller`` is a name registered with ``@app.controller``, a
    ``"module:Class"`` import path, or a controller class itself.
    """

    path: str
    controller: str | type
    action: str

    @property
    def controller_name(self) -> str:
        if isinstance(self.controller, type):
            return self.controller.__name__
        return self.controller


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route resolution.

    ``url`` is the full path+query that was routed. ``previous_url`` is
    what the session held before this request overwrote it: the
    redirect target if validation fails.
    """

    route: Route
    url: str
    previous_url: str | None = None
