"""Controller resolution and action invocation.

A route names its controller one of three ways:

- a class object,
- a name registered with ``@app.controller``,
- a ``"package.module:ClassName"`` import path.

Anything that does not resolve, and any action that is missing, private
or not callable, is a ``ConfigurationError``: a broken route table is a
deployment bug, never a 404.
"""

import importlib
import logging
from collections.abc import Mapping
from typing import Any

from wren._internal.invoke import invoke
from wren.context import RequestContext
from wren.errors import ConfigurationError
from wren.routing.route import Route, RouteMatch

logger = logging.getLogger("wren.routing")

type ControllerRegistry = Mapping[str, type]


def resolve_controller(controller: str | type, registry: ControllerRegistry) -> type:
    """Return the controller class a route refers to."""
    if isinstance(controller, type):
        return controller

    found = registry.get(controller)
    if found is not None:
        return found

    module_name, sep, attr = controller.partition(":")
    if not sep or not module_name or not attr:
        known = ", ".join(sorted(registry)) or "(none registered)"
        msg = f"Unknown controller {controller!r}. Registered controllers: {known}"
        raise ConfigurationError(msg)

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Cannot import controller module {module_name!r}: {exc}"
        raise ConfigurationError(msg) from exc

    cls = getattr(module, attr, None)
    if not isinstance(cls, type):
        msg = f"Module {module_name!r} has no controller class {attr!r}"
        raise ConfigurationError(msg)
    return cls


def resolve_action(cls: type, action: str) -> None:
    """Check that *cls* has a public callable *action*."""
    if not action or action.startswith("_"):
        msg = f"Action {action!r} on {cls.__name__} is not a public method"
        raise ConfigurationError(msg)
    if not callable(getattr(cls, action, None)):
        msg = f"Controller {cls.__name__} has no action {action!r}"
        raise ConfigurationError(msg)


def check_route(route: Route, registry: ControllerRegistry) -> type:
    """Resolve a route's controller and action without calling anything."""
    cls = resolve_controller(route.controller, registry)
    resolve_action(cls, route.action)
    return cls


async def invoke_route(
    match: RouteMatch,
    ctx: RequestContext,
    registry: ControllerRegistry,
) -> Any:
    """Construct the controller with *ctx* and run the matched action."""
    cls = check_route(match.route, registry)
    instance = cls(ctx)
    logger.debug("%s -> %s.%s", match.url, cls.__name__, match.route.action)
    return await invoke(getattr(instance, match.route.action))
