"""ASGI handler — translates ASGI scope/messages to wren types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, dispatches through middleware and routing,
and sends the Response back through ASGI send().

Inside the middleware chain, the innermost ``dispatch`` step runs the
request lifecycle:

1. read the form body and open the flash slots on the active session,
2. build the ``RequestContext`` (draining pending errors and old input),
3. resolve the route (rotating the previous URL),
4. run the controller action,
5. turn a ``Halt`` into its redirect and anything else into a Response.

A 404 and a ``Halt`` both come back as ordinary responses from
``dispatch``, so the session middleware still saves the drained flash
state. Any other exception unwinds through the middleware and the
session cookie is left as the client sent it.
"""

from collections.abc import Callable
from typing import Any

from kida import Environment

from wren._internal.asgi import Receive, Scope, Send
from wren.config import EnvVars, Settings
from wren.context import RequestContext, context_var
from wren.errors import Halt, HTTPError, NotFound
from wren.flash import FlashStore
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.protocol import Next
from wren.middleware.sessions import get_session
from wren.routing.dispatch import ControllerRegistry, invoke_route
from wren.routing.router import Router
from wren.server.errors import ErrorHandlers, handle_http_error, handle_internal_error
from wren.server.negotiation import negotiate
from wren.server.sender import send_response
from wren.validation import RuleEngine


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    controllers: ControllerRegistry,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: ErrorHandlers,
    kida_env: Environment,
    debug: bool,
    not_found_template: str,
    settings: Settings,
    env: EnvVars,
    engine: RuleEngine,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    try:

        async def dispatch(req: Request) -> Response:
            form = await req.form()
            flash = FlashStore(get_session())
            ctx = RequestContext(req, flash, form, settings=settings, env=env, engine=engine)
            token = context_var.set(ctx)
            try:
                return await _dispatch(
                    ctx,
                    router=router,
                    controllers=controllers,
                    error_handlers=error_handlers,
                    kida_env=kida_env,
                    not_found_template=not_found_template,
                )
            finally:
                context_var.reset(token)

        # Wrap middleware around the dispatch
        handler: Next = dispatch
        for mw in reversed(middleware):

            async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)

    except HTTPError as exc:
        response = await handle_http_error(
            exc, request, error_handlers, kida_env, not_found_template=not_found_template
        )
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, kida_env, debug)

    await send_response(response, send)


async def _dispatch(
    ctx: RequestContext,
    *,
    router: Router,
    controllers: ControllerRegistry,
    error_handlers: ErrorHandlers,
    kida_env: Environment,
    not_found_template: str,
) -> Response:
    """Route, invoke, and negotiate for an already-built context."""
    request = ctx.request
    try:
        match = router.resolve(request.url, ctx.flash)
    except NotFound as exc:
        return await handle_http_error(
            exc, request, error_handlers, kida_env, not_found_template=not_found_template
        )

    ctx.previous_url = match.previous_url
    try:
        result = await invoke_route(match, ctx, controllers)
        if ctx.halted is None:
            # Templates get the context too and may redirect while rendering.
            response = negotiate(result, kida_env=kida_env)
    except Halt as halt:
        return halt.response.to_response()

    # The Halt was caught before it reached us; the redirect still wins.
    if ctx.halted is not None:
        return ctx.halted.response.to_response()
    return response
