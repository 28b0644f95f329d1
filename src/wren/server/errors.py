"""Error handling pipeline for wren requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers or sensible defaults. A 404 renders the
app's not-found view as an ordinary page.
"""

import html
import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from kida import Environment

from wren.errors import HTTPError, NotFound
from wren.http.request import Request
from wren.http.response import Response
from wren.server.negotiation import negotiate
from wren.templating.returns import Template

logger = logging.getLogger("wren.server")

type ErrorHandlers = dict[int | type, Callable[..., Any]]


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: BaseException,
    kida_env: Environment,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    if isinstance(result, Response):
        return result
    return negotiate(result, kida_env=kida_env)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    kida_env: Environment,
    *,
    not_found_template: str,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    # Try exact exception type, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env)
        # Keep the error status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    if isinstance(exc, NotFound):
        tpl = Template(not_found_template, path=request.path, detail=exc.detail)
        return negotiate(tpl, kida_env=kida_env).with_status(404)

    resp = Response(body=exc.detail or f"Error {exc.status}", status=exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    kida_env: Environment,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions (including ConfigurationError) as 500s."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env)
        if response.status == 200:
            response = response.with_status(500)
        return response

    if debug:
        trace = "".join(traceback.format_exception(exc))
        body = (
            f"<h1>500 {html.escape(type(exc).__name__)}</h1>\n"
            f"<p>{html.escape(str(exc))}</p>\n"
            f"<pre>{html.escape(trace)}</pre>\n"
        )
        return Response(body=body, status=500)

    return Response(body="Internal Server Error", status=500)
