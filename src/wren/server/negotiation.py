"""Content negotiation — maps action return values to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

import json as json_module
from typing import Any

from kida import Environment

from wren.http.response import Redirect, Response
from wren.templating.integration import render_template
from wren.templating.returns import Template


def negotiate(value: Any, *, kida_env: Environment) -> Response:
    """Convert an action's return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``Redirect``         -> 302 (or its status) with Location header
    3. ``Template``         -> render via kida -> Response
    4. ``str``              -> 200, text/html
    5. ``bytes``            -> 200, application/octet-stream
    6. ``dict`` / ``list``  -> 200, application/json
    7. ``None``             -> 204, empty body
    8. ``(value, int)``     -> negotiate value, override status
    """
    match value:
        case Response():
            return value
        case Redirect():
            return value.to_response()
        case Template():
            return Response(body=render_template(kida_env, value))
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json; charset=utf-8",
            )
        case None:
            return Response(status=204)
        case (inner, int() as status):
            return negotiate(inner, kida_env=kida_env).with_status(status)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                f"Return str, dict, bytes, Template, Response, or Redirect."
            )
            raise TypeError(msg)
