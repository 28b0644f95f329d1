"""Invoke helpers — call sync or async actions uniformly.

Controller actions can be ``def`` or ``async def``. Anything that calls
user code goes through ``invoke()`` so the check lives in one place.
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's a coroutine."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
