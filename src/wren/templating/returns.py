"""Template return type.

A frozen dataclass that actions return. The content negotiation layer
inspects it and dispatches to the kida renderer.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Template:
    """Render a full kida template.

    Usage::

        return Template("contact/form.html", title="Contact")

    Controllers usually build one through ``self.view()``, which adds
    the request context under ``app``.
    """

    name: str
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, name: str, /, **context: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "context", context)
