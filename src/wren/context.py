"""Request-scoped context via ContextVar.

``RequestContext`` is the one object a controller talks to: merged
input, the drained flash snapshots, validate-and-redirect, views,
settings. The dispatcher builds it once per request, before routing,
so a pending flash is consumed by whatever request comes next, even
one that ends in a 404.

Usage inside a controller action::

    def store(self):
        self.app.validate({"email": "required|email"})
        return self.app.redirect("/thanks")

Usage inside a template (the context is passed as ``app``)::

    {% if app.errors_present() %}...{% end %}
    <input name="email" value="{{ app.old('email', '') }}">
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextvars import ContextVar
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, NoReturn

from wren.config import EnvVars, Settings
from wren.errors import Halt
from wren.http.forms import FormData
from wren.http.response import Redirect
from wren.templating.returns import Template
from wren.validation import FieldValidator, RuleEngine, RuleSpec, ValidationResult

if TYPE_CHECKING:
    from wren.flash import FlashStore
    from wren.http.request import Request

logger = logging.getLogger("wren.context")

_EMPTY: Mapping[str, str] = MappingProxyType({})

context_var: ContextVar[RequestContext] = ContextVar("wren_context")
"""The current request context. Set by the dispatcher before routing."""


def get_context() -> RequestContext:
    """Return the active request context.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()


class RequestContext:
    """Per-request façade over input, flash state, views and settings.

    The ``errors`` and ``old_input`` flash slots are drained exactly once,
    here in the constructor. Everything read afterwards comes from the
    snapshots, so calling ``errors()`` twice gives the same answer.
    """

    __slots__ = (
        "_env",
        "_errors",
        "_old_input",
        "_settings",
        "engine",
        "flash",
        "form",
        "halted",
        "previous_url",
        "request",
    )

    def __init__(
        self,
        request: Request,
        flash: FlashStore,
        form: FormData | None = None,
        *,
        settings: Settings | None = None,
        env: EnvVars | None = None,
        engine: RuleEngine | None = None,
    ) -> None:
        self.request = request
        self.flash = flash
        self.form = form if form is not None else FormData()
        self._settings = settings if settings is not None else Settings()
        self._env = env if env is not None else EnvVars()
        self.engine = engine

        errors = flash.take_errors()
        old_input = flash.take_old_input()
        self._errors: Mapping[str, str] = MappingProxyType(dict(errors)) if errors else _EMPTY
        self._old_input: Mapping[str, str] = (
            MappingProxyType(dict(old_input)) if old_input else _EMPTY
        )

        # Assigned by the dispatcher once the route resolves.
        self.previous_url: str | None = None
        self.halted: Halt | None = None

    # -- flash snapshots --

    def errors_present(self) -> bool:
        """Whether the previous request left validation errors behind."""
        return bool(self._errors)

    def errors(self) -> Mapping[str, str]:
        """Field -> message, as flashed by the previous request."""
        return self._errors

    def old(self, field: str, default: Any = None) -> Any:
        """Value submitted for *field* before the last redirect."""
        return self._old_input.get(field, default)

    # -- input --

    def input(self, field: str, default: Any = None) -> Any:
        """Query string first, then the request body."""
        value = self.request.query.get(field)
        if value is not None:
            return value
        return self.form.get(field, default)

    def param(self, field: str, default: Any = None) -> Any:
        """Query string only."""
        return self.request.query.get(field, default)

    def all_input(self) -> dict[str, str]:
        """Query and body merged; body values win on conflicting keys."""
        merged = dict(self.request.query.items())
        merged.update(self.form.items())
        return merged

    # -- validate / redirect --

    def validate(self, rules: RuleSpec) -> ValidationResult:
        """Validate the merged input, or flash and redirect back.

        On success the (empty) result is returned. On failure the errors
        and the merged input are flashed and the request ends with a
        redirect to the previous URL; this method does not return.
        """
        data = self.all_input()
        result = FieldValidator(rules, engine=self.engine).validate(data)
        if result:
            return result

        target = self.previous_url or "/"
        logger.debug("Redirecting %s back to %s", self.request.path, target)
        self.flash.set_errors(result.errors)
        self.redirect(target, data)

    def redirect(self, path: str, payload: Mapping[str, str] | None = None) -> NoReturn:
        """End the request with a redirect to *path*.

        When *payload* is given it is flashed as old input for the next
        request. Never returns: raises ``Halt``, which the dispatcher
        turns into a 302.
        """
        if payload is not None:
            self.flash.set_old_input(payload)
        halt = Halt(Redirect(path))
        self.halted = halt
        raise halt

    # -- views --

    def view(self, name: str, /, **data: Any) -> Template:
        """A template response with this context available as ``app``.

        ``app`` is reserved: a caller-supplied value under that key is
        replaced.
        """
        return Template(name, **{**data, "app": self})

    # -- settings --

    def config(self, key: str, default: Any = None) -> Any:
        """Dotted settings lookup, e.g. ``config("app.name")``."""
        return self._settings.get(key, default)

    def env(self, name: str, default: str | None = None) -> str | None:
        """Environment variable lookup (``.env`` included)."""
        return self._env.get(name, default)

    def __repr__(self) -> str:
        return f"<RequestContext {self.request.method} {self.request.url}>"
