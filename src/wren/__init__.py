"""Wren — a small ASGI scaffold for form-driven sites.

Static routes dispatch to controller classes. A failed validation
flashes its errors and the submitted input into the session and
redirects back; the next request reads them exactly once.

Basic usage::

    from wren import App, AppConfig, Controller

    app = App(AppConfig(secret_key="change-me"), routes={
        "/signup": ("SignupController", "show"),
        "/signup/submit": ("SignupController", "store"),
    })

    @app.controller
    class SignupController(Controller):
        def show(self):
            return self.view("signup.html")

        def store(self):
            self.validate({"email": "required|email", "age": "required|numeric|min:18"})
            return self.redirect("/welcome")

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Controller",
    "HTTPError",
    "Halt",
    "Middleware",
    "Next",
    "NotFound",
    "Redirect",
    "Request",
    "RequestContext",
    "Response",
    "Settings",
    "Template",
    "ValidationResult",
    "WrenError",
    "get_context",
    "validate",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name in ("AppConfig", "Settings"):
        from wren import config as _config

        return getattr(_config, name)

    if name == "Controller":
        from wren.controller import Controller

        return Controller

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from wren.http import response as _resp

        return getattr(_resp, name)

    if name == "Template":
        from wren.templating.returns import Template

        return Template

    if name in ("Middleware", "Next"):
        from wren.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("RequestContext", "get_context"):
        from wren import context as _ctx

        return getattr(_ctx, name)

    if name in ("ValidationResult", "validate"):
        from wren import validation as _validation

        return getattr(_validation, name)

    if name in ("ConfigurationError", "HTTPError", "Halt", "NotFound", "WrenError"):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
