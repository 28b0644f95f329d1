"""Wren application class.

Mutable during setup (controllers, routes, middleware, rules, filters).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import inspect
import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from kida import Environment

from wren._internal.asgi import Receive, Scope, Send
from wren.config import AppConfig, EnvVars, Settings, apply_timezone, load_environment
from wren.errors import ConfigurationError
from wren.middleware.protocol import Middleware
from wren.middleware.sessions import NullSessionMiddleware, SessionConfig, SessionMiddleware
from wren.routing.dispatch import check_route
from wren.routing.route import Route
from wren.routing.router import Router, RouteTable
from wren.server.handler import handle_request
from wren.templating.integration import create_environment
from wren.validation import RuleEngine

logger = logging.getLogger("wren.server")

SECRET_KEY_ENV = "WREN_SECRET_KEY"


class App:
    """The wren application.

    Usage::

        app = App(AppConfig(secret_key="s3cr3t"), routes={
            "/contact": ("ContactController", "show"),
            "/contact/send": ("ContactController", "store"),
        })

        @app.controller
        class ContactController(Controller):
            ...

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the app.
    """

    __slots__ = (
        "_controllers",
        "_engine",
        "_env",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_kida_env",
        "_middleware",
        "_middleware_list",
        "_pending_routes",
        "_router",
        "_settings",
        "_shutdown_hooks",
        "_startup_hooks",
        "_template_filters",
        "_template_globals",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        routes: RouteTable | None = None,
        settings: Mapping[str, Any] | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._settings = Settings(settings)
        self._pending_routes: list[Route] = []
        self._controllers: dict[str, type] = {}
        self._engine = RuleEngine()
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, Callable[..., Any]] = {}
        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._template_globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state (populated by _freeze)
        self._router: Router | None = None
        self._middleware: tuple[Middleware, ...] = ()
        self._kida_env: Environment | None = None
        self._env: EnvVars = EnvVars()

        if routes is not None:
            self.routes(routes)

    # -- Controllers and routes --

    def controller(self, cls: type | None = None, *, name: str | None = None) -> Any:
        """Register a controller class so routes can name it.

        Usage::

            @app.controller
            class PageController(Controller): ...

            @app.controller(name="pages")
            class PageController(Controller): ...
        """

        def decorator(target: type) -> type:
            self._check_not_frozen()
            key = name or target.__name__
            if key in self._controllers and self._controllers[key] is not target:
                msg = f"Controller name {key!r} is already registered"
                raise ConfigurationError(msg)
            self._controllers[key] = target
            return target

        if cls is not None:
            return decorator(cls)
        return decorator

    def route(self, path: str, controller: str | type, action: str) -> None:
        """Map *path* to ``controller.action``."""
        self._check_not_frozen()
        self._pending_routes.append(Route(path=path, controller=controller, action=action))

    def routes(self, table: RouteTable) -> None:
        """Add every entry of a ``path -> (controller, action)`` table."""
        self._check_not_frozen()
        self._pending_routes.extend(Router.from_table(table).routes)

    # -- Validation rules --

    def rule(
        self,
        name: str,
        message: str,
        *,
        coerce: Callable[[str], Any] | None = None,
    ) -> Callable[[Callable[..., bool]], Callable[..., bool]]:
        """Register an application validation rule.

        Usage::

            @app.rule("postcode", "must be a valid postcode")
            def postcode(value, parameter):
                return bool(POSTCODE_RE.fullmatch(value))
        """

        def decorator(func: Callable[..., bool]) -> Callable[..., bool]:
            self._check_not_frozen()
            self._engine.register(name, func, message, coerce=coerce)
            return func

        return decorator

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register an error handler via decorator.

        ``@app.error(404)`` replaces the not-found view.
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline (inside the session middleware)."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Template integration --

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template filter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_filters[name or func.__name__] = func
            return func

        return decorator

    def template_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template global."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_globals[name or func.__name__] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Introspection --

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def router(self) -> Router:
        self._ensure_frozen()
        assert self._router is not None
        return self._router

    @property
    def controllers(self) -> Mapping[str, type]:
        return dict(self._controllers)

    def check(self) -> list[str]:
        """Resolve every route's controller and action.

        Returns one message per broken route; an empty list means every
        route can be dispatched.
        """
        problems: list[str] = []
        for route in self.router.routes:
            try:
                check_route(route, self._controllers)
            except ConfigurationError as exc:
                problems.append(f"{route.path}: {exc}")
        return problems

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the pounce development server."""
        self._ensure_frozen()

        from wren.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()
        assert self._router is not None
        assert self._kida_env is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            controllers=self._controllers,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            kida_env=self._kida_env,
            debug=self.config.debug,
            not_found_template=self.config.not_found_template,
            settings=self._settings,
            env=self._env,
            engine=self._engine,
        )

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    await self.startup()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        for hook in self._startup_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def shutdown(self) -> None:
        for hook in self._shutdown_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its runtime state.

        MUST only be called while holding _freeze_lock.
        """
        cfg = self.config
        self._env = load_environment(cfg.env_file)

        # 1. Routes: explicit registrations first, then a settings table
        routes = list(self._pending_routes)
        table = self._settings.get("routes")
        if table:
            routes.extend(Router.from_table(table).routes)

        router = Router()
        for route in routes:
            router.add(route)
        router.compile()
        self._router = router

        # 2. Session middleware wraps everything else
        if cfg.interactive:
            secret = cfg.secret_key or self._env.get(SECRET_KEY_ENV) or ""
            if not secret:
                msg = (
                    "An interactive app needs a secret key for its session cookie. "
                    f"Set AppConfig(secret_key=...) or {SECRET_KEY_ENV}."
                )
                raise ConfigurationError(msg)
            session_mw: Middleware = SessionMiddleware(
                SessionConfig(
                    secret_key=secret,
                    cookie_name=cfg.session_cookie,
                    max_age=cfg.session_max_age,
                    secure=cfg.session_secure,
                    samesite=cfg.session_samesite,
                )
            )
        else:
            session_mw = NullSessionMiddleware()
        self._middleware = (session_mw, *self._middleware_list)

        # 3. Templates
        self._kida_env = create_environment(
            cfg, filters=self._template_filters, globals_=self._template_globals
        )

        # 4. Timezone
        timezone = cfg.timezone or self._settings.get("app.timezone")
        if timezone:
            apply_timezone(timezone)

        logger.debug(
            "Compiled %d routes, %d controllers", len(router.routes), len(self._controllers)
        )
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register controllers, routes, and middleware before calling app.run()."
            )
            raise RuntimeError(msg)
