"""Kida environment setup.

Creates a kida Environment from wren's AppConfig. The environment is
created once during App._freeze() and passed through the request
pipeline.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from kida import ChoiceLoader, DictLoader, Environment, FileSystemLoader

from wren.config import AppConfig
from wren.templating.returns import Template

# Fallbacks for templates every app is expected to have. A file with the
# same name in the app's template_dir wins.
BUILTIN_TEMPLATES: dict[str, str] = {
    "errors/404.html": (
        "<!doctype html>\n"
        "<html>\n"
        "<head><title>404 Not Found</title></head>\n"
        "<body>\n"
        "<h1>Not Found</h1>\n"
        "<p>The page {{ path }} does not exist.</p>\n"
        "</body>\n"
        "</html>\n"
    ),
}


def create_environment(
    config: AppConfig,
    filters: dict[str, Callable[..., Any]],
    globals_: dict[str, Any],
) -> Environment:
    """Create a kida Environment from app configuration.

    Called once during ``App._freeze()``. The returned environment
    is immutable for the lifetime of the app.
    """
    loaders: list[Any] = []
    if Path(config.template_dir).is_dir():
        loaders.append(FileSystemLoader(str(config.template_dir)))
    loaders.append(DictLoader(BUILTIN_TEMPLATES))

    loader = ChoiceLoader(loaders)
    env = Environment(
        loader=loader,
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )

    if filters:
        env.update_filters(filters)

    for name, value in globals_.items():
        env.add_global(name, value)

    return env


def render_template(env: Environment, tpl: Template) -> str:
    """Render a full template to string."""
    template = env.get_template(tpl.name)
    return template.render(tpl.context)
