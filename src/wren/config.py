"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. Free-form application settings (the
``section.key`` values controllers read through ``ctx.config()``) live in
``Settings``.
"""

import logging
import os
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from wren.errors import ConfigurationError

logger = logging.getLogger("wren.config")

_MISSING = object()


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, secret_key="s3cr3t")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Security: required when interactive (sessions are signed)
    secret_key: str = ""

    # Templates
    template_dir: str | Path = "templates"
    autoescape: bool = True
    not_found_template: str = "errors/404.html"

    # Sessions
    interactive: bool = True  # False: flash writes become no-ops
    session_cookie: str = "wren_session"
    session_max_age: int = 86400  # 24 hours
    session_secure: bool = False
    session_samesite: str = "lax"

    # Environment
    env_file: str | Path | None = ".env"
    timezone: str | None = None

    log_level: str = "info"


class Settings:
    """Read-only dotted-key lookup over a nested mapping.

    Usage::

        settings = Settings({"app": {"name": "Demo", "timezone": "UTC"}})
        settings.get("app.name")            # "Demo"
        settings.get("mail.host", "localhost")  # "localhost"
        settings["app"]                     # {"name": "Demo", ...}
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping):
                return default
            node = node.get(part, _MISSING)
            if node is _MISSING:
                return default
        return node

    def __getitem__(self, key: str) -> Any:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key, _MISSING) is not _MISSING

    def __repr__(self) -> str:
        return f"Settings({self._data!r})"


@dataclass(frozen=True, slots=True)
class EnvVars:
    """Process environment lookup, after ``.env`` has been loaded."""

    loaded_from: Path | None = None
    overrides: Mapping[str, str] = field(default_factory=dict)

    def get(self, name: str, default: str | None = None) -> str | None:
        if name in self.overrides:
            return self.overrides[name]
        return os.environ.get(name, default)


def load_environment(env_file: str | Path | None) -> EnvVars:
    """Load *env_file* into ``os.environ`` without overriding existing values.

    A missing file is not an error; the process environment is used as is.
    """
    if env_file is None:
        return EnvVars()
    path = Path(env_file)
    if not path.is_file():
        return EnvVars()
    load_dotenv(path, override=False)
    logger.debug("Loaded environment from %s", path)
    return EnvVars(loaded_from=path)


def apply_timezone(name: str) -> ZoneInfo:
    """Validate *name* and make it the process-local timezone.

    Raises ``ConfigurationError`` for names the tz database does not know.
    """
    try:
        zone = ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        msg = f"Unknown timezone {name!r}"
        raise ConfigurationError(msg) from None

    os.environ["TZ"] = name
    if hasattr(time, "tzset"):
        time.tzset()
    return zone
