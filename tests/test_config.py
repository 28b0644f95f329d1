"""Tests for AppConfig, Settings, environment loading, and timezones."""

import os
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from wren.config import AppConfig, EnvVars, Settings, apply_timezone, load_environment
from wren.errors import ConfigurationError


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8000
        assert config.interactive is True
        assert config.not_found_template == "errors/404.html"
        assert config.session_cookie == "wren_session"

    def test_frozen(self) -> None:
        config = AppConfig()
        with pytest.raises(FrozenInstanceError):
            config.port = 9000  # type: ignore[misc]


class TestSettings:
    def test_dotted_lookup(self) -> None:
        settings = Settings({"app": {"name": "Demo", "mail": {"host": "smtp"}}})
        assert settings.get("app.name") == "Demo"
        assert settings.get("app.mail.host") == "smtp"
        assert settings["app.mail"] == {"host": "smtp"}

    def test_missing(self) -> None:
        settings = Settings({"app": {"name": "Demo"}})
        assert settings.get("app.version") is None
        assert settings.get("db.host", "localhost") == "localhost"
        assert settings.get("app.name.first") is None
        with pytest.raises(KeyError):
            settings["nope"]

    def test_falsy_values_are_found(self) -> None:
        settings = Settings({"app": {"debug": False, "count": 0}})
        assert settings.get("app.debug", True) is False
        assert "app.count" in settings
        assert "app.other" not in settings


class TestEnvironment:
    def test_missing_file(self, tmp_path: Path) -> None:
        env = load_environment(tmp_path / "absent.env")
        assert env.loaded_from is None

    def test_none(self) -> None:
        assert load_environment(None) == EnvVars()

    def test_loads_without_overriding(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        environ = {k: v for k, v in os.environ.items() if not k.startswith("WREN_CFG_")}
        environ["WREN_CFG_KEEP"] = "process"
        monkeypatch.setattr(os, "environ", environ)

        env_file = tmp_path / ".env"
        env_file.write_text("WREN_CFG_NEW=file\nWREN_CFG_KEEP=file\n")
        env = load_environment(env_file)

        assert env.loaded_from == env_file
        assert env.get("WREN_CFG_NEW") == "file"
        assert env.get("WREN_CFG_KEEP") == "process"

    def test_overrides_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WREN_CFG_X", "process")
        assert EnvVars(overrides={"WREN_CFG_X": "override"}).get("WREN_CFG_X") == "override"


class TestTimezone:
    def test_applies_known_zone(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TZ", "Europe/Amsterdam")
        zone = apply_timezone("UTC")
        assert zone.key == "UTC"
        assert os.environ["TZ"] == "UTC"

    def test_unknown_zone(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown timezone 'Nowhere/Atlantis'"):
            apply_timezone("Nowhere/Atlantis")
