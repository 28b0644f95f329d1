"""End-to-end tests for the validate -> flash -> redirect -> drain lifecycle."""

import json
import secrets
from pathlib import Path

from wren.app import App
from wren.config import AppConfig
from wren.controller import Controller
from wren.errors import Halt
from wren.testing import TestClient

TEMPLATES_DIR = Path(__file__).parent / "templates"

SIGNUP_RULES = {"email": "required|email", "age": "required|numeric|min:18"}


def _app(**config_overrides: object) -> App:
    cfg = AppConfig(
        secret_key="test-secret",
        template_dir=TEMPLATES_DIR,
        env_file=None,
        **config_overrides,
    )
    app = App(
        cfg,
        routes={
            "/signup": ("SignupController", "show"),
            "/signup/submit": ("SignupController", "store"),
            "/welcome": ("SignupController", "welcome"),
            "/other": ("SignupController", "other"),
            "/swallow": ("SignupController", "swallow"),
            "/broken": ("SignupController", "broken"),
            "/missing-action": ("SignupController", "does_not_exist"),
        },
    )

    @app.controller
    class SignupController(Controller):
        def show(self):
            return self.view("signup.html", title="Sign up")

        def store(self):
            self.validate(SIGNUP_RULES)
            return self.redirect("/welcome?email=" + self.app.input("email"))

        def welcome(self):
            return self.view("welcome.html", email=self.app.param("email"))

        def other(self):
            errors = dict(self.app.errors())
            return {"errors": errors, "old": self.app.old("email")}

        def swallow(self):
            try:
                self.validate({"name": "required"})
            except Halt:
                pass
            return "should not be sent"

        def broken(self):
            self.validate({"name": "required|nonsense"})
            return "unreachable"

    return app


class TestRoundTrip:
    async def test_failed_submit_redirects_back_with_errors(self) -> None:
        async with TestClient(_app()) as client:
            page = await client.get("/signup")
            assert page.status == 200
            assert "<h1>Sign up</h1>" in page.text
            assert 'class="errors"' not in page.text

            response = await client.post(
                "/signup/submit", data={"email": "not-an-email", "age": "15"}
            )
            assert response.status == 302
            assert response.location == "/signup"

            page = await client.follow(response)
            assert "The value for email must contain a correctly formatted email address" in page.text
            assert "The value for age must be greater than or equal to 18" in page.text
            assert 'value="not-an-email"' in page.text
            assert 'value="15"' in page.text

    async def test_valid_submit_goes_on(self) -> None:
        async with TestClient(_app()) as client:
            await client.get("/signup")
            response = await client.post("/signup/submit", data={"email": "a@b.com", "age": "21"})
            assert response.status == 302
            assert response.location == "/welcome?email=a@b.com"

            page = await client.follow(response)
            assert "Welcome, a@b.com" in page.text

    async def test_redirect_target_keeps_query_string(self) -> None:
        async with TestClient(_app()) as client:
            await client.get("/signup?src=ad")
            response = await client.post("/signup/submit", data={"email": ""})
            assert response.location == "/signup?src=ad"

    async def test_without_previous_url_redirects_home(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.post("/signup/submit", data={})
            assert response.status == 302
            assert response.location == "/"


class TestOneShot:
    async def test_errors_consumed_by_next_request_only(self) -> None:
        async with TestClient(_app()) as client:
            await client.get("/signup")
            await client.post("/signup/submit", data={"email": "x", "age": "1"})

            first = json.loads((await client.get("/other")).text)
            assert first["errors"] == {
                "email": "The value for email must contain a correctly formatted email address",
                "age": "The value for age must be greater than or equal to 18",
            }
            assert first["old"] == "x"

            second = json.loads((await client.get("/other")).text)
            assert second == {"errors": {}, "old": None}

    async def test_not_found_still_drains(self) -> None:
        async with TestClient(_app()) as client:
            await client.get("/signup")
            await client.post("/signup/submit", data={"email": ""})

            missing = await client.get("/nope")
            assert missing.status == 404

            after = json.loads((await client.get("/other")).text)
            assert after["errors"] == {}


class TestPreviousUrl:
    async def test_not_found_does_not_rotate(self) -> None:
        async with TestClient(_app()) as client:
            await client.get("/signup?step=1")
            await client.get("/does-not-exist")
            response = await client.post("/signup/submit", data={})
            assert response.location == "/signup?step=1"

    async def test_each_routed_request_rotates(self) -> None:
        async with TestClient(_app()) as client:
            await client.get("/signup")
            await client.get("/welcome?email=x")
            response = await client.post("/signup/submit", data={})
            assert response.location == "/welcome?email=x"


class TestNotFound:
    async def test_builtin_page(self, tmp_path: Path) -> None:
        app = App(AppConfig(secret_key="s", template_dir=tmp_path, env_file=None))
        async with TestClient(app) as client:
            response = await client.get("/nowhere")
            assert response.status == 404
            assert "Not Found" in response.text
            assert "/nowhere" in response.text

    async def test_template_from_app(self, tmp_path: Path) -> None:
        (tmp_path / "errors").mkdir()
        (tmp_path / "errors" / "404.html").write_text("<p>Lost: {{ path }}</p>")
        app = App(AppConfig(secret_key="s", template_dir=tmp_path, env_file=None))
        async with TestClient(app) as client:
            response = await client.get("/nowhere")
            assert response.status == 404
            assert response.text == "<p>Lost: /nowhere</p>"

    async def test_error_handler_overrides(self) -> None:
        app = _app()

        @app.error(404)
        def not_found(request):
            return f"custom miss for {request.path}"

        async with TestClient(app) as client:
            response = await client.get("/nowhere")
            assert response.status == 404
            assert response.text == "custom miss for /nowhere"


class TestHaltHandling:
    async def test_caught_halt_still_redirects(self) -> None:
        async with TestClient(_app()) as client:
            await client.get("/signup")
            response = await client.get("/swallow")
            assert response.status == 302
            assert response.location == "/signup"
            assert "should not be sent" not in response.text

    async def test_redirect_while_rendering(self, tmp_path: Path) -> None:
        (tmp_path / "gate.html").write_text("<p>{{ app.redirect('/signup') }}</p>")
        app = App(
            AppConfig(secret_key="s", template_dir=tmp_path, env_file=None),
            routes={"/gate": ("GateController", "show")},
        )

        @app.controller
        class GateController(Controller):
            def show(self):
                return self.view("gate.html")

        async with TestClient(app) as client:
            response = await client.get("/gate")
            assert response.status == 302
            assert response.location == "/signup"


class TestConfigurationErrors:
    async def test_unknown_rule_is_500_without_flash_mutation(self) -> None:
        async with TestClient(_app()) as client:
            await client.get("/signup")
            await client.post("/signup/submit", data={"email": "x"})
            cookie_before = dict(client.cookies)

            response = await client.get("/broken")
            assert response.status == 500
            assert client.cookies == cookie_before

            # The errors flashed before the failure are still pending.
            after = json.loads((await client.get("/other")).text)
            assert "email" in after["errors"]

    async def test_flash_too_large_for_cookie_is_500(self) -> None:
        async with TestClient(_app(debug=True)) as client:
            await client.get("/signup")
            cookie_before = dict(client.cookies)

            response = await client.post(
                "/signup/submit", data={"email": "x", "bio": secrets.token_urlsafe(6144)}
            )
            assert response.status == 500
            assert "StoreUnavailable" in response.text
            assert client.cookies == cookie_before

    async def test_missing_action_is_500_not_404(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/missing-action")
            assert response.status == 500

    async def test_debug_shows_error(self) -> None:
        async with TestClient(_app(debug=True)) as client:
            response = await client.get("/missing-action")
            assert response.status == 500
            assert "ConfigurationError" in response.text
            assert "does_not_exist" in response.text


class TestNonInteractive:
    async def test_flash_writes_are_no_ops(self) -> None:
        app = _app(interactive=False)
        async with TestClient(app) as client:
            await client.get("/signup")
            response = await client.post("/signup/submit", data={"email": "x"})
            assert response.status == 302
            assert response.location == "/"
            assert client.cookies == {}

            page = await client.get("/signup")
            assert 'class="errors"' not in page.text

    async def test_no_secret_needed(self) -> None:
        app = App(AppConfig(interactive=False, env_file=None))
        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 404


class TestMalformedBody:
    async def test_invalid_utf8_form_is_400(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.post(
                "/signup/submit",
                body=b"email=\xff\xfe",
                headers={"content-type": "application/x-www-form-urlencoded"},
            )
            assert response.status == 400
