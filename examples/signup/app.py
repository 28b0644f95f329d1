"""Signup — validate, flash, redirect back, and re-fill the form.

A failed submit stores the errors and the submitted values in the
session and redirects to the form. The form page shows both exactly
once; a reload comes back clean.

Run:
    WREN_SECRET_KEY=dev python app.py
"""

import re
from pathlib import Path

from wren import App, AppConfig, Controller

TEMPLATES_DIR = Path(__file__).parent / "templates"

config = AppConfig(template_dir=TEMPLATES_DIR, secret_key="signup-example-secret", debug=True)

app = App(
    config,
    routes={
        "/": ("SignupController", "show"),
        "/signup": ("SignupController", "store"),
        "/welcome": ("SignupController", "welcome"),
    },
    settings={"app": {"name": "Wren Signup"}},
)

_HANDLE_RE = re.compile(r"[a-z0-9_]{3,20}")

# In-memory accounts, keyed by email
_accounts: dict[str, str] = {}


@app.rule("handle", "must be 3-20 lowercase letters, digits or underscores")
def handle(value: str, parameter: object = None) -> bool:
    return _HANDLE_RE.fullmatch(value) is not None


@app.controller
class SignupController(Controller):
    def show(self):
        return self.view("signup.html", title=self.app.config("app.name"))

    def store(self):
        self.validate(
            {
                "email": "required|email",
                "handle": "required|handle",
                "age": "required|digit|min:18",
            }
        )
        email = self.app.input("email")
        _accounts[email] = self.app.input("handle")
        return self.redirect(f"/welcome?email={email}")

    def welcome(self):
        email = self.app.param("email", "")
        return self.view("welcome.html", handle=_accounts.get(email, "stranger"))


if __name__ == "__main__":
    app.run()
