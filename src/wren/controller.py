"""Controller base class.

A controller is constructed once per request with the active
``RequestContext`` and one of its public methods (the action named in
the route table) is called with no arguments::

    @app.controller
    class ContactController(Controller):
        def show(self):
            return self.view("contact.html")

        def store(self):
            self.validate({"email": "required|email", "message": "required"})
            return self.redirect("/contact/sent")

Subclassing is a convenience, not a requirement: any class whose
constructor takes the context works.
"""

from typing import Any, NoReturn

from wren.context import RequestContext
from wren.templating.returns import Template
from wren.validation import RuleSpec, ValidationResult


class Controller:
    """Base controller: shortcuts onto ``self.app``."""

    def __init__(self, app: RequestContext) -> None:
        self.app = app

    def view(self, name: str, /, **data: Any) -> Template:
        return self.app.view(name, **data)

    def validate(self, rules: RuleSpec) -> ValidationResult:
        return self.app.validate(rules)

    def redirect(self, path: str, payload: dict[str, str] | None = None) -> NoReturn:
        self.app.redirect(path, payload)
