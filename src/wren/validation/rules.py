"""Built-in validation rules and the rule engine.

Each rule is a pure check plus a message formatter, registered by name::

    @_rule("digit", "can only contain digits")
    def digit(value: str, parameter: object) -> bool:
        ...

Rules are looked up by name when a rule chain is compiled, so an
unknown name fails before any field is evaluated. Parameterized rules
declare a coercion (``int`` or ``float``); the raw parameter string is
kept for the message so ``min:18`` reads ``... or equal to 18``.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from urllib.parse import urlsplit

from wren.errors import ConfigurationError

# A check receives the value (never None) and the coerced parameter
type Check = Callable[[str, object], bool]


@dataclass(frozen=True, slots=True)
class Rule:
    """A named check with its message template.

    ``message`` may contain ``{parameter}``; it is formatted with the
    parameter exactly as it appeared in the rule token.
    """

    name: str
    check: Check
    message: str
    coerce: Callable[[str], object] | None = None

    def format_message(self, parameter: str | None) -> str:
        return self.message.format(parameter=parameter)


@dataclass(frozen=True, slots=True)
class RuleOutcome:
    """Result of applying one rule to one value."""

    passed: bool
    message: str = ""

    def __bool__(self) -> bool:
        return self.passed


RULES: dict[str, Rule] = {}


def _rule(
    name: str,
    message: str,
    *,
    coerce: Callable[[str], object] | None = None,
) -> Callable[[Check], Check]:
    def decorator(func: Check) -> Check:
        RULES[name] = Rule(name=name, check=func, message=message, coerce=coerce)
        return func

    return decorator


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


@_rule("required", "can not be blank")
def required(value: str, parameter: object = None) -> bool:
    """Value must be present and non-blank."""
    return value.strip() != ""


# ---------------------------------------------------------------------------
# Character classes
# ---------------------------------------------------------------------------
# Spaces are ignored; an empty remainder fails, as a character-class test
# over zero characters does.


@_rule("alpha", "can only contain letters")
def alpha(value: str, parameter: object = None) -> bool:
    stripped = value.replace(" ", "")
    return stripped.isascii() and stripped.isalpha()


@_rule("alphaNumeric", "can only contain letters or numbers")
def alpha_numeric(value: str, parameter: object = None) -> bool:
    stripped = value.replace(" ", "")
    return stripped.isascii() and stripped.isalnum()


@_rule("digit", "can only contain digits")
def digit(value: str, parameter: object = None) -> bool:
    stripped = value.replace(" ", "")
    return stripped.isascii() and stripped.isdigit()


_NUMERIC_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def is_numeric(value: str) -> bool:
    """True if *value*, spaces removed, reads as a decimal number."""
    stripped = value.replace(" ", "").strip("\t\n\r\v\f")
    return _NUMERIC_RE.fullmatch(stripped) is not None


@_rule("numeric", "can only contain numerical values")
def numeric(value: str, parameter: object = None) -> bool:
    return is_numeric(value)


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

_ATOM = r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+"
_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
_EMAIL_RE = re.compile(rf"{_ATOM}(?:\.{_ATOM})*@(?:{_LABEL}\.)+[A-Za-z]{{2,63}}")
_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")
# urlsplit().hostname drops IPv6 brackets and lowercases
_HOST_RE = re.compile(rf"{_LABEL}(?:\.{_LABEL})*\.?|[0-9a-f.]*:[0-9a-f:.]*")


@_rule("email", "must contain a correctly formatted email address")
def email(value: str, parameter: object = None) -> bool:
    if len(value) > 254:
        return False
    local, _, _ = value.partition("@")
    if len(local) > 64:
        return False
    return _EMAIL_RE.fullmatch(value) is not None


@_rule("url", "must contain a correctly formatted URL")
def url(value: str, parameter: object = None) -> bool:
    if not value or any(ch.isspace() for ch in value):
        return False
    try:
        parts = urlsplit(value)
        parts.port  # noqa: B018  raises ValueError on a bad port
    except ValueError:
        return False
    if not _SCHEME_RE.fullmatch(parts.scheme) or not parts.hostname:
        return False
    return _HOST_RE.fullmatch(parts.hostname) is not None


# ---------------------------------------------------------------------------
# Length
# ---------------------------------------------------------------------------


@_rule("minLength", "must be at least {parameter} character(s) long", coerce=int)
def min_length(value: str, parameter: object) -> bool:
    return len(value) >= parameter  # type: ignore[operator]


@_rule("maxLength", "must be less than {parameter} character(s) long", coerce=int)
def max_length(value: str, parameter: object) -> bool:
    return len(value) <= parameter  # type: ignore[operator]


# ---------------------------------------------------------------------------
# Range: non-numeric input fails, never raises
# ---------------------------------------------------------------------------


@_rule("min", "must be greater than or equal to {parameter}", coerce=float)
def minimum(value: str, parameter: object) -> bool:
    if not is_numeric(value):
        return False
    return float(value.replace(" ", "")) >= parameter  # type: ignore[operator]


@_rule("max", "must be less than or equal to {parameter}", coerce=float)
def maximum(value: str, parameter: object) -> bool:
    if not is_numeric(value):
        return False
    return float(value.replace(" ", "")) <= parameter  # type: ignore[operator]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def parse_token(token: str) -> tuple[str, str | None]:
    """Split ``"name:parameter"`` into its parts.

    Only the first ``:`` separates; the parameter is ``None`` when absent.
    """
    name, sep, parameter = token.strip().partition(":")
    return name, (parameter if sep else None)


class RuleEngine:
    """Resolves rule names and applies them to values.

    Each engine starts from a copy of the built-in registry, so rules
    registered on one engine never leak into another::

        engine = RuleEngine()
        engine.register("even", lambda v, p: v.isdigit() and int(v) % 2 == 0,
                        "must be an even number")
        engine.apply("even", "3", None)  # RuleOutcome(passed=False, ...)
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: Mapping[str, Rule] | None = None) -> None:
        self._rules: dict[str, Rule] = dict(RULES if rules is None else rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def register(
        self,
        name: str,
        check: Check,
        message: str,
        *,
        coerce: Callable[[str], object] | None = None,
    ) -> None:
        """Add or replace a rule on this engine."""
        self._rules[name] = Rule(name=name, check=check, message=message, coerce=coerce)

    def get(self, name: str) -> Rule:
        """Return the rule called *name*.

        Raises ``ConfigurationError`` for an unknown name.
        """
        try:
            return self._rules[name]
        except KeyError:
            known = ", ".join(sorted(self._rules))
            msg = f"Unknown validation rule {name!r}. Available rules: {known}"
            raise ConfigurationError(msg) from None

    def coerce(self, rule: Rule, parameter: str | None) -> object:
        """Convert a raw parameter string to what *rule* expects.

        Raises ``ConfigurationError`` if the rule needs a parameter that
        is missing or cannot be converted.
        """
        if rule.coerce is None:
            return parameter
        if parameter is None or not parameter.strip():
            msg = f"Validation rule {rule.name!r} requires a parameter, e.g. '{rule.name}:5'"
            raise ConfigurationError(msg)
        try:
            return rule.coerce(parameter.strip())
        except ValueError:
            msg = f"Invalid parameter {parameter!r} for validation rule {rule.name!r}"
            raise ConfigurationError(msg) from None

    def apply(self, name: str, value: str | None, parameter: str | None = None) -> RuleOutcome:
        """Apply rule *name* to *value*.

        ``None`` is checked as the empty string. Returns a ``RuleOutcome``
        whose ``message`` is set only when the rule failed.
        """
        rule = self.get(name)
        return self.run(rule, value, parameter, self.coerce(rule, parameter))

    def run(
        self,
        rule: Rule,
        value: str | None,
        parameter: str | None,
        coerced: object,
    ) -> RuleOutcome:
        """Apply an already-resolved rule with a pre-coerced parameter."""
        text = "" if value is None else str(value)
        if rule.check(text, coerced):
            return RuleOutcome(passed=True)
        return RuleOutcome(passed=False, message=rule.format_message(parameter))
