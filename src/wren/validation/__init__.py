"""Form validation — rule chains, one message per field.

Usage::

    from wren.validation import validate

    result = validate(form, {
        "email": "required|email",
        "age": "required|numeric|min:18",
    })
    if not result:
        # result.messages == ["The value for age must be greater than or equal to 18"]
        ...

Inside a controller, ``self.app.validate(rules)`` runs the same check
and, on failure, flashes the errors and redirects back.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from wren.errors import ConfigurationError
from wren.validation.result import ValidationResult
from wren.validation.rules import RULES, Rule, RuleEngine, RuleOutcome, parse_token

__all__ = [
    "RULES",
    "FieldValidator",
    "Rule",
    "RuleEngine",
    "RuleOutcome",
    "RuleSpec",
    "ValidationResult",
    "validate",
]

logger = logging.getLogger("wren.validation")

# field -> "required|min:3" or ["required", "min:3"]
type RuleSpec = Mapping[str, str | Sequence[str]]

_default_engine = RuleEngine()


@dataclass(frozen=True, slots=True)
class _CompiledRule:
    rule: Rule
    parameter: str | None
    coerced: object


def _split_chain(field_name: str, chain: str | Sequence[str]) -> list[str]:
    if isinstance(chain, str):
        tokens = chain.split("|")
    elif isinstance(chain, Sequence):
        tokens = list(chain)
    else:
        msg = f"Rule chain for field {field_name!r} must be a string or a list of rules"
        raise ConfigurationError(msg)
    return [t.strip() for t in tokens if t.strip()]


class FieldValidator:
    """A compiled rule chain spec.

    Every rule name and parameter is resolved when the validator is
    built, so a typo such as ``"requird"`` raises ``ConfigurationError``
    before any input is looked at.
    """

    __slots__ = ("_chains", "_engine")

    def __init__(self, rules: RuleSpec, engine: RuleEngine | None = None) -> None:
        self._engine = engine or _default_engine
        self._chains: dict[str, tuple[_CompiledRule, ...]] = {}
        for field_name, chain in rules.items():
            compiled: list[_CompiledRule] = []
            for token in _split_chain(field_name, chain):
                name, parameter = parse_token(token)
                rule = self._engine.get(name)
                coerced = self._engine.coerce(rule, parameter)
                compiled.append(_CompiledRule(rule, parameter, coerced))
            self._chains[field_name] = tuple(compiled)

    def validate(self, data: Mapping[str, str]) -> ValidationResult:
        """Check *data* field by field, in declaration order.

        A missing key is checked as an empty value. The first failing
        rule of a field produces its message; later rules of that field
        are not run.
        """
        errors: dict[str, str] = {}
        for field_name, chain in self._chains.items():
            value = data.get(field_name)
            for compiled in chain:
                outcome = self._engine.run(
                    compiled.rule, value, compiled.parameter, compiled.coerced
                )
                if not outcome:
                    errors[field_name] = f"The value for {field_name} {outcome.message}"
                    break

        if errors:
            logger.debug("Validation failed for fields: %s", ", ".join(errors))
        return ValidationResult(errors=errors)


def validate(
    data: Mapping[str, str],
    rules: RuleSpec,
    *,
    engine: RuleEngine | None = None,
) -> ValidationResult:
    """Validate *data* against a rule chain spec.

    Args:
        data: Any mapping of field names to string values —
            ``FormData``, ``QueryParams``, or a plain ``dict``.
        rules: Field name to rule chain, either ``"required|max:99"``
            or ``["required", "max:99"]``.
        engine: Rule engine to resolve names against. Defaults to the
            built-in rules.

    Returns:
        A ``ValidationResult``; empty ``errors`` means valid.

    Example::

        result = validate({"age": "15"}, {"age": "required|numeric|min:18"})
        # result.messages == ["The value for age must be greater than or equal to 18"]
    """
    return FieldValidator(rules, engine).validate(data)
