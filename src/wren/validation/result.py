"""Validation result — immutable container for field errors."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of checking input against a rule chain spec.

    ``errors`` maps each failing field to its single message, in
    field-declaration order::

        {"email": "The value for email must contain a correctly formatted email address"}

    The result is falsy when invalid, so you can write::

        result = validate(data, rules)
        if not result:
            ...
    """

    errors: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", MappingProxyType(dict(self.errors)))

    @property
    def is_valid(self) -> bool:
        """True if validation passed with no errors."""
        return not self.errors

    @property
    def messages(self) -> list[str]:
        """Error messages in field-declaration order."""
        return list(self.errors.values())

    def __bool__(self) -> bool:
        """Falsy when invalid — enables ``if not result:`` pattern."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self.errors)
