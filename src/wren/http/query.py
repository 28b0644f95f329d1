"""Multi-value parameter mappings for query strings and form bodies.

Both read as ``Mapping[str, str]`` where a key maps to its first value,
which is what validation and ``RequestContext.input()`` see. Repeated
keys (checkbox groups, ``?tag=a&tag=b``) stay reachable through
``get_list``.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


def parse_pairs(text: str) -> dict[str, list[str]]:
    """Decode ``a=1&a=2&b=`` into ``{"a": ["1", "2"], "b": [""]}``."""
    return parse_qs(text, keep_blank_values=True)


class MultiParams(Mapping[str, str]):
    """Read-only field -> values store with first-value mapping access."""

    __slots__ = ("_values",)

    _values: dict[str, list[str]]

    def __init__(self, values: Mapping[str, list[str]] | None = None) -> None:
        object.__setattr__(self, "_values", {k: list(v) for k, v in (values or {}).items()})

    def __setattr__(self, name: str, value: object) -> None:
        msg = f"{type(self).__name__} is read-only"
        raise AttributeError(msg)

    def __getitem__(self, key: str) -> str:
        values = self._values[key]
        if not values:
            raise KeyError(key)
        return values[0]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        """Every value sent for *key*, in order; empty when absent."""
        return list(self._values.get(key, ()))


class QueryParams(MultiParams):
    """The request's query string, decoded.

    ``raw`` keeps the undecoded text so the request URL can be rebuilt
    exactly as the client sent it.
    """

    __slots__ = ("_raw",)

    _raw: str

    def __init__(self, query_string: bytes = b"") -> None:
        raw = query_string.decode("latin-1")
        super().__init__(parse_pairs(raw))
        object.__setattr__(self, "_raw", raw)

    @property
    def raw(self) -> str:
        return self._raw
