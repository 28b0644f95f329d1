"""Cookie header parsing and ``Set-Cookie`` directives."""

from dataclasses import dataclass, replace


def parse_cookies(header: str) -> dict[str, str]:
    """``"a=1; b=2"`` -> ``{"a": "1", "b": "2"}``.

    Fragments without ``=`` are ignored. When a name repeats, the first
    occurrence wins, matching how browsers order path-specific cookies.
    """
    cookies: dict[str, str] = {}
    for fragment in header.split(";"):
        name, sep, value = fragment.partition("=")
        name = name.strip()
        if sep and name and name not in cookies:
            cookies[name] = value.strip().strip('"')
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """One ``Set-Cookie`` response header."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    def expired(self) -> "SetCookie":
        """The same cookie with an empty value and ``Max-Age=0``."""
        return replace(self, value="", max_age=0)

    def to_header_value(self) -> str:
        attributes: list[str] = [f"{self.name}={self.value}"]
        if self.max_age is not None:
            attributes.append(f"Max-Age={self.max_age}")
        for label, value in (("Path", self.path), ("Domain", self.domain)):
            if value:
                attributes.append(f"{label}={value}")
        attributes.extend(
            flag for flag, on in (("Secure", self.secure), ("HttpOnly", self.httponly)) if on
        )
        if self.samesite:
            attributes.append(f"SameSite={self.samesite}")
        return "; ".join(attributes)
