"""Form body parsing.

Only ``application/x-www-form-urlencoded`` bodies are understood. A
multipart body would lose its fields silently, so it is answered with
``415 Unsupported Media Type`` instead.
"""

from wren.errors import HTTPError
from wren.http.query import MultiParams, parse_pairs

FORM_URLENCODED = "application/x-www-form-urlencoded"


class FormData(MultiParams):
    """Decoded fields of a submitted form."""

    __slots__ = ()


def media_type(content_type: str | None) -> str:
    """``"Text/HTML; charset=utf-8"`` -> ``"text/html"``."""
    if not content_type:
        return ""
    return content_type.partition(";")[0].strip().lower()


def parse_form_data(body: bytes, content_type: str | None) -> FormData:
    """Decode a request body into ``FormData``.

    An empty body yields an empty form whatever its content type. A body
    sent without a Content-Type is treated as URL-encoded.

    Raises:
        HTTPError: 415 for any other content type, 400 for a body that
            is not valid UTF-8.
    """
    if not body:
        return FormData()

    kind = media_type(content_type) or FORM_URLENCODED
    if kind != FORM_URLENCODED:
        raise HTTPError(415, f"Unsupported form content type: {content_type!r}")
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPError(400, "Form body is not valid UTF-8") from None
    return FormData(parse_pairs(text))
