"""Tests for the HTTP primitives: query strings, forms, cookies, requests, responses."""

import pytest

from wren.errors import HTTPError
from wren.http.cookies import SetCookie, parse_cookies
from wren.http.forms import FormData, parse_form_data
from wren.http.query import QueryParams
from wren.http.request import Request
from wren.http.response import Redirect, Response


def _request(
    method: str = "GET",
    path: str = "/",
    *,
    query: bytes = b"",
    headers: list[tuple[bytes, bytes]] | None = None,
    chunks: tuple[bytes, ...] = (b"",),
) -> Request:
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive() -> dict:
        return messages.pop(0)

    scope = {
        "method": method,
        "path": path,
        "query_string": query,
        "headers": headers or [],
        "client": ("127.0.0.1", 5000),
    }
    return Request.from_asgi(scope, receive)


class TestQueryParams:
    def test_first_value(self) -> None:
        qp = QueryParams(b"tag=a&tag=b&page=2")
        assert qp["tag"] == "a"
        assert qp.get_list("tag") == ["a", "b"]
        assert qp.get("page") == "2"

    def test_blank_values_kept(self) -> None:
        qp = QueryParams(b"q=&x=1")
        assert qp.get("q") == ""
        assert "q" in qp

    def test_missing(self) -> None:
        qp = QueryParams()
        assert qp.get("x") is None
        assert qp.get("x", "d") == "d"
        assert len(qp) == 0

    def test_raw(self) -> None:
        assert QueryParams(b"a=1&b=2").raw == "a=1&b=2"


class TestForms:
    def test_urlencoded(self) -> None:
        form = parse_form_data(b"email=a%40b.com&age=21", "application/x-www-form-urlencoded")
        assert dict(form) == {"email": "a@b.com", "age": "21"}

    def test_charset_parameter(self) -> None:
        form = parse_form_data(b"x=1", "application/x-www-form-urlencoded; charset=utf-8")
        assert form["x"] == "1"

    def test_empty_body(self) -> None:
        assert len(parse_form_data(b"", "multipart/form-data")) == 0

    def test_multipart_rejected(self) -> None:
        with pytest.raises(HTTPError) as info:
            parse_form_data(b"--x--", "multipart/form-data; boundary=x")
        assert info.value.status == 415

    def test_invalid_utf8_is_bad_request(self) -> None:
        with pytest.raises(HTTPError) as info:
            parse_form_data(b"name=\xff\xfe", "application/x-www-form-urlencoded")
        assert info.value.status == 400

    def test_get_list(self) -> None:
        form = FormData({"opt": ["a", "b"]})
        assert form.get_list("opt") == ["a", "b"]
        assert form.get_list("none") == []


class TestCookies:
    def test_parse(self) -> None:
        assert parse_cookies("a=1; b=two") == {"a": "1", "b": "two"}
        assert parse_cookies("") == {}

    def test_set_cookie_header(self) -> None:
        header = SetCookie("sid", "abc", max_age=10, samesite="strict").to_header_value()
        assert header == "sid=abc; Max-Age=10; Path=/; HttpOnly; SameSite=strict"


class TestRequest:
    def test_metadata(self) -> None:
        request = _request(
            "POST",
            "/signup",
            query=b"src=ad",
            headers=[(b"Content-Type", b"text/plain"), (b"cookie", b"a=1"), (b"cookie", b"b=2")],
        )
        assert request.method == "POST"
        assert request.url == "/signup?src=ad"
        assert request.content_type == "text/plain"
        assert request.cookies == {"a": "1", "b": "2"}
        assert request.client == ("127.0.0.1", 5000)

    def test_url_without_query(self) -> None:
        assert _request(path="/contact").url == "/contact"

    async def test_body_chunks_cached(self) -> None:
        request = _request("POST", chunks=(b"a=", b"1"))
        assert await request.body() == b"a=1"
        assert await request.body() == b"a=1"

    async def test_form(self) -> None:
        request = _request(
            "POST",
            headers=[(b"content-type", b"application/x-www-form-urlencoded")],
            chunks=(b"name=Jo",),
        )
        form = await request.form()
        assert form["name"] == "Jo"
        assert await request.form() is form

    async def test_get_has_empty_form(self) -> None:
        assert len(await _request("GET").form()) == 0


class TestResponse:
    def test_chaining_is_immutable(self) -> None:
        base = Response("hi")
        changed = base.with_status(201).with_header("X-A", "1")
        assert base.status == 200
        assert changed.status == 201
        assert changed.header("x-a") == "1"

    def test_body_conversions(self) -> None:
        assert Response("é").body_bytes == "é".encode()
        assert Response(b"ok").text == "ok"

    def test_redirect(self) -> None:
        response = Redirect("/next").to_response()
        assert response.status == 302
        assert response.location == "/next"
