"""Tests for wren.flash — one-shot flash slots over a session store."""

from wren.flash import ERRORS_KEY, OLD_INPUT_KEY, PREVIOUS_URL_KEY, FlashStore
from wren.middleware.sessions import NullSession, Session


class TestErrorsSlot:
    def test_take_drains(self) -> None:
        flash = FlashStore(Session())
        flash.set_errors({"email": "The value for email can not be blank"})
        assert flash.take_errors() == {"email": "The value for email can not be blank"}
        assert flash.take_errors() is None

    def test_take_when_empty(self) -> None:
        assert FlashStore(Session()).take_errors() is None

    def test_set_none_clears(self) -> None:
        session = Session()
        flash = FlashStore(session)
        flash.set_errors({"a": "b"})
        flash.set_errors(None)
        assert ERRORS_KEY not in session

    def test_stores_a_copy(self) -> None:
        errors = {"a": "b"}
        flash = FlashStore(Session())
        flash.set_errors(errors)
        errors["c"] = "d"
        assert flash.take_errors() == {"a": "b"}


class TestOldInputSlot:
    def test_take_drains(self) -> None:
        session = Session()
        flash = FlashStore(session)
        flash.set_old_input({"email": "x@y.z"})
        assert session.get(OLD_INPUT_KEY) == {"email": "x@y.z"}
        assert flash.take_old_input() == {"email": "x@y.z"}
        assert flash.take_old_input() is None

    def test_independent_of_errors(self) -> None:
        flash = FlashStore(Session())
        flash.set_errors({"a": "b"})
        flash.set_old_input({"a": "1"})
        assert flash.take_errors() == {"a": "b"}
        assert flash.take_old_input() == {"a": "1"}


class TestPreviousUrl:
    def test_reading_does_not_clear(self) -> None:
        flash = FlashStore(Session())
        flash.set_previous_url("/contact?x=1")
        assert flash.get_previous_url() == "/contact?x=1"
        assert flash.get_previous_url() == "/contact?x=1"

    def test_overwrite(self) -> None:
        session = Session()
        flash = FlashStore(session)
        flash.set_previous_url("/a")
        flash.set_previous_url("/b")
        assert session.get(PREVIOUS_URL_KEY) == "/b"

    def test_absent(self) -> None:
        assert FlashStore(Session()).get_previous_url() is None


class TestNullSession:
    def test_writes_are_no_ops(self) -> None:
        flash = FlashStore(NullSession())
        flash.set_errors({"a": "b"})
        flash.set_old_input({"a": "1"})
        flash.set_previous_url("/x")
        assert flash.take_errors() is None
        assert flash.take_old_input() is None
        assert flash.get_previous_url() is None
