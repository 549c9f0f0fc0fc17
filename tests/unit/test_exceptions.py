"""Unit tests for the exception hierarchy and status code mapping."""

import pytest

from front_controller.exceptions import (
    ApplicationError,
    BadRequestError,
    InvalidLinkError,
    InvalidPresenterError,
    LoopOverflowError,
    SessionError,
    status_code_for,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            BadRequestError("bad"),
            InvalidPresenterError("invalid", name="X"),
            LoopOverflowError("loop", max_loop=20),
            InvalidLinkError("link", destination=":X:"),
            SessionError("session"),
        ],
    )
    def test_all_derive_from_application_error(self, error: ApplicationError) -> None:
        assert isinstance(error, ApplicationError)
        assert isinstance(error, Exception)

    def test_message_is_kept(self) -> None:
        error = ApplicationError("Something failed")

        assert error.message == "Something failed"
        assert str(error) == "Something failed"


class TestBadRequestError:
    def test_defaults(self) -> None:
        error = BadRequestError("No route for HTTP request.")

        assert error.code is None
        assert error.cause is None
        assert error.status_code == 404

    def test_explicit_code(self) -> None:
        assert BadRequestError("Forbidden", code=403).status_code == 403

    def test_zero_code_means_not_set(self) -> None:
        assert BadRequestError("Unset", code=0).status_code == 404

    def test_cause(self) -> None:
        cause = InvalidPresenterError("Unknown", name="Unknown")

        error = BadRequestError("Unknown", cause=cause)

        assert error.cause is cause


class TestAttributes:
    def test_invalid_presenter_name(self) -> None:
        assert InvalidPresenterError("bad", name="9Lives").name == "9Lives"

    def test_loop_overflow_limit(self) -> None:
        assert LoopOverflowError("loop", max_loop=7).max_loop == 7

    def test_invalid_link_destination(self) -> None:
        assert InvalidLinkError("link", destination=":Sign:in").destination == ":Sign:in"

    def test_session_error_cause(self) -> None:
        cause = OSError("disk full")

        assert SessionError("write failed", cause=cause).cause is cause


class TestStatusCodeFor:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (BadRequestError("missing"), 404),
            (BadRequestError("forbidden", code=403), 403),
            (BadRequestError("gone", code=410), 410),
            (LoopOverflowError("loop", max_loop=20), 500),
            (InvalidPresenterError("invalid", name="X"), 500),
            (RuntimeError("boom"), 500),
            (KeyError("key"), 500),
        ],
    )
    def test_mapping(self, error: Exception, expected: int) -> None:
        assert status_code_for(error) == expected
