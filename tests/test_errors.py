"""Tests for querykit.errors — exception hierarchy and error messages."""

import pytest

from querykit.errors import IllegalArgumentError, MalformedQueryStringError, QueryKitError


class TestHierarchy:
    def test_malformed_is_querykit_error(self) -> None:
        assert issubclass(MalformedQueryStringError, QueryKitError)

    def test_illegal_argument_is_querykit_error(self) -> None:
        assert issubclass(IllegalArgumentError, QueryKitError)

    def test_both_are_value_errors(self) -> None:
        assert issubclass(MalformedQueryStringError, ValueError)
        assert issubclass(IllegalArgumentError, ValueError)


class TestMalformedQueryStringError:
    def test_attributes(self) -> None:
        err = MalformedQueryStringError("a=1&b", "b", "has no '='")
        assert err.query_string == "a=1&b"
        assert err.segment == "b"
        assert err.reason == "has no '='"

    def test_str(self) -> None:
        err = MalformedQueryStringError("a=1&b", "b", "has no '='")
        assert str(err) == "Malformed query string 'a=1&b': segment 'b' has no '='"

    def test_catchable_as_base(self) -> None:
        with pytest.raises(QueryKitError):
            raise MalformedQueryStringError("x", "x", "has no '='")
