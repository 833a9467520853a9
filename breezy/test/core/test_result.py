"""Tests for breezy.core.result module."""

import pytest

from breezy.core.result import Err, Ok, Result


class TestOk:
    """Tests for Ok type."""

    def test_value(self) -> None:
        assert Ok(42).value == 42

    def test_map(self) -> None:
        """Ok.map() transforms the value."""
        assert Ok(2).map(lambda v: v * 10) == Ok(20)

    def test_map_err_is_noop(self) -> None:
        assert Ok(2).map_err(lambda e: f"wrapped {e}") == Ok(2)

    def test_repr(self) -> None:
        assert repr(Ok("x")) == "Ok('x')"

    def test_frozen(self) -> None:
        result = Ok(1)
        with pytest.raises(AttributeError):
            result.value = 2  # type: ignore[misc]


class TestErr:
    """Tests for Err type."""

    def test_error(self) -> None:
        assert Err("boom").error == "boom"

    def test_map_is_noop(self) -> None:
        assert Err("boom").map(lambda v: v) == Err("boom")

    def test_map_err(self) -> None:
        """Err.map_err() transforms the error."""
        assert Err(404).map_err(lambda status: f"HTTP {status}") == Err("HTTP 404")

    def test_repr(self) -> None:
        assert repr(Err("x")) == "Err('x')"


def test_pattern_matching() -> None:
    def describe(result: Result[int, str]) -> str:
        match result:
            case Ok(value):
                return f"ok {value}"
            case Err(error):
                return f"err {error}"

    assert describe(Ok(3)) == "ok 3"
    assert describe(Err("bad")) == "err bad"
