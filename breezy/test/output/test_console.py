"""Tests for breezy.output.console module."""

from __future__ import annotations

import io

from rich.console import Console

from breezy.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    """Test Style enum."""

    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DIM) == "dim"
        assert str(Style.DEFAULT) == "default"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DIM"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs == [OutputRecord("hello", Style.DEFAULT)]

    def test_print_with_style(self) -> None:
        console = MockConsole()
        console.print("styled", Style.DIM)
        assert console.outputs[0].style == Style.DIM

    def test_prefixed_levels(self) -> None:
        console = MockConsole()
        console.success("created")
        console.info("would delete")
        console.warning("careful")
        console.error("failed")
        assert console.messages == [
            "OK created",
            "info: would delete",
            "warning: careful",
            "error: failed",
        ]

    def test_has_error(self) -> None:
        console = MockConsole()
        console.print("fine")
        assert not console.has_error()
        console.error("boom")
        assert console.has_error()

    def test_find_and_text(self) -> None:
        console = MockConsole()
        console.print("Deleted extra draft release 3 for main")
        console.print("other")
        assert len(console.find("release 3")) == 1
        assert console.text == "Deleted extra draft release 3 for main\nother"

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.print("ok")


def _rich_console() -> tuple[RichConsole, io.StringIO, io.StringIO]:
    out = io.StringIO()
    err = io.StringIO()
    console = RichConsole(
        out=Console(file=out, force_terminal=False, width=200),
        err=Console(file=err, force_terminal=False, width=200),
    )
    return console, out, err


class TestRichConsole:
    def test_streams(self) -> None:
        console, out, err = _rich_console()
        console.print("progress")
        console.success("created")
        console.info("dry run")
        console.warning("careful")
        console.error("failed")

        assert out.getvalue() == "progress\nOK created\ninfo: dry run\n"
        assert err.getvalue() == "warning: careful\nerror: failed\n"

    def test_brackets_are_not_markup(self) -> None:
        console, out, _ = _rich_console()
        console.print("* [core] Fix parser (#3)", Style.DIM)
        assert out.getvalue() == "* [core] Fix parser (#3)\n"
