"""Console output for reconciliation progress.

Services report through ``ConsoleProtocol`` so tests can capture what a run
said with ``MockConsole`` while the CLI renders it with Rich.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...


class RichConsole:
    """Production console backed by Rich.

    Errors and warnings go to stderr so action logs keep them apart from
    the regular progress lines.
    """

    def __init__(self, out: Console | None = None, err: Console | None = None) -> None:
        # Rich is imported lazily so importing the engine stays cheap.
        from rich.console import Console

        self._out = out if out is not None else Console(highlight=False)
        self._err = err if err is not None else Console(stderr=True, highlight=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        # Release bodies contain "[...]" sequences that must not be read as markup.
        if rich_style:
            self._out.print(message, style=rich_style, markup=False)
        else:
            self._out.print(message, markup=False)

    def success(self, message: str) -> None:
        self._out.print("[green]OK[/green] ", end="")
        self._out.print(message, markup=False)

    def error(self, message: str) -> None:
        self._err.print("[red bold]error:[/red bold] ", end="")
        self._err.print(message, markup=False)

    def warning(self, message: str) -> None:
        self._err.print("[yellow]warning:[/yellow] ", end="")
        self._err.print(message, markup=False)

    def info(self, message: str) -> None:
        self._out.print("[cyan]info:[/cyan] ", end="")
        self._out.print(message, markup=False)


@dataclass
class OutputRecord:
    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that records output instead of printing it."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """All outputs containing ``substring``."""
        return [o for o in self.outputs if substring in o.message]
