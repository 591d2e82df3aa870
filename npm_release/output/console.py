"""Release progress output.

Steps report through ConsoleProtocol: one header per step, dimmed command
lines, then a prefixed outcome line (``OK``, ``warning:``, ``error:``).
RichConsole renders to the terminal; MockConsole keeps the lines for tests.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()


# Outcome lines carry a fixed prefix so they stay readable without color.
_PREFIXES: dict[Style, str] = {
    Style.SUCCESS: "OK",
    Style.ERROR: "error:",
    Style.WARNING: "warning:",
    Style.INFO: "info:",
}

_RICH_STYLES: dict[Style, str] = {
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.DIM: "dim",
    Style.HEADER: "blue bold",
}


class ConsoleProtocol(Protocol):
    """Where pipeline steps report progress."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None:
        """Start a new section (one per release step)."""
        ...


class RichConsole:
    """Terminal output through rich.

    Messages are never parsed as markup: changelog headings such as
    ``## [1.0.1]`` and npm output print verbatim. Headers carry the wall-clock
    time so slow steps (install, registry polling) are visible.
    """

    def __init__(self, *, clock: Callable[[], datetime] = datetime.now) -> None:
        from rich.console import Console

        self._console = Console(highlight=False)
        self._clock = clock

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._console.print(message, style=_RICH_STYLES.get(style, ""), markup=False)

    def success(self, message: str) -> None:
        self._outcome(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._outcome(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._outcome(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._outcome(Style.INFO, message)

    def header(self, message: str) -> None:
        from rich.text import Text

        line = Text("\n")
        line.append(message, style=_RICH_STYLES[Style.HEADER])
        line.append(f" {self._clock():%H:%M:%S}", style="dim")
        self._console.print(line)

    def _outcome(self, style: Style, message: str) -> None:
        from rich.text import Text

        line = Text(_PREFIXES[style], style=_RICH_STYLES[style])
        line.append(f" {message}")
        self._console.print(line)


@dataclass
class OutputRecord:
    message: str
    style: Style


@dataclass
class MockConsole:
    """Console that records every line; outcome lines keep their prefix."""

    outputs: list[OutputRecord] = field(default_factory=list)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self._outcome(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._outcome(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._outcome(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._outcome(Style.INFO, message)

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def _outcome(self, style: Style, message: str) -> None:
        self.outputs.append(OutputRecord(f"{_PREFIXES[style]} {message}", style))

    # Test helpers

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    @property
    def headers(self) -> list[str]:
        return [o.message for o in self.outputs if o.style == Style.HEADER]

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]
