"""Console output for release runs.

The release engine and asset sync report progress through ``ConsoleProtocol``
so they never depend on a rendering library. ``RichConsole`` is used by the
CLI; ``MockConsole`` records output for tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from threading import Lock
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Destination for progress and diagnostic messages."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...


class RichConsole:
    """Console backed by ``rich``.

    Args:
        stderr: Write to stderr instead of stdout. CI logs interleave both,
            so the CLI keeps the default.
    """

    def __init__(self, *, stderr: bool = False) -> None:
        from rich.console import Console
        from rich.text import Text

        self._text = Text
        self._console = Console(stderr=stderr, highlight=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.HEADER: "blue bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self._console.print(self._text.assemble(("OK", "green"), " ", message))

    def error(self, message: str) -> None:
        self._console.print(self._text.assemble(("error:", "red bold"), " ", message))

    def warning(self, message: str) -> None:
        self._console.print(self._text.assemble(("warning:", "yellow"), " ", message))

    def info(self, message: str) -> None:
        self._console.print(self._text.assemble(("info:", "cyan"), " ", message))

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style="blue bold", markup=False)


@dataclass
class OutputRecord:
    """A single captured line."""

    message: str
    style: Style


@dataclass
class MockConsole:
    """Console that captures output instead of printing.

    Asset uploads report from worker threads, so appends are locked.
    """

    outputs: list[OutputRecord] = field(default_factory=lambda: [])
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def _record(self, message: str, style: Style) -> None:
        with self._lock:
            self.outputs.append(OutputRecord(message, style))

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._record(message, style)

    def success(self, message: str) -> None:
        self._record(f"OK {message}", Style.SUCCESS)

    def error(self, message: str) -> None:
        self._record(f"error: {message}", Style.ERROR)

    def warning(self, message: str) -> None:
        self._record(f"warning: {message}", Style.WARNING)

    def info(self, message: str) -> None:
        self._record(f"info: {message}", Style.INFO)

    def header(self, message: str) -> None:
        self._record(message, Style.HEADER)

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]
