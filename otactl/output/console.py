"""Console output abstraction.

Commands talk to a ``ConsoleProtocol`` instead of printing directly. The
production implementation renders through Rich (results on stdout, errors
on stderr); ``MockConsole`` records everything for tests.

Messages are printed as plain ``Text`` rather than Rich markup: error
messages start with ``[Error]`` and user data (descriptions, app names) may
contain square brackets too.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rich.text import Text

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
    "TableRecord",
]

ERROR_PREFIX = "[Error]  "


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    BOLD = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling.

        Args:
            message: The text to print
            style: The style to apply
        """
        ...

    def success(self, message: str) -> None:
        """Print a success confirmation."""
        ...

    def error(self, message: str) -> None:
        """Print ``[Error]  <message>`` on the error stream."""
        ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...

    def table(self, columns: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        """Render rows as a table with the given column headers."""
        ...

    def raw(self, text: str) -> None:
        """Write ``text`` unstyled and unwrapped (machine-readable output)."""
        ...


class RichConsole:
    """Console implementation using Rich library."""

    def __init__(self) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console

        self._console = Console()
        self._stderr = Console(stderr=True)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.BOLD: "bold",
            Style.HEADER: "blue bold",
        }

    def _text(self, message: str, style: Style) -> Text:
        from rich.text import Text

        return Text(message, style=self._style_map.get(style, ""))

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._console.print(self._text(message, style))

    def success(self, message: str) -> None:
        self._console.print(self._text(message, Style.SUCCESS))

    def error(self, message: str) -> None:
        self._stderr.print(self._text(f"{ERROR_PREFIX}{message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self._stderr.print(self._text(f"[Warning]  {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self._console.print(self._text(message, Style.INFO))

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(self._text(message, Style.HEADER))

    def newline(self) -> None:
        self._console.print()

    def table(self, columns: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        from rich.table import Table

        table = Table(show_header=True, header_style="cyan bold")
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*(self._text(cell, Style.DEFAULT) for cell in row))
        self._console.print(table)

    def raw(self, text: str) -> None:
        self._console.out(text, highlight=False)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


@dataclass
class TableRecord:
    columns: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]


def _empty_outputs() -> list[OutputRecord]:
    return []


def _empty_tables() -> list[TableRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    tables: list[TableRecord] = field(default_factory=_empty_tables)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"{ERROR_PREFIX}{message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"[Warning]  {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    def table(self, columns: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        self.tables.append(
            TableRecord(tuple(columns), tuple(tuple(row) for row in rows))
        )

    def raw(self, text: str) -> None:
        self.outputs.append(OutputRecord(text, Style.DEFAULT))

    # Test helper methods

    def clear(self) -> None:
        """Clear all captured output."""
        self.outputs.clear()
        self.tables.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        """Get all output as a single newline-separated string."""
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def has_success(self) -> bool:
        return any(o.style == Style.SUCCESS for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
