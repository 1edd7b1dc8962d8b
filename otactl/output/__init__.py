"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .errors import CommandValidator, exit_code_for

__all__ = [
    "CommandValidator",
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
    "exit_code_for",
]
