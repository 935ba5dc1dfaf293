from __future__ import annotations
from pathlib import Path
from typing import Optional


class DolintError(Exception):
    """Base class for errors raised by dolint."""


class InputError(DolintError):
    """A source file could not be read. Reported per file."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ParseError(DolintError):
    """Malformed comment nesting, e.g. a `/*` that is never closed."""

    def __init__(self, message: str, line: int, column: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class ConfigError(DolintError, ValueError):
    """Invalid configuration. Fatal for the whole run."""
