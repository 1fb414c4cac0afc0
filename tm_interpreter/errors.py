from __future__ import annotations

from pathlib import Path
from typing import Optional


class InterpreterError(Exception):
    """Base class for every error raised while loading or running a machine."""


class ResourceError(InterpreterError):
    """A description or output resource could not be opened, read or written."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class ParseError(InterpreterError, ValueError):
    """A description line does not have the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
        field: Optional[str] = None,
    ) -> None:
        self.reason = message
        self.line_number = line_number
        self.line = line
        self.field = field
        if line_number is not None and line is not None:
            message = f"line {line_number}: {message} ({line!r})"
        elif line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class RuntimeFault(InterpreterError):
    """The machine moved the head off the tape or used an unknown direction."""

    def __init__(
        self,
        message: str,
        *,
        head: Optional[int] = None,
        state: Optional[str] = None,
        step: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.head = head
        self.state = state
        self.step = step
