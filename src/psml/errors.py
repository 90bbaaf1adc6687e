"""Exceptions raised by the PSML codec."""

from __future__ import annotations


class PSMLError(Exception):
    """Base exception for PSML markup handling."""


class ParseError(PSMLError):
    """Raised when PSML input is not well-formed.

    Attributes:
        line: 1-based line of the offending input, when the parser reports it
        column: Column of the offending input, when the parser reports it
    """

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        self.message = message
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column or 0})"
        super().__init__(message)


class EncodeError(PSMLError):
    """Raised when a node tree cannot be written as XML.

    Attributes:
        path: Slash-separated location of the offending node, e.g. ``/document/section[1]``
    """

    def __init__(self, message: str, path: str) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{message} at {path}")
