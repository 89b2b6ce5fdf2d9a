"""
Exception hierarchy for nu2vgap.

Every fatal condition raised by the converter derives from Nu2VgapError so
that the CLI can report it with a single handler. Recoverable data loss is
not an exception: it is logged as a warning and the conversion continues.
"""

from typing import Optional


class Nu2VgapError(Exception):
    """Base class for all converter errors."""


class ParseError(Nu2VgapError):
    """Malformed document text."""

    def __init__(self, message: str, offset: Optional[int] = None, snippet: str = "",
                 line: int = 0, column: int = 0):
        self.message = message
        self.offset = offset
        self.snippet = snippet
        self.line = line
        self.column = column
        if offset is not None:
            super().__init__(
                f"Parse error at offset {offset} (line {line}, column {column}): "
                f"{message}, got {snippet!r}"
            )
        else:
            super().__init__(f"Parse error: {message}")


class SchemaError(Nu2VgapError):
    """The document is well-formed but inconsistent (missing player, mismatched keys)."""
