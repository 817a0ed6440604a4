"""Exception types raised at the parse boundary.

Tokenizing and declaration validation fail fast with :class:`MalformedInput`;
the tree builder and the query engine never raise for structural problems.
"""

from enum import Enum, auto
from typing import Optional


class MalformedKind(Enum):
    """Kinds of malformed input detected before a tree is built."""

    UNCLOSED_COMMENT = auto()
    UNCLOSED_CDATA = auto()
    UNCLOSED_DECLARATION = auto()
    UNCLOSED_DOCTYPE = auto()
    UNCLOSED_RAW_TEXT = auto()
    UNCLOSED_TAG = auto()
    INVALID_DECLARATION = auto()


class MarkupTreeError(Exception):
    """Base class for all errors raised by markup_tree."""


class MalformedInput(MarkupTreeError, ValueError):
    """Raised when the input text cannot be tokenized.

    Attributes:
        kind: Category of the failure
        reason: Human readable description
        position: Zero-based character offset of the offending construct
        line: One-based line number of ``position``
        column: One-based column number of ``position``
        element: Name of the raw-text element left open, if any
    """

    def __init__(
        self,
        kind: MalformedKind,
        reason: str,
        position: int = 0,
        line: int = 1,
        column: int = 1,
        element: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.reason = reason
        self.position = position
        self.line = line
        self.column = column
        self.element = element
        super().__init__(f"{reason} (line {line}, column {column})")

    def __reduce__(self):
        return (
            self.__class__,
            (self.kind, self.reason, self.position, self.line, self.column, self.element),
        )
