"""XML declaration guard run before tokenization.

When a document opens with ``<?xml``, the declaration is checked for the
attributes a reader relies on before any tokenizing work starts.
"""

import re
from typing import Optional

from markup_tree.shared.errors import MalformedInput, MalformedKind
from markup_tree.shared.logging import get_logger
from markup_tree.tokenization.tokenizer import LineIndex

_VERSION_PATTERN = re.compile(r"^<\?xml\s+version\s*=\s*[\"'][0-9.]+[\"']")
_ENCODING_PRESENT = re.compile(r"encoding\s*=\s*[\"']")
_ENCODING_VALID = re.compile(r"encoding\s*=\s*[\"'][^\"']+[\"']")
_STANDALONE_PRESENT = re.compile(r"standalone\s*=\s*[\"']")
_STANDALONE_VALID = re.compile(r"standalone\s*=\s*[\"'](yes|no)[\"']")
_DOUBLED_MARKER = re.compile(r"\?\?>|<\?\?xml")


def _malformed(
    text: str, offset: int, reason: str,
    kind: MalformedKind = MalformedKind.INVALID_DECLARATION,
) -> MalformedInput:
    position = LineIndex(text).position(offset)
    return MalformedInput(
        kind,
        f"Invalid XML declaration: {reason}",
        position=offset,
        line=position.line,
        column=position.column,
    )


def validate_declaration(text: str, correlation_id: Optional[str] = None) -> None:
    """Validate a leading XML declaration, if the text has one.

    Args:
        text: Complete markup input
        correlation_id: Optional correlation ID for log records

    Raises:
        MalformedInput: If the declaration is unterminated or carries an
            invalid ``version``, ``encoding`` or ``standalone`` attribute
    """
    trimmed = text.lstrip()
    offset = len(text) - len(trimmed)

    if trimmed.startswith("<??xml"):
        raise _malformed(text, offset, "malformed processing instruction")
    if not trimmed.startswith("<?xml"):
        return

    end = trimmed.find("?>")
    if end == -1:
        raise _malformed(
            text, offset, "missing closing ?>", MalformedKind.UNCLOSED_DECLARATION
        )

    declaration = trimmed[:end + 2]

    get_logger(__name__, correlation_id, "declaration_guard").debug(
        "Validating XML declaration",
        extra={"declaration": declaration},
    )

    if not _VERSION_PATTERN.match(declaration):
        raise _malformed(text, offset, "version attribute required")

    if _ENCODING_PRESENT.search(declaration) and not _ENCODING_VALID.search(declaration):
        raise _malformed(text, offset, "encoding attribute malformed")

    if (
        _STANDALONE_PRESENT.search(declaration)
        and not _STANDALONE_VALID.search(declaration)
    ):
        raise _malformed(text, offset, 'standalone must be "yes" or "no"')

    if _DOUBLED_MARKER.search(declaration):
        raise _malformed(text, offset, "malformed processing instruction")
