"""Tokenization engine for markup parsing.

This module converts raw markup text into a flat sequence of structural
tokens using a character-position state machine.

Key Components:
    MarkupTokenizer: State machine turning text into tokens
    Token: Union of the seven token variants
    TokenType: Enumeration of token kinds
    TokenPosition: Line/column/offset of a token in the source
    validate_declaration: Guard for a leading XML declaration
"""

from .declaration import validate_declaration
from .tokenizer import (
    CDataToken,
    CloseTagToken,
    CommentToken,
    DoctypeToken,
    LineIndex,
    MarkupTokenizer,
    OpenTagToken,
    TextToken,
    Token,
    TokenizationResult,
    TokenizerState,
    TokenPosition,
    TokenType,
    XmlDeclarationToken,
    parse_attributes,
    split_qualified_name,
    tokenize,
)

__all__ = [
    "CDataToken",
    "CloseTagToken",
    "CommentToken",
    "DoctypeToken",
    "LineIndex",
    "MarkupTokenizer",
    "OpenTagToken",
    "TextToken",
    "Token",
    "TokenizationResult",
    "TokenizerState",
    "TokenPosition",
    "TokenType",
    "XmlDeclarationToken",
    "parse_attributes",
    "split_qualified_name",
    "tokenize",
    "validate_declaration",
]
