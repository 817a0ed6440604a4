"""Core markup tokenization implementation with a character-position state machine.

This module converts raw HTML/XML-like text into a flat, ordered sequence of
structural tokens. Quoted attribute values, raw-text elements, comments,
CDATA sections, DOCTYPE and XML declarations are recognized; anything left
unterminated at end of input raises :class:`MalformedInput`.
"""

import bisect
import re
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, Dict, List, Optional, Tuple, Union

from markup_tree.shared.config import TokenizerConfig
from markup_tree.shared.errors import MalformedInput, MalformedKind
from markup_tree.shared.logging import get_logger

# Opening and closing markers of the scanned constructs
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
CDATA_OPEN = "<![CDATA["
CDATA_CLOSE = "]]>"
XML_DECL_OPEN = "<?xml"
XML_DECL_CLOSE = "?>"
DOCTYPE_OPEN = "<!DOCTYPE"

_ATTRIBUTE_PATTERN = re.compile(
    r"([a-zA-Z_][a-zA-Z0-9_\-:]*(?::[a-zA-Z_][a-zA-Z0-9_\-:]*)?)"
    r"(?:\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^>\s]+)))?"
)
_DOCTYPE_BODY_PATTERN = re.compile(r"DOCTYPE\s+(.*)", re.IGNORECASE | re.DOTALL)
_WHITESPACE_RUN = re.compile(r"\s+")


class TokenType(Enum):
    """Markup token types produced by the tokenizer."""

    OPEN_TAG = auto()           # <name attr="value"> or <name/>
    CLOSE_TAG = auto()          # </name>
    TEXT = auto()               # Character content between tags
    COMMENT = auto()            # <!-- ... -->
    DOCTYPE = auto()            # <!DOCTYPE ...>
    XML_DECLARATION = auto()    # <?xml ... ?>
    CDATA = auto()              # <![CDATA[ ... ]]>


class TokenizerState(Enum):
    """State machine states for markup tokenization."""

    TEXT = auto()       # Accumulating character content
    TAG = auto()        # Inside <...>
    QUOTE = auto()      # Inside a quoted attribute value within a tag
    COMMENT = auto()    # After <!--
    DOCTYPE = auto()    # After <!DOCTYPE
    XML_DECL = auto()   # After <?xml
    CDATA = auto()      # After <![CDATA[


@dataclass(frozen=True)
class TokenPosition:
    """Position information for markup tokens."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")


START_POSITION = TokenPosition(1, 1, 0)


@dataclass
class OpenTagToken:
    """Opening tag, possibly self-closing."""

    type: ClassVar[TokenType] = TokenType.OPEN_TAG

    name: str
    namespace: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    self_closing: bool = False
    position: TokenPosition = START_POSITION


@dataclass
class CloseTagToken:
    """Closing tag."""

    type: ClassVar[TokenType] = TokenType.CLOSE_TAG

    name: str
    namespace: str = ""
    position: TokenPosition = START_POSITION


@dataclass
class TextToken:
    """Run of character content."""

    type: ClassVar[TokenType] = TokenType.TEXT

    content: str
    position: TokenPosition = START_POSITION


@dataclass
class CommentToken:
    type: ClassVar[TokenType] = TokenType.COMMENT

    content: str
    position: TokenPosition = START_POSITION


@dataclass
class DoctypeToken:
    type: ClassVar[TokenType] = TokenType.DOCTYPE

    content: str
    position: TokenPosition = START_POSITION


@dataclass
class XmlDeclarationToken:
    type: ClassVar[TokenType] = TokenType.XML_DECLARATION

    content: str
    position: TokenPosition = START_POSITION


@dataclass
class CDataToken:
    type: ClassVar[TokenType] = TokenType.CDATA

    content: str
    position: TokenPosition = START_POSITION


Token = Union[
    OpenTagToken,
    CloseTagToken,
    TextToken,
    CommentToken,
    DoctypeToken,
    XmlDeclarationToken,
    CDataToken,
]


@dataclass
class TokenizationResult:
    """Result of a tokenization run with basic metadata."""

    tokens: List[Token]
    processing_time: float = 0.0
    character_count: int = 0

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)

    @property
    def token_type_distribution(self) -> Dict[str, int]:
        """Count tokens per token type name."""
        distribution: Dict[str, int] = {}
        for token in self.tokens:
            distribution[token.type.name] = distribution.get(token.type.name, 0) + 1
        return distribution


class LineIndex:
    """Maps character offsets of a text to one-based line/column pairs."""

    def __init__(self, text: str) -> None:
        self._line_starts = [0]
        self._line_starts.extend(
            match.end() for match in re.finditer("\n", text)
        )

    def position(self, offset: int) -> TokenPosition:
        line = bisect.bisect_right(self._line_starts, offset)
        column = offset - self._line_starts[line - 1] + 1
        return TokenPosition(line, column, offset)


def parse_attributes(attr_string: str) -> Dict[str, str]:
    """Parse an attribute string into an insertion-ordered mapping.

    Supports ``name``, ``name="value"``, ``name='value'`` and
    ``name=value``, including prefixed names such as ``xmlns:svg``. A name
    without a value maps to the empty string; later duplicates win.
    """
    attributes: Dict[str, str] = {}
    attr_string = attr_string.strip()
    if not attr_string:
        return attributes

    for match in _ATTRIBUTE_PATTERN.finditer(attr_string):
        double_quoted, single_quoted, unquoted = match.group(2, 3, 4)
        attributes[match.group(1)] = double_quoted or single_quoted or unquoted or ""

    return attributes


def split_qualified_name(qualified_name: str) -> Tuple[str, str]:
    """Split ``prefix:name`` once into ``(prefix, name)``."""
    if ":" in qualified_name:
        prefix, name = qualified_name.split(":", 1)
        return prefix, name
    return "", qualified_name


class MarkupTokenizer:
    """Markup tokenizer driven by a character-position state machine.

    Examples:
        >>> tokenizer = MarkupTokenizer()
        >>> [t.type.name for t in tokenizer.tokenize("<p>Hi</p>").tokens]
        ['OPEN_TAG', 'TEXT', 'CLOSE_TAG']
    """

    def __init__(
        self,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the tokenizer.

        Args:
            config: Tokenizer configuration (raw-text and self-closing sets)
            correlation_id: Optional correlation ID for tracking requests
        """
        self.config = config or TokenizerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "markup_tokenizer")
        self._reset_state("")

    def _reset_state(self, text: str) -> None:
        self.text = text
        self.length = len(text)
        self.lines = LineIndex(text)
        self.state = TokenizerState.TEXT
        self.position = 0
        self.tokens: List[Token] = []
        self.text_buffer: List[str] = []
        self.text_start = 0
        self.tag_buffer: List[str] = []
        self.tag_start = 0
        self.quote_char = ""
        self.construct_start = 0
        self.raw_text_element: Optional[str] = None
        self.raw_text_start = 0

    def tokenize(self, text: str) -> TokenizationResult:
        """Tokenize markup text.

        Args:
            text: Markup to tokenize

        Returns:
            TokenizationResult with the ordered token list

        Raises:
            MalformedInput: If a construct is left unterminated
        """
        start_time = time.time()
        self._reset_state(text)

        self.logger.debug(
            "Starting tokenization",
            extra={"char_count": self.length},
        )

        while self.position < self.length:
            if self.raw_text_element is not None:
                self._process_raw_text()
            elif self.state is TokenizerState.TEXT:
                self._process_text()
            elif self.state is TokenizerState.TAG:
                self._process_tag()
            elif self.state is TokenizerState.QUOTE:
                self._process_quote()
            elif self.state is TokenizerState.COMMENT:
                self._process_comment()
            elif self.state is TokenizerState.CDATA:
                self._process_cdata()
            elif self.state is TokenizerState.XML_DECL:
                self._process_xml_declaration()
            elif self.state is TokenizerState.DOCTYPE:
                self._process_doctype()

        self._finalize()

        result = TokenizationResult(
            tokens=self.tokens,
            processing_time=time.time() - start_time,
            character_count=self.length,
        )

        self.logger.debug(
            "Tokenization completed",
            extra={
                "token_count": result.token_count,
                "processing_time": result.processing_time,
            },
        )

        return result

    def _error(
        self,
        kind: MalformedKind,
        reason: str,
        offset: int,
        element: Optional[str] = None,
    ) -> MalformedInput:
        position = self.lines.position(offset)
        self.logger.debug(
            "Malformed input detected",
            extra={"kind": kind.name, "offset": offset},
        )
        return MalformedInput(
            kind,
            reason,
            position=offset,
            line=position.line,
            column=position.column,
            element=element,
        )

    # text and raw text

    def _flush_text(self) -> None:
        if self.text_buffer:
            content = "".join(self.text_buffer).strip()
            if content:
                self.tokens.append(
                    TextToken(content, self.lines.position(self.text_start))
                )
            self.text_buffer = []

    def _process_text(self) -> None:
        text, pos = self.text, self.position

        if text[pos] != "<":
            next_tag = text.find("<", pos)
            if next_tag == -1:
                next_tag = self.length
            if not self.text_buffer:
                self.text_start = pos
            self.text_buffer.append(text[pos:next_tag])
            self.position = next_tag
            return

        self._flush_text()
        self.construct_start = pos

        if text.startswith(COMMENT_OPEN, pos):
            self.state = TokenizerState.COMMENT
            self.position = pos + len(COMMENT_OPEN)
        elif text.startswith(XML_DECL_OPEN, pos):
            self.state = TokenizerState.XML_DECL
            self.position = pos + len(XML_DECL_OPEN)
        elif text[pos:pos + len(DOCTYPE_OPEN)].upper() == DOCTYPE_OPEN:
            self.state = TokenizerState.DOCTYPE
            self.position = pos + 2
        elif text.startswith(CDATA_OPEN, pos):
            self.state = TokenizerState.CDATA
            self.position = pos + len(CDATA_OPEN)
        else:
            self.state = TokenizerState.TAG
            self.tag_buffer = []
            self.tag_start = pos
            self.position = pos + 1

    def _process_raw_text(self) -> None:
        element = self.raw_text_element
        end = self.text.find("</" + element, self.position)
        if end == -1:
            raise self._error(
                MalformedKind.UNCLOSED_RAW_TEXT,
                f"Unclosed {element} element",
                self.raw_text_start,
                element=element,
            )

        content = self.text[self.position:end]
        if content:
            self.tokens.append(TextToken(content, self.lines.position(self.position)))

        self.raw_text_element = None
        # Resume at the '<' of the closing tag
        self.position = end

    # tags

    def _process_tag(self) -> None:
        char = self.text[self.position]
        self.position += 1

        if char in ("\"", "'"):
            self.tag_buffer.append(char)
            self.quote_char = char
            self.state = TokenizerState.QUOTE
        elif char == ">":
            token = self._parse_tag_buffer("".join(self.tag_buffer))
            self.tag_buffer = []
            self.quote_char = ""
            self.state = TokenizerState.TEXT
            if token is None:
                return
            self.tokens.append(token)
            if (
                isinstance(token, OpenTagToken)
                and not token.self_closing
                and token.name in self.config.raw_text_elements
            ):
                self.raw_text_element = token.name
                self.raw_text_start = self.tag_start
        else:
            self.tag_buffer.append(char)

    def _process_quote(self) -> None:
        char = self.text[self.position]
        self.tag_buffer.append(char)
        if char == self.quote_char and self.text[self.position - 1] != "\\":
            self.state = TokenizerState.TAG
        self.position += 1

    def _parse_tag_buffer(self, tag_content: str) -> Optional[Token]:
        """Turn the text between ``<`` and ``>`` into a tag token."""
        position = self.lines.position(self.tag_start)

        if tag_content.startswith("/"):
            namespace, name = split_qualified_name(tag_content[1:].strip())
            return CloseTagToken(name, namespace, position)

        self_closing = False
        if tag_content.endswith("/"):
            self_closing = True
            tag_content = tag_content[:-1]

        # "< a>" has no name, as whitespace before the name is not skipped
        parts = _WHITESPACE_RUN.split(tag_content, maxsplit=1)
        qualified_name = parts[0]
        if not qualified_name:
            self.logger.debug(
                "Dropping tag without a name",
                extra={"offset": self.tag_start},
            )
            return None

        namespace, name = split_qualified_name(qualified_name)
        if not name:
            # "<prefix:>" keeps the colon in the name rather than losing the tag
            namespace, name = "", qualified_name
        attributes = parse_attributes(parts[1] if len(parts) > 1 else "")

        if name.lower() in self.config.self_closing_tags:
            self_closing = True

        return OpenTagToken(name, namespace, attributes, self_closing, position)

    # scanned constructs

    def _scan_to(self, terminator: str, kind: MalformedKind, reason: str) -> Tuple[str, int]:
        end = self.text.find(terminator, self.position)
        if end == -1:
            raise self._error(
                kind,
                f"{reason} at position {self.construct_start}",
                self.construct_start,
            )
        content = self.text[self.position:end]
        self.position = end + len(terminator)
        self.state = TokenizerState.TEXT
        return content, self.construct_start

    def _process_comment(self) -> None:
        content, start = self._scan_to(
            COMMENT_CLOSE, MalformedKind.UNCLOSED_COMMENT, "Unclosed comment"
        )
        self.tokens.append(CommentToken(content.strip(), self.lines.position(start)))

    def _process_cdata(self) -> None:
        content, start = self._scan_to(
            CDATA_CLOSE, MalformedKind.UNCLOSED_CDATA, "Unclosed CDATA"
        )
        self.tokens.append(CDataToken(content, self.lines.position(start)))

    def _process_xml_declaration(self) -> None:
        content, start = self._scan_to(
            XML_DECL_CLOSE,
            MalformedKind.UNCLOSED_DECLARATION,
            "Unclosed XML declaration",
        )
        self.tokens.append(
            XmlDeclarationToken(content.strip(), self.lines.position(start))
        )

    def _process_doctype(self) -> None:
        # position sits right after '<!'
        body, start = self._scan_to(
            ">", MalformedKind.UNCLOSED_DOCTYPE, "Unclosed DOCTYPE"
        )
        match = _DOCTYPE_BODY_PATTERN.match(body)
        content = match.group(1).strip() if match else ""
        self.tokens.append(DoctypeToken(content, self.lines.position(start)))

    def _finalize(self) -> None:
        if self.raw_text_element is not None:
            raise self._error(
                MalformedKind.UNCLOSED_RAW_TEXT,
                f"Unclosed {self.raw_text_element} element",
                self.raw_text_start,
                element=self.raw_text_element,
            )

        if self.state is TokenizerState.TEXT:
            self._flush_text()
            return

        unclosed = {
            TokenizerState.TAG: (MalformedKind.UNCLOSED_TAG, "tag"),
            TokenizerState.QUOTE: (MalformedKind.UNCLOSED_TAG, "quoted attribute value"),
            TokenizerState.COMMENT: (MalformedKind.UNCLOSED_COMMENT, "comment"),
            TokenizerState.CDATA: (MalformedKind.UNCLOSED_CDATA, "CDATA"),
            TokenizerState.XML_DECL: (MalformedKind.UNCLOSED_DECLARATION, "XML declaration"),
            TokenizerState.DOCTYPE: (MalformedKind.UNCLOSED_DOCTYPE, "DOCTYPE"),
        }
        kind, label = unclosed[self.state]
        start = self.construct_start
        raise self._error(kind, f"Unclosed {label} at position {start}", start)


def tokenize(text: str, config: Optional[TokenizerConfig] = None) -> List[Token]:
    """Tokenize markup text into an ordered list of tokens.

    Raises:
        MalformedInput: If a construct is left unterminated
    """
    return MarkupTokenizer(config).tokenize(text).tokens
