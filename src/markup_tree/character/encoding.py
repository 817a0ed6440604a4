"""Byte input decoding with a never-fail guarantee.

Markup arriving as bytes is decoded by trying, in order: a byte order mark,
the ``encoding`` of a leading XML declaration, an HTML ``<meta charset>``
declaration, strict UTF-8, and finally latin-1, which accepts any byte
sequence.
"""

import codecs
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple

# Declarations are only looked for near the start of the document
HEADER_SIZE = 1024

FALLBACK_ENCODING = "latin-1"


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    BOM = "bom"
    XML_DECLARATION = "xml_declaration"
    META_CHARSET = "meta_charset"
    UTF8 = "utf8"
    FALLBACK = "fallback"


@dataclass
class DecodedText:
    """Decoded markup text and how its encoding was determined.

    Attributes:
        text: Decoded text, without byte order mark
        encoding: Codec used for decoding
        method: Detection stage that chose the codec
        issues: Declared encodings that were rejected on the way
    """
    text: str
    encoding: str
    method: DetectionMethod
    issues: List[str] = field(default_factory=list)


class BOMDetector:
    """Byte Order Mark (BOM) detection for all major encodings."""

    BOM_PATTERNS: ClassVar[Dict[bytes, str]] = {
        b"\xef\xbb\xbf": "utf-8",
        b"\xff\xfe": "utf-16-le",
        b"\xfe\xff": "utf-16-be",
        b"\xff\xfe\x00\x00": "utf-32-le",
        b"\x00\x00\xfe\xff": "utf-32-be",
    }

    def detect(self, data: bytes) -> Optional[Tuple[str, int]]:
        """Return the encoding and BOM length, or None without a BOM."""
        # UTF-32 marks share a prefix with UTF-16 ones, so longer ones go first
        for bom_bytes, encoding in sorted(
            self.BOM_PATTERNS.items(), key=lambda x: len(x[0]), reverse=True
        ):
            if data.startswith(bom_bytes):
                return encoding, len(bom_bytes)
        return None


class DeclarationSniffer:
    """Finds encodings declared inside the document header."""

    XML_DECLARATION_PATTERN = re.compile(
        rb'^\s*<\?xml\s+[^>]*?encoding\s*=\s*["\']([^"\']+)["\']',
        re.IGNORECASE,
    )
    META_CHARSET_PATTERN = re.compile(
        rb'<meta\s[^>]*?charset\s*=\s*["\']?\s*([\w.:-]+)',
        re.IGNORECASE,
    )

    def xml_declaration(self, data: bytes) -> Optional[str]:
        match = self.XML_DECLARATION_PATTERN.search(data[:HEADER_SIZE])
        return self._name(match)

    def meta_charset(self, data: bytes) -> Optional[str]:
        match = self.META_CHARSET_PATTERN.search(data[:HEADER_SIZE])
        return self._name(match)

    @staticmethod
    def _name(match: "Optional[re.Match[bytes]]") -> Optional[str]:
        if not match:
            return None
        return match.group(1).decode("ascii", errors="ignore").strip().lower() or None


def _try_decode(data: bytes, encoding: str, issues: List[str]) -> Optional[str]:
    try:
        codec = codecs.lookup(encoding)
    except LookupError:
        issues.append(f"Unknown declared encoding: {encoding}")
        return None
    try:
        return data.decode(codec.name)
    except UnicodeDecodeError as e:
        issues.append(f"Content is not valid {codec.name}: {e.reason} at byte {e.start}")
        return None


def decode_markup(data: bytes) -> DecodedText:
    """Decode markup bytes to text.

    Args:
        data: Raw document bytes

    Returns:
        DecodedText with the text and the encoding that produced it
    """
    issues: List[str] = []

    bom = BOMDetector().detect(data)
    if bom is not None:
        encoding, length = bom
        text = _try_decode(data[length:], encoding, issues)
        if text is not None:
            return DecodedText(text, encoding, DetectionMethod.BOM, issues)

    sniffer = DeclarationSniffer()
    for method, declared in (
        (DetectionMethod.XML_DECLARATION, sniffer.xml_declaration(data)),
        (DetectionMethod.META_CHARSET, sniffer.meta_charset(data)),
    ):
        if declared is None:
            continue
        text = _try_decode(data, declared, issues)
        if text is not None:
            return DecodedText(text, declared, method, issues)

    text = _try_decode(data, "utf-8", issues)
    if text is not None:
        return DecodedText(text, "utf-8", DetectionMethod.UTF8, issues)

    return DecodedText(
        data.decode(FALLBACK_ENCODING), FALLBACK_ENCODING, DetectionMethod.FALLBACK, issues
    )
