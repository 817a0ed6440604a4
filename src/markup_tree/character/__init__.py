"""Character processing layer for markup parsing.

This module decodes byte input to text before tokenization.
"""

from .encoding import (
    BOMDetector,
    DecodedText,
    DeclarationSniffer,
    DetectionMethod,
    decode_markup,
)

__all__ = [
    "BOMDetector",
    "DecodedText",
    "DeclarationSniffer",
    "DetectionMethod",
    "decode_markup",
]
