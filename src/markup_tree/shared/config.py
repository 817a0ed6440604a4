"""Configuration classes for markup parsing.

This module provides configuration objects for the tokenizer, the tree
builder and the memoization cache, plus an aggregate :class:`ParserConfig`
with ready-made presets.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

# Elements whose body is kept verbatim instead of being tokenized as markup
RAW_TEXT_ELEMENTS: FrozenSet[str] = frozenset(
    {"script", "style", "textarea", "iframe", "noscript"}
)

# Void elements; matched case-insensitively against the tag name
SELF_CLOSING_TAGS: FrozenSet[str] = frozenset(
    {
        "img", "br", "hr", "input", "meta", "link", "area",
        "base", "col", "embed", "source", "track", "wbr",
    }
)


@dataclass
class TokenizerConfig:
    """Configuration for the tokenizer state machine."""

    raw_text_elements: FrozenSet[str] = RAW_TEXT_ELEMENTS
    self_closing_tags: FrozenSet[str] = SELF_CLOSING_TAGS
    validate_declaration: bool = True

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""
        self.raw_text_elements = frozenset(self.raw_text_elements)
        self.self_closing_tags = frozenset(
            name.lower() for name in self.self_closing_tags
        )
        if any(not name for name in self.raw_text_elements):
            raise ValueError("raw_text_elements cannot contain empty names")
        if any(not name for name in self.self_closing_tags):
            raise ValueError("self_closing_tags cannot contain empty names")


@dataclass
class TreeConfig:
    """Configuration for tree building."""

    cdata_as_text: bool = False
    max_depth: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if self.max_depth is not None and self.max_depth <= 0:
            raise ValueError("max_depth must be > 0 or None")


@dataclass
class CacheConfig:
    """Configuration for the parse memoization cache."""

    enabled: bool = True
    max_entries: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate cache configuration."""
        if self.max_entries is not None and self.max_entries <= 0:
            raise ValueError("max_entries must be > 0 or None")


@dataclass
class ParserConfig:
    """Complete configuration for a :class:`~markup_tree.MarkupParser`."""

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    correlation_id: Optional[str] = None

    @classmethod
    def html(cls) -> "ParserConfig":
        """Create the default configuration for HTML-like markup."""
        return cls()

    @classmethod
    def xml(cls) -> "ParserConfig":
        """Create configuration for XML documents.

        No element is treated as raw text and only explicit ``/>`` marks an
        element as self-closing.
        """
        return cls(
            tokenizer=TokenizerConfig(
                raw_text_elements=frozenset(),
                self_closing_tags=frozenset(),
            )
        )

    def validate(self) -> None:
        """Validate the complete configuration."""
        # Component configurations validate themselves in __post_init__
        if not isinstance(self.tokenizer, TokenizerConfig):
            raise TypeError("tokenizer must be a TokenizerConfig instance")
        if not isinstance(self.tree, TreeConfig):
            raise TypeError("tree must be a TreeConfig instance")
        if not isinstance(self.cache, CacheConfig):
            raise TypeError("cache must be a CacheConfig instance")
