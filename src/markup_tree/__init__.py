"""markup_tree: markup parsing into immutable trees with path queries.

Parses HTML/XML-like markup into a fully owned tree of frozen nodes and
evaluates a compact path-query language over it.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_string(), parse_bytes(), parse_file()
- Level 2: Configured parser - MarkupParser class with an owned TreeCache
- Level 3: Components - MarkupTokenizer, TreeBuilder, compile_query
"""

__version__ = "0.1.0"
__author__ = "markup-tree contributors"

# Level 1: Simple functions
# Level 2: Configured parser
from .api import (
    MarkupParser,
    TreeCache,
    format_tree,
    parse,
    parse_bytes,
    parse_file,
    parse_string,
    to_element_tree,
    to_html,
    to_lxml,
)

# Level 3: Components
from .query import compile_query, query
from .shared import (
    CacheConfig,
    MalformedInput,
    MalformedKind,
    MarkupTreeError,
    ParserConfig,
    TokenizerConfig,
    TreeConfig,
)
from .tokenization import MarkupTokenizer, tokenize, validate_declaration
from .tree import (
    BuildResult,
    Comment,
    Doctype,
    Element,
    Node,
    NodeKind,
    Root,
    Text,
    TreeBuilder,
    build_tree,
    node_from_dict,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_string",
    "parse_bytes",
    "parse_file",

    # Level 2: Advanced parser class
    "MarkupParser",
    "TreeCache",

    # Serialization and conversion
    "format_tree",
    "to_html",
    "to_element_tree",
    "to_lxml",

    # Level 3: Components
    "MarkupTokenizer",
    "tokenize",
    "validate_declaration",
    "TreeBuilder",
    "BuildResult",
    "build_tree",
    "compile_query",
    "query",

    # Nodes
    "Node",
    "NodeKind",
    "Root",
    "Element",
    "Text",
    "Comment",
    "Doctype",
    "node_from_dict",

    # Configuration and errors
    "ParserConfig",
    "TokenizerConfig",
    "TreeConfig",
    "CacheConfig",
    "MarkupTreeError",
    "MalformedInput",
    "MalformedKind",
]
