"""Public parsing API for markup_tree.

Key Components:
    parse, parse_string, parse_bytes, parse_file: Module-level entry points
    MarkupParser: Configurable, reusable parser with statistics
    TreeCache: Content-addressed memoization of built trees
    to_html, format_tree: Serialization and debugging output
    to_element_tree, to_lxml: Conversion to ElementTree-compatible libraries
"""

from .adapters import (
    ElementTreeAdapter,
    IntegrationAdapter,
    LxmlAdapter,
    from_element_tree,
    from_lxml,
    to_element_tree,
    to_lxml,
)
from .cache import CacheStatistics, TreeCache
from .parser import (
    InputType,
    MarkupParser,
    parse,
    parse_bytes,
    parse_file,
    parse_string,
)
from .serializer import format_tree, to_html

__all__ = [
    "ElementTreeAdapter",
    "IntegrationAdapter",
    "LxmlAdapter",
    "from_element_tree",
    "from_lxml",
    "to_element_tree",
    "to_lxml",
    "CacheStatistics",
    "TreeCache",
    "InputType",
    "MarkupParser",
    "parse",
    "parse_bytes",
    "parse_file",
    "parse_string",
    "format_tree",
    "to_html",
]
