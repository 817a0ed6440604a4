"""Path query language over parsed markup trees.

Key Components:
    compile_query: Pattern to expression compilation (memoized)
    query: Evaluate a pattern against a node
    first, text_of_first, attribute_of_first, exists, count: Shortcuts
"""

from .engine import (
    QueryResult,
    attribute_of_first,
    count,
    evaluate,
    exists,
    first,
    query,
    text_of_first,
    xpath_attribute,
    xpath_text,
)
from .parser import (
    AbsolutePath,
    AttributeEquals,
    AttributeSearch,
    ClassSearch,
    DescendantSearch,
    HasAttribute,
    IdSearch,
    PassThrough,
    Position,
    Predicated,
    QueryExpression,
    compile_query,
    parse_predicate,
    split_predicate,
)

__all__ = [
    "QueryResult",
    "attribute_of_first",
    "count",
    "evaluate",
    "exists",
    "first",
    "query",
    "text_of_first",
    "xpath_attribute",
    "xpath_text",
    "AbsolutePath",
    "AttributeEquals",
    "AttributeSearch",
    "ClassSearch",
    "DescendantSearch",
    "HasAttribute",
    "IdSearch",
    "PassThrough",
    "Position",
    "Predicated",
    "QueryExpression",
    "compile_query",
    "parse_predicate",
    "split_predicate",
]
