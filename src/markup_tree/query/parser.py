"""Compilation of path patterns into query expressions.

A pattern is parsed once into a small tree of frozen expression values and
the result is memoized, so repeated queries only pay for evaluation.

Supported syntax::

    //name            every element named ``name`` in the receiver's subtree
    /a/b/c            child path starting below the receiver
    @attr             elements carrying ``attr``
    .class            elements whose class list contains ``class``
    #id               first element whose id is ``id``
    base[predicate]   ``base`` narrowed by a predicate
    name              same as ``//name``

Predicates are a 1-based position (``[2]`` or ``[position()=2]``), an
attribute test (``[@attr]``) or an attribute comparison
(``[@attr="value"]``). Anything else leaves the base result unchanged.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple, Union

from markup_tree.shared.logging import get_logger

logger = get_logger(__name__, component="query_parser")

_POSITION = re.compile(r"^\d+$")
_POSITION_FUNCTION = re.compile(r"^position\(\)\s*=\s*(\d+)$")
_ATTRIBUTE_EQUALS = re.compile(r"^@([\w:.-]+)\s*=\s*([\"'])([^\"']*)\2$")
_HAS_ATTRIBUTE = re.compile(r"^@([\w:.-]+)$")


# predicates


@dataclass(frozen=True)
class Position:
    """1-based index into the base result."""

    index: int


@dataclass(frozen=True)
class AttributeEquals:
    name: str
    value: str


@dataclass(frozen=True)
class HasAttribute:
    name: str


@dataclass(frozen=True)
class PassThrough:
    """Unrecognized predicate text; keeps the base result as is."""

    text: str


Predicate = Union[Position, AttributeEquals, HasAttribute, PassThrough]


# expressions


@dataclass(frozen=True)
class DescendantSearch:
    """Pre-order search of the receiver's subtree, receiver included."""

    tag: str


@dataclass(frozen=True)
class AbsolutePath:
    """Exact child-name steps starting at the receiver."""

    steps: Tuple[str, ...]


@dataclass(frozen=True)
class AttributeSearch:
    name: str


@dataclass(frozen=True)
class ClassSearch:
    class_name: str


@dataclass(frozen=True)
class IdSearch:
    """At most one element, the first in pre-order."""

    element_id: str


@dataclass(frozen=True)
class Predicated:
    base: "QueryExpression"
    predicate: Predicate


QueryExpression = Union[
    DescendantSearch,
    AbsolutePath,
    AttributeSearch,
    ClassSearch,
    IdSearch,
    Predicated,
]


def split_predicate(pattern: str) -> Optional[Tuple[str, str]]:
    """Split ``base[predicate]`` at the bracket matching the final ``]``.

    Brackets inside quoted predicate values are ignored. Returns ``None``
    when the pattern does not end with a bracketed predicate.
    """
    if not pattern.endswith("]"):
        return None

    depth = 0
    quote: Optional[str] = None
    for index in range(len(pattern) - 1, -1, -1):
        char = pattern[index]
        if quote is not None:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == "]":
            depth += 1
        elif char == "[":
            depth -= 1
            if depth == 0:
                return pattern[:index], pattern[index + 1:-1]

    return None


def parse_predicate(text: str) -> Predicate:
    """Classify the text between a predicate's brackets."""
    text = text.strip()

    if _POSITION.match(text):
        return Position(int(text))

    match = _POSITION_FUNCTION.match(text)
    if match:
        return Position(int(match.group(1)))

    match = _ATTRIBUTE_EQUALS.match(text)
    if match:
        return AttributeEquals(match.group(1), match.group(3))

    match = _HAS_ATTRIBUTE.match(text)
    if match:
        return HasAttribute(match.group(1))

    logger.debug(
        "Unrecognized predicate passed through",
        extra={"predicate": text},
    )
    return PassThrough(text)


@lru_cache(maxsize=256)
def compile_query(pattern: str) -> QueryExpression:
    """Compile a path pattern into a query expression.

    Compilation never fails: unknown syntax degrades to a tag-name search or
    a pass-through predicate.

    Examples:
        >>> compile_query("//p[2]")
        Predicated(base=DescendantSearch(tag='p'), predicate=Position(index=2))
    """
    pattern = pattern.strip()

    # a trailing predicate binds loosest, so it is split off before prefixes
    parts = split_predicate(pattern)
    if parts is not None:
        base, predicate = parts
        return Predicated(compile_query(base), parse_predicate(predicate))

    if pattern.startswith("//"):
        return DescendantSearch(pattern[2:])
    if pattern.startswith("/"):
        return AbsolutePath(tuple(step for step in pattern.split("/") if step))
    if pattern.startswith("@"):
        return AttributeSearch(pattern[1:])
    if pattern.startswith("."):
        return ClassSearch(pattern[1:])
    if pattern.startswith("#"):
        return IdSearch(pattern[1:])
    return DescendantSearch(pattern)
