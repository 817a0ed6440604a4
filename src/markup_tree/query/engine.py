"""Evaluation of compiled query expressions over a node tree.

Evaluation is read-only and returns references into the existing tree in
document order. Nothing here raises for odd patterns: unsupported syntax
simply matches nothing or leaves a result unfiltered.
"""

from typing import Iterator, List, Optional

from markup_tree.query.parser import (
    AbsolutePath,
    AttributeEquals,
    AttributeSearch,
    ClassSearch,
    DescendantSearch,
    HasAttribute,
    IdSearch,
    PassThrough,
    Position,
    Predicate,
    Predicated,
    QueryExpression,
    compile_query,
)
from markup_tree.tree.nodes import Node, NodeKind

QueryResult = List[Node]


def _elements(receiver: Node) -> Iterator[Node]:
    return (node for node in receiver.iter() if node.kind is NodeKind.ELEMENT)


def _apply_predicate(nodes: QueryResult, predicate: Predicate) -> QueryResult:
    if isinstance(predicate, Position):
        if 1 <= predicate.index <= len(nodes):
            return [nodes[predicate.index - 1]]
        return []
    if isinstance(predicate, AttributeEquals):
        return [
            node for node in nodes
            if node.get_attribute(predicate.name) == predicate.value
        ]
    if isinstance(predicate, HasAttribute):
        return [node for node in nodes if node.has_attribute(predicate.name)]
    if isinstance(predicate, PassThrough):
        return nodes
    raise TypeError(f"Unknown predicate: {predicate!r}")


def evaluate(expression: QueryExpression, receiver: Node) -> QueryResult:
    """Evaluate a compiled expression with ``receiver`` as context node."""
    if isinstance(expression, DescendantSearch):
        return [node for node in _elements(receiver) if node.name == expression.tag]

    if isinstance(expression, AbsolutePath):
        current: QueryResult = [receiver]
        for step in expression.steps:
            current = [
                child
                for node in current
                for child in node.children
                if child.kind is NodeKind.ELEMENT and child.name == step
            ]
            if not current:
                break
        return current

    if isinstance(expression, AttributeSearch):
        return [node for node in _elements(receiver) if node.has_attribute(expression.name)]

    if isinstance(expression, ClassSearch):
        return [
            node for node in _elements(receiver)
            if expression.class_name in node.classes  # type: ignore[union-attr]
        ]

    if isinstance(expression, IdSearch):
        for node in _elements(receiver):
            if node.get_attribute("id") == expression.element_id:
                return [node]
        return []

    if isinstance(expression, Predicated):
        return _apply_predicate(evaluate(expression.base, receiver), expression.predicate)

    raise TypeError(f"Unknown query expression: {expression!r}")


def query(receiver: Node, pattern: str) -> QueryResult:
    """Return every node matched by ``pattern`` below and including ``receiver``.

    Args:
        receiver: Root or any node of a built tree
        pattern: Path pattern, see :mod:`markup_tree.query.parser`

    Returns:
        Matching nodes in document order
    """
    return evaluate(compile_query(pattern), receiver)


def first(receiver: Node, pattern: str) -> Optional[Node]:
    results = query(receiver, pattern)
    return results[0] if results else None


def text_of_first(receiver: Node, pattern: str) -> Optional[str]:
    """Concatenated text of the first match, or ``None`` without a match."""
    node = first(receiver, pattern)
    return node.text_content if node is not None else None


def attribute_of_first(receiver: Node, pattern: str, attribute: str) -> Optional[str]:
    node = first(receiver, pattern)
    return node.get_attribute(attribute) if node is not None else None


def exists(receiver: Node, pattern: str) -> bool:
    return bool(query(receiver, pattern))


def count(receiver: Node, pattern: str) -> int:
    return len(query(receiver, pattern))


def xpath_text(receiver: Node, pattern: str) -> List[str]:
    """Concatenated text of every match."""
    return [node.text_content for node in query(receiver, pattern)]


def xpath_attribute(receiver: Node, pattern: str, attribute: str) -> List[Optional[str]]:
    return [node.get_attribute(attribute) for node in query(receiver, pattern)]
