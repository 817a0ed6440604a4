"""Tree building engine for markup parsing.

This module provides the immutable node model and the stack-based builder
that assembles it from a token stream, repairing unbalanced structure.

Key Components:
    TreeBuilder: Arena-based tree construction from tokens
    BuildResult: Built root with structure repairs and timings
    Root, Element, Text, Comment, Doctype: Node variants
    NodeKind: Discriminant of the node variants
"""

from .builder import (
    BuildResult,
    StructureRepair,
    TreeBuilder,
    build_tree,
)
from .nodes import (
    Comment,
    Doctype,
    Element,
    Node,
    NodeKind,
    Root,
    Text,
    node_from_dict,
)

__all__ = [
    "BuildResult",
    "StructureRepair",
    "TreeBuilder",
    "build_tree",
    "Comment",
    "Doctype",
    "Element",
    "Node",
    "NodeKind",
    "Root",
    "Text",
    "node_from_dict",
]
