"""Node model for parsed markup documents.

A parsed document is a tree of immutable nodes. Every node kind is its own
frozen dataclass carrying only the fields that are meaningful for it:

* :class:`Root` - the unique entry point, owns the top-level children
* :class:`Element` - tag name, namespace prefix, attributes, children, depth
* :class:`Text`, :class:`Comment`, :class:`Doctype` - content-bearing leaves

Nodes hold no reference to their parent, so trees can be copied, pickled
and compared by value. Comparison, hashing, pickling and the dictionary
projection walk the tree with an explicit stack, so arbitrarily deep
documents never hit the interpreter recursion limit. Query helpers are available on every node and
delegate to :mod:`markup_tree.query`.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

if TYPE_CHECKING:
    from markup_tree.query.engine import QueryResult


class NodeKind(Enum):
    """Discriminant of the node variants."""

    ROOT = "root"
    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"
    DOCTYPE = "doctype"


_NO_ATTRIBUTES: Mapping[str, str] = MappingProxyType({})

# kind, name, namespace, attributes, content, depth, child count
Record = Tuple[str, Optional[str], Optional[str], Dict[str, str], Optional[str], int, int]


class _NodeBase:
    """Behaviour shared by every node variant."""

    __slots__ = ()

    kind: NodeKind
    children: Tuple["Node", ...] = ()
    depth: int = 0

    # accessors that are meaningless for some variants answer with defaults

    @property
    def name(self) -> Optional[str]:
        return None

    @property
    def namespace(self) -> Optional[str]:
        return None

    @property
    def attributes(self) -> Mapping[str, str]:
        return _NO_ATTRIBUTES

    @property
    def content(self) -> Optional[str]:
        return None

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get attribute value with optional default."""
        return self.attributes.get(name, default)

    def has_attribute(self, name: str) -> bool:
        """Check if node has a specific attribute."""
        return name in self.attributes

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def child_count(self) -> int:
        return len(self.children)

    def children_of_kind(self, kind: NodeKind) -> List["Node"]:
        """Return the direct children of the given kind."""
        return [child for child in self.children if child.kind is kind]

    def text_children(self) -> List["Node"]:
        return self.children_of_kind(NodeKind.TEXT)

    def comment_children(self) -> List["Node"]:
        return self.children_of_kind(NodeKind.COMMENT)

    def doctype_children(self) -> List["Node"]:
        return self.children_of_kind(NodeKind.DOCTYPE)

    def iter(self) -> Iterator["Node"]:
        """Iterate over this node and its descendants in pre-order."""
        stack: List[Node] = [self]  # type: ignore[list-item]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @property
    def text_content(self) -> str:
        """Concatenated text of all descendant text nodes, in document order."""
        return "".join(
            node.content for node in self.iter() if node.kind is NodeKind.TEXT
        )

    def find(self, tag: str) -> List["Element"]:
        """Find all elements named ``tag`` in this subtree, self included."""
        return [
            node for node in self.iter()
            if node.kind is NodeKind.ELEMENT and node.name == tag
        ]

    def filter(self, predicate: Callable[["Node"], bool]) -> List["Node"]:
        """Return every node of this subtree for which ``predicate`` holds."""
        return [node for node in self.iter() if predicate(node)]

    # query shortcuts

    def xpath(self, pattern: str) -> "QueryResult":
        """Evaluate a path query with this node as the receiver."""
        from markup_tree.query.engine import query

        return query(self, pattern)  # type: ignore[arg-type]

    def first(self, pattern: str) -> Optional["Node"]:
        """Return the first node matched by ``pattern``."""
        from markup_tree.query.engine import first

        return first(self, pattern)  # type: ignore[arg-type]

    def text(self, pattern: str) -> Optional[str]:
        """Return the text content of the first node matched by ``pattern``."""
        from markup_tree.query.engine import text_of_first

        return text_of_first(self, pattern)  # type: ignore[arg-type]

    def attr(self, pattern: str, attribute: str) -> Optional[str]:
        """Return ``attribute`` of the first node matched by ``pattern``."""
        from markup_tree.query.engine import attribute_of_first

        return attribute_of_first(self, pattern, attribute)  # type: ignore[arg-type]

    def exists(self, pattern: str) -> bool:
        from markup_tree.query.engine import exists

        return exists(self, pattern)  # type: ignore[arg-type]

    def count(self, pattern: str) -> int:
        from markup_tree.query.engine import count

        return count(self, pattern)  # type: ignore[arg-type]

    def xpath_text(self, pattern: str) -> List[str]:
        """Return the text content of every node matched by ``pattern``."""
        return [node.text_content for node in self.xpath(pattern)]

    def xpath_attribute(self, pattern: str, attribute: str) -> List[Optional[str]]:
        """Return ``attribute`` of every node matched by ``pattern``."""
        return [node.get_attribute(attribute) for node in self.xpath(pattern)]

    def to_dict(self) -> Dict[str, Any]:
        """Convert node and its subtree to a plain dictionary."""
        result: Dict[str, Any] = {}
        stack: List[Tuple[Node, Dict[str, Any]]] = [(self, result)]  # type: ignore[list-item]
        while stack:
            node, target = stack.pop()
            children: List[Dict[str, Any]] = []
            target.update(
                type=node.kind.value,
                name=node.name,
                name_space=node.namespace,
                attributes=dict(node.attributes),
                content=node.content,
                children=children,
                depth=node.depth,
            )
            for child in node.children:
                children.append({})
                stack.append((child, children[-1]))
        return result

    def __str__(self) -> str:
        return f"{self.kind.value}{{name: {self.name}, children: {len(self.children)}, depth: {self.depth}}}"

    # value semantics

    def _shape(self) -> Tuple[Any, ...]:
        return (
            self.kind,
            self.name,
            self.namespace,
            self.content,
            self.depth,
            len(self.children),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _NodeBase):
            return NotImplemented
        pairs: List[Tuple[_NodeBase, _NodeBase]] = [(self, other)]
        while pairs:
            left, right = pairs.pop()
            if left is right:
                continue
            if left._shape() != right._shape() or left.attributes != right.attributes:
                return False
            pairs.extend(zip(left.children, right.children))
        return True

    def __hash__(self) -> int:
        # attributes do not take part, equal trees still hash equally
        return hash(tuple(node._shape() for node in self.iter()))

    def __reduce__(self) -> Tuple[Any, ...]:
        return _from_records, (_records(self),)


@dataclass(frozen=True, eq=False, repr=False)
class Root(_NodeBase):
    """Document root; has no name, attributes or content."""

    children: Tuple["Node", ...] = ()

    kind = NodeKind.ROOT

    def __repr__(self) -> str:
        return f"Root(children={len(self.children)})"


@dataclass(frozen=True, eq=False, repr=False)
class Element(_NodeBase):
    """Markup element."""

    tag: str
    prefix: str = ""
    attrs: Mapping[str, str] = field(default_factory=dict)
    children: Tuple["Node", ...] = ()
    depth: int = 0

    kind = NodeKind.ELEMENT

    def __post_init__(self) -> None:
        """Validate element values."""
        if not self.tag:
            raise ValueError("Element tag cannot be empty")
        if "" in self.attrs:
            raise ValueError("Attribute names cannot be empty")
        object.__setattr__(self, "attrs", MappingProxyType(dict(self.attrs)))

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.tag

    @property
    def namespace(self) -> str:  # type: ignore[override]
        return self.prefix

    @property
    def attributes(self) -> Mapping[str, str]:  # type: ignore[override]
        return self.attrs

    @property
    def qualified_name(self) -> str:
        """Tag name with its namespace prefix as written in the source."""
        return f"{self.prefix}:{self.tag}" if self.prefix else self.tag

    @property
    def classes(self) -> List[str]:
        """Tokens of the ``class`` attribute, split on single spaces."""
        class_attr = self.attrs.get("class")
        if not class_attr:
            return []
        return [token.strip() for token in class_attr.split(" ")]

    def __repr__(self) -> str:
        return f"Element({self.qualified_name!r}, depth={self.depth}, children={len(self.children)})"


@dataclass(frozen=True, eq=False, repr=False)
class Text(_NodeBase):
    """Whitespace-trimmed character content."""

    value: str
    depth: int = 0

    kind = NodeKind.TEXT

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Text content cannot be empty")

    @property
    def content(self) -> str:  # type: ignore[override]
        return self.value

    def __repr__(self) -> str:
        return f"Text({self.value!r}, depth={self.depth})"


@dataclass(frozen=True, eq=False, repr=False)
class Comment(_NodeBase):
    value: str = ""
    depth: int = 0

    kind = NodeKind.COMMENT

    @property
    def content(self) -> str:  # type: ignore[override]
        return self.value

    def __repr__(self) -> str:
        return f"Comment({self.value!r}, depth={self.depth})"


@dataclass(frozen=True, eq=False, repr=False)
class Doctype(_NodeBase):
    value: str = ""
    depth: int = 0

    kind = NodeKind.DOCTYPE

    @property
    def content(self) -> str:  # type: ignore[override]
        return self.value

    def __repr__(self) -> str:
        return f"Doctype({self.value!r}, depth={self.depth})"


Node = Union[Root, Element, Text, Comment, Doctype]


def _records(node: "_NodeBase") -> List[Record]:
    """Flatten a subtree into pre-order records."""
    return [
        (
            current.kind.value,
            current.name,
            current.namespace,
            dict(current.attributes),
            current.content,
            current.depth,
            len(current.children),
        )
        for current in node.iter()
    ]


def _make_node(
    kind: NodeKind,
    name: Optional[str],
    namespace: Optional[str],
    attributes: Mapping[str, str],
    content: Optional[str],
    depth: int,
    children: Tuple[Node, ...],
) -> Node:
    if kind is NodeKind.TEXT:
        return Text(content, depth)  # type: ignore[arg-type]
    if kind is NodeKind.COMMENT:
        return Comment(content or "", depth)
    if kind is NodeKind.DOCTYPE:
        return Doctype(content or "", depth)
    if kind is NodeKind.ROOT:
        return Root(children)
    return Element(name, namespace or "", attributes, children, depth)  # type: ignore[arg-type]


def _from_records(records: List[Record]) -> Node:
    """Rebuild a tree from the records produced by ``_records``."""
    built: List[Node] = []
    for kind, name, namespace, attributes, content, depth, child_count in reversed(records):
        # the first child of this node is on top of the stack
        children = tuple(built.pop() for _ in range(child_count))
        built.append(
            _make_node(NodeKind(kind), name, namespace, attributes, content, depth, children)
        )
    return built.pop()


def node_from_dict(data: Dict[str, Any]) -> Node:
    """Rebuild a node tree from the projection produced by ``to_dict``.

    Raises:
        ValueError: If the projection names an unknown node type
    """
    records: List[Record] = []
    pending = [data]
    while pending:
        item = pending.pop()
        kind = NodeKind(item["type"])
        children = []
        if kind in (NodeKind.ROOT, NodeKind.ELEMENT):
            children = item.get("children") or []
        records.append(
            (
                kind.value,
                item.get("name"),
                item.get("name_space"),
                item.get("attributes") or {},
                item.get("content"),
                item.get("depth", 0),
                len(children),
            )
        )
        pending.extend(reversed(children))
    return _from_records(records)
