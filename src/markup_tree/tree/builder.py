"""Core tree building implementation for markup parsing.

This module turns a token sequence into an owned, immutable node tree. The
builder is total: unbalanced or mismatched closing tags are repaired rather
than rejected, and every repair is reported on the :class:`BuildResult`.

Construction works on an arena of pending nodes addressed by index. The
stack of open elements holds arena indices, appends mutate arena entries by
index, and the frozen :mod:`markup_tree.tree.nodes` objects are created in a
single bottom-up pass once all tokens have been consumed.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from markup_tree.shared import TreeConfig, get_logger
from markup_tree.tokenization import (
    CDataToken,
    CloseTagToken,
    CommentToken,
    DoctypeToken,
    OpenTagToken,
    TextToken,
    Token,
    TokenizationResult,
    XmlDeclarationToken,
)
from markup_tree.tree.nodes import (
    Comment,
    Doctype,
    Element,
    Node,
    NodeKind,
    Root,
    Text,
)

ROOT_INDEX = 0


@dataclass
class StructureRepair:
    """Information about structural repairs made during tree building."""

    repair_type: str
    description: str
    position: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate repair information."""
        if not self.repair_type:
            raise ValueError("Repair type cannot be empty")
        if not self.description:
            raise ValueError("Repair description cannot be empty")


@dataclass
class BuildResult:
    """Result of a tree building run."""

    root: Root
    repairs: List[StructureRepair] = field(default_factory=list)
    node_count: int = 0
    processing_time_ms: float = 0.0

    @property
    def has_repairs(self) -> bool:
        return bool(self.repairs)

    @property
    def repair_count(self) -> int:
        return len(self.repairs)

    def get_repair_summary(self) -> Dict[str, int]:
        """Count repairs per repair type."""
        summary: Dict[str, int] = {}
        for repair in self.repairs:
            summary[repair.repair_type] = summary.get(repair.repair_type, 0) + 1
        return summary


@dataclass
class _PendingNode:
    """Mutable arena entry for a node under construction."""

    kind: NodeKind
    depth: int = 0
    name: str = ""
    namespace: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    content: str = ""
    children: List[int] = field(default_factory=list)


class TreeBuilder:
    """Stack-based tree builder for markup token streams.

    Examples:
        >>> from markup_tree.tokenization import tokenize
        >>> result = TreeBuilder().build(tokenize("<a><b>x</b></a>"))
        >>> result.root.children[0].name
        'a'
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Tree building configuration
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_builder")
        self._reset_state()

    def _reset_state(self) -> None:
        self._arena: List[_PendingNode] = [_PendingNode(NodeKind.ROOT)]
        self._stack: List[int] = [ROOT_INDEX]
        self._repairs: List[StructureRepair] = []

    def build(self, tokens: Union[TokenizationResult, Sequence[Token]]) -> BuildResult:
        """Build a document tree from a token stream.

        Args:
            tokens: Either a TokenizationResult or a sequence of tokens

        Returns:
            BuildResult holding the Root and the repairs applied
        """
        start_time = time.time()
        token_list = tokens.tokens if isinstance(tokens, TokenizationResult) else tokens

        self.logger.debug(
            "Starting tree building",
            extra={"token_count": len(token_list)},
        )

        self._reset_state()
        for token in token_list:
            self._process_token(token)

        if len(self._stack) > 1:
            open_names = [self._arena[index].name for index in self._stack[1:]]
            self._repair(
                "unclosed_at_eof",
                f"{len(open_names)} element(s) left open at end of input",
                details={"elements": open_names},
            )

        root = self._materialize()
        result = BuildResult(
            root=root,
            repairs=self._repairs,
            node_count=len(self._arena) - 1,
            processing_time_ms=(time.time() - start_time) * 1000,
        )

        self.logger.debug(
            "Tree building completed",
            extra={
                "node_count": result.node_count,
                "repair_count": result.repair_count,
                "processing_time_ms": result.processing_time_ms,
            },
        )

        return result

    def _repair(
        self,
        repair_type: str,
        description: str,
        token: Optional[Token] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._repairs.append(
            StructureRepair(
                repair_type=repair_type,
                description=description,
                position=token.position.offset if token is not None else None,
                details=details or {},
            )
        )

    def _append(self, node: _PendingNode) -> int:
        """Append ``node`` as the last child of the stack top."""
        index = len(self._arena)
        self._arena.append(node)
        self._arena[self._stack[-1]].children.append(index)
        return index

    @property
    def _current_depth(self) -> int:
        return len(self._stack) - 1

    def _process_token(self, token: Token) -> None:
        if isinstance(token, OpenTagToken):
            self._handle_open_tag(token)
        elif isinstance(token, CloseTagToken):
            self._handle_close_tag(token)
        elif isinstance(token, TextToken):
            self._handle_text(token.content)
        elif isinstance(token, CommentToken):
            self._append(_PendingNode(NodeKind.COMMENT, self._current_depth, content=token.content))
        elif isinstance(token, DoctypeToken):
            self._append(_PendingNode(NodeKind.DOCTYPE, self._current_depth, content=token.content))
        elif isinstance(token, CDataToken):
            if self.config.cdata_as_text:
                self._handle_text(token.content)
            else:
                self.logger.debug(
                    "CDATA section dropped",
                    extra={"offset": token.position.offset},
                )
        elif isinstance(token, XmlDeclarationToken):
            self.logger.debug(
                "XML declaration not materialized",
                extra={"offset": token.position.offset},
            )
        else:
            self.logger.warning(
                "Ignoring unrecognized token",
                extra={"token_type": type(token).__name__},
            )

    def _handle_open_tag(self, token: OpenTagToken) -> None:
        if not token.name:
            self._repair("nameless_tag", "Open tag without a name ignored", token)
            return

        index = self._append(
            _PendingNode(
                NodeKind.ELEMENT,
                self._current_depth,
                name=token.name,
                namespace=token.namespace,
                attributes={k: v for k, v in token.attributes.items() if k},
            )
        )

        if token.self_closing:
            return

        max_depth = self.config.max_depth
        if max_depth is not None and self._current_depth >= max_depth:
            self._repair(
                "depth_limit",
                f"Element <{token.name}> not opened beyond depth {max_depth}",
                token,
            )
            return

        self._stack.append(index)

    def _handle_close_tag(self, token: CloseTagToken) -> None:
        for position in range(len(self._stack) - 1, ROOT_INDEX, -1):
            if self._arena[self._stack[position]].name == token.name:
                implicitly_closed = self._stack[position + 1:]
                if implicitly_closed:
                    names = [self._arena[index].name for index in implicitly_closed]
                    self._repair(
                        "implicit_close",
                        f"</{token.name}> closed {len(names)} open descendant(s)",
                        token,
                        details={"elements": names},
                    )
                del self._stack[position:]
                return

        self._repair(
            "unmatched_close_tag",
            f"Closing tag </{token.name}> without matching open element ignored",
            token,
        )

    def _handle_text(self, content: str) -> None:
        content = content.strip()
        if content:
            self._append(_PendingNode(NodeKind.TEXT, self._current_depth, content=content))

    def _materialize(self) -> Root:
        """Freeze the arena into immutable nodes, children before parents."""
        built: List[Optional[Node]] = [None] * len(self._arena)

        # children always have a larger arena index than their parent
        for index in range(len(self._arena) - 1, -1, -1):
            pending = self._arena[index]
            children = tuple(built[child] for child in pending.children)
            for child in pending.children:
                built[child] = None

            if pending.kind is NodeKind.ELEMENT:
                node: Node = Element(
                    pending.name,
                    pending.namespace,
                    pending.attributes,
                    children,  # type: ignore[arg-type]
                    pending.depth,
                )
            elif pending.kind is NodeKind.TEXT:
                node = Text(pending.content, pending.depth)
            elif pending.kind is NodeKind.COMMENT:
                node = Comment(pending.content, pending.depth)
            elif pending.kind is NodeKind.DOCTYPE:
                node = Doctype(pending.content, pending.depth)
            else:
                node = Root(children)  # type: ignore[arg-type]
            built[index] = node

        return built[ROOT_INDEX]  # type: ignore[return-value]


def build_tree(
    tokens: Union[TokenizationResult, Sequence[Token]],
    config: Optional[TreeConfig] = None,
) -> Root:
    """Build a document tree from tokens and return its Root."""
    return TreeBuilder(config).build(tokens).root
