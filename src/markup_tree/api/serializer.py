"""Serialization of node trees back to markup and to a debugging view.

Both functions walk the tree with an explicit stack, so arbitrarily deep
documents serialize without hitting the recursion limit.
"""

import html
from typing import AbstractSet, List, Optional, Union

from markup_tree.shared.config import SELF_CLOSING_TAGS
from markup_tree.tree.nodes import Node, NodeKind

INDENT = "  "


def _attribute_string(node: Node) -> str:
    return "".join(
        f' {name}="{html.escape(value)}"' for name, value in node.attributes.items()
    )


def to_html(node: Node, self_closing: Optional[AbstractSet[str]] = None) -> str:
    """Serialize a node and its subtree to markup text.

    Text is HTML-escaped, comments and doctypes are written with their
    markers, and a Root contributes only its children. Elements whose
    lowercased name is in ``self_closing`` are written as ``<name attrs />``
    and their children are skipped. A namespace prefix is written after the
    tag name of the opening tag as ``name:prefix``.

    Args:
        node: Any node of a built tree
        self_closing: Tag names written self-closed (default: the HTML void
            elements)

    Examples:
        >>> from markup_tree import parse
        >>> to_html(parse('<p class="x">a &amp; b<br></p>'))
        '<p class="x">a &amp;amp; b<br /></p>'
    """
    void_tags = SELF_CLOSING_TAGS if self_closing is None else self_closing
    parts: List[str] = []
    stack: List[Union[Node, str]] = [node]

    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue

        kind = item.kind
        if kind is NodeKind.TEXT:
            parts.append(html.escape(item.content))
        elif kind is NodeKind.COMMENT:
            parts.append(f"<!--{item.content}-->")
        elif kind is NodeKind.DOCTYPE:
            parts.append(f"<!{item.content}>")
        elif kind is NodeKind.ELEMENT:
            attrs = _attribute_string(item)
            if item.name.lower() in void_tags:
                parts.append(f"<{item.name}{attrs} />")
                continue
            namespace = f":{item.namespace}" if item.namespace else ""
            parts.append(f"<{item.name}{namespace}{attrs}>")
            stack.append(f"</{item.name}>")
            stack.extend(reversed(item.children))
        else:
            stack.extend(reversed(item.children))

    return "".join(parts)


def format_tree(node: Node) -> str:
    """Render an indented, human readable view of a tree for debugging.

    Examples:
        >>> from markup_tree import parse
        >>> print(format_tree(parse("<p>Hi</p>")))
        ROOT (children: 1)
          <p> (depth: 0, children: 1)
            TEXT: "Hi" (depth: 1)
          </p>
    """
    lines: List[str] = []
    stack: List[Union[tuple, str]] = [(node, 0)]

    while stack:
        item = stack.pop()
        if isinstance(item, str):
            lines.append(item)
            continue

        current, level = item
        spaces = INDENT * level
        kind = current.kind

        if kind is NodeKind.ROOT:
            lines.append(f"{spaces}ROOT (children: {current.child_count})")
        elif kind is NodeKind.ELEMENT:
            attrs = ""
            if current.attributes:
                attrs = " [" + ", ".join(
                    f'{name}="{value}"' for name, value in current.attributes.items()
                ) + "]"
            lines.append(
                f"{spaces}<{current.name}{attrs}> "
                f"(depth: {current.depth}, children: {current.child_count})"
            )
            stack.append(f"{spaces}</{current.name}>")
        else:
            label = kind.name
            lines.append(f'{spaces}{label}: "{current.content}" (depth: {current.depth})')
            continue

        stack.extend((child, level + 1) for child in reversed(current.children))

    return "\n".join(lines)
