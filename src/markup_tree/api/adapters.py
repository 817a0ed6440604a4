"""Conversion between node trees and ElementTree-compatible libraries.

Adapters exist for the standard library's :mod:`xml.etree.ElementTree` and
for :mod:`lxml.etree` (an optional dependency, installed with the ``lxml``
extra). Both share one conversion routine since the two libraries expose
the same element factory API.

Mapping rules:

* a Root with a single Element child converts to that element, anything
  else is wrapped in a ``wrapper_tag`` element
* Text becomes the ``text`` of its parent or the ``tail`` of the preceding
  sibling element
* Comments become comment nodes and Doctypes are dropped
* namespace prefixes are not carried over; elements use their local name
"""

import time
from abc import ABC, abstractmethod
from types import ModuleType
from typing import Any, List, Optional, Tuple

from markup_tree.shared import ParserConfig, get_logger
from markup_tree.tree.nodes import Node, NodeKind, Root

DEFAULT_WRAPPER_TAG = "root"


def _append_text(parent: Any, content: str) -> None:
    if len(parent):
        last = parent[-1]
        last.tail = (last.tail or "") + content
    else:
        parent.text = (parent.text or "") + content


class IntegrationAdapter(ABC):
    """Base class for conversions to and from an element library."""

    name: str = ""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the integration adapter.

        Args:
            correlation_id: Optional correlation ID for request tracking
        """
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, f"{self.name}_adapter")

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the target library can be imported."""

    @abstractmethod
    def _module(self) -> ModuleType:
        """Return the element module, raising ImportError when missing."""

    def _keep_attribute(self, name: str) -> bool:
        return True

    def to_target(self, root: Root, wrapper_tag: str = DEFAULT_WRAPPER_TAG) -> Any:
        """Convert a tree into an element of the target library.

        Args:
            root: Root of a built tree
            wrapper_tag: Tag of the element wrapping several top-level nodes

        Returns:
            Element of the target library
        """
        start_time = time.time()
        etree = self._module()

        content = [child for child in root.children if child.kind is not NodeKind.DOCTYPE]
        if len(content) == 1 and content[0].kind is NodeKind.ELEMENT:
            top = self._make_element(etree, content[0])
            pending: List[Tuple[Node, Any]] = [
                (child, top) for child in reversed(content[0].children)
            ]
        else:
            top = etree.Element(wrapper_tag)
            pending = [(child, top) for child in reversed(content)]

        # pending holds (node, parent) pairs; popping keeps document order
        while pending:
            node, parent = pending.pop()
            if node.kind is NodeKind.ELEMENT:
                element = self._make_element(etree, node)
                parent.append(element)
                pending.extend((child, element) for child in reversed(node.children))
            elif node.kind is NodeKind.TEXT:
                _append_text(parent, node.content)
            elif node.kind is NodeKind.COMMENT:
                parent.append(etree.Comment(node.content))

        self._logger.debug(
            "Tree converted",
            extra={"processing_time_ms": (time.time() - start_time) * 1000},
        )
        return top

    def _make_element(self, etree: ModuleType, node: Node) -> Any:
        attributes = {
            name: value for name, value in node.attributes.items()
            if self._keep_attribute(name)
        }
        return etree.Element(node.name, attributes)

    def from_target(self, element: Any) -> Root:
        """Convert an element of the target library into a tree.

        The element is serialized and parsed with the XML preset.
        """
        from markup_tree.api.parser import parse_string

        etree = self._module()
        text = etree.tostring(element, encoding="unicode")
        return parse_string(text, ParserConfig.xml(), correlation_id=self.correlation_id)


class ElementTreeAdapter(IntegrationAdapter):
    """Adapter for the standard library's xml.etree.ElementTree."""

    name = "etree"

    def is_available(self) -> bool:
        return True

    def _module(self) -> ModuleType:
        import xml.etree.ElementTree as ET

        return ET


class LxmlAdapter(IntegrationAdapter):
    """Adapter for lxml.etree."""

    name = "lxml"

    def is_available(self) -> bool:
        """Check if lxml is available."""
        try:
            import lxml.etree  # noqa: F401
        except ImportError:
            return False
        return True

    def _module(self) -> ModuleType:
        try:
            import lxml.etree
        except ImportError as e:
            raise ImportError(
                "lxml is required for this conversion; install markup-tree[lxml]"
            ) from e
        return lxml.etree

    def _keep_attribute(self, name: str) -> bool:
        # lxml only accepts namespace-free attribute names
        if ":" in name or name == "xmlns":
            self._logger.debug(
                "Namespaced attribute skipped",
                extra={"attribute": name},
            )
            return False
        return True


def to_element_tree(root: Root, wrapper_tag: str = DEFAULT_WRAPPER_TAG) -> Any:
    """Convert a tree into an ``xml.etree.ElementTree.Element``."""
    return ElementTreeAdapter().to_target(root, wrapper_tag)


def from_element_tree(element: Any) -> Root:
    return ElementTreeAdapter().from_target(element)


def to_lxml(root: Root, wrapper_tag: str = DEFAULT_WRAPPER_TAG) -> Any:
    """Convert a tree into an ``lxml.etree._Element``.

    Raises:
        ImportError: If lxml is not installed
    """
    return LxmlAdapter().to_target(root, wrapper_tag)


def from_lxml(element: Any) -> Root:
    return LxmlAdapter().from_target(element)
