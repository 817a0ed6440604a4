"""Tests for the arena-based tree builder."""

import pytest

from markup_tree.shared import TreeConfig
from markup_tree.tokenization import (
    CDataToken,
    CloseTagToken,
    CommentToken,
    DoctypeToken,
    MarkupTokenizer,
    OpenTagToken,
    TextToken,
    XmlDeclarationToken,
    tokenize,
)
from markup_tree.tree import (
    BuildResult,
    Comment,
    Doctype,
    Element,
    NodeKind,
    Root,
    StructureRepair,
    Text,
    TreeBuilder,
    build_tree,
)


def build(text, config=None):
    return build_tree(tokenize(text), config)


def walk_with_parent(root):
    stack = [(child, None) for child in root.children]
    while stack:
        node, parent = stack.pop()
        yield node, parent
        stack.extend((child, node) for child in node.children)


class TestStructureRepair:
    """Test repair record validation."""

    def test_empty_type_raises_error(self):
        with pytest.raises(ValueError, match="Repair type"):
            StructureRepair(repair_type="", description="x")

    def test_empty_description_raises_error(self):
        with pytest.raises(ValueError, match="description"):
            StructureRepair(repair_type="implicit_close", description="")


class TestBasicConstruction:
    """Test building well-formed input."""

    def test_nested_elements(self):
        root = build('<div id="a"><p>Hi</p><p>Bye</p></div>')
        assert isinstance(root, Root)
        (div,) = root.children
        assert div == Element(
            "div", "", {"id": "a"},
            (Element("p", children=(Text("Hi", 2),), depth=1),
             Element("p", children=(Text("Bye", 2),), depth=1)),
            0,
        )

    def test_empty_token_stream(self):
        root = build_tree([])
        assert root == Root()

    def test_leaves(self):
        root = build("<!DOCTYPE html><!-- c --><a>t</a>")
        assert root.children[0] == Doctype("html", 0)
        assert root.children[1] == Comment("c", 0)
        assert root.children[2].children == (Text("t", 1),)

    def test_self_closing_elements_do_not_open(self):
        root = build("<p>a<br>b<img src=x.png>c</p>")
        (p,) = root.children
        assert [child.kind for child in p.children] == [
            NodeKind.TEXT, NodeKind.ELEMENT, NodeKind.TEXT, NodeKind.ELEMENT, NodeKind.TEXT,
        ]
        assert p.children[3].attributes == {"src": "x.png"}

    def test_explicit_self_closing_is_honoured(self):
        root = build("<a><b/><c/></a>")
        assert [child.name for child in root.children[0].children] == ["b", "c"]

    def test_namespace_is_kept(self):
        root = build("<svg:g><svg:rect/></svg:g>")
        g = root.children[0]
        assert (g.name, g.namespace) == ("g", "svg")
        assert g.children[0].qualified_name == "svg:rect"

    def test_accepts_tokenization_result(self):
        result = TreeBuilder().build(MarkupTokenizer().tokenize("<a/>"))
        assert isinstance(result, BuildResult)
        assert result.root.children[0].name == "a"
        assert result.node_count == 1
        assert not result.has_repairs


class TestDepthInvariant:
    """Test depth assignment from stack height."""

    def test_depth_is_parent_depth_plus_one(self):
        root = build(
            "<html><body><div><p>one<b>two</b></p><!-- c --></div>"
            "<ul><li>x</li></ul></body></html>"
        )
        for node, parent in walk_with_parent(root):
            if parent is None:
                assert node.depth == 0
            else:
                assert node.depth == parent.depth + 1

    def test_root_level_nodes_have_depth_zero(self):
        root = build("text<a/><!-- c -->")
        assert all(child.depth == 0 for child in root.children)


class TestRepairs:
    """Test tolerance of unbalanced markup."""

    def test_mismatched_close_tag(self):
        """Test that </a> closes everything opened inside a."""
        root = build("<a><b><c></a><d/>")
        a, d = root.children
        assert a.name == "a"
        assert d.name == "d"
        (b,) = a.children
        assert b.name == "b"
        assert b.children[0].name == "c"

    def test_mismatched_close_tag_reports_implicit_close(self):
        result = TreeBuilder().build(tokenize("<a><b><c></a>"))
        assert result.get_repair_summary() == {"implicit_close": 1}
        assert result.repairs[0].details == {"elements": ["b", "c"]}
        assert result.repairs[0].position == 9

    def test_unmatched_close_tag_is_ignored(self):
        result = TreeBuilder().build(tokenize("<a>x</b>y</a>"))
        (a,) = result.root.children
        assert [child.content for child in a.children] == ["x", "y"]
        assert result.get_repair_summary() == {"unmatched_close_tag": 1}

    def test_close_tag_never_closes_root(self):
        root = build("</a><b/>")
        assert [child.name for child in root.children] == ["b"]

    def test_unclosed_elements_at_end(self):
        result = TreeBuilder().build(tokenize("<a><b>text"))
        assert result.root.children[0].children[0].children[0] == Text("text", 2)
        assert result.repairs[-1].repair_type == "unclosed_at_eof"
        assert result.repairs[-1].details == {"elements": ["a", "b"]}

    def test_nearest_matching_open_element_is_closed(self):
        root = build("<a><a>inner</a>outer</a>")
        (outer,) = root.children
        assert outer.children[0].text_content == "inner"
        assert outer.children[1] == Text("outer", 1)

    def test_nameless_open_token_is_skipped(self):
        result = TreeBuilder().build([OpenTagToken(""), TextToken("x")])
        assert result.root.children == (Text("x", 0),)
        assert result.repairs[0].repair_type == "nameless_tag"


class TestTokenHandling:
    """Test per-token materialization rules."""

    def test_text_tokens_are_trimmed_and_empty_ones_dropped(self):
        root = build_tree([OpenTagToken("a"), TextToken("  x  "), TextToken("   "), CloseTagToken("a")])
        assert root.children[0].children == (Text("x", 1),)

    def test_cdata_is_dropped_by_default(self):
        root = build_tree([OpenTagToken("a"), CDataToken("data"), CloseTagToken("a")])
        assert root.children[0].children == ()

    def test_cdata_as_text(self):
        root = build_tree(
            [OpenTagToken("a"), CDataToken(" a < b "), CloseTagToken("a")],
            TreeConfig(cdata_as_text=True),
        )
        assert root.children[0].children == (Text("a < b", 1),)

    def test_xml_declaration_is_not_materialized(self):
        root = build_tree([XmlDeclarationToken('version="1.0"'), OpenTagToken("a", self_closing=True)])
        assert [child.kind for child in root.children] == [NodeKind.ELEMENT]

    def test_comment_and_doctype_tokens(self):
        root = build_tree([DoctypeToken("html"), CommentToken("")])
        assert root.children == (Doctype("html", 0), Comment("", 0))


class TestDepthLimit:
    """Test the optional nesting limit."""

    def test_elements_beyond_limit_are_attached_but_not_opened(self):
        builder = TreeBuilder(TreeConfig(max_depth=1))
        result = builder.build(tokenize("<a><b><c/></b></a>"))
        (a,) = result.root.children
        assert [child.name for child in a.children] == ["b", "c"]
        assert a.children[0].children == ()
        assert result.get_repair_summary()["depth_limit"] == 1


class TestDeepDocuments:
    """Test that construction does not recurse."""

    def test_very_deep_nesting(self):
        depth = 5000
        root = build("<d>" * depth + "x" + "</d>" * depth)
        node = root
        for _ in range(depth):
            (node,) = node.children
        assert node.depth == depth - 1
        assert node.children == (Text("x", depth),)
