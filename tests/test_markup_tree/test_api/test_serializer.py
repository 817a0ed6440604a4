"""Tests for markup serialization and the debugging tree view."""

from markup_tree import format_tree, parse, to_html
from markup_tree.tree import Comment, Doctype, Element, Root, Text


class TestToHtml:
    """Test serialization back to markup."""

    def test_element_with_attributes(self):
        root = parse('<div class="a b" id="main"><p>Hi</p></div>')
        assert to_html(root) == '<div class="a b" id="main"><p>Hi</p></div>'

    def test_root_contributes_only_children(self):
        assert to_html(parse("<a/><b/>")) == "<a></a><b></b>"
        assert to_html(Root()) == ""

    def test_text_and_attribute_values_are_escaped(self):
        node = Element("p", attrs={"title": 'say "hi"'}, children=(Text("1 < 2 & 3", 1),))
        assert to_html(node) == '<p title="say &quot;hi&quot;">1 &lt; 2 &amp; 3</p>'

    def test_void_elements_are_self_closed(self):
        assert to_html(parse('<p>a<br>b<img src="x.png"></p>')) == '<p>a<br />b<img src="x.png" /></p>'

    def test_void_elements_match_case_insensitively(self):
        assert to_html(Element("BR")) == "<BR />"

    def test_custom_self_closing_set(self):
        assert to_html(Element("br"), self_closing=frozenset()) == "<br></br>"
        assert to_html(Element("x"), self_closing={"x"}) == "<x />"

    def test_comment_and_doctype(self):
        assert to_html(Comment("note")) == "<!--note-->"
        assert to_html(Doctype("html")) == "<!html>"

    def test_namespace_follows_name_in_opening_tag(self):
        assert to_html(Element("rect", "svg")) == "<rect:svg></rect>"

    def test_subtree(self):
        root = parse("<ul><li>one</li><li>two</li></ul>")
        assert to_html(root.first("//li[2]")) == "<li>two</li>"

    def test_round_trip(self):
        source = (
            '<html><body><div id="main" class="x y"><h1>Title</h1>'
            "<p>First<b>bold</b>text</p><!--note--><ul><li>1</li><li>2</li></ul>"
            "</div></body></html>"
        )
        root = parse(source)
        assert to_html(root) == source
        assert parse(to_html(root)) == root

    def test_very_deep_tree(self):
        depth = 5000
        source = "<d>" * depth + "x" + "</d>" * depth
        assert to_html(parse(source)) == source


class TestFormatTree:
    """Test the indented debugging view."""

    def test_format(self):
        root = parse('<!DOCTYPE html><div id="a"><p>Hi</p><!-- c --></div>')
        assert format_tree(root) == "\n".join(
            [
                "ROOT (children: 2)",
                '  DOCTYPE: "html" (depth: 0)',
                '  <div [id="a"]> (depth: 0, children: 2)',
                "    <p> (depth: 1, children: 1)",
                '      TEXT: "Hi" (depth: 2)',
                "    </p>",
                '    COMMENT: "c" (depth: 1)',
                "  </div>",
            ]
        )

    def test_multiple_attributes(self):
        view = format_tree(Element("a", attrs={"href": "/", "rel": "nav"}))
        assert view.splitlines() == [
            '<a [href="/", rel="nav"]> (depth: 0, children: 0)',
            "</a>",
        ]

    def test_leaf(self):
        assert format_tree(Text("x", 3)) == 'TEXT: "x" (depth: 3)'
