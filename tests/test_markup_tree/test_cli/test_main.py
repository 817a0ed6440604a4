"""Tests for the markup-tree command-line interface."""

import json

import pytest

from markup_tree import __version__
from markup_tree.cli import main
from markup_tree.cli.main import create_argument_parser

DOCUMENT = '<div class="a b"><p id="x">Hi</p><p>Bye <b>now</b></p></div>'


@pytest.fixture
def document(tmp_path):
    path = tmp_path / "doc.html"
    path.write_text(DOCUMENT, encoding="utf-8")
    return path


@pytest.fixture
def broken(tmp_path):
    path = tmp_path / "broken.html"
    path.write_text("<p>text<!-- unterminated", encoding="utf-8")
    return path


class TestArgumentParser:
    """Test argument handling."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage: markup-tree" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--version"])
        assert info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_verbose_and_quiet_are_exclusive(self):
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["-v", "-q", "tree", "x.html"])

    def test_query_defaults(self):
        args = create_argument_parser().parse_args(["query", "doc.html", "//p"])
        assert args.format == "text"
        assert args.attribute is None
        assert not args.xml


class TestQueryCommand:
    """Test the query command."""

    def test_text_output(self, document, capsys):
        assert main(["query", str(document), "//p"]) == 0
        assert capsys.readouterr().out.splitlines() == ["Hi", "Byenow"]

    def test_attribute_output(self, document, capsys):
        assert main(["query", str(document), "//p", "--attribute", "id"]) == 0
        assert capsys.readouterr().out.splitlines() == ["x", ""]

    def test_html_output(self, document, capsys):
        assert main(["query", str(document), "//p[2]", "-f", "html"]) == 0
        assert capsys.readouterr().out.strip() == "<p>Bye<b>now</b></p>"

    def test_json_output(self, document, capsys):
        assert main(["query", str(document), "#x", "--format", "json"]) == 0
        (match,) = json.loads(capsys.readouterr().out)
        assert match["name"] == "p"
        assert match["attributes"] == {"id": "x"}
        assert match["children"][0]["content"] == "Hi"

    def test_no_matches(self, document, capsys):
        assert main(["query", str(document), "//table"]) == 1
        assert capsys.readouterr().out == ""

    def test_malformed_file(self, broken, capsys):
        assert main(["query", str(broken), "//p"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(["query", str(tmp_path / "missing.html"), "//p"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_xml_preset(self, tmp_path, capsys):
        path = tmp_path / "doc.xml"
        path.write_text("<script><item>1</item></script>", encoding="utf-8")
        assert main(["--xml", "query", str(path), "//item"]) == 0
        assert capsys.readouterr().out.strip() == "1"
        assert main(["query", str(path), "//item"]) == 1


class TestTreeAndDumpCommands:
    """Test the tree and dump commands."""

    def test_tree(self, document, capsys):
        assert main(["tree", str(document)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "ROOT (children: 1)"
        assert lines[1] == '  <div [class="a b"]> (depth: 0, children: 2)'
        assert lines[-1] == "  </div>"

    def test_dump(self, document, capsys):
        assert main(["dump", str(document)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["type"] == "root"
        assert data["children"][0]["name"] == "div"

    def test_dump_malformed(self, broken, capsys):
        assert main(["dump", str(broken)]) == 1
        assert "Unclosed comment" in capsys.readouterr().err


class TestCheckCommand:
    """Test the check command."""

    def test_all_valid(self, document, capsys):
        assert main(["check", str(document)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Checked 1 files, 1 valid")
        assert f"✓ {document}" in out

    def test_reports_repairs(self, tmp_path, capsys):
        path = tmp_path / "unbalanced.html"
        path.write_text("<a><b></a><c>", encoding="utf-8")
        assert main(["check", str(path)]) == 0
        assert "Repairs: implicit_close: 1, unclosed_at_eof: 1" in capsys.readouterr().out

    def test_invalid_file_fails(self, document, broken, capsys):
        assert main(["check", str(document), str(broken)]) == 1
        out = capsys.readouterr().out
        assert out.startswith("Checked 2 files, 1 valid")
        assert f"✗ {broken}" in out
        assert "Error: Unclosed comment" in out

    def test_json_output(self, document, broken, capsys):
        assert main(["check", str(document), str(broken), "--format", "json"]) == 1
        valid, invalid = json.loads(capsys.readouterr().out)
        assert valid == {"file": str(document), "valid": True, "node_count": 7, "repairs": {}}
        assert invalid["valid"] is False
        assert invalid["error"].startswith("Unclosed comment")
