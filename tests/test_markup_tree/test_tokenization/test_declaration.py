"""Tests for the XML declaration guard."""

import pytest

from markup_tree.shared import MalformedInput, MalformedKind
from markup_tree.tokenization import validate_declaration


class TestValidDeclarations:
    """Test inputs the guard accepts."""

    @pytest.mark.parametrize(
        "text",
        [
            '<?xml version="1.0"?><a/>',
            "<?xml version='1.1' encoding='UTF-8'?><a/>",
            '<?xml version="1.0" encoding="utf-8" standalone="yes"?><a/>',
            '<?xml version="1.0" standalone="no"?><a/>',
            '   \n<?xml version="1.0"?><a/>',
        ],
    )
    def test_valid_declaration(self, text):
        validate_declaration(text)

    @pytest.mark.parametrize("text", ["<a/>", "", "text <?xml nonsense?>"])
    def test_input_without_leading_declaration_is_ignored(self, text):
        validate_declaration(text)


class TestInvalidDeclarations:
    """Test inputs the guard rejects."""

    def test_invalid_standalone_value(self):
        with pytest.raises(MalformedInput) as info:
            validate_declaration('<?xml standalone="maybe"?><a/>')
        assert info.value.kind is MalformedKind.INVALID_DECLARATION

    def test_standalone_checked_after_version(self):
        with pytest.raises(MalformedInput, match="standalone"):
            validate_declaration('<?xml version="1.0" standalone="maybe"?><a/>')

    def test_missing_version(self):
        with pytest.raises(MalformedInput, match="version"):
            validate_declaration('<?xml encoding="utf-8"?><a/>')

    def test_non_numeric_version(self):
        with pytest.raises(MalformedInput, match="version"):
            validate_declaration('<?xml version="one"?><a/>')

    def test_empty_encoding(self):
        with pytest.raises(MalformedInput, match="encoding"):
            validate_declaration('<?xml version="1.0" encoding=""?><a/>')

    def test_doubled_question_mark_at_start(self):
        with pytest.raises(MalformedInput) as info:
            validate_declaration('<??xml version="1.0"?><a/>')
        assert info.value.kind is MalformedKind.INVALID_DECLARATION

    def test_doubled_question_mark_at_end(self):
        with pytest.raises(MalformedInput, match="processing instruction"):
            validate_declaration('<?xml version="1.0"??><a/>')

    def test_unterminated_declaration(self):
        with pytest.raises(MalformedInput) as info:
            validate_declaration('<?xml version="1.0"')
        assert info.value.kind is MalformedKind.UNCLOSED_DECLARATION

    def test_error_position_after_leading_whitespace(self):
        with pytest.raises(MalformedInput) as info:
            validate_declaration('\n  <?xml version="x"?>')
        assert info.value.position == 3
        assert (info.value.line, info.value.column) == (2, 3)
