"""Tests for byte input decoding."""

import pytest

from markup_tree.character import (
    BOMDetector,
    DeclarationSniffer,
    DetectionMethod,
    decode_markup,
)


class TestBOMDetector:
    """Test byte order mark detection."""

    @pytest.mark.parametrize(
        "data,expected",
        [
            (b"\xef\xbb\xbf<a/>", ("utf-8", 3)),
            (b"\xff\xfe<\x00", ("utf-16-le", 2)),
            (b"\xfe\xff\x00<", ("utf-16-be", 2)),
            (b"\xff\xfe\x00\x00<\x00\x00\x00", ("utf-32-le", 4)),
            (b"\x00\x00\xfe\xff\x00\x00\x00<", ("utf-32-be", 4)),
        ],
    )
    def test_detect(self, data, expected):
        assert BOMDetector().detect(data) == expected

    def test_no_bom(self):
        assert BOMDetector().detect(b"<a/>") is None
        assert BOMDetector().detect(b"") is None


class TestDeclarationSniffer:
    """Test encoding declarations in the document header."""

    def test_xml_declaration(self):
        sniffer = DeclarationSniffer()
        assert sniffer.xml_declaration(b'<?xml version="1.0" encoding="ISO-8859-1"?>') == "iso-8859-1"
        assert sniffer.xml_declaration(b"  <?xml version='1.0' encoding='utf-8'?>") == "utf-8"
        assert sniffer.xml_declaration(b'<?xml version="1.0"?>') is None

    def test_meta_charset(self):
        sniffer = DeclarationSniffer()
        assert sniffer.meta_charset(b'<html><head><meta charset="Shift_JIS">') == "shift_jis"
        assert sniffer.meta_charset(
            b'<meta http-equiv="Content-Type" content="text/html; charset=windows-1252">'
        ) == "windows-1252"
        assert sniffer.meta_charset(b"<p>charset=utf-8</p>") is None

    def test_declarations_beyond_header_are_ignored(self):
        data = b" " * 2000 + b'<meta charset="koi8-r">'
        assert DeclarationSniffer().meta_charset(data) is None


class TestDecodeMarkup:
    """Test the decoding cascade."""

    def test_bom_wins_and_is_stripped(self):
        decoded = decode_markup("\ufeff<a>é</a>".encode("utf-16-le"))
        assert decoded.text == "<a>é</a>"
        assert decoded.method is DetectionMethod.BOM

    def test_xml_declaration(self):
        data = '<?xml version="1.0" encoding="windows-1252"?><a>€</a>'.encode("cp1252")
        decoded = decode_markup(data)
        assert decoded.text.endswith("<a>€</a>")
        assert decoded.method is DetectionMethod.XML_DECLARATION
        assert decoded.encoding == "windows-1252"

    def test_meta_charset(self):
        data = '<meta charset="iso-8859-15"><p>€</p>'.encode("iso-8859-15")
        decoded = decode_markup(data)
        assert decoded.text.endswith("<p>€</p>")
        assert decoded.method is DetectionMethod.META_CHARSET

    def test_utf8_default(self):
        decoded = decode_markup("<p>日本</p>".encode("utf-8"))
        assert decoded.text == "<p>日本</p>"
        assert decoded.method is DetectionMethod.UTF8
        assert decoded.issues == []

    def test_unknown_declared_encoding_falls_through(self):
        decoded = decode_markup(b'<?xml version="1.0" encoding="no-such-codec"?><a/>')
        assert decoded.method is DetectionMethod.UTF8
        assert decoded.issues == ["Unknown declared encoding: no-such-codec"]

    def test_wrong_declared_encoding_falls_through(self):
        data = b'<meta charset="utf-8"><p>\xe9</p>'
        decoded = decode_markup(data)
        assert decoded.method is DetectionMethod.FALLBACK
        assert decoded.encoding == "latin-1"
        assert decoded.text.endswith("<p>é</p>")
        assert len(decoded.issues) == 2

    def test_never_fails(self):
        decoded = decode_markup(bytes(range(256)))
        assert len(decoded.text) == 256

    def test_empty_input(self):
        decoded = decode_markup(b"")
        assert decoded.text == ""
        assert decoded.method is DetectionMethod.UTF8
