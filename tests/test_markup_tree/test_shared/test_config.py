"""Tests for configuration classes."""

import pytest

from markup_tree.shared import (
    RAW_TEXT_ELEMENTS,
    SELF_CLOSING_TAGS,
    CacheConfig,
    ParserConfig,
    TokenizerConfig,
    TreeConfig,
)


class TestTokenizerConfig:
    """Test tokenizer configuration defaults and validation."""

    def test_defaults(self):
        """Test default raw-text and self-closing sets."""
        config = TokenizerConfig()
        assert config.raw_text_elements == {"script", "style", "textarea", "iframe", "noscript"}
        assert "br" in config.self_closing_tags
        assert len(config.self_closing_tags) == 13
        assert config.validate_declaration is True

    def test_self_closing_names_are_lowercased(self):
        """Test that self-closing names are normalized to lowercase."""
        config = TokenizerConfig(self_closing_tags={"BR", "Img"})
        assert config.self_closing_tags == frozenset({"br", "img"})

    def test_sets_are_frozen(self):
        """Test that plain sets are converted to frozensets."""
        config = TokenizerConfig(raw_text_elements={"script"})
        assert isinstance(config.raw_text_elements, frozenset)

    def test_empty_raw_text_name_raises_error(self):
        """Test that an empty raw-text element name is rejected."""
        with pytest.raises(ValueError, match="raw_text_elements"):
            TokenizerConfig(raw_text_elements={""})

    def test_empty_self_closing_name_raises_error(self):
        """Test that an empty self-closing name is rejected."""
        with pytest.raises(ValueError, match="self_closing_tags"):
            TokenizerConfig(self_closing_tags={"br", ""})


class TestTreeConfig:
    """Test tree builder configuration."""

    def test_defaults(self):
        config = TreeConfig()
        assert config.cdata_as_text is False
        assert config.max_depth is None

    @pytest.mark.parametrize("max_depth", [0, -1])
    def test_non_positive_max_depth_raises_error(self, max_depth):
        """Test that max_depth must be positive."""
        with pytest.raises(ValueError, match="max_depth"):
            TreeConfig(max_depth=max_depth)


class TestCacheConfig:
    """Test cache configuration."""

    def test_defaults(self):
        config = CacheConfig()
        assert config.enabled is True
        assert config.max_entries is None

    def test_zero_max_entries_raises_error(self):
        with pytest.raises(ValueError, match="max_entries"):
            CacheConfig(max_entries=0)


class TestParserConfig:
    """Test aggregate configuration and presets."""

    def test_html_preset_uses_defaults(self):
        """Test that the HTML preset matches the default configuration."""
        config = ParserConfig.html()
        assert config.tokenizer.raw_text_elements == RAW_TEXT_ELEMENTS
        assert config.tokenizer.self_closing_tags == SELF_CLOSING_TAGS
        assert config.cache.enabled is True

    def test_xml_preset_has_no_implicit_elements(self):
        """Test that the XML preset disables raw-text and void elements."""
        config = ParserConfig.xml()
        assert config.tokenizer.raw_text_elements == frozenset()
        assert config.tokenizer.self_closing_tags == frozenset()

    def test_validate_accepts_presets(self):
        ParserConfig.html().validate()
        ParserConfig.xml().validate()

    def test_validate_rejects_wrong_component_type(self):
        """Test that validate() catches misplaced component configs."""
        config = ParserConfig(tokenizer=TreeConfig())  # type: ignore[arg-type]
        with pytest.raises(TypeError, match="tokenizer"):
            config.validate()
