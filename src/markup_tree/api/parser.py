"""Core parser API with progressive disclosure for markup parsing.

This module provides the parse entry points, from module-level functions
that cover the common case to a configurable :class:`MarkupParser` that is
reused across documents and owns a tree cache.

Every entry point runs the same pipeline: the XML declaration guard, the
tokenizer and the tree builder. :class:`~markup_tree.shared.MalformedInput`
is the only error raised for bad markup.
"""

import time
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, TextIO, Tuple, Union

from markup_tree.api.cache import TreeCache
from markup_tree.character import decode_markup
from markup_tree.shared import (
    MalformedInput,
    ParserConfig,
    PerformanceMetrics,
    get_logger,
)
from markup_tree.tokenization import (
    MarkupTokenizer,
    TokenizationResult,
    validate_declaration,
)
from markup_tree.tree import BuildResult, Root, TreeBuilder

# Type definitions for input data
InputType = Union[str, bytes, BinaryIO, TextIO, Path]

MS_PER_SECOND = 1000


def _tokenize(
    text: str, config: ParserConfig, correlation_id: Optional[str]
) -> TokenizationResult:
    if config.tokenizer.validate_declaration:
        validate_declaration(text, correlation_id)
    return MarkupTokenizer(config.tokenizer, correlation_id).tokenize(text)


def _build(
    text: str, config: ParserConfig, correlation_id: Optional[str]
) -> Tuple[TokenizationResult, BuildResult]:
    tokenization = _tokenize(text, config, correlation_id)
    return tokenization, TreeBuilder(config.tree, correlation_id).build(tokenization)


def parse(
    input_data: InputType,
    config: Optional[ParserConfig] = None,
    cache: Optional[TreeCache] = None,
    correlation_id: Optional[str] = None,
) -> Root:
    """Parse markup from various input sources with automatic type detection.

    Args:
        input_data: Markup as string, bytes, file-like object, or Path
        config: Optional parser configuration (HTML preset by default)
        cache: Optional tree cache; without one every call builds a new tree
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Root of the built tree

    Raises:
        MalformedInput: If the markup has an unterminated construct or an
            invalid XML declaration
        TypeError: If the input type is not supported

    Examples:
        >>> root = parse('<root><item>value</item></root>')
        >>> root.text("//item")
        'value'
        >>> parse(b'<?xml version="1.0"?><root/>').children[0].name
        'root'
    """
    if isinstance(input_data, str):
        return parse_string(input_data, config, cache, correlation_id)
    if isinstance(input_data, bytes):
        return parse_bytes(input_data, config, cache, correlation_id)
    if isinstance(input_data, Path):
        return parse_file(input_data, config=config, cache=cache, correlation_id=correlation_id)
    if hasattr(input_data, "read"):
        content = input_data.read()
        get_logger(__name__, correlation_id, "parse").debug(
            "File-like object read",
            extra={"content_type": type(content).__name__, "content_length": len(content)},
        )
        return parse(content, config, cache, correlation_id)

    raise TypeError(f"Unsupported input type: {type(input_data).__name__}")


def parse_string(
    text: str,
    config: Optional[ParserConfig] = None,
    cache: Optional[TreeCache] = None,
    correlation_id: Optional[str] = None,
) -> Root:
    """Parse markup from a string.

    A cache passed here should only be shared between calls that use the
    same configuration, since entries are keyed by text alone.

    Examples:
        >>> parse_string('<p id="x">Hi</p>').attr("//p", "id")
        'x'
    """
    config = config or ParserConfig()
    logger = get_logger(__name__, correlation_id, "parse_string")

    logger.info(
        "Starting string parse operation",
        extra={"content_length": len(text), "cached": cache is not None},
    )

    try:
        if cache is not None:
            return cache.get_or_build(text, lambda: _build(text, config, correlation_id)[1].root)
        return _build(text, config, correlation_id)[1].root
    except MalformedInput as e:
        logger.warning(
            "Malformed input rejected",
            extra={"kind": e.kind.name, "position": e.position},
        )
        raise


def parse_bytes(
    data: bytes,
    config: Optional[ParserConfig] = None,
    cache: Optional[TreeCache] = None,
    correlation_id: Optional[str] = None,
) -> Root:
    """Decode markup bytes and parse the resulting text."""
    decoded = decode_markup(data)
    get_logger(__name__, correlation_id, "parse_bytes").debug(
        "Bytes decoded",
        extra={
            "encoding": decoded.encoding,
            "method": decoded.method.value,
            "issues": decoded.issues,
        },
    )
    return parse_string(decoded.text, config, cache, correlation_id)


def parse_file(
    file_path: Union[str, Path],
    encoding: Optional[str] = None,
    config: Optional[ParserConfig] = None,
    cache: Optional[TreeCache] = None,
    correlation_id: Optional[str] = None,
) -> Root:
    """Parse markup from a file.

    Args:
        file_path: Path to the markup file (string or Path object)
        encoding: Optional encoding override (detected if not provided)
        config: Optional parser configuration
        cache: Optional tree cache
        correlation_id: Optional correlation ID for request tracking

    Raises:
        OSError: If the file cannot be read
        MalformedInput: If the markup is malformed
    """
    path_obj = Path(file_path) if isinstance(file_path, str) else file_path

    get_logger(__name__, correlation_id, "parse_file").info(
        "Starting file parse operation",
        extra={"file_path": str(path_obj), "encoding_override": encoding},
    )

    data = path_obj.read_bytes()
    if encoding:
        return parse_string(data.decode(encoding), config, cache, correlation_id)
    return parse_bytes(data, config, cache, correlation_id)


class MarkupParser:
    """Configurable markup parser for reuse across many documents.

    The parser owns a :class:`TreeCache` when its configuration enables
    caching and no cache is injected, so parsing the same text twice returns
    the same tree.

    Attributes:
        config: Parser configuration
        cache: Tree cache in use, or None
        correlation_id: Correlation ID for request tracking

    Examples:
        Basic usage with default configuration:
        >>> parser = MarkupParser()
        >>> parser.parse('<root><item>value</item></root>').count("//item")
        1

        XML documents:
        >>> parser = MarkupParser(ParserConfig.xml())
        >>> parser.parse('<script><b/></script>').count("//b")
        1
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        cache: Optional[TreeCache] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize markup parser.

        Args:
            config: Parser configuration (defaults to the HTML preset)
            cache: Optional shared tree cache, used regardless of config
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        self.config.validate()
        self.correlation_id = correlation_id or self.config.correlation_id

        if cache is None and self.config.cache.enabled:
            cache = TreeCache(self.config.cache.max_entries)
        self.cache = cache

        self.logger = get_logger(__name__, self.correlation_id, "markup_parser")

        self._parse_count = 0
        self._failed_parses = 0
        self._metrics = PerformanceMetrics()

        self.logger.info(
            "MarkupParser initialized",
            extra={"cache_enabled": self.cache is not None},
        )

    def _read(self, input_data: InputType) -> str:
        if isinstance(input_data, Path):
            input_data = input_data.read_bytes()
        elif hasattr(input_data, "read"):
            input_data = input_data.read()  # type: ignore[union-attr]

        if isinstance(input_data, bytes):
            return decode_markup(input_data).text
        if isinstance(input_data, str):
            return input_data
        raise TypeError(f"Unsupported input type: {type(input_data).__name__}")

    def parse(self, input_data: InputType) -> Root:
        """Parse markup into a tree, consulting the cache first.

        Raises:
            MalformedInput: If the markup is malformed
        """
        start_time = time.time()
        text = self._read(input_data)
        built: Dict[str, BuildResult] = {}

        def build() -> Root:
            built["result"] = self._build_counted(text)
            return built["result"].root

        try:
            root = self.cache.get_or_build(text, build) if self.cache is not None else build()
        except MalformedInput as e:
            self._parse_count += 1
            self._failed_parses += 1
            self.logger.warning(
                "Malformed input rejected",
                extra={"kind": e.kind.name, "position": e.position},
            )
            raise

        processing_time = (time.time() - start_time) * MS_PER_SECOND
        self._parse_count += 1
        self._metrics.processing_time_ms += processing_time
        self._metrics.characters_processed += len(text)

        result = built.get("result")
        if result is not None:
            self._metrics.nodes_built += result.node_count
            if self.cache is not None:
                self._metrics.cache_misses += 1
        elif self.cache is not None:
            self._metrics.cache_hits += 1

        self.logger.debug(
            "Parse completed",
            extra={
                "processing_time_ms": processing_time,
                "cache_hit": result is None and self.cache is not None,
                "repair_count": result.repair_count if result is not None else 0,
            },
        )

        return root

    def build(self, input_data: InputType) -> BuildResult:
        """Parse without the cache and return the builder's full report."""
        return self._build_counted(self._read(input_data))

    def _build_counted(self, text: str) -> BuildResult:
        tokenization, result = _build(text, self.config, self.correlation_id)
        self._metrics.tokens_generated += tokenization.token_count
        return result

    def tokenize(self, text: str) -> TokenizationResult:
        """Run the declaration guard and tokenizer only.

        Raises:
            MalformedInput: If the markup is malformed
        """
        result = _tokenize(text, self.config, self.correlation_id)
        self._metrics.tokens_generated += result.token_count
        return result

    def clear_cache(self) -> None:
        """Drop cached trees; trees already returned remain usable."""
        if self.cache is not None:
            self.cache.clear()
            self.logger.info("Parser cache cleared")

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics.

        Returns:
            Dictionary with parse counts, accumulated metrics and cache state
        """
        return {
            "total_parses": self._parse_count,
            "failed_parses": self._failed_parses,
            "average_processing_time_ms": (
                self._metrics.processing_time_ms / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "metrics": self._metrics.to_dict(),
            "cache": self.cache.statistics.to_dict() if self.cache is not None else None,
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._failed_parses = 0
        self._metrics = PerformanceMetrics()

        self.logger.info("Parser statistics reset")
