"""Shared utilities for markup parsing.

This module provides configuration objects, error types, metrics and the
correlation-aware logger used across all processing layers.
"""

from .config import (
    RAW_TEXT_ELEMENTS,
    SELF_CLOSING_TAGS,
    CacheConfig,
    ParserConfig,
    TokenizerConfig,
    TreeConfig,
)
from .errors import (
    MalformedInput,
    MalformedKind,
    MarkupTreeError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import PerformanceMetrics

__all__ = [
    "RAW_TEXT_ELEMENTS",
    "SELF_CLOSING_TAGS",
    "CacheConfig",
    "ParserConfig",
    "TokenizerConfig",
    "TreeConfig",
    "MalformedInput",
    "MalformedKind",
    "MarkupTreeError",
    "CorrelationLogger",
    "get_logger",
    "PerformanceMetrics",
]
