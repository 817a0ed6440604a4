"""Result objects for markup parsing.

This module defines the metrics record shared by the tree builder, the
memoization cache and the parser API.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class PerformanceMetrics:
    """Accumulated performance metrics for parsing operations."""

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    tokens_generated: int = 0
    nodes_built: int = 0
    cache_hits: int = 0
    cache_misses: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def tokens_per_second(self) -> float:
        """Calculate tokens generated per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tokens_generated * 1000.0) / self.processing_time_ms

    @property
    def cache_hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total_accesses = self.cache_hits + self.cache_misses
        if total_accesses == 0:
            return 0.0
        return self.cache_hits / total_accesses

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to a plain dictionary."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "characters_processed": self.characters_processed,
            "tokens_generated": self.tokens_generated,
            "nodes_built": self.nodes_built,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "cache_hit_rate": self.cache_hit_rate,
        }
