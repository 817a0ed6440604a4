"""Content-addressed memoization of built trees.

A :class:`TreeCache` maps the SHA-256 digest of a source text to the Root
built from it. Trees are immutable, so one published Root can be shared by
every caller. Concurrent first requests for the same text are coalesced:
one thread builds, the others wait for its result.
"""

import hashlib
import threading
from collections import OrderedDict
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from markup_tree.shared.logging import get_logger
from markup_tree.tree.nodes import Root

logger = get_logger(__name__, component="tree_cache")


@dataclass
class CacheStatistics:
    """Counters of a TreeCache."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "size": self.size,
            "hit_rate": self.hit_rate,
        }


class TreeCache:
    """Thread-safe cache of built trees keyed by a hash of their source text.

    Args:
        max_entries: Optional bound; least recently used trees are evicted
            once it is exceeded. ``None`` keeps every entry.

    Examples:
        >>> cache = TreeCache()
        >>> root = cache.get_or_build("<a/>", lambda: Root())
        >>> cache.get_or_build("<a/>", lambda: Root()) is root
        True
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, Root]" = OrderedDict()
        self._in_flight: Dict[str, "Future[Root]"] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @staticmethod
    def key_for(text: str) -> str:
        """Cache key of a source text."""
        return hashlib.sha256(text.encode("utf-8", errors="surrogatepass")).hexdigest()

    def get(self, text: str) -> Optional[Root]:
        """Return the cached tree for ``text`` without building one."""
        key = self.key_for(text)
        with self._lock:
            root = self._entries.get(key)
            if root is None:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return root

    def get_or_build(self, text: str, builder: Callable[[], Root]) -> Root:
        """Return the cached tree for ``text``, building it at most once.

        Args:
            text: Source text the tree is built from
            builder: Called without arguments to build the tree on a miss

        Raises:
            Whatever ``builder`` raises; threads waiting on the same build
            receive the same exception and nothing is cached.
        """
        key = self.key_for(text)

        with self._lock:
            root = self._entries.get(key)
            if root is not None:
                self._entries.move_to_end(key)
                self._hits += 1
                return root

            future = self._in_flight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._in_flight[key] = future
                self._misses += 1
            else:
                self._hits += 1

        if not owner:
            logger.debug(
                "Waiting for concurrent build",
                extra={"key": key},
            )
            return future.result()  # type: ignore[union-attr]

        try:
            root = builder()
        except BaseException as e:
            with self._lock:
                del self._in_flight[key]
            future.set_exception(e)  # type: ignore[union-attr]
            raise

        with self._lock:
            self._entries[key] = root
            self._evict()
            size = len(self._entries)
            del self._in_flight[key]
        future.set_result(root)  # type: ignore[union-attr]

        logger.debug(
            "Tree cached",
            extra={"key": key, "size": size},
        )
        return root

    def _evict(self) -> None:
        if self.max_entries is None:
            return
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
            self._evictions += 1

    def clear(self) -> None:
        """Drop every cached tree; trees already handed out stay valid."""
        with self._lock:
            self._entries.clear()

    @property
    def statistics(self) -> CacheStatistics:
        with self._lock:
            return CacheStatistics(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                size=len(self._entries),
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, text: object) -> bool:
        if not isinstance(text, str):
            return False
        key = self.key_for(text)
        with self._lock:
            return key in self._entries
