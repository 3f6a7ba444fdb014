"""Query embedding cache for memdecay."""

import hashlib
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from memdecay.models import utc_now


@dataclass
class CacheEntry:
    """Cached query vector and the time it stops being served."""

    value: list[float]
    expires_at: datetime


class EmbeddingCache:
    """LRU cache for query embeddings with TTL.

    Repeated queries for the same text skip the embedding client. Only
    queries go through the cache; inserted documents are always embedded.

    Example:
        ```python
        cache = EmbeddingCache(max_size=1000, ttl_seconds=600)

        embedding = cache.get("query text")
        if embedding is None:
            embedding = await embedder.embed("query text")
            cache.set("query text", embedding)
        ```
    """

    def __init__(self, max_size: int = 1000, ttl_seconds: int = 600, clock: Callable[[], datetime] = utc_now):
        """
        Args:
            max_size: Maximum number of cached queries
            ttl_seconds: Seconds an entry is served after being stored
            clock: Source of the current UTC time
        """
        self.max_size = max_size
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def _key(text: str) -> str:
        return hashlib.sha256(text.encode("utf-8")).hexdigest()

    def get(self, text: str) -> list[float] | None:
        """Return a copy of the cached vector, or None if absent or expired."""
        key = self._key(text)
        entry = self._entries.get(key)
        if entry is not None and self._clock() > entry.expires_at:
            del self._entries[key]
            entry = None

        if entry is None:
            self.misses += 1
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return list(entry.value)

    def set(self, text: str, embedding: list[float]) -> None:
        key = self._key(text)
        self._entries.pop(key, None)
        while len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
        self._entries[key] = CacheEntry(value=list(embedding), expires_at=self._clock() + self.ttl)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)
