"""In-memory TTL cache for generated recommendations."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

CONTEXT_KEY_LENGTH = 300

CacheKey = tuple[str, str, str]


@dataclass(frozen=True)
class CacheEntry:
    text: str
    created_at: float


def cache_key(check_title: str, keyphrase: str, context: str) -> CacheKey:
    return (check_title, keyphrase, context[:CONTEXT_KEY_LENGTH])


class RecommendationCache:
    """Maps ``(check_title, keyphrase, context[:300])`` to generated text.

    Entries older than ``ttl`` seconds are treated as missing; staleness is
    checked when an entry is read, and stale entries are dropped then.
    """

    def __init__(self, ttl: float = 24 * 60 * 60, clock: Callable[[], float] = time.time) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, check_title: str, keyphrase: str, context: str) -> str | None:
        key = cache_key(check_title, keyphrase, context)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.created_at >= self.ttl:
                del self._entries[key]
                return None
            return entry.text

    def put(self, check_title: str, keyphrase: str, context: str, text: str) -> None:
        key = cache_key(check_title, keyphrase, context)
        with self._lock:
            self._entries[key] = CacheEntry(text=text, created_at=self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
