"""In-memory translation cache.

Stores translated protected text keyed by the protected content and the
target language. Lives for the lifetime of one orchestrator and is never
persisted.
"""

import logging
import threading
from typing import Dict, Optional

from ...utils.text import content_hash

logger = logging.getLogger(__name__)


class TranslationCache:
    """Content-addressed cache of translations.

    Reads take no lock; writes are serialized and idempotent, so concurrent
    workers storing the same key never corrupt the mapping.
    """

    def __init__(self):
        self._entries: Dict[str, str] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(protected_content: str, target_language: str) -> str:
        """Build the cache key for a (protected content, language) pair."""
        return content_hash(protected_content, target_language.lower())

    def get(self, key: str) -> Optional[str]:
        value = self._entries.get(key)
        if value is None:
            self._misses += 1
        else:
            self._hits += 1
        return value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            if self._entries.get(key) == value:
                return
            self._entries[key] = value
        logger.debug(f"[Cache] Stored {key[:12]} ({len(value)} chars)")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> Dict[str, int]:
        """Hit, miss and size counters."""
        return {
            "hits": self._hits,
            "misses": self._misses,
            "size": len(self._entries),
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
