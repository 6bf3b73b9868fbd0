"""Caching layer for language detection results."""

import hashlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, Optional

from .models import DetectionResult


logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A single cache entry with metadata."""

    result: DetectionResult
    content_hash: str
    timestamp: float

    def is_valid(self, max_age_seconds: int) -> bool:
        """Check if cache entry is still valid based on age."""
        age = time.time() - self.timestamp
        return age < max_age_seconds


@dataclass
class CacheStatistics:
    """Statistics for cache performance monitoring."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    puts: int = 0
    invalidations: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.hits / self.total_requests


class LanguageDetectionCache:
    """
    LRU cache for accepted detection results.

    Keys are SHA256 hashes of the code. The cache holds results produced
    under one configuration; the engine clears it whenever the
    configuration or the set of registered detectors changes.
    """

    def __init__(self, max_size: int = 1000, max_age_seconds: int = 3600):
        """
        Initialize the cache.

        Args:
            max_size: Maximum number of entries to cache
            max_age_seconds: Maximum age of cache entries in seconds
        """
        if max_size < 1:
            raise ValueError("Cache max_size must be at least 1")
        self.max_size = max_size
        self.max_age_seconds = max_age_seconds
        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = RLock()
        self.statistics = CacheStatistics()

        logger.debug(
            f"Initialized LanguageDetectionCache with max_size={max_size}, "
            f"max_age_seconds={max_age_seconds}"
        )

    @staticmethod
    def _generate_hash(content: str) -> str:
        return hashlib.sha256(content.encode("utf-8")).hexdigest()

    def get(self, content: str) -> Optional[DetectionResult]:
        """
        Retrieve a cached detection result.

        Args:
            content: The code to look up

        Returns:
            Cached DetectionResult or None if not found/expired
        """
        key = self._generate_hash(content)

        with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                if entry.is_valid(self.max_age_seconds):
                    self._cache.move_to_end(key)
                    self.statistics.hits += 1
                    logger.debug(f"Cache hit for key={key[:8]}..., language={entry.result.language}")
                    return entry.result

                del self._cache[key]
                logger.debug(f"Removed expired entry for key={key[:8]}...")

            self.statistics.misses += 1
            return None

    def put(self, content: str, result: DetectionResult) -> None:
        """
        Store a detection result in the cache.

        Args:
            content: The code that was analyzed
            result: The detection result to cache
        """
        key = self._generate_hash(content)

        with self._lock:
            if key in self._cache:
                del self._cache[key]
            elif len(self._cache) >= self.max_size:
                oldest_key = next(iter(self._cache))
                del self._cache[oldest_key]
                self.statistics.evictions += 1
                logger.debug(f"Evicted oldest entry: key={oldest_key[:8]}...")

            self._cache[key] = CacheEntry(result=result, content_hash=key, timestamp=time.time())
            self.statistics.puts += 1

    def clear(self) -> None:
        """Drop every entry, e.g. after a configuration change."""
        with self._lock:
            if self._cache:
                self.statistics.invalidations += 1
            self._cache.clear()
            logger.debug("Language detection cache cleared")

    def __len__(self) -> int:
        return len(self._cache)

    def get_info(self) -> Dict[str, Any]:
        """
        Get cache information and statistics.

        Returns:
            Dictionary with cache info and statistics
        """
        with self._lock:
            return {
                "size": len(self._cache),
                "max_size": self.max_size,
                "max_age_seconds": self.max_age_seconds,
                "hit_rate": self.statistics.hit_rate,
                "statistics": {
                    "hits": self.statistics.hits,
                    "misses": self.statistics.misses,
                    "evictions": self.statistics.evictions,
                    "puts": self.statistics.puts,
                    "invalidations": self.statistics.invalidations,
                    "total_requests": self.statistics.total_requests,
                },
            }

    def cleanup_expired(self) -> int:
        """
        Remove expired entries from the cache.

        Returns:
            Number of entries removed
        """
        with self._lock:
            expired_keys = [
                key for key, entry in self._cache.items()
                if not entry.is_valid(self.max_age_seconds)
            ]
            for key in expired_keys:
                del self._cache[key]

            if expired_keys:
                logger.info(f"Cleaned up {len(expired_keys)} expired cache entries")
            return len(expired_keys)
