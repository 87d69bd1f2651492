"""Bounded cache for derived image assets."""

import dataclasses
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from photo_report.config import MAX_CACHE_SIZE
from photo_report.domain.photos import ImageAsset, PhotoRecord

WARNING_RATIO = 0.8
DANGER_RATIO = 0.9

_logger = logging.getLogger(__name__)


class AssetCache(Protocol):
    """Cache interface for derived photo assets keyed by photo id."""

    def put(self, key: int, value: "CachedAsset") -> None:
        """Store a value, evicting old entries beyond the size limit."""

    def get(self, key: int) -> "CachedAsset | None":
        """Return a cached value if present."""

    def remove(self, key: int) -> None:
        """Drop a cached value if present."""


@dataclass(frozen=True)
class CachedAsset:
    """Original and thumbnail buffers kept for quick re-rendering."""

    original: ImageAsset | None
    thumbnail: ImageAsset | None


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache occupancy."""

    size: int
    limit: int
    total_bytes: int
    usage_ratio: float


@dataclass
class MemoryCache(AssetCache):
    """In-memory cache with first-in first-out eviction."""

    max_size: int = MAX_CACHE_SIZE
    _entries: dict[int, CachedAsset] = dataclasses.field(default_factory=dict)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[int]:
        """Return keys from oldest to newest insertion."""
        return list(self._entries)

    def put(self, key: int, value: CachedAsset) -> None:
        """Store a value; overflowing entries are evicted oldest first."""
        self._entries[key] = value
        overflow = len(self._entries) - self.max_size
        for _ in range(max(overflow, 0)):
            self.evict_one()

    def get(self, key: int) -> CachedAsset | None:
        return self._entries.get(key)

    def remove(self, key: int) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry without touching the photos that own the assets."""
        self._entries.clear()

    def evict_one(self) -> int | None:
        """Evict the oldest entry and return its key."""
        if not self._entries:
            return None
        key = next(iter(self._entries))
        del self._entries[key]
        _logger.debug("Evicted cached assets for photo %s", key)
        return key

    def release_all(self, photos: Iterable[PhotoRecord]) -> list[PhotoRecord]:
        """Clear the cache and return the photos with their buffers dropped."""
        self._entries.clear()
        released = [
            dataclasses.replace(photo, original_asset=None, thumbnail_asset=None)
            for photo in photos
        ]
        _logger.info("Released image buffers for %s photos", len(released))
        return released

    def usage_ratio(self) -> float:
        """Return used entries relative to the limit."""
        if self.max_size <= 0:
            return 1.0
        return len(self._entries) / self.max_size

    def memory_warning(self) -> str | None:
        """Return an advisory message when the cache is nearly full."""
        ratio = self.usage_ratio()
        percent = ratio * 100
        if ratio > DANGER_RATIO:
            return f"Memory usage is at a dangerous level ({percent:.1f}%)"
        if ratio > WARNING_RATIO:
            return f"Memory usage is high ({percent:.1f}%)"
        return None

    def stats(self) -> CacheStats:
        total_bytes = sum(
            asset.size
            for entry in self._entries.values()
            for asset in (entry.original, entry.thumbnail)
            if asset is not None
        )
        return CacheStats(
            size=len(self._entries),
            limit=self.max_size,
            total_bytes=total_bytes,
            usage_ratio=self.usage_ratio(),
        )
