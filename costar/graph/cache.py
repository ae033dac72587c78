"""
Content-addressed resolution cache for oracle queries.

Every oracle answer the engine depends on is memoized here under a
SHA-256 digest of its query text. Entries expire after a TTL (7 days by
default) and, when a store runs out of room, the oldest ~20% of entries
by insertion time are evicted before retrying the write once.

Storage is pluggable:
- MemoryCacheStore: per-process dict, used by tests and ephemeral runs
- FileCacheStore: one JSON document per slot under ``<data_path>/cache``

Architecture:
    data/cache/
    ├── costar_cache_<sha256>.json   # {"key", "value", "insertedAt"}
    └── ...

The cache never surfaces storage failures to callers: a value fetched
from the oracle is returned even when it could not be persisted.
Supplier failures propagate unchanged and are never cached.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import math
import os
import tempfile
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, TypeVar

import aiofiles
from pydantic import BaseModel

from costar.graph.errors import CacheQuotaExceededError

logger = logging.getLogger(__name__)

T = TypeVar("T")

CACHE_PREFIX = "costar_cache_"
DEFAULT_TTL_SECONDS = 7 * 24 * 60 * 60
DEFAULT_EVICT_FRACTION = 0.2
KEY_PREVIEW_LENGTH = 50


def cache_slot(key: str) -> str:
    """
    Map query text to its storage slot.

    Examples:
        >>> cache_slot("abc") == cache_slot("abc")
        True
        >>> cache_slot("abc").startswith(CACHE_PREFIX)
        True
    """
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    return f"{CACHE_PREFIX}{digest}"


@dataclass
class CacheEntry:
    """One memoized oracle answer."""

    slot: str
    key: str
    value: Any
    inserted_at: float

    def to_json(self) -> str:
        return json.dumps(
            {"key": self.key, "value": self.value, "insertedAt": self.inserted_at},
            ensure_ascii=False,
        )

    @classmethod
    def from_json(cls, slot: str, raw: str) -> CacheEntry:
        data = json.loads(raw)
        return cls(
            slot=slot,
            key=data.get("key", ""),
            value=data["value"],
            inserted_at=float(data["insertedAt"]),
        )


class CacheStats(BaseModel):
    """Entry count and on-store size of the cache."""

    entries: int
    size_bytes: int
    size_kb: float
    size_mb: float


class CacheStore(Protocol):
    """Storage backend for cache entries."""

    async def read(self, slot: str) -> CacheEntry | None: ...

    async def write(self, entry: CacheEntry) -> None:
        """Persist an entry; raise CacheQuotaExceededError when full."""
        ...

    async def delete(self, slot: str) -> None: ...

    async def entries(self) -> list[CacheEntry]: ...

    async def clear(self) -> int: ...

    async def size_bytes(self) -> int: ...


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Stores
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class MemoryCacheStore:
    """
    In-process store with an optional byte quota.

    Values are kept serialized so reads hand back copies, matching the
    file store's behaviour.
    """

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes
        self._items: dict[str, str] = {}

    async def read(self, slot: str) -> CacheEntry | None:
        raw = self._items.get(slot)
        if raw is None:
            return None
        return CacheEntry.from_json(slot, raw)

    async def write(self, entry: CacheEntry) -> None:
        raw = entry.to_json()
        if self.max_bytes is not None:
            used = sum(
                len(v.encode("utf-8")) for k, v in self._items.items() if k != entry.slot
            )
            if used + len(raw.encode("utf-8")) > self.max_bytes:
                raise CacheQuotaExceededError(
                    f"Memory cache full ({used} of {self.max_bytes} bytes used)"
                )
        self._items[entry.slot] = raw

    async def delete(self, slot: str) -> None:
        self._items.pop(slot, None)

    async def entries(self) -> list[CacheEntry]:
        return [CacheEntry.from_json(slot, raw) for slot, raw in self._items.items()]

    async def clear(self) -> int:
        count = len(self._items)
        self._items.clear()
        return count

    async def size_bytes(self) -> int:
        return sum(len(raw.encode("utf-8")) for raw in self._items.values())


class FileCacheStore:
    """
    One JSON file per slot, written atomically.

    Corrupt files are deleted on read and treated as misses.
    """

    def __init__(self, directory: Path | str, max_bytes: int | None = None) -> None:
        self.directory = Path(directory)
        self.max_bytes = max_bytes
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, slot: str) -> Path:
        return self.directory / f"{slot}.json"

    def _slot_files(self) -> list[Path]:
        return sorted(self.directory.glob(f"{CACHE_PREFIX}*.json"))

    async def read(self, slot: str) -> CacheEntry | None:
        path = self._path(slot)
        if not path.exists():
            return None
        try:
            async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
                raw = await f.read()
            return CacheEntry.from_json(slot, raw)
        except (ValueError, KeyError, TypeError) as e:
            # UnicodeDecodeError is a ValueError
            logger.warning(f"Dropping corrupt cache entry {slot}: {e}")
            path.unlink(missing_ok=True)
            return None

    async def write(self, entry: CacheEntry) -> None:
        raw = entry.to_json()
        if self.max_bytes is not None:
            target = self._path(entry.slot)
            used = await self.size_bytes()
            if target.exists():
                used -= target.stat().st_size
            if used + len(raw.encode("utf-8")) > self.max_bytes:
                raise CacheQuotaExceededError(
                    f"Cache directory full ({used} of {self.max_bytes} bytes used)"
                )

        # Temp file in the same directory so the rename stays on one filesystem
        fd, temp_path = tempfile.mkstemp(
            suffix=".tmp", prefix="entry", dir=self.directory
        )
        os.close(fd)
        try:
            async with aiofiles.open(temp_path, mode="w", encoding="utf-8") as f:
                await f.write(raw)
            os.replace(temp_path, self._path(entry.slot))
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    async def delete(self, slot: str) -> None:
        self._path(slot).unlink(missing_ok=True)

    async def entries(self) -> list[CacheEntry]:
        found: list[CacheEntry] = []
        for path in self._slot_files():
            entry = await self.read(path.stem)
            if entry is not None:
                found.append(entry)
        return found

    async def clear(self) -> int:
        count = 0
        for path in self._slot_files():
            path.unlink(missing_ok=True)
            count += 1
        return count

    async def size_bytes(self) -> int:
        return sum(path.stat().st_size for path in self._slot_files())


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Cache
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class ResolutionCache:
    """
    TTL cache in front of the oracle client.

    Injected explicitly into every component that queries the oracle, so
    tests and sessions never share hidden state.

    Args:
        store: Storage backend
        ttl_seconds: Lifetime of an entry; older entries count as misses
        evict_fraction: Share of entries evicted when the store is full
        clock: Returns the current time in seconds (injectable for tests)
    """

    def __init__(
        self,
        store: CacheStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        evict_fraction: float = DEFAULT_EVICT_FRACTION,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.evict_fraction = evict_fraction
        self._clock = clock
        self._lock = asyncio.Lock()

    async def get_or_fetch(self, key: str, supplier: Callable[[], Awaitable[T]]) -> T:
        """
        Return the cached value for ``key`` or fetch, store and return it.

        Args:
            key: Query text (hashed to a slot)
            supplier: Coroutine factory invoked on miss or expiry

        Returns:
            The cached or freshly fetched value.

        Raises:
            Whatever ``supplier`` raises; nothing is stored in that case.
        """
        slot = cache_slot(key)
        preview = key[:KEY_PREVIEW_LENGTH]

        entry = await self._read(slot)
        if entry is not None:
            if self._clock() - entry.inserted_at < self.ttl_seconds:
                logger.debug(f"Cache hit: {preview}")
                return entry.value
            await self._delete(slot)
            logger.debug(f"Cache expired: {preview}")
        else:
            logger.debug(f"Cache miss: {preview}")

        value = await supplier()
        await self._store_value(CacheEntry(slot, key, value, self._clock()))
        return value

    async def _read(self, slot: str) -> CacheEntry | None:
        try:
            return await self.store.read(slot)
        except (OSError, ValueError) as e:
            logger.warning(f"Cache read failed for {slot}: {e}")
            return None

    async def _delete(self, slot: str) -> None:
        try:
            await self.store.delete(slot)
        except OSError as e:
            logger.warning(f"Cache delete failed for {slot}: {e}")

    async def _store_value(self, entry: CacheEntry) -> None:
        try:
            await self.store.write(entry)
            return
        except (CacheQuotaExceededError, OSError) as e:
            logger.warning(f"Cache write failed, evicting old entries: {e}")

        await self.evict_oldest()
        try:
            await self.store.write(entry)
        except (CacheQuotaExceededError, OSError) as e:
            logger.warning(f"Cache write failed after eviction, continuing uncached: {e}")

    async def evict_oldest(self, fraction: float | None = None) -> int:
        """
        Delete the oldest entries by insertion time.

        Args:
            fraction: Share of entries to remove (defaults to ``evict_fraction``).
                At least one entry is removed when the cache is not empty.

        Returns:
            Number of entries removed.
        """
        fraction = self.evict_fraction if fraction is None else fraction
        async with self._lock:
            try:
                entries = await self.store.entries()
            except (OSError, ValueError) as e:
                logger.warning(f"Cache eviction skipped, listing failed: {e}")
                return 0
            if not entries:
                return 0
            entries.sort(key=lambda e: e.inserted_at)
            count = max(1, math.ceil(len(entries) * fraction))
            for entry in entries[:count]:
                await self._delete(entry.slot)
        logger.info(f"Evicted {count} of {len(entries)} cache entries")
        return count

    async def clear(self) -> int:
        """Remove every cache entry. Returns the number removed."""
        async with self._lock:
            removed = await self.store.clear()
        logger.info(f"Cache cleared ({removed} entries)")
        return removed

    async def stats(self) -> CacheStats:
        """Entry count and stored size."""
        entries = await self.store.entries()
        size = await self.store.size_bytes()
        return CacheStats(
            entries=len(entries),
            size_bytes=size,
            size_kb=round(size / 1024, 2),
            size_mb=round(size / (1024 * 1024), 2),
        )
