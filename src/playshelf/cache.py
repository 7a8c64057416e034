"""
Ephemeral in-process cache for metadata results.
"""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from typing import Any, Dict, Optional, Tuple

import structlog

from playshelf.protocols import MetadataResult

logger = structlog.get_logger(__name__)


def cache_key(app_id: str) -> str:
    return f"app_{app_id}"


class MetadataCache:
    """TTL cache keyed by ``app_<id>``; the oldest entry is evicted when full."""

    def __init__(self, ttl_seconds: float = 600.0, max_entries: int = 512):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, Tuple[float, MetadataResult]]" = OrderedDict()
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    async def get(self, app_id: str) -> Optional[MetadataResult]:
        if not self.enabled:
            return None
        key = cache_key(app_id)
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, result = entry
            if time.monotonic() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return result

    async def set(self, app_id: str, result: MetadataResult) -> None:
        if not self.enabled:
            return
        key = cache_key(app_id)
        async with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (time.monotonic(), result)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cache entry", key=evicted)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "entries": len(self._entries),
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
        }
