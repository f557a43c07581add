"""Time-bounded cache for stage-1 insight analysis.

Keyed by a digest of the normalised (topic, tone) pair.  Reads and
writes are guarded by a lock; concurrent misses on the same key both
compute and the last write wins.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from typing import Awaitable, Callable, Optional

from .models import InsightBundle

log = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 1800.0


def cache_key(topic: str, tone: str) -> str:
    normalised = f"{' '.join(topic.split()).casefold()}\x1f{tone.strip().casefold()}"
    return "insights_" + hashlib.sha256(normalised.encode("utf-8")).hexdigest()


class InsightCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, InsightBundle]] = {}
        self._lock = threading.Lock()

    def get(self, topic: str, tone: str) -> Optional[InsightBundle]:
        key = cache_key(topic, tone)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, bundle = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return bundle

    def put(self, topic: str, tone: str, bundle: InsightBundle) -> None:
        key = cache_key(topic, tone)
        with self._lock:
            self._entries[key] = (self._clock() + self._ttl, bundle)

    async def get_or_compute(
        self,
        topic: str,
        tone: str,
        compute_fn: Callable[[], Awaitable[InsightBundle]],
    ) -> InsightBundle:
        """Return the cached bundle, or await *compute_fn* and store its result.

        Exceptions from *compute_fn* propagate and nothing is stored.
        """
        cached = self.get(topic, tone)
        if cached is not None:
            log.info("Insight cache hit for topic=%.60r tone=%s", topic, tone)
            return cached

        log.info("Insight cache miss for topic=%.60r tone=%s", topic, tone)
        bundle = await compute_fn()
        self.put(topic, tone, bundle)
        return bundle

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
