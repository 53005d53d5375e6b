"""Time-expiring read cache over the event store."""
from dataclasses import dataclass
from typing import Callable, Optional, Tuple
import structlog

from ..event_models import RevenueEvent
from .event_store import EventStore

log = structlog.get_logger()

DEFAULT_CACHE_TTL_SECONDS = 2.0


@dataclass(frozen=True)
class CacheSnapshot:
    """Copy of the store tagged with the clock reading it was taken at."""

    events: Tuple[RevenueEvent, ...] = ()
    captured_at: Optional[float] = None

    @property
    def populated(self) -> bool:
        return self.captured_at is not None


def refresh_snapshot(
    current: CacheSnapshot,
    source: Callable[[], Tuple[RevenueEvent, ...]],
    now: float,
    ttl: float,
) -> CacheSnapshot:
    """
    Return a fresh snapshot if `current` is older than `ttl`, else `current`.

    Args:
        current: Snapshot held by the cache
        source: Callable producing a new copy of the store
        now: Current clock reading (seconds)
        ttl: Freshness window (seconds)

    Returns:
        Either `current` unchanged or a new snapshot captured at `now`
    """
    if current.captured_at is None or now - current.captured_at > ttl:
        return CacheSnapshot(events=source(), captured_at=now)
    return current


class ReadCache:
    """
    Lazily refreshed snapshot of an EventStore.

    Not thread-safe on its own; callers serialise access
    (see RevenueService).
    """

    def __init__(self, store: EventStore, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS):
        self._store = store
        self.ttl_seconds = ttl_seconds
        self._snapshot = CacheSnapshot()

    @property
    def snapshot(self) -> CacheSnapshot:
        return self._snapshot

    def ensure_fresh(self, now: float) -> bool:
        """
        Refresh the snapshot if it is stale.

        Args:
            now: Current clock reading (seconds)

        Returns:
            True if the snapshot was replaced
        """
        fresh = refresh_snapshot(self._snapshot, self._store.snapshot, now, self.ttl_seconds)
        if fresh is self._snapshot:
            return False

        self._snapshot = fresh
        log.debug("cache.refreshed", events=len(fresh.events), captured_at=now)
        return True
