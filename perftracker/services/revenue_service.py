"""Revenue tracking service owning the event store and its read cache."""
from typing import Callable, Optional
import threading
import time
import structlog

from ..event_models import RevenueEvent
from .event_store import EventStore
from .read_cache import DEFAULT_CACHE_TTL_SECONDS, ReadCache
from .query import DEFAULT_PAGE_SIZE, QueryParams, QueryResult, run_query

log = structlog.get_logger()


class RevenueService:
    """
    Ingest and report on revenue events.

    A single lock is held for a whole append or for a whole
    cache-refresh-plus-query, so reads and writes never interleave.
    Instances share nothing; construct one per application.
    """

    def __init__(
        self,
        store: EventStore | None = None,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        clock: Callable[[], float] = time.time,
        metrics=None,
    ):
        """
        Initialize the service.

        Args:
            store: Backing store (a new empty one by default)
            cache_ttl_seconds: Read cache freshness window
            default_page_size: pageSize used when the request gives none
            clock: Wall clock in seconds since epoch, injectable for tests
            metrics: Optional Metrics instance for business metrics
        """
        self._store = store if store is not None else EventStore()
        self._cache = ReadCache(self._store, ttl_seconds=cache_ttl_seconds)
        self._lock = threading.Lock()
        self._clock = clock
        self.default_page_size = default_page_size
        self.metrics = metrics

    @property
    def cache(self) -> ReadCache:
        return self._cache

    def ingest(self, event: RevenueEvent) -> None:
        """Append an event. No validation, no deduplication."""
        with self._lock:
            self._store.append(event)
            stored = len(self._store)

        log.info(
            "revenue.tracked",
            channel=event.channel,
            amount=event.amount,
            transaction_id=event.transaction_id,
            timestamp=event.timestamp,
        )
        if self.metrics is not None:
            self.metrics.record_event_ingested(event.channel, event.amount)
            self.metrics.set_events_stored(stored)

    def query(self, params: QueryParams) -> QueryResult:
        """
        Refresh the cache if stale and run the query pipeline on it.

        Period windows are measured from the time of this call, not from
        the cache capture time.
        """
        with self._lock:
            now = self._clock()
            refreshed = self._cache.ensure_fresh(now)
            result = run_query(self._cache.snapshot.events, params, now_ms=int(now * 1000))

        log.debug(
            "revenue.queried",
            page=result.page,
            page_size=result.page_size,
            utm_campaign=params.utm_campaign,
            period=params.period,
            total=result.total,
            cache_refreshed=refreshed,
        )
        if self.metrics is not None:
            self.metrics.record_query(params.period, refreshed)
        return result

    def event_count(self) -> int:
        return len(self._store)
