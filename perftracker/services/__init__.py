"""Core services: event store, read cache and query pipeline."""
from .event_store import EventStore
from .read_cache import CacheSnapshot, ReadCache, refresh_snapshot
from .query import QueryParams, QueryResult, run_query, parse_int_param
from .revenue_service import RevenueService

__all__ = [
    "EventStore",
    "CacheSnapshot",
    "ReadCache",
    "refresh_snapshot",
    "QueryParams",
    "QueryResult",
    "run_query",
    "parse_int_param",
    "RevenueService",
]
