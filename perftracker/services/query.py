"""
Query pipeline for revenue reports.

Stages run in order over a cache snapshot:

1. filter    - by utm_campaign and period (relative to request time)
2. sort      - newest first, stable for equal timestamps
3. aggregate - amount summed per channel over the whole filtered set
4. paginate  - 1-based page slicing with clamped bounds
"""
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ..event_models import RevenueEvent

DAY_MS = 24 * 60 * 60 * 1000

PERIOD_WINDOWS_MS: Dict[str, int] = {
    "7d": 7 * DAY_MS,
    "30d": 30 * DAY_MS,
}

ALL = "all"
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def parse_int_param(raw: Optional[str], default: int, minimum: int = 1) -> int:
    """
    Leniently parse a pagination parameter.

    A leading integer is read from `raw` ("3", " 3", "3abc" all give 3).
    Missing or non-numeric input yields `default`; values below `minimum`
    are clamped up to it.
    """
    value = default
    if raw is not None:
        match = _LEADING_INT.match(raw)
        if match:
            value = int(match.group(1))
    return max(value, minimum)


@dataclass(frozen=True)
class QueryParams:
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    utm_campaign: Optional[str] = None
    period: Optional[str] = None

    @classmethod
    def from_raw(
        cls,
        page: Optional[str] = None,
        page_size: Optional[str] = None,
        utm_campaign: Optional[str] = None,
        period: Optional[str] = None,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> "QueryParams":
        """Build params from raw query-string values, never raising."""
        return cls(
            page=parse_int_param(page, DEFAULT_PAGE),
            page_size=parse_int_param(page_size, default_page_size),
            utm_campaign=utm_campaign,
            period=period,
        )


@dataclass
class QueryResult:
    data: List[RevenueEvent] = field(default_factory=list)
    totals: Dict[str, float] = field(default_factory=dict)
    total: int = 0
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    total_pages: int = 0


def matches(event: RevenueEvent, utm_campaign: Optional[str], period: Optional[str], now_ms: int) -> bool:
    if utm_campaign and utm_campaign != ALL:
        campaign = event.campaign()
        if campaign is None or campaign != utm_campaign:
            return False

    window = PERIOD_WINDOWS_MS.get(period or "")
    if window is not None and event.timestamp < now_ms - window:
        return False

    return True


def filter_events(
    events: Iterable[RevenueEvent],
    utm_campaign: Optional[str],
    period: Optional[str],
    now_ms: int,
) -> List[RevenueEvent]:
    return [e for e in events if matches(e, utm_campaign, period, now_ms)]


def sort_newest_first(events: Iterable[RevenueEvent]) -> List[RevenueEvent]:
    # sorted() is stable with reverse=True, so ties keep snapshot order
    return sorted(events, key=lambda e: e.timestamp, reverse=True)


def totals_by_channel(events: Iterable[RevenueEvent]) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for e in events:
        totals[e.channel] = totals.get(e.channel, 0.0) + e.amount
    return totals


def paginate(events: Sequence[RevenueEvent], page: int, page_size: int) -> List[RevenueEvent]:
    total = len(events)
    start = min(max((page - 1) * page_size, 0), total)
    end = min(max(start + page_size, 0), total)
    return list(events[start:end])


def total_pages(total: int, page_size: int) -> int:
    return (total + page_size - 1) // page_size


def run_query(events: Iterable[RevenueEvent], params: QueryParams, now_ms: int) -> QueryResult:
    """
    Run the full filter, sort, aggregate, paginate pipeline.

    Args:
        events: Snapshot to query
        params: Normalised query parameters
        now_ms: Request time in ms since epoch, used for period windows

    Returns:
        QueryResult with the requested page and totals over the filtered set
    """
    page = max(params.page, 1)
    page_size = max(params.page_size, 1)

    filtered = sort_newest_first(filter_events(events, params.utm_campaign, params.period, now_ms))
    total = len(filtered)

    return QueryResult(
        data=paginate(filtered, page, page_size),
        totals=totals_by_channel(filtered),
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )
