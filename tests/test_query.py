"""Tests for the query pipeline."""
import math
import pytest
from perftracker.services.query import (
    DAY_MS,
    QueryParams,
    parse_int_param,
    run_query,
    totals_by_channel,
)
from conftest import NOW_MS, make_event


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, 10),
        ("", 10),
        ("abc", 10),
        ("3", 3),
        (" 3", 3),
        ("3abc", 3),
        ("2.5", 2),
        ("+4", 4),
        ("0", 1),
        ("-7", 1),
        ("\u0663", 10),
        ("1\u0663", 1),
    ],
)
def test_parse_int_param(raw, expected):
    """Malformed input falls back to the default, low values are clamped."""
    assert parse_int_param(raw, default=10) == expected


def test_params_from_raw_defaults():
    params = QueryParams.from_raw()
    assert params.page == 1
    assert params.page_size == 10
    assert params.utm_campaign is None
    assert params.period is None


def test_params_from_raw_custom_default_page_size():
    params = QueryParams.from_raw(page="x", page_size=None, default_page_size=25)
    assert params.page == 1
    assert params.page_size == 25


def test_newest_first_with_totals():
    """Two channels: newest first, totals per channel."""
    a = make_event(channel="email", amount=10, timestamp=NOW_MS)
    b = make_event(channel="social", amount=5, timestamp=NOW_MS + 1000)

    result = run_query([a, b], QueryParams(), now_ms=NOW_MS)

    assert result.data == [b, a]
    assert result.totals == {"email": 10, "social": 5}
    assert result.total == 2
    assert result.page == 1
    assert result.page_size == 10
    assert result.total_pages == 1


def test_second_page_of_fifteen():
    events = [make_event(channel="x", amount=1, timestamp=NOW_MS + i) for i in range(15)]

    result = run_query(events, QueryParams(page=2, page_size=10), now_ms=NOW_MS)

    assert len(result.data) == 5
    assert result.total == 15
    assert result.total_pages == 2
    assert result.totals == {"x": 15}
    # Oldest five land on the last page
    assert [e.timestamp for e in result.data] == [NOW_MS + i for i in range(4, -1, -1)]


def test_all_filters_return_every_event_sorted():
    events = [make_event(timestamp=ts, campaign=c) for ts, c in [(5, "a"), (9, None), (1, "b"), (7, "a")]]

    result = run_query(
        events, QueryParams(page_size=100, utm_campaign="all", period="all"), now_ms=NOW_MS
    )

    assert [e.timestamp for e in result.data] == [9, 7, 5, 1]
    assert set(id(e) for e in result.data) == set(id(e) for e in events)


def test_empty_result():
    result = run_query([], QueryParams(), now_ms=NOW_MS)

    assert result.data == []
    assert result.totals == {}
    assert result.total == 0
    assert result.total_pages == 0


def test_page_past_end_is_empty():
    events = [make_event(timestamp=i) for i in range(3)]

    result = run_query(events, QueryParams(page=5, page_size=2), now_ms=NOW_MS)

    assert result.data == []
    assert result.total == 3
    assert result.total_pages == 2
    assert result.page == 5


def test_out_of_range_params_are_clamped():
    events = [make_event(timestamp=i) for i in range(3)]

    result = run_query(events, QueryParams(page=0, page_size=0), now_ms=NOW_MS)

    assert result.page == 1
    assert result.page_size == 1
    assert len(result.data) == 1
    assert result.total_pages == 3


@pytest.mark.parametrize("page_size", [1, 2, 3, 4, 7, 10, 11])
def test_pages_cover_everything_once(page_size):
    """Concatenating all pages reproduces the sorted filtered sequence."""
    events = [make_event(timestamp=(i * 37) % 11, channel=str(i)) for i in range(10)]
    full = run_query(events, QueryParams(page_size=100), now_ms=NOW_MS).data

    first = run_query(events, QueryParams(page=1, page_size=page_size), now_ms=NOW_MS)
    assert first.total_pages == math.ceil(len(events) / page_size)

    collected = []
    for page in range(1, first.total_pages + 1):
        collected.extend(run_query(events, QueryParams(page=page, page_size=page_size), now_ms=NOW_MS).data)

    assert collected == full


def test_equal_timestamps_keep_arrival_order():
    events = [make_event(channel=c, timestamp=100) for c in "abcd"]
    events.append(make_event(channel="z", timestamp=200))

    result = run_query(events, QueryParams(), now_ms=NOW_MS)

    assert [e.channel for e in result.data] == ["z", "a", "b", "c", "d"]


def test_totals_ignore_pagination():
    events = [
        make_event(channel="email", amount=10, timestamp=1),
        make_event(channel="email", amount=2.5, timestamp=2),
        make_event(channel="social", amount=4, timestamp=3),
        make_event(channel="ads", amount=1, timestamp=4),
    ]

    for page in (1, 2, 3, 4, 9):
        result = run_query(events, QueryParams(page=page, page_size=1), now_ms=NOW_MS)
        assert result.totals == {"email": 12.5, "social": 4, "ads": 1}


def test_totals_skip_absent_channels():
    totals = totals_by_channel([make_event(channel="email", amount=3)])
    assert totals == {"email": 3}
    assert "social" not in totals


def test_campaign_filter_excludes_missing_null_and_other():
    match = make_event(campaign="spring", timestamp=4)
    other = make_event(campaign="summer", timestamp=3)
    upper = make_event(campaign="Spring", timestamp=2)
    null = make_event(utm={"utm_campaign": None}, timestamp=1)
    absent = make_event(utm={"utm_source": "news"}, timestamp=0)

    result = run_query(
        [match, other, upper, null, absent], QueryParams(utm_campaign="spring"), now_ms=NOW_MS
    )

    assert result.data == [match]
    assert result.total == 1


@pytest.mark.parametrize("campaign", [None, "", "all"])
def test_campaign_filter_disabled(campaign):
    events = [make_event(campaign="spring"), make_event(utm={"utm_campaign": None}), make_event()]

    result = run_query(events, QueryParams(utm_campaign=campaign), now_ms=NOW_MS)

    assert result.total == 3


def test_period_7d_boundary_is_inclusive():
    boundary = make_event(channel="edge", timestamp=NOW_MS - 7 * DAY_MS)
    older = make_event(channel="old", timestamp=NOW_MS - 7 * DAY_MS - 1)
    recent = make_event(channel="new", timestamp=NOW_MS - 1000)

    result = run_query([boundary, older, recent], QueryParams(period="7d"), now_ms=NOW_MS)

    assert [e.channel for e in result.data] == ["new", "edge"]
    assert "old" not in result.totals


def test_period_30d():
    inside = make_event(channel="in", timestamp=NOW_MS - 20 * DAY_MS)
    boundary = make_event(channel="edge", timestamp=NOW_MS - 30 * DAY_MS)
    older = make_event(channel="old", timestamp=NOW_MS - 30 * DAY_MS - 1)
    outside = make_event(channel="out", timestamp=NOW_MS - 31 * DAY_MS)

    result = run_query([inside, boundary, older, outside], QueryParams(period="30d"), now_ms=NOW_MS)

    assert [e.channel for e in result.data] == ["in", "edge"]


@pytest.mark.parametrize("period", [None, "", "all", "90d", "7D"])
def test_other_periods_have_no_window(period):
    ancient = make_event(timestamp=0)

    result = run_query([ancient], QueryParams(period=period), now_ms=NOW_MS)

    assert result.total == 1


def test_filters_combine():
    events = [
        make_event(channel="a", campaign="spring", timestamp=NOW_MS - DAY_MS),
        make_event(channel="b", campaign="spring", timestamp=NOW_MS - 10 * DAY_MS),
        make_event(channel="c", campaign="summer", timestamp=NOW_MS - DAY_MS),
    ]

    result = run_query(events, QueryParams(utm_campaign="spring", period="7d"), now_ms=NOW_MS)

    assert [e.channel for e in result.data] == ["a"]
    assert result.totals == {"a": 1.0}
