from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from hypothesis import given, strategies as st

from conftest import FakeResponse
from data import analytics, service


TODAY = date(2025, 3, 10)


def test_timeframe_days():
    assert [analytics.timeframe_days(t) for t in ("7d", "30d", "90d")] == [7, 30, 90]
    with pytest.raises(ValueError):
        analytics.timeframe_days("1y")


def test_daily_counts_zero_fills_and_ignores_out_of_range():
    counts = analytics.daily_counts(
        ["2025-03-10T08:00:00+00:00", "2025-03-10T09:30:00+00:00", "2025-03-08T23:59:00+00:00", "2025-01-01T00:00:00+00:00"],
        days=3,
        today=TODAY,
    )
    assert list(counts.index) == ["2025-03-08", "2025-03-09", "2025-03-10"]
    assert list(counts) == [1, 0, 2]


def test_daily_counts_empty():
    counts = analytics.daily_counts([], days=7, today=TODAY)
    assert len(counts) == 7
    assert counts.sum() == 0


@given(st.lists(st.integers(min_value=0, max_value=20), max_size=60), st.integers(min_value=1, max_value=30))
def test_daily_counts_only_counts_the_window(offsets, days):
    stamps = [date.fromordinal(TODAY.toordinal() - o).isoformat() + "T12:00:00+00:00" for o in offsets]
    counts = analytics.daily_counts(stamps, days, TODAY)
    assert len(counts) == days
    assert counts.sum() == sum(1 for o in offsets if o < days)


def test_get_analytics_live(cfg, fake_client, monkeypatch):
    fake_client.queue("users", "select", FakeResponse([{"created_at": "2025-03-10T10:00:00+00:00"}, {"created_at": None}]))
    fake_client.queue("messages", "select", FakeResponse([{"created_at": "2025-03-09T10:00:00+00:00"}] * 3))
    monkeypatch.setattr(analytics, "utc_now", lambda: datetime(2025, 3, 10, 18, tzinfo=timezone.utc))

    res = analytics.get_analytics(cfg, False, "7d")

    assert res.source == "supabase"
    assert list(res.df.columns) == analytics.COLUMNS
    assert len(res.df) == 7
    assert res.df["users"].sum() == 1
    assert res.df["messages"].sum() == 3
    since = fake_client.calls_for("users")[0].filter_value("gte", "created_at")
    assert since.startswith("2025-03-03")


def test_get_analytics_live_reads_past_one_page(cfg, fake_client, monkeypatch):
    monkeypatch.setattr(service, "FETCH_PAGE_SIZE", 2)
    monkeypatch.setattr(analytics, "utc_now", lambda: datetime(2025, 3, 10, 18, tzinfo=timezone.utc))
    row = {"created_at": "2025-03-10T08:00:00+00:00"}
    fake_client.queue("messages", "select", FakeResponse([row, row]), FakeResponse([row, row]), FakeResponse([row]))

    res = analytics.get_analytics(cfg, False, "7d")

    assert res.df["messages"].sum() == 5
    assert [q.filters[-1] for q in fake_client.calls_for("messages")] == [("range", 0, 1), ("range", 2, 3), ("range", 4, 5)]


def test_get_analytics_mock(cfg):
    res = analytics.get_analytics(cfg, True, "90d")
    assert len(res.df) == 90
    assert list(res.df.columns) == analytics.COLUMNS
