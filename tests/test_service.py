from __future__ import annotations

import pandas as pd
import pytest

from conftest import FakeResponse
from data import service
from data.service import (
    READ_ONLY_MESSAGE,
    PageResult,
    _fallback,
    _fallback_page,
    describe_error,
    fetch_all,
    missing_to_none,
    page_bounds,
    rows_to_frame,
    run_action,
)


COLUMNS = ["id", "name"]


def _mock():
    return pd.DataFrame({"id": list(range(7)), "name": list("abcdefg")})


def test_page_bounds():
    assert page_bounds(1, 50) == (0, 49)
    assert page_bounds(3, 20) == (40, 59)
    assert page_bounds(0, 10) == (0, 9)


@pytest.mark.parametrize("total, per_page, pages", [(0, 50, 1), (50, 50, 1), (51, 50, 2), (10, 0, 1)])
def test_total_pages(total, per_page, pages):
    result = PageResult(df=pd.DataFrame(), total=total, page=1, per_page=per_page, source="mock")
    assert result.total_pages == pages


def test_rows_to_frame_adds_missing_columns():
    df = rows_to_frame([{"id": 1}], COLUMNS)
    assert list(df.columns) == ["id", "name"]
    assert df.loc[0, "name"] is None
    assert list(rows_to_frame(None, COLUMNS).columns) == COLUMNS


def test_rows_to_frame_null_text_reads_back_as_none():
    df = rows_to_frame([{"id": 1, "name": "ok"}, {"id": 2, "name": None}], COLUMNS)
    row = df.iloc[1].to_dict()
    assert row["name"] is None
    assert (row.get("name") or "") == ""


def test_missing_to_none_keeps_values_and_lists():
    df = pd.DataFrame(
        {
            "score": [4.5, float("nan")],
            "seen": pd.to_datetime(["2025-01-02", None]),
            "tags": [["dog"], ["cat", "bird"]],
        }
    )
    out = missing_to_none(df)
    assert out.loc[1, "score"] is None
    assert out.loc[1, "seen"] is None
    assert out.loc[0, "score"] == 4.5
    assert out.loc[1, "tags"] == ["cat", "bird"]


def test_fetch_all_reads_until_short_page(fake_client):
    fake_client.queue("users", "select", FakeResponse([{"id": 1}, {"id": 2}]), FakeResponse([{"id": 3}]))
    rows = fetch_all(lambda: fake_client.table("users").select("id"), page_size=2)
    assert [r["id"] for r in rows] == [1, 2, 3]
    ranges = [c.filters[-1] for c in fake_client.calls_for("users", "select")]
    assert ranges == [("range", 0, 1), ("range", 2, 3)]


def test_fetch_all_full_last_page_needs_one_more_read(fake_client, monkeypatch):
    monkeypatch.setattr(service, "FETCH_PAGE_SIZE", 1)
    fake_client.queue("users", "select", FakeResponse([{"id": 1}]))
    assert fetch_all(lambda: fake_client.table("users").select("id")) == [{"id": 1}]
    assert len(fake_client.calls_for("users", "select")) == 2


def test_describe_error_prefers_message():
    class WithMessage(Exception):
        message = "permission denied for table users"

    assert describe_error(WithMessage()) == "permission denied for table users"
    assert describe_error(RuntimeError("boom")) == "boom"
    assert describe_error(TimeoutError()) == "TimeoutError"


def test_fallback_mock_never_touches_the_backend(unconfigured_cfg):
    res = _fallback(unconfigured_cfg, True, lambda c: pytest.fail("live called"), _mock, COLUMNS, "things")
    assert res.source == "mock"
    assert len(res.df) == 7


def test_fallback_unconfigured_backend_warns(unconfigured_cfg):
    res = _fallback(unconfigured_cfg, False, lambda c: _mock(), _mock, COLUMNS, "things")
    assert res.source == "unavailable"
    assert res.df.empty and list(res.df.columns) == COLUMNS
    assert "SUPABASE_URL" in res.warning


def test_fallback_live_error_returns_empty_frame_not_mock(cfg, fake_client):
    def _boom(client):
        raise RuntimeError("connection reset")

    res = _fallback(cfg, False, _boom, _mock, COLUMNS, "things")
    assert res.source == "unavailable"
    assert res.df.empty
    assert res.warning == "Could not load things: connection reset"


def test_fallback_live(cfg, fake_client):
    res = _fallback(cfg, False, lambda client: _mock().head(2), _mock, COLUMNS, "things")
    assert res.source == "supabase"
    assert len(res.df) == 2
    assert res.warning is None


def test_fallback_page_slices_mock(unconfigured_cfg):
    res = _fallback_page(unconfigured_cfg, True, 2, 3, lambda c, s, e: None, _mock, COLUMNS, "things")
    assert list(res.df["id"]) == [3, 4, 5]
    assert res.total == 7
    assert res.total_pages == 3


def test_fallback_page_passes_bounds(cfg, fake_client):
    seen = []

    def _live(client, start, end):
        seen.append((start, end))
        return _mock().head(3), 103

    res = _fallback_page(cfg, False, 4, 25, _live, _mock, COLUMNS, "things")
    assert seen == [(75, 99)]
    assert res.total == 103
    assert res.page == 4


def test_fallback_page_error(cfg, fake_client):
    def _boom(client, start, end):
        raise ValueError("bad range")

    res = _fallback_page(cfg, False, 1, 10, _boom, _mock, COLUMNS, "things")
    assert res.total == 0
    assert res.source == "unavailable"
    assert "bad range" in res.warning


def test_run_action_refuses_demo_writes(cfg, fake_client):
    res = run_action(cfg, True, lambda client: pytest.fail("write attempted"), "do it", "Done")
    assert res.ok is False
    assert res.message == READ_ONLY_MESSAGE


def test_run_action_success(cfg, fake_client):
    res = run_action(cfg, False, lambda client: {"id": 1}, "do it", "Done")
    assert res.ok is True
    assert res.message == "Done"
    assert res.data == {"id": 1}


def test_run_action_failure_is_a_message(cfg, fake_client):
    def _boom(client):
        raise RuntimeError("duplicate key")

    res = run_action(cfg, False, _boom, "do it", "Done")
    assert res.ok is False
    assert res.message == "Could not do it: duplicate key"


def test_run_action_unconfigured(unconfigured_cfg):
    res = run_action(unconfigured_cfg, False, lambda client: None, "do it", "Done")
    assert res.ok is False
    assert "SUPABASE_URL" in res.message
