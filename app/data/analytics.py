from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

import pandas as pd
from supabase import Client

from config import AppConfig
from data import mock_data, queries
from data.service import DataResult, _fallback, fetch_all, iso, utc_now


logger = logging.getLogger(__name__)

TIMEFRAMES = {"7d": 7, "30d": 30, "90d": 90}
COLUMNS = ["date", "users", "messages"]


def timeframe_days(timeframe: str) -> int:
    if timeframe not in TIMEFRAMES:
        raise ValueError(f"Unknown timeframe: {timeframe}")
    return TIMEFRAMES[timeframe]


def daily_counts(timestamps: list[str], days: int, today: Optional[date] = None) -> pd.Series:
    """Rows per UTC day over the last `days` days (today included), zero-filled."""
    today = today or utc_now().date()
    index = [(today - timedelta(days=i)).isoformat() for i in range(days - 1, -1, -1)]
    if not timestamps:
        return pd.Series(0, index=index, dtype="int64")
    per_day = pd.Series([str(ts)[:10] for ts in timestamps]).value_counts()
    return per_day.reindex(index, fill_value=0).astype("int64")


def activity_frame(user_ts: list[str], message_ts: list[str], days: int, today: Optional[date] = None) -> pd.DataFrame:
    users = daily_counts(user_ts, days, today)
    messages = daily_counts(message_ts, days, today)
    return pd.DataFrame({"date": users.index, "users": users.values, "messages": messages.values})


def get_analytics(cfg: AppConfig, use_mock: bool, timeframe: str = "30d") -> DataResult:
    """Users and messages created per day for 7d | 30d | 90d."""
    days = timeframe_days(timeframe)

    def _live(client: Client) -> pd.DataFrame:
        since = iso(utc_now() - timedelta(days=days))
        users = fetch_all(lambda: queries.q_created_since(client, "users", since))
        messages = fetch_all(lambda: queries.q_created_since(client, "messages", since))
        return activity_frame(
            [r["created_at"] for r in users if r.get("created_at")],
            [r["created_at"] for r in messages if r.get("created_at")],
            days,
        )

    return _fallback(cfg, use_mock, _live, lambda: mock_data.daily_activity_mock(days), COLUMNS, "analytics")
