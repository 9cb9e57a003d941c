from __future__ import annotations

import streamlit as st

from components.metrics import Kpi, fmt_count, line_chart, render_kpi_row
from components.narrative import render_result_warning, render_tab_intro
from config import AppConfig
from data.analytics import TIMEFRAMES, get_analytics
from views.context import ViewContext


TIMEFRAME_LABELS = {"7d": "Last 7 days", "30d": "Last 30 days", "90d": "Last 90 days"}


def render(cfg: AppConfig, ctx: ViewContext) -> None:
    st.title("Analytics")
    render_tab_intro(
        title="Platform analytics",
        context="New registrations and messages sent per day.",
    )

    timeframe = st.radio(
        "Timeframe",
        list(TIMEFRAMES),
        index=1,
        format_func=TIMEFRAME_LABELS.get,
        horizontal=True,
        key="analytics_timeframe",
    )
    res = get_analytics(cfg, ctx.use_mock, timeframe)
    render_result_warning(res.warning)
    df = res.df

    if df.empty:
        st.info("No activity data available.")
        return

    days = len(df)
    render_kpi_row(
        [
            Kpi("New users", fmt_count(df["users"].sum())),
            Kpi("Messages", fmt_count(df["messages"].sum())),
            Kpi("New users / day", f"{df['users'].sum() / days:.1f}"),
            Kpi("Messages / day", f"{df['messages'].sum() / days:.1f}"),
        ]
    )

    c1, c2 = st.columns(2)
    with c1:
        line_chart(df, x="date", y="users", title="User growth", y_title="New users")
    with c2:
        line_chart(df, x="date", y="messages", title="Message activity", y_title="Messages")

    with st.expander("Daily numbers"):
        st.dataframe(df, hide_index=True, use_container_width=True)
    st.caption(f"Data source: **{res.source}**")
