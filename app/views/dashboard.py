from __future__ import annotations

import streamlit as st

from components.metrics import Kpi, fmt_count, render_kpi_row
from components.narrative import render_result_warning, render_tab_intro
from components.tables import refresh_button
from config import AppConfig
from data.dashboard import get_admin_profile, get_dashboard_stats
from views.context import ViewContext


def render(cfg: AppConfig, ctx: ViewContext) -> None:
    st.title("Dashboard")

    profile = get_admin_profile(cfg, ctx.use_mock, ctx.actor_id) if ctx.actor_id else None
    name = " ".join(p for p in [(profile or {}).get("first_name"), (profile or {}).get("last_name")] if p)
    render_tab_intro(
        title=f"Welcome back{', ' + name if name else ''}",
        context="Platform totals at a glance. Counts come straight from the database on every refresh.",
    )
    refresh_button("dashboard_refresh")

    with st.spinner("Loading statistics…"):
        res = get_dashboard_stats(cfg, ctx.use_mock)
    render_result_warning(res.warning)
    s = res.stats

    st.subheader("Users")
    render_kpi_row(
        [
            Kpi("Total users", fmt_count(s.total_users)),
            Kpi("Pet owners", fmt_count(s.total_owners)),
            Kpi("Caretakers", fmt_count(s.total_caretakers)),
            Kpi("Service providers", fmt_count(s.service_providers), help="Vets, trainers, groomers and others"),
        ]
    )

    st.subheader("Activity")
    render_kpi_row(
        [
            Kpi("New users (30 days)", fmt_count(s.users_last_30_days)),
            Kpi("Active subscriptions", fmt_count(s.active_subscriptions), help="Status active or premium"),
            Kpi("Conversations", fmt_count(s.total_conversations)),
            Kpi("Messages", fmt_count(s.total_messages)),
        ]
    )

    st.caption(f"Data source: **{res.source}**")
