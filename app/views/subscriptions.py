from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

import streamlit as st

from components.narrative import badge, render_badges, render_result_warning, render_tab_intro
from components.tables import done, refresh_button, select_row
from config import AppConfig
from data import subscriptions
from views.context import ViewContext


FILTER_LABELS = {
    "all": "All users",
    "free": "Free",
    "premium": "Premium",
    "expiring": "Premium expiring within 7 days",
    "expired": "Expired",
}


def render(cfg: AppConfig, ctx: ViewContext) -> None:
    st.title("Subscriptions")
    render_tab_intro(
        title="Subscription sync",
        context="Align plan flags and limits with each user's effective plan. Expired premium plans fall back to free.",
    )

    c1, c2 = st.columns([3, 1])
    with c1:
        plan_filter = st.selectbox("Show", subscriptions.PLAN_FILTERS, format_func=FILTER_LABELS.get, key="subs_filter")
    with c2:
        st.write("")
        refresh_button("subs_refresh")

    res = subscriptions.list_subscriptions(cfg, ctx.use_mock, plan_filter)
    render_result_warning(res.warning)

    pending = subscriptions.preview_sync(res.df)
    st.subheader("Sync")
    if pending.empty:
        st.success("All shown users already match their plan.")
    else:
        st.warning(f"{len(pending)} users need an update.")
        with st.expander("Pending changes"):
            st.dataframe(pending, hide_index=True, use_container_width=True)
    if st.button("Run subscription sync", type="primary"):
        with st.spinner("Syncing subscriptions…"):
            done(subscriptions.sync_subscriptions(cfg, ctx.use_mock))

    st.subheader("Users")
    if res.df.empty:
        st.info("No users to show.")
        return
    st.caption(f"{len(res.df)} users · source: **{res.source}**")
    user = select_row(
        res.df,
        "subs_table",
        ["email", "plan_type", "subscription_status", "plan_expires_at", "show_ads", "premium_badge", "search_priority"],
    )
    if user is None:
        return

    st.markdown(f"#### {user.get('email') or user['id']}")
    render_badges(badge(user.get("plan_type") or "free"), badge(user.get("subscription_status")))
    with st.form(f"plan_form_{user['id']}"):
        plan = st.selectbox(
            "Plan",
            subscriptions.PLANS,
            index=subscriptions.PLANS.index(user["plan_type"]) if user.get("plan_type") in subscriptions.PLANS else 0,
        )
        expires_on = st.date_input("Premium until", value=(datetime.now(timezone.utc) + timedelta(days=30)).date())
        if st.form_submit_button("Set plan", type="primary"):
            expires_at = datetime.combine(expires_on, time(23, 59, 59), tzinfo=timezone.utc) if plan == "premium" else None
            done(subscriptions.set_plan(cfg, ctx.use_mock, user["id"], plan, expires_at))
