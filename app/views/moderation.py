from __future__ import annotations

import streamlit as st

from components.narrative import badge, render_badges, render_result_warning, render_tab_intro
from components.tables import done, refresh_button, select_row
from config import AppConfig
from data import moderation
from views.context import ViewContext


def _reviews(cfg: AppConfig, ctx: ViewContext) -> None:
    status = st.selectbox("Status", ["all", *moderation.REVIEW_STATUSES], index=1, key="reviews_status")
    res = moderation.list_reviews(cfg, ctx.use_mock, None if status == "all" else status)
    render_result_warning(res.warning)
    if res.df.empty:
        st.info("No reviews to show.")
        return

    st.caption(f"{len(res.df)} reviews · source: **{res.source}**")
    review = select_row(res.df, "reviews_table", ["rating", "comment", "moderation_status", "created_at", "moderated_at"])
    if review is None:
        return

    st.markdown(f"#### {'★' * int(review.get('rating') or 0)}")
    render_badges(badge(review.get("moderation_status")))
    st.write(review.get("comment") or "")
    cols = st.columns(3)
    for col, (action, label) in zip(cols, [("approve", "Approve"), ("reject", "Reject"), ("flag", "Flag")]):
        with col:
            if st.button(label, key=f"review_{action}_{review['id']}", use_container_width=True):
                done(moderation.moderate_review(cfg, ctx.use_mock, review["id"], action, ctx.actor_id))


def _tickets(cfg: AppConfig, ctx: ViewContext) -> None:
    status = st.selectbox("Status", ["all", *moderation.TICKET_STATUSES], index=1, key="tickets_status")
    res = moderation.list_tickets(cfg, ctx.use_mock, None if status == "all" else status)
    render_result_warning(res.warning)
    if res.df.empty:
        st.info("No support tickets to show.")
        return

    st.caption(f"{len(res.df)} tickets · source: **{res.source}**")
    ticket = select_row(res.df, "tickets_table", ["subject", "email", "status", "priority", "created_at", "updated_at"])
    if ticket is None:
        return

    st.markdown(f"#### {ticket.get('subject') or '(no subject)'}")
    render_badges(badge(ticket.get("status")), badge(ticket.get("priority"), f"priority: {ticket.get('priority') or '-'}"))
    st.caption(f"From {ticket.get('email') or ticket.get('user_id') or 'unknown'}")
    st.write(ticket.get("message") or "")

    with st.form(f"ticket_form_{ticket['id']}"):
        new_status = st.selectbox(
            "Status",
            moderation.TICKET_STATUSES,
            index=moderation.TICKET_STATUSES.index(ticket["status"]) if ticket.get("status") in moderation.TICKET_STATUSES else 0,
        )
        response = st.text_area("Response", value=ticket.get("admin_response") or "")
        if st.form_submit_button("Save", type="primary"):
            done(moderation.update_ticket(cfg, ctx.use_mock, ticket["id"], new_status, response))


def render(cfg: AppConfig, ctx: ViewContext) -> None:
    st.title("Moderation")
    render_tab_intro(
        title="Content moderation",
        context="Approve, reject or flag reviews and answer support tickets.",
    )
    refresh_button("moderation_refresh")

    reviews_tab, tickets_tab = st.tabs(["Reviews", "Support tickets"])
    with reviews_tab:
        _reviews(cfg, ctx)
    with tickets_tab:
        _tickets(cfg, ctx)
