from __future__ import annotations

import streamlit as st

from components.narrative import badge, render_badges, render_result_warning, render_tab_intro
from components.tables import done, refresh_button, select_row
from config import AppConfig
from data import users, verification
from views.context import ViewContext


def _documents(request: dict) -> None:
    docs = request.get("documents")
    if docs is None or len(docs) == 0:
        st.caption("No documents attached.")
        return
    for i, url in enumerate(docs, start=1):
        st.markdown(f"- [Document {i}]({url})")


def _verification_queue(cfg: AppConfig, ctx: ViewContext) -> None:
    status = st.selectbox("Status", ["all", *verification.REQUEST_STATUSES], index=1, key="verif_status")
    res = verification.list_verification_requests(cfg, ctx.use_mock, None if status == "all" else status)
    render_result_warning(res.warning)
    if res.df.empty:
        st.info("No verification requests.")
        return

    st.caption(f"{len(res.df)} requests · source: **{res.source}**")
    req = select_row(res.df, "verif_table", ["email", "first_name", "last_name", "user_type", "status", "created_at"])
    if req is None:
        return

    st.markdown(f"#### {req.get('first_name') or ''} {req.get('last_name') or ''} · {req.get('email') or req['user_id']}")
    render_badges(badge(req.get("status")), badge(None, users.user_type_label(req.get("user_type"))))
    _documents(req)

    comment = st.text_area("Comment", value=req.get("admin_comment") or "", key=f"verif_comment_{req['id']}")
    c1, c2, _ = st.columns([1, 1, 3])
    with c1:
        if st.button("Approve", key=f"verif_ok_{req['id']}", type="primary", use_container_width=True):
            done(verification.review_verification(cfg, ctx.use_mock, req["id"], req["user_id"], True, comment, ctx.actor_id))
    with c2:
        if st.button("Reject", key=f"verif_no_{req['id']}", use_container_width=True):
            done(verification.review_verification(cfg, ctx.use_mock, req["id"], req["user_id"], False, comment, ctx.actor_id))


def _approval_queue(cfg: AppConfig, ctx: ViewContext) -> None:
    res = users.list_pending_approvals(cfg, ctx.use_mock)
    render_result_warning(res.warning)
    if res.df.empty:
        st.success("No caretakers or service providers waiting for approval.")
        return

    st.caption(f"{len(res.df)} profiles pending or rejected · source: **{res.source}**")
    user = select_row(res.df, "approval_table", ["email", "first_name", "last_name", "user_type", "approval_status", "city", "created_at"])
    if user is None:
        return

    st.markdown(f"#### {user.get('first_name') or ''} {user.get('last_name') or ''} · {user.get('email') or user['id']}")
    render_badges(badge(user.get("approval_status")), badge(None, users.user_type_label(user.get("user_type"))))
    if user.get("approval_notes"):
        st.caption(f"Previous notes: {user['approval_notes']}")

    reason = st.text_area("Rejection reason", key=f"approval_reason_{user['id']}")
    c1, c2, _ = st.columns([1, 1, 3])
    with c1:
        if st.button("Approve profile", key=f"approval_ok_{user['id']}", type="primary", use_container_width=True):
            done(users.approve_user(cfg, ctx.use_mock, user["id"], ctx.actor_id))
    with c2:
        if st.button("Reject profile", key=f"approval_no_{user['id']}", use_container_width=True):
            done(users.reject_user(cfg, ctx.use_mock, user["id"], reason.strip() or None, ctx.actor_id))


def render(cfg: AppConfig, ctx: ViewContext) -> None:
    st.title("Verification")
    render_tab_intro(
        title="Verification & approvals",
        context="Check submitted identity documents and release caretaker and service provider profiles.",
    )
    refresh_button("verif_refresh")

    docs_tab, approvals_tab = st.tabs(["Identity verification", "Profile approvals"])
    with docs_tab:
        _verification_queue(cfg, ctx)
    with approvals_tab:
        _approval_queue(cfg, ctx)
