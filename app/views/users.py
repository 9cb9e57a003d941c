from __future__ import annotations

import streamlit as st

from components.narrative import badge, render_badges, render_result_warning, render_tab_intro
from components.tables import done, refresh_button, render_pager, select_row
from config import AppConfig
from data import export, queries, users
from data.service import ActionResult
from views.context import ViewContext


PAGE_KEY = "users_page"

FILTER_LABELS = {
    "all": "All users",
    "owners": "Pet owners",
    "caretakers": "Caretakers",
    "service_providers": "Service providers",
    "admins": "Admins",
    "suspended": "Suspended",
    "unverified": "Not verified",
    "approval_pending": "Approval pending",
    "approval_approved": "Approved",
    "approval_rejected": "Rejected",
    "approval_not_requested": "Approval not requested",
}

TABLE_COLUMNS = [
    "email",
    "first_name",
    "last_name",
    "type",
    "city",
    "verification_status",
    "approval_status",
    "subscription_status",
    "is_suspended",
    "is_admin",
    "created_at",
]


def _render_actions(cfg: AppConfig, ctx: ViewContext, user: dict) -> None:
    uid = user["id"]
    suspended = bool(user.get("is_suspended"))
    is_admin = bool(user.get("is_admin"))

    st.markdown(f"#### {user.get('first_name') or ''} {user.get('last_name') or ''} · {user.get('email') or uid}")
    render_badges(
        badge(user.get("verification_status")),
        badge("suspended" if suspended else "active"),
        badge(user.get("approval_status"), f"approval: {(user.get('approval_status') or 'not_requested').replace('_', ' ')}"),
        badge("premium" if user.get("plan_type") == "premium" else "free", user.get("plan_type") or "free"),
    )
    st.caption(
        f"Type: {users.user_type_label(user.get('user_type'))} · City: {user.get('city') or '-'} "
        f"({user.get('plz') or '-'}) · Phone: {user.get('phone_number') or '-'}"
    )
    if suspended and user.get("suspension_reason"):
        st.caption(f"Suspended: {user['suspension_reason']}")
    if user.get("approval_notes"):
        st.caption(f"Approval notes: {user['approval_notes']}")

    c1, c2, c3 = st.columns(3)
    result: ActionResult | None = None
    with c1:
        if st.button("Verify", key=f"u_verify_{uid}", disabled=user.get("verification_status") == "approved", use_container_width=True):
            result = users.verify_user(cfg, ctx.use_mock, uid)
    with c2:
        reason = "" if suspended else st.text_input("Suspension reason", key=f"u_reason_{uid}")
        if st.button("Reactivate" if suspended else "Suspend", key=f"u_suspend_{uid}", use_container_width=True):
            result = users.toggle_user_status(cfg, ctx.use_mock, uid, is_active=suspended, actor_id=ctx.actor_id, reason=reason)
    with c3:
        if uid == ctx.actor_id and is_admin:
            st.caption("You cannot revoke your own admin rights.")
        elif st.button("Revoke admin" if is_admin else "Make admin", key=f"u_admin_{uid}", use_container_width=True):
            result = users.toggle_admin_status(cfg, ctx.use_mock, uid, make_admin=not is_admin)

    if user.get("user_type") in queries.APPROVAL_USER_TYPES:
        with st.expander("Approval", expanded=user.get("approval_status") == "pending"):
            status = st.selectbox(
                "Approval status",
                users.APPROVAL_STATUSES,
                index=users.APPROVAL_STATUSES.index(user.get("approval_status") or "not_requested"),
                key=f"u_approval_status_{uid}",
            )
            notes = st.text_area("Notes / rejection reason", value=user.get("approval_notes") or "", key=f"u_approval_notes_{uid}")
            if st.button("Save approval status", key=f"u_approval_save_{uid}", type="primary"):
                result = users.set_approval_status(cfg, ctx.use_mock, uid, status, notes.strip() or None, ctx.actor_id)

    if result is not None:
        done(result)


def render(cfg: AppConfig, ctx: ViewContext) -> None:
    st.title("Users")
    render_tab_intro(
        title="User management",
        context="Search, verify, suspend and approve accounts. Filters and search apply to the current page.",
    )

    c1, c2, c3 = st.columns([3, 2, 1])
    with c1:
        search = st.text_input("Search", placeholder="Email, name or city", key="users_search")
    with c2:
        filter_type = st.selectbox("Filter", users.USER_FILTERS, format_func=FILTER_LABELS.get, key="users_filter")
    with c3:
        st.write("")
        refresh_button("users_refresh")

    page = int(st.session_state.get(PAGE_KEY, 1))
    res = users.list_users(cfg, ctx.use_mock, page=page)
    render_result_warning(res.warning)

    shown = users.filter_users(res.df, search, filter_type)
    if not shown.empty:
        shown = shown.assign(type=shown["user_type"].map(users.user_type_label))

    st.caption(f"{len(shown)} of {len(res.df)} users on this page · {res.total} in total · source: **{res.source}**")
    selected = select_row(shown, "users_table", TABLE_COLUMNS) if not shown.empty else None
    if shown.empty:
        st.info("No users match the current filters.")
    render_pager(PAGE_KEY, res)

    st.download_button(
        "⬇️ Export CSV",
        data=export.users_csv(shown),
        file_name=export.export_filename("users-export"),
        mime="text/csv",
        disabled=shown.empty,
    )

    if selected is not None:
        st.divider()
        _render_actions(cfg, ctx, selected)
