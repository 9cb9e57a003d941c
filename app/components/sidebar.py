from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import streamlit as st

from auth.bootstrap import AuthBootstrap
from config import AppConfig


@dataclass(frozen=True)
class SidebarState:
    view: str
    use_mock: bool
    signed_out: bool = False


NAV_ITEMS = [
    ("📊 Dashboard", "dashboard"),
    ("👥 Users", "users"),
    ("🛡️ Moderation", "moderation"),
    ("📈 Analytics", "analytics"),
    ("💳 Subscriptions", "subscriptions"),
    ("📝 Content", "blog"),
    ("📣 Advertisements", "advertisements"),
    ("✅ Verification", "verification"),
]


def render_sidebar(cfg: AppConfig, auth: Optional[AuthBootstrap]) -> SidebarState:
    signed_out = False
    with st.sidebar:
        st.markdown("### 🐾 Admin Console")
        st.caption("Pet-care marketplace back office")

        labels = [l for l, _ in NAV_ITEMS]
        default_label = st.session_state.get("nav_label", labels[0])
        idx = labels.index(default_label) if default_label in labels else 0

        label = st.radio(
            "Nav",
            labels,
            index=idx,
            label_visibility="collapsed",
        )
        st.session_state["nav_label"] = label
        view = dict(NAV_ITEMS)[label]

        with st.expander("⚙️ Settings", expanded=False):
            use_mock = st.toggle(
                "Use demo data",
                value=st.session_state.get("use_mock", cfg.default_use_mock),
                help="Shows generated sample rows instead of live Supabase data. Demo data is read-only.",
            )
            st.session_state["use_mock"] = use_mock
            st.caption(f"Backend: {cfg.supabase_url or 'not configured'}")
            st.caption(f"Service role key: {'set' if cfg.supabase_service_role_key else 'not set (RLS applies)'}")

        if auth is not None:
            state = auth.state
            st.divider()
            if state.user is not None:
                st.caption(f"Signed in as **{state.user.email or state.user.id}**")
                if state.admin_role:
                    st.caption(f"Role: {state.admin_role}")
            if st.button("Sign out", use_container_width=True):
                auth.sign_out()
                signed_out = True

    use_mock = st.session_state.get("use_mock", cfg.default_use_mock)
    return SidebarState(view=view, use_mock=use_mock, signed_out=signed_out)
