from __future__ import annotations

import logging

import streamlit as st

from auth.backend import SupabaseAuthBackend
from auth.bootstrap import AuthBootstrap, AuthState, AuthStatus
from config import AppConfig
from data.connection import create_auth_client
from views import login


logger = logging.getLogger(__name__)

SESSION_KEY = "auth"


def decide_route(state: AuthState) -> str:
    """loading | login | pending | denied | allow"""
    if state.loading:
        return "loading"
    if state.user is None:
        return "login"
    if state.is_admin:
        return "allow"
    if state.status == AuthStatus.ADMIN_PENDING:
        return "pending"
    return "denied"


def get_auth(cfg: AppConfig) -> AuthBootstrap:
    """
    One AuthBootstrap per browser session, kept in session_state.
    The first run does the (bounded) session check; later reruns only poll.
    Raises BackendConfigError when Supabase is not configured.
    """
    auth = st.session_state.get(SESSION_KEY)
    if auth is None:
        backend = SupabaseAuthBackend(create_auth_client(cfg), allow_demo_admin=cfg.allow_demo_admin)
        auth = AuthBootstrap.from_config(backend, cfg)
        st.session_state[SESSION_KEY] = auth
        with st.spinner("Checking session…"):
            auth.start()
    else:
        auth.poll()
    return auth


def _render_access_denied(auth: AuthBootstrap, state: AuthState) -> None:
    st.markdown("## 🔒 Access denied")
    st.error("This account does not have administrator permissions.")
    if state.status == AuthStatus.STALE and state.error:
        st.warning(state.error)
    if state.user is not None:
        st.caption(f"Signed in as {state.user.email or state.user.id}")

    c1, c2, _ = st.columns([1, 1, 3])
    with c1:
        if st.button("Back to sign-in", type="primary", use_container_width=True):
            auth.sign_out()
            st.rerun()
    with c2:
        if state.status == AuthStatus.STALE and st.button("Retry check", use_container_width=True):
            auth.recheck_admin()
            st.rerun()


def require_admin(auth: AuthBootstrap, cfg: AppConfig) -> AuthState:
    """Render whatever stands between the visitor and the console; st.stop() unless allowed."""
    state = auth.state
    route = decide_route(state)

    if route == "pending":
        with st.spinner("Checking admin permissions…"):
            state = auth.wait_for_admin(timeout=cfg.admin_check_budget_s + 1.0)
        route = decide_route(state)
        if route == "pending":
            st.info("Still checking admin permissions. This page refreshes on the next interaction.")
            st.stop()

    if route == "loading":
        with st.spinner("Loading…"):
            st.stop()
    if route == "login":
        login.render(auth, cfg, notice=state.error)
        st.stop()
    if route == "denied":
        logger.info("Access denied for %s", state.user.id if state.user else "?")
        _render_access_denied(auth, state)
        st.stop()

    if state.status == AuthStatus.STALE and state.error:
        st.warning(state.error)
    return state
