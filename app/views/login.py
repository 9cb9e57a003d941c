from __future__ import annotations

from typing import Optional

import streamlit as st

from auth.bootstrap import AuthBootstrap
from config import AppConfig


def render(auth: Optional[AuthBootstrap], cfg: AppConfig, notice: Optional[str] = None, error: Optional[str] = None) -> None:
    _, mid, _ = st.columns([1, 2, 1])
    with mid:
        st.markdown(
            """
<div class="login-card">
  <div class="login-title">🐾 Admin Console</div>
  <div class="login-subtitle">Sign in with your administrator account</div>
</div>
            """,
            unsafe_allow_html=True,
        )

        if auth is None:
            st.error(error or "Supabase is not configured.")
            st.caption("Set SUPABASE_URL and SUPABASE_ANON_KEY (for example in a `.env` file) and reload.")
            return

        if notice:
            st.info(notice)

        with st.form("login_form", clear_on_submit=False):
            email = st.text_input("Email", placeholder="admin@example.com")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)

        if submitted:
            if not email.strip() or not password:
                st.error("Please enter email and password.")
                return
            with st.spinner("Signing in…"):
                message = auth.sign_in(email.strip(), password)
            if message:
                st.error(message)
                return
            st.rerun()
