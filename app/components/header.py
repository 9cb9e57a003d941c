from __future__ import annotations

import html

import streamlit as st


def render_header(app_name: str, subtitle: str, right_pill: str, demo: bool = False) -> None:
    st.markdown(
        f"""
<div class="console-header">
  <div>
    <div class="console-title">🐾 {html.escape(app_name)}</div>
    <div class="console-subtitle">{html.escape(subtitle)}</div>
  </div>
  <div class="pill{' demo' if demo else ''}"><span class="dot"></span>{html.escape(right_pill)}</div>
</div>
        """,
        unsafe_allow_html=True,
    )
