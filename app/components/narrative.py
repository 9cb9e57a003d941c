from __future__ import annotations

import html

import streamlit as st


# status value -> badge tone
BADGE_TONES = {
    "active": "success",
    "approved": "success",
    "published": "success",
    "resolved": "success",
    "premium": "info",
    "scheduled": "warning",
    "pending": "warning",
    "in_review": "warning",
    "in_progress": "warning",
    "open": "warning",
    "draft": "muted",
    "inactive": "muted",
    "closed": "muted",
    "not_requested": "muted",
    "free": "muted",
    "expired": "danger",
    "rejected": "danger",
    "flagged": "danger",
    "suspended": "danger",
}


def render_tab_intro(title: str, context: str | None = None) -> None:
    """Every tab opens with a title and a one-line description of what it is for."""
    st.markdown(
        f"""
<div class="tab-intro">
  <div class="tab-intro-title">{html.escape(title)}</div>
  {f'<div class="tab-intro-context">{html.escape(context)}</div>' if context else ''}
</div>
        """,
        unsafe_allow_html=True,
    )


def badge(status: str | None, label: str | None = None) -> str:
    tone = BADGE_TONES.get(status or "", "muted")
    text = label or (status or "-").replace("_", " ")
    return f'<span class="badge badge-{tone}">{html.escape(text)}</span>'


def render_badges(*badges: str) -> None:
    st.markdown(" ".join(badges), unsafe_allow_html=True)


def render_result_warning(warning: str | None) -> None:
    if warning:
        st.warning(warning)
