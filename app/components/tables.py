from __future__ import annotations

from typing import Optional

import pandas as pd
import streamlit as st

from data.service import PageResult, missing_to_none


def render_pager(key: str, result: PageResult) -> None:
    """Prev / next buttons under a paged table; the page number lives in session_state[key]."""
    c1, c2, c3 = st.columns([1, 2, 1])
    with c1:
        if st.button("← Previous", key=f"{key}_prev", disabled=result.page <= 1, use_container_width=True):
            st.session_state[key] = result.page - 1
            st.rerun()
    with c2:
        first = (result.page - 1) * result.per_page + 1 if result.total else 0
        last = min(result.page * result.per_page, result.total)
        st.caption(f"Page {result.page} of {result.total_pages} · rows {first}-{last} of {result.total}")
    with c3:
        if st.button("Next →", key=f"{key}_next", disabled=result.page >= result.total_pages, use_container_width=True):
            st.session_state[key] = result.page + 1
            st.rerun()


def select_row(df: pd.DataFrame, key: str, columns: list[str], height: int = 420) -> Optional[dict]:
    """Table with single-row selection; returns the selected row as a dict."""
    shown = [c for c in columns if c in df.columns]
    event = st.dataframe(
        df[shown],
        key=key,
        hide_index=True,
        use_container_width=True,
        height=height,
        on_select="rerun",
        selection_mode="single-row",
    )
    rows = event.selection.rows if event is not None else []
    if not rows or rows[0] >= len(df):
        return None
    return missing_to_none(df.iloc[[rows[0]]]).iloc[0].to_dict()


def refresh_button(key: str) -> None:
    if st.button("🔄 Refresh", key=key):
        st.rerun()


def done(result, success_icon: str = "✅") -> None:
    """Toast + rerun on success, inline error otherwise."""
    if result.ok:
        st.toast(result.message, icon=success_icon)
        st.rerun()
    else:
        st.error(result.message)
