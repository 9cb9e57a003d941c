from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from config import THEME


@dataclass(frozen=True)
class Kpi:
    label: str
    value: str
    help: Optional[str] = None


def fmt_count(n: int) -> str:
    return f"{int(n):,}".replace(",", ".")


def render_kpi_row(kpis: list[Kpi]) -> None:
    cols = st.columns(len(kpis))
    for c, k in zip(cols, kpis):
        with c:
            help_html = f'<div class="metric-help">{html.escape(k.help)}</div>' if k.help else ""
            st.markdown(
                f"""
<div class="metric-card">
  <div class="metric-label">{html.escape(k.label)}</div>
  <div class="metric-value">{html.escape(k.value)}</div>
  {help_html}
</div>
                """,
                unsafe_allow_html=True,
            )


def apply_plotly_theme(fig: go.Figure, x_title: str, y_title: str) -> go.Figure:
    font_family = "Inter, system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif"
    fig.update_layout(
        margin=dict(l=10, r=10, t=44, b=10),
        font=dict(family=font_family, color=THEME["text_primary"]),
        paper_bgcolor=THEME["bg_card"],
        plot_bgcolor=THEME["bg_card"],
        colorway=[THEME["accent_primary"], THEME["navy_800"], THEME["accent_secondary"], "#6B7280"],
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0),
        title_font=dict(color=THEME["navy_900"], size=16),
        hovermode="x unified",
    )
    fig.update_traces(line=dict(width=2))
    for update in (fig.update_xaxes, fig.update_yaxes):
        update(gridcolor=THEME["grid"], zeroline=False, linecolor=THEME["border_color"])
    fig.update_xaxes(title_text=x_title)
    fig.update_yaxes(title_text=y_title, rangemode="tozero")
    return fig


def line_chart(df: pd.DataFrame, x: str, y: str | list[str], title: str = "", y_title: str = "") -> None:
    fig = px.line(df, x=x, y=y, title=title, markers=len(df) <= 31)
    fig = apply_plotly_theme(fig, x_title="", y_title=y_title)
    st.plotly_chart(fig, use_container_width=True)
