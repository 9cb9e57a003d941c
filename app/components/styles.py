from __future__ import annotations

import streamlit as st

from config import THEME


APP_TITLE = "Pet Care Admin Console"


def apply_theme() -> None:
    st.set_page_config(
        page_title=APP_TITLE,
        page_icon="🐾",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    # THEME tokens (config.py) -> CSS variables
    radius = int(THEME["radius_px"])
    css = """
<style>
@import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap');

:root{
  --brand-600: __BRAND_600__;
  --brand-500: __BRAND_500__;
  --indigo-900: __INDIGO_900__;
  --indigo-800: __INDIGO_800__;

  --bg-primary: __BG_PRIMARY__;
  --bg-secondary: __BG_SECONDARY__;
  --card-bg: __CARD_BG__;
  --card-border: __CARD_BORDER__;

  --text-primary: __TEXT_PRIMARY__;
  --text-secondary: __TEXT_SECONDARY__;
  --shadow: __SHADOW__;
  --radius: __RADIUS_PX__px;
}

#MainMenu { visibility: hidden; }
footer { visibility: hidden; }

html, body, [data-testid="stAppViewContainer"]{
  background: var(--bg-primary) !important;
  font-family: "Inter", system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif !important;
  color: var(--text-primary) !important;
}

[data-testid="stSidebar"]{
  background: var(--indigo-900) !important;
}
[data-testid="stSidebar"] *{
  color: #E0E7FF !important;
}
[data-testid="stSidebar"] div[role="radiogroup"] > label{
  border-radius: 8px !important;
  padding: 8px 10px !important;
  margin: 0 0 4px 0 !important;
}
[data-testid="stSidebar"] div[role="radiogroup"] > label:has(input:checked){
  background: var(--indigo-800) !important;
}

.block-container{
  padding-top: 1rem !important;
  padding-bottom: 2rem !important;
}

/* Header bar */
.console-header{
  display:flex;
  align-items:center;
  justify-content:space-between;
  gap: 12px;
  background: var(--bg-secondary);
  border: 1px solid var(--card-border);
  border-radius: var(--radius);
  box-shadow: var(--shadow);
  padding: 10px 14px;
  margin: 0 0 14px 0;
}
.console-title{
  font-size: 20px;
  font-weight: 700;
  color: var(--indigo-900);
  line-height: 1.1;
}
.console-subtitle{
  font-size: 13px;
  color: var(--text-secondary);
}
.pill{
  display:inline-flex;
  align-items:center;
  gap:6px;
  border: 1px solid var(--card-border);
  border-radius: 999px;
  padding: 5px 10px;
  font-size: 13px;
  font-weight: 600;
  color: var(--indigo-800);
  background: white;
}
.pill .dot{
  width:8px;
  height:8px;
  border-radius:999px;
  display:inline-block;
  background: var(--brand-600);
}
.pill.demo .dot{ background: __WARNING__; }

/* Metric cards */
.metric-card{
  background: var(--card-bg);
  border: 1px solid var(--card-border);
  border-radius: var(--radius);
  box-shadow: var(--shadow);
  padding: 12px 14px;
}
.metric-label{
  font-size: 13px;
  font-weight: 500;
  color: var(--text-secondary);
  margin-bottom: 6px;
}
.metric-value{
  font-size: 26px;
  font-weight: 700;
  line-height: 1.2;
}
.metric-help{
  margin-top: 4px;
  font-size: 12px;
  color: var(--text-secondary);
}

div.stButton > button[kind="primary"], div.stFormSubmitButton > button[kind="primary"]{
  background: var(--brand-600) !important;
  border-color: var(--brand-600) !important;
  color: white !important;
}

div[data-testid="stPlotlyChart"]{
  background: var(--card-bg);
  border: 1px solid var(--card-border);
  border-radius: var(--radius);
  padding: 8px 10px;
}

/* Tab intro */
.tab-intro{
  background: var(--bg-secondary);
  border: 1px solid var(--card-border);
  border-left: 4px solid var(--brand-600);
  border-radius: var(--radius);
  padding: 12px 14px;
  margin: 0 0 14px 0;
}
.tab-intro-title{
  font-size: 20px;
  font-weight: 700;
  color: var(--indigo-900);
  margin-bottom: 4px;
}
.tab-intro-context{
  font-size: 14px;
  color: var(--text-secondary);
  line-height: 1.5;
}

/* Status badges */
.badge{
  display:inline-block;
  padding: 2px 8px;
  border-radius: 999px;
  font-size: 12px;
  font-weight: 600;
}
.badge-success{ background:#DCFCE7; color: __SUCCESS__; }
.badge-warning{ background:#FEF3C7; color:#92400E; }
.badge-danger{ background:#FEE2E2; color: __DANGER__; }
.badge-muted{ background:#F3F4F6; color:#374151; }
.badge-info{ background:#E0E7FF; color: var(--indigo-800); }

/* Sign-in card */
.login-card{
  max-width: 440px;
  margin: 8vh auto 0 auto;
  text-align: center;
}
.login-title{
  font-size: 26px;
  font-weight: 700;
  color: var(--indigo-900);
}
.login-subtitle{
  font-size: 14px;
  color: var(--text-secondary);
  margin-bottom: 16px;
}
</style>
"""

    tokens = {
        "__BRAND_600__": str(THEME["accent_primary"]),
        "__BRAND_500__": str(THEME["accent_secondary"]),
        "__INDIGO_900__": str(THEME["navy_900"]),
        "__INDIGO_800__": str(THEME["navy_800"]),
        "__BG_PRIMARY__": str(THEME["bg_primary"]),
        "__BG_SECONDARY__": str(THEME["bg_secondary"]),
        "__CARD_BG__": str(THEME["bg_card"]),
        "__CARD_BORDER__": str(THEME["border_color"]),
        "__TEXT_PRIMARY__": str(THEME["text_primary"]),
        "__TEXT_SECONDARY__": str(THEME["text_secondary"]),
        "__SHADOW__": str(THEME["shadow"]),
        "__RADIUS_PX__": str(radius),
        "__SUCCESS__": str(THEME["success"]),
        "__WARNING__": str(THEME["warning"]),
        "__DANGER__": str(THEME["danger"]),
    }
    for k, v in tokens.items():
        css = css.replace(k, v)

    st.markdown(css, unsafe_allow_html=True)
