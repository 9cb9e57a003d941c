"""
Routing only.

All view logic lives in app/views/.
All env reads happen ONLY in config.py.
"""

from __future__ import annotations

import os
import sys

# Make `app/` importable as a flat module path when running:
#   streamlit run app/app.py
APP_DIR = os.path.dirname(__file__)
REPO_ROOT = os.path.abspath(os.path.join(APP_DIR, ".."))
for p in [APP_DIR, REPO_ROOT]:
    if p not in sys.path:
        sys.path.insert(0, p)

import streamlit as st  # noqa: E402

from auth.guard import get_auth, require_admin  # noqa: E402
from components.header import render_header  # noqa: E402
from components.sidebar import render_sidebar  # noqa: E402
from components.styles import apply_theme  # noqa: E402
from config import configure_logging, get_config  # noqa: E402
from data.connection import BackendConfigError  # noqa: E402

from views import (  # noqa: E402
    advertisements,
    analytics,
    blog,
    dashboard,
    login,
    moderation,
    subscriptions,
    users,
    verification,
)
from views.context import ViewContext  # noqa: E402


VIEWS = {
    "dashboard": dashboard.render,
    "users": users.render,
    "moderation": moderation.render,
    "analytics": analytics.render,
    "subscriptions": subscriptions.render,
    "blog": blog.render,
    "advertisements": advertisements.render,
    "verification": verification.render,
}


def main() -> None:
    apply_theme()
    cfg = get_config()
    configure_logging(cfg)

    try:
        auth = get_auth(cfg)
    except BackendConfigError as e:
        login.render(None, cfg, error=str(e))
        st.stop()

    state = require_admin(auth, cfg)
    sidebar = render_sidebar(cfg, auth)
    if sidebar.signed_out:
        st.rerun()

    render_header(
        app_name="Pet Care Admin Console",
        subtitle="Users, content, subscriptions and ads",
        right_pill=f"Data: {'Demo (read-only)' if sidebar.use_mock else 'Supabase'}",
        demo=sidebar.use_mock,
    )

    ctx = ViewContext(
        use_mock=sidebar.use_mock,
        actor_id=state.user.id if state.user else None,
        actor_email=state.user.email if state.user else None,
    )

    # Routing only
    render_view = VIEWS.get(sidebar.view)
    if render_view is None:
        st.error("Unknown view")
        return
    render_view(cfg, ctx)


if __name__ == "__main__":
    main()
