from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


#
# Shared theme tokens
# - Centralized here so components/styles.py and the Plotly theme stay in sync.
#
THEME = {
    # Backgrounds
    "bg_primary": "#F6F7F9",     # page background
    "bg_secondary": "#FFFFFF",   # sidebar / top surfaces
    "bg_card": "#FFFFFF",        # card surface
    # Accents (brand green + indigo)
    "accent_primary": "#5A9E4B",
    "accent_secondary": "#74B565",
    "navy_900": "#1E1B4B",
    "navy_800": "#312E81",
    # Text + borders
    "text_primary": "#111827",
    "text_secondary": "rgba(17, 24, 39, 0.72)",
    "border_color": "#E5E7EB",
    "grid": "rgba(17, 24, 39, 0.10)",
    "shadow": "0 1px 3px rgba(16,24,40,0.08)",
    "radius_px": 10,
    # Status colors
    "success": "#067647",
    "warning": "#F59E0B",
    "danger": "#B42318",
}


@dataclass(frozen=True)
class AppConfig:
    # Required for live data + sign-in (Supabase)
    supabase_url: str
    supabase_anon_key: str

    # Optional. Without it the admin client falls back to the anon key and RLS applies.
    supabase_service_role_key: Optional[str]

    # Defaults
    default_use_mock: bool
    allow_demo_admin: bool

    # Auth bootstrap timings (seconds)
    session_timeout_s: float = 3.0
    admin_check_timeout_s: float = 3.0
    admin_check_retries: int = 3
    admin_check_backoff_s: float = 0.5
    dashboard_timeout_s: float = 10.0

    # Paging
    users_per_page: int = 50
    ads_per_page: int = 20
    posts_per_page: int = 20

    # Object storage
    ad_image_bucket: str = "advertisement-images"
    blog_image_bucket: str = "blog-images"
    max_upload_bytes: int = 5 * 1024 * 1024

    log_level: str = "INFO"

    @property
    def backend_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def admin_check_budget_s(self) -> float:
        # Worst case for one admin lookup: every attempt times out, plus the backoff sleeps.
        sleeps = sum(self.admin_check_backoff_s * (2 ** i) for i in range(max(0, self.admin_check_retries - 1)))
        return self.admin_check_retries * self.admin_check_timeout_s + sleeps


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name, default)
    if v is None:
        return None
    v = v.strip()
    return v if v else None


def _getbool(name: str, default: bool) -> bool:
    raw = _getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "y", "on"}


def _getfloat(name: str, default: float) -> float:
    raw = _getenv(name)
    try:
        return float(raw) if raw is not None else default
    except ValueError:
        return default


def _getint(name: str, default: int) -> int:
    raw = _getenv(name)
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        return default


def get_config() -> AppConfig:
    """
    Centralized config: this is the ONLY place env vars are read.
    - Loads `.env` if present (local dev)
    - Accepts both SUPABASE_SERVICE_ROLE_KEY and the shorter SUPABASE_SERVICE_ROLE
    """
    load_dotenv(override=False)

    return AppConfig(
        supabase_url=_getenv("SUPABASE_URL") or "",
        supabase_anon_key=_getenv("SUPABASE_ANON_KEY") or "",
        supabase_service_role_key=_getenv("SUPABASE_SERVICE_ROLE_KEY") or _getenv("SUPABASE_SERVICE_ROLE"),
        default_use_mock=_getbool("USE_MOCK_DATA", False),
        allow_demo_admin=_getbool("ALLOW_DEMO_ADMIN", False),
        session_timeout_s=_getfloat("AUTH_SESSION_TIMEOUT", 3.0),
        admin_check_timeout_s=_getfloat("ADMIN_CHECK_TIMEOUT", 3.0),
        admin_check_retries=max(1, _getint("ADMIN_CHECK_RETRIES", 3)),
        admin_check_backoff_s=_getfloat("ADMIN_CHECK_BACKOFF", 0.5),
        dashboard_timeout_s=_getfloat("DASHBOARD_TIMEOUT", 10.0),
        log_level=(_getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
    )


def configure_logging(cfg: AppConfig) -> None:
    # basicConfig is a no-op once the root logger has handlers, so Streamlit reruns are safe.
    level = getattr(logging, cfg.log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)
