from __future__ import annotations

import logging
from functools import lru_cache

from supabase import Client, create_client
from supabase.client import ClientOptions

from config import AppConfig


logger = logging.getLogger(__name__)


class BackendConfigError(RuntimeError):
    pass


def _require_backend(cfg: AppConfig) -> None:
    if not cfg.backend_configured:
        raise BackendConfigError(
            "Missing SUPABASE_URL / SUPABASE_ANON_KEY. "
            "Set them in the environment (or .env for local dev) to use live data and sign-in."
        )


def create_auth_client(cfg: AppConfig) -> Client:
    """
    Anon-key client that owns ONE browser session's auth state.
    Never share it between Streamlit sessions.
    """
    _require_backend(cfg)
    return create_client(
        cfg.supabase_url,
        cfg.supabase_anon_key,
        options=ClientOptions(auto_refresh_token=True, persist_session=True),
    )


@lru_cache(maxsize=4)
def get_admin_client(cfg: AppConfig) -> Client:
    """
    Shared client for table + storage access.
    Uses the service role key when present (bypasses RLS), otherwise the anon key.
    No session of its own: never signs in, never refreshes tokens.
    """
    _require_backend(cfg)
    logger.info(
        "Admin client for %s (service role key: %s)",
        cfg.supabase_url,
        "set" if cfg.supabase_service_role_key else "missing",
    )
    if not cfg.supabase_service_role_key:
        logger.warning("SUPABASE_SERVICE_ROLE_KEY is not set; RLS policies may hide rows from the admin views")

    return create_client(
        cfg.supabase_url,
        cfg.supabase_service_role_key or cfg.supabase_anon_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
