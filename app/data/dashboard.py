from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, fields
from datetime import timedelta
from typing import Callable, Optional

from supabase import Client

from config import AppConfig
from data import connection, mock_data, queries
from data.connection import BackendConfigError
from data.service import iso, utc_now


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardStats:
    total_users: int = 0
    total_owners: int = 0
    total_caretakers: int = 0
    service_providers: int = 0
    active_subscriptions: int = 0
    total_conversations: int = 0
    total_messages: int = 0
    users_last_30_days: int = 0


@dataclass(frozen=True)
class StatsResult:
    stats: DashboardStats
    source: str
    warning: Optional[str] = None


def _count_queries(client: Client) -> dict[str, Callable[[], object]]:
    since = iso(utc_now() - timedelta(days=30))
    return {
        "total_users": lambda: queries.q_count(client, "users"),
        "total_owners": lambda: queries.q_count(client, "users").eq("user_type", "owner"),
        "total_caretakers": lambda: queries.q_count(client, "users").eq("user_type", "caretaker"),
        "service_providers": lambda: queries.q_count(client, "users").in_("user_type", queries.SERVICE_PROVIDER_TYPES),
        "active_subscriptions": lambda: queries.q_count(client, "users").in_("subscription_status", ["active", "premium"]),
        "total_conversations": lambda: queries.q_count(client, "conversations"),
        "total_messages": lambda: queries.q_count(client, "messages"),
        "users_last_30_days": lambda: queries.q_count(client, "users").gte("created_at", since),
    }


def _run_count(name: str, build: Callable[[], object]) -> int:
    try:
        return int(build().execute().count or 0)
    except Exception as e:
        logger.warning("%s count failed: %s", name, e)
        return 0


def _mock_stats() -> DashboardStats:
    users = mock_data.users_mock()
    activity = mock_data.daily_activity_mock(30)
    since = iso(utc_now() - timedelta(days=30))
    return DashboardStats(
        total_users=len(users),
        total_owners=int((users["user_type"] == "owner").sum()),
        total_caretakers=int((users["user_type"] == "caretaker").sum()),
        service_providers=int(users["user_type"].isin(queries.SERVICE_PROVIDER_TYPES).sum()),
        active_subscriptions=int(users["subscription_status"].isin(["active", "premium"]).sum()),
        total_conversations=len(users) * 2,
        total_messages=int(activity["messages"].sum()) * 6,
        users_last_30_days=int((users["created_at"] >= since).sum()),
    )


def get_dashboard_stats(cfg: AppConfig, use_mock: bool) -> StatsResult:
    """
    Eight independent counts, run concurrently.
    - a failing count is logged and reported as 0
    - the batch as a whole is bounded by cfg.dashboard_timeout_s; past that every stat is 0
    """
    if use_mock:
        return StatsResult(stats=_mock_stats(), source="mock")

    try:
        client = connection.get_admin_client(cfg)
    except BackendConfigError as e:
        logger.warning("Dashboard stats skipped: %s", e)
        return StatsResult(stats=DashboardStats(), source="unavailable", warning=str(e))

    builders = _count_queries(client)
    pool = ThreadPoolExecutor(max_workers=len(builders), thread_name_prefix="dashboard")
    try:
        futures = {name: pool.submit(_run_count, name, build) for name, build in builders.items()}
        _, not_done = wait(futures.values(), timeout=cfg.dashboard_timeout_s)
    finally:
        pool.shutdown(wait=False)

    if not_done:
        logger.warning("Dashboard stats timed out after %.1fs; showing zeros", cfg.dashboard_timeout_s)
        return StatsResult(
            stats=DashboardStats(),
            source="unavailable",
            warning="Statistics took too long to load. Try refreshing.",
        )

    stats = DashboardStats(**{name: f.result() for name, f in futures.items()})
    logger.info("Dashboard stats loaded: %s", {f.name: getattr(stats, f.name) for f in fields(stats)})
    return StatsResult(stats=stats, source="supabase")


def get_admin_profile(cfg: AppConfig, use_mock: bool, user_id: str) -> Optional[dict]:
    """The signed-in admin's own `users` row (is_admin = true), or None."""
    if use_mock:
        return {"id": user_id, "email": "admin@example.com", "first_name": "Demo", "last_name": "Admin", "admin_role": "admin"}
    try:
        resp = queries.q_admin_profile(connection.get_admin_client(cfg), user_id).execute()
    except BackendConfigError as e:
        logger.warning("Admin profile skipped: %s", e)
        return None
    except Exception:
        logger.exception("Error fetching admin profile")
        return None
    if resp is None or not resp.data:
        return None
    profile = dict(resp.data)
    profile["admin_role"] = profile.get("admin_role") or "admin"
    return profile
