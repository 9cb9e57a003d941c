from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

import pandas as pd
from supabase import Client

from config import AppConfig
from data import mock_data, queries
from data.service import ActionResult, DataResult, _fallback, fetch_all, iso, rows_to_frame, run_action, utc_now


logger = logging.getLogger(__name__)

PLANS = ["free", "premium"]
PLAN_FILTERS = ["all", "free", "premium", "expiring", "expired"]
EXPIRING_WITHIN = timedelta(days=7)

LIMIT_FIELDS = ["show_ads", "premium_badge", "max_contact_requests", "max_bookings", "search_priority"]


def plan_limits(plan: str) -> dict:
    """Feature flags and quotas that belong to a plan (None = unlimited)."""
    if plan == "premium":
        return {
            "show_ads": False,
            "premium_badge": True,
            "max_contact_requests": None,
            "max_bookings": None,
            "search_priority": 10,
        }
    return {
        "show_ads": True,
        "premium_badge": False,
        "max_contact_requests": 3,
        "max_bookings": 3,
        "search_priority": 0,
    }


def _is_null(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _same(current: Any, wanted: Any) -> bool:
    if _is_null(current) or _is_null(wanted):
        return _is_null(current) and _is_null(wanted)
    return current == wanted


def _parse_ts(value: Any) -> Optional[pd.Timestamp]:
    if _is_null(value) or value == "":
        return None
    ts = pd.Timestamp(value)
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts


def compute_subscription_patch(user: dict, now: Optional[datetime] = None) -> Optional[dict]:
    """
    Fields to write so the user's flags match their effective plan, or None if nothing changes.

    - premium past plan_expires_at becomes free with subscription_status 'expired'
    - free users still marked active/premium go back to 'free'
    - limits/flags are realigned with the effective plan
    """
    now_ts = _parse_ts(now or utc_now())
    plan = user.get("plan_type") if not _is_null(user.get("plan_type")) else "free"
    status = user.get("subscription_status")
    expires = _parse_ts(user.get("plan_expires_at"))

    patch: dict = {}
    effective = plan
    if plan == "premium" and expires is not None and expires < now_ts:
        effective = "free"
        patch["plan_type"] = "free"
        if status != "expired":
            patch["subscription_status"] = "expired"
    elif plan != "premium" and status in ("active", "premium"):
        patch["subscription_status"] = "free"

    for field, wanted in plan_limits(effective).items():
        if not _same(user.get(field), wanted):
            patch[field] = wanted

    if not patch:
        return None
    patch["updated_at"] = iso(now)
    return patch


def preview_sync(df: pd.DataFrame, now: Optional[datetime] = None) -> pd.DataFrame:
    """One row per user the sync would touch, with the fields it would change."""
    rows = []
    for user in df.to_dict("records"):
        patch = compute_subscription_patch(user, now)
        if patch is None:
            continue
        changes = [k for k in patch if k != "updated_at"]
        rows.append(
            {
                "id": user.get("id"),
                "email": user.get("email"),
                "plan_type": user.get("plan_type"),
                "plan_expires_at": user.get("plan_expires_at"),
                "changes": ", ".join(changes),
            }
        )
    return pd.DataFrame(rows, columns=["id", "email", "plan_type", "plan_expires_at", "changes"])


def filter_subscriptions(df: pd.DataFrame, plan_filter: str = "all", now: Optional[datetime] = None) -> pd.DataFrame:
    if df.empty or plan_filter == "all":
        return df
    now_ts = _parse_ts(now or utc_now())
    plan = df["plan_type"].fillna("free")
    expires = pd.to_datetime(df["plan_expires_at"], utc=True, errors="coerce")
    if plan_filter in PLANS:
        out = df[plan == plan_filter]
    elif plan_filter == "expiring":
        out = df[(plan == "premium") & (expires >= now_ts) & (expires <= now_ts + EXPIRING_WITHIN)]
    elif plan_filter == "expired":
        out = df[((plan == "premium") & (expires < now_ts)) | (df["subscription_status"] == "expired")]
    else:
        raise ValueError(f"Unknown plan filter: {plan_filter}")
    return out.reset_index(drop=True)


def list_subscriptions(cfg: AppConfig, use_mock: bool, plan_filter: str = "all") -> DataResult:
    def _live(client: Client) -> pd.DataFrame:
        df = rows_to_frame(fetch_all(lambda: queries.q_subscriptions(client)), queries.SUBSCRIPTION_COLUMNS)
        return filter_subscriptions(df, plan_filter)

    def _mock() -> pd.DataFrame:
        return filter_subscriptions(mock_data.users_mock()[queries.SUBSCRIPTION_COLUMNS], plan_filter)

    return _fallback(cfg, use_mock, _live, _mock, queries.SUBSCRIPTION_COLUMNS, "subscriptions")


def sync_subscriptions(cfg: AppConfig, use_mock: bool, now: Optional[datetime] = None) -> ActionResult:
    """
    Applies compute_subscription_patch to every user.
    `data` is {"checked", "updated", "failed"}; one failing row does not stop the rest.
    """

    def _live(client: Client) -> dict:
        users = fetch_all(lambda: queries.q_subscriptions(client))
        updated, failed = 0, []
        for user in users:
            patch = compute_subscription_patch(user, now)
            if patch is None:
                continue
            try:
                client.table("users").update(patch).eq("id", user["id"]).execute()
            except Exception as e:
                logger.warning("Subscription sync failed for %s: %s", user.get("id"), e)
                failed.append(user.get("id"))
            else:
                updated += 1
        return {"checked": len(users), "updated": updated, "failed": failed}

    res = run_action(cfg, use_mock, _live, "sync subscriptions", "Subscriptions synced")
    if not res.ok:
        return res
    summary = res.data
    message = f"{summary['updated']} of {summary['checked']} users updated"
    if summary["failed"]:
        message += f", {len(summary['failed'])} failed"
    logger.info("Subscription sync: %s", message)
    return ActionResult(ok=not summary["failed"], message=message, data=summary)


def set_plan(
    cfg: AppConfig, use_mock: bool, user_id: str, plan: str, expires_at: Optional[datetime] = None
) -> ActionResult:
    if plan not in PLANS:
        return ActionResult(ok=False, message=f"Unknown plan: {plan}")
    payload = {
        "plan_type": plan,
        "plan_expires_at": expires_at.isoformat() if (plan == "premium" and expires_at) else None,
        "subscription_status": "premium" if plan == "premium" else "free",
        **plan_limits(plan),
        "updated_at": iso(),
    }

    def _live(client: Client):
        return client.table("users").update(payload).eq("id", user_id).execute().data

    return run_action(cfg, use_mock, _live, "change plan", f"Plan set to {plan}")
