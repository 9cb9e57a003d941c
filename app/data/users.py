from __future__ import annotations

import logging
from typing import Optional

import pandas as pd
from supabase import Client

from config import AppConfig
from data import mock_data, queries
from data.service import ActionResult, DataResult, PageResult, _fallback, _fallback_page, iso, rows_to_frame, run_action


logger = logging.getLogger(__name__)

USER_FILTERS = [
    "all",
    "owners",
    "caretakers",
    "service_providers",
    "admins",
    "suspended",
    "unverified",
    "approval_pending",
    "approval_approved",
    "approval_rejected",
    "approval_not_requested",
]

APPROVAL_STATUSES = ["not_requested", "pending", "approved", "rejected"]

USER_TYPE_LABELS = {
    "owner": "Pet owner",
    "caretaker": "Caretaker",
    "dienstleister": "Service provider",
    "tierarzt": "Veterinarian",
    "hundetrainer": "Dog trainer",
    "tierfriseur": "Pet groomer",
    "physiotherapeut": "Physiotherapist",
    "ernaehrungsberater": "Nutrition advisor",
    "tierfotograf": "Pet photographer",
    "sonstige": "Other",
    "admin": "Administrator",
}

ALL_USER_COLUMNS = queries.USER_COLUMNS + queries.APPROVAL_COLUMNS


def user_type_label(user_type: Optional[str]) -> str:
    if not user_type:
        return "Unknown"
    return USER_TYPE_LABELS.get(user_type, user_type)


def _flatten_profile(row: dict) -> dict:
    # PostgREST returns the embed as an object, a one-element list, or null.
    profile = row.pop("caretaker_profiles", None)
    if isinstance(profile, list):
        profile = profile[0] if profile else None
    profile = profile or {}
    row["approval_status"] = profile.get("approval_status") or "not_requested"
    row["approval_notes"] = profile.get("approval_notes")
    return row


def flatten_users(rows: Optional[list[dict]]) -> pd.DataFrame:
    return rows_to_frame([_flatten_profile(dict(r)) for r in (rows or [])], ALL_USER_COLUMNS)


def list_users(cfg: AppConfig, use_mock: bool, page: int = 1, per_page: Optional[int] = None) -> PageResult:
    per_page = per_page or cfg.users_per_page

    def _live(client: Client, start: int, end: int) -> tuple[pd.DataFrame, int]:
        resp = queries.q_users_page(client, start, end).execute()
        df = flatten_users(resp.data)
        return df, int(resp.count if resp.count is not None else len(df))

    return _fallback_page(cfg, use_mock, page, per_page, _live, mock_data.users_mock, ALL_USER_COLUMNS, "users")


def _contains(series: pd.Series, needle: str) -> pd.Series:
    return series.fillna("").astype(str).str.lower().str.contains(needle, regex=False)


def filter_users(df: pd.DataFrame, search: str = "", filter_type: str = "all") -> pd.DataFrame:
    """
    Local filtering of the loaded page.
    Search matches email, first/last name and city (case-insensitive substring).
    """
    if df.empty:
        return df
    out = df
    needle = (search or "").strip().lower()
    if needle:
        mask = (
            _contains(out["email"], needle)
            | _contains(out["first_name"], needle)
            | _contains(out["last_name"], needle)
            | _contains(out["city"], needle)
        )
        out = out[mask]

    approval = out["approval_status"].fillna("not_requested") if "approval_status" in out else None
    if filter_type == "owners":
        out = out[out["user_type"] == "owner"]
    elif filter_type == "caretakers":
        out = out[out["user_type"] == "caretaker"]
    elif filter_type == "service_providers":
        out = out[out["user_type"].isin(queries.SERVICE_PROVIDER_TYPES + ["dienstleister"])]
    elif filter_type == "admins":
        out = out[out["is_admin"].fillna(False).astype(bool)]
    elif filter_type == "suspended":
        out = out[out["is_suspended"].fillna(False).astype(bool)]
    elif filter_type == "unverified":
        out = out[out["verification_status"] != "approved"]
    elif filter_type.startswith("approval_") and approval is not None:
        out = out[approval == filter_type[len("approval_"):]]
    return out.reset_index(drop=True)


# --- writes ------------------------------------------------------------------


def verify_user(cfg: AppConfig, use_mock: bool, user_id: str) -> ActionResult:
    def _live(client: Client):
        return (
            client.table("users")
            .update({"verification_status": "approved", "updated_at": iso()})
            .eq("id", user_id)
            .execute()
            .data
        )

    return run_action(cfg, use_mock, _live, "verify user", "User verified")


def toggle_user_status(
    cfg: AppConfig,
    use_mock: bool,
    user_id: str,
    is_active: bool,
    actor_id: Optional[str] = None,
    reason: Optional[str] = None,
) -> ActionResult:
    """`is_active` is the desired state: False suspends, True reactivates."""
    suspend = not is_active
    payload = {
        "is_suspended": suspend,
        "suspended_at": iso() if suspend else None,
        "suspended_by": actor_id if suspend else None,
        "suspension_reason": (reason or None) if suspend else None,
        "updated_at": iso(),
    }

    def _live(client: Client):
        return client.table("users").update(payload).eq("id", user_id).execute().data

    return run_action(
        cfg,
        use_mock,
        _live,
        "suspend user" if suspend else "reactivate user",
        "User suspended" if suspend else "User reactivated",
    )


def toggle_admin_status(cfg: AppConfig, use_mock: bool, user_id: str, make_admin: bool) -> ActionResult:
    payload = {"is_admin": make_admin, "admin_role": "admin" if make_admin else None, "updated_at": iso()}

    def _live(client: Client):
        return client.table("users").update(payload).eq("id", user_id).execute().data

    return run_action(
        cfg,
        use_mock,
        _live,
        "grant admin rights" if make_admin else "revoke admin rights",
        "Admin rights granted" if make_admin else "Admin rights revoked",
    )


def approval_payload(status: str, notes: Optional[str], actor_id: Optional[str]) -> dict:
    if status not in APPROVAL_STATUSES:
        raise ValueError(f"Unknown approval status: {status}")
    payload: dict = {"approval_status": status, "updated_at": iso()}
    if status == "rejected":
        payload["approval_notes"] = notes or None
    elif notes:
        payload["approval_notes"] = notes
    if status == "approved":
        payload["approval_approved_at"] = iso()
        if actor_id:
            payload["approval_approved_by"] = actor_id
    return payload


def set_approval_status(
    cfg: AppConfig,
    use_mock: bool,
    user_id: str,
    status: str,
    notes: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> ActionResult:
    try:
        payload = approval_payload(status, notes, actor_id)
    except ValueError as e:
        return ActionResult(ok=False, message=str(e))

    def _live(client: Client):
        resp = client.table("caretaker_profiles").update(payload).eq("id", user_id).execute()
        if resp.data:
            return resp.data
        # No profile row yet: create it with the same fields.
        logger.info("No caretaker profile for %s; inserting one", user_id)
        return client.table("caretaker_profiles").insert({"id": user_id, **payload}).execute().data

    return run_action(cfg, use_mock, _live, "update approval status", f"Approval status set to {status}")


def approve_user(cfg: AppConfig, use_mock: bool, user_id: str, actor_id: Optional[str] = None) -> ActionResult:
    return set_approval_status(cfg, use_mock, user_id, "approved", None, actor_id)


def reject_user(
    cfg: AppConfig, use_mock: bool, user_id: str, reason: Optional[str] = None, actor_id: Optional[str] = None
) -> ActionResult:
    return set_approval_status(cfg, use_mock, user_id, "rejected", reason, actor_id)


def list_pending_approvals(cfg: AppConfig, use_mock: bool, limit: int = 100) -> DataResult:
    """Caretakers and service providers whose approval is pending or was rejected."""
    columns = queries.PENDING_APPROVAL_COLUMNS + queries.APPROVAL_COLUMNS

    def _keep(df: pd.DataFrame) -> pd.DataFrame:
        if df.empty:
            return df
        df = df[df["user_type"].isin(queries.APPROVAL_USER_TYPES)]
        df = df[df["approval_status"].isin(["pending", "rejected"])]
        return df[[c for c in columns if c in df.columns]].head(limit).reset_index(drop=True)

    def _live(client: Client) -> pd.DataFrame:
        return _keep(flatten_users(queries.q_pending_approval_users(client, limit).execute().data))

    def _mock() -> pd.DataFrame:
        return _keep(mock_data.users_mock())

    return _fallback(cfg, use_mock, _live, _mock, columns, "pending approvals")
