from __future__ import annotations

import logging
from typing import Optional

import pandas as pd
from supabase import Client

from config import AppConfig
from data import mock_data, queries
from data.service import ActionResult, DataResult, _fallback, iso, rows_to_frame, run_action


logger = logging.getLogger(__name__)

REQUEST_STATUSES = ["pending", "in_review", "approved", "rejected"]
USER_FIELDS = ["email", "first_name", "last_name", "user_type"]
COLUMNS = queries.VERIFICATION_COLUMNS + USER_FIELDS


def _flatten(rows: Optional[list[dict]]) -> pd.DataFrame:
    flat = []
    for r in rows or []:
        r = dict(r)
        user = r.pop("users", None)
        if isinstance(user, list):
            user = user[0] if user else None
        user = user or {}
        for f in USER_FIELDS:
            r[f] = user.get(f)
        flat.append(r)
    return rows_to_frame(flat, COLUMNS)


def list_verification_requests(cfg: AppConfig, use_mock: bool, status: Optional[str] = None) -> DataResult:
    """Oldest first, so the queue reads top-down."""

    def _live(client: Client) -> pd.DataFrame:
        return _flatten(queries.q_verification_requests(client, status).execute().data)

    def _mock() -> pd.DataFrame:
        df = mock_data.verification_requests_mock()
        return df[df["status"] == status].reset_index(drop=True) if status else df

    return _fallback(cfg, use_mock, _live, _mock, COLUMNS, "verification requests")


def review_verification(
    cfg: AppConfig,
    use_mock: bool,
    request_id: str,
    user_id: str,
    approve: bool,
    comment: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> ActionResult:
    """Closes the request and mirrors the outcome onto users.verification_status."""
    status = "approved" if approve else "rejected"
    now = iso()
    request_patch = {
        "status": status,
        "admin_comment": (comment or "").strip() or None,
        "reviewed_by": actor_id,
        "reviewed_at": now,
    }

    def _live(client: Client):
        client.table("verification_requests").update(request_patch).eq("id", request_id).execute()
        return (
            client.table("users")
            .update({"verification_status": status, "updated_at": now})
            .eq("id", user_id)
            .execute()
            .data
        )

    return run_action(
        cfg,
        use_mock,
        _live,
        "approve verification" if approve else "reject verification",
        "Verification approved" if approve else "Verification rejected",
    )
