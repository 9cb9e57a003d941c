from __future__ import annotations

import logging
from typing import Optional

import pandas as pd
from supabase import Client

from config import AppConfig
from data import mock_data, queries
from data.service import ActionResult, DataResult, _fallback, iso, rows_to_frame, run_action


logger = logging.getLogger(__name__)

REVIEW_STATUSES = ["pending", "approved", "rejected", "flagged"]
TICKET_STATUSES = ["open", "in_progress", "resolved", "closed"]

# action -> moderation_status
MODERATION_ACTIONS = {"approve": "approved", "reject": "rejected", "flag": "flagged"}


def _only_status(df: pd.DataFrame, column: str, status: Optional[str]) -> pd.DataFrame:
    if not status or df.empty:
        return df
    return df[df[column] == status].reset_index(drop=True)


def list_reviews(cfg: AppConfig, use_mock: bool, status: Optional[str] = None) -> DataResult:
    def _live(client: Client) -> pd.DataFrame:
        return rows_to_frame(queries.q_reviews(client, status).execute().data, queries.REVIEW_COLUMNS)

    def _mock() -> pd.DataFrame:
        return _only_status(mock_data.reviews_mock(), "moderation_status", status)

    return _fallback(cfg, use_mock, _live, _mock, queries.REVIEW_COLUMNS, "reviews")


def moderate_review(
    cfg: AppConfig, use_mock: bool, review_id: str, action: str, actor_id: Optional[str] = None
) -> ActionResult:
    status = MODERATION_ACTIONS.get(action)
    if status is None:
        return ActionResult(ok=False, message=f"Unknown moderation action: {action}")
    payload = {"moderation_status": status, "moderated_at": iso(), "moderated_by": actor_id}

    def _live(client: Client):
        return client.table("reviews").update(payload).eq("id", review_id).execute().data

    return run_action(cfg, use_mock, _live, f"{action} review", f"Review {status}")


def list_tickets(cfg: AppConfig, use_mock: bool, status: Optional[str] = None) -> DataResult:
    def _live(client: Client) -> pd.DataFrame:
        return rows_to_frame(queries.q_tickets(client, status).execute().data, queries.TICKET_COLUMNS)

    def _mock() -> pd.DataFrame:
        return _only_status(mock_data.tickets_mock(), "status", status)

    return _fallback(cfg, use_mock, _live, _mock, queries.TICKET_COLUMNS, "support tickets")


def update_ticket(
    cfg: AppConfig, use_mock: bool, ticket_id: str, status: str, response: Optional[str] = None
) -> ActionResult:
    if status not in TICKET_STATUSES:
        return ActionResult(ok=False, message=f"Unknown ticket status: {status}")
    payload = {"status": status, "updated_at": iso()}
    if response and response.strip():
        payload["admin_response"] = response.strip()

    def _live(client: Client):
        return client.table("support_tickets").update(payload).eq("id", ticket_id).execute().data

    return run_action(cfg, use_mock, _live, "update ticket", "Ticket updated")
