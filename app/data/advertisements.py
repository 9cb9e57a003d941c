from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd
from supabase import Client

from config import AppConfig
from data import connection, mock_data, queries
from data.connection import BackendConfigError
from data.service import (
    ActionResult,
    DataResult,
    PageResult,
    _fallback,
    _fallback_page,
    iso,
    missing_to_none,
    rows_to_frame,
    run_action,
    utc_now,
)


logger = logging.getLogger(__name__)

AD_TYPE_LABELS = {
    "search_card": "Search card",
    "search_filter": "Search filter",
    "search_card_filter": "Search card & filter",
    "profile_banner": "Profile banner",
    "dashboard_banner": "Dashboard banner",
}

PET_TYPES = mock_data.PET_TYPES
SUBSCRIPTION_TYPES = ["free", "premium"]
ACTIVE_FILTERS = ["all", "active", "inactive"]

_LIST_FIELDS = ["target_pet_types", "target_locations", "target_subscription_types"]
_OPTIONAL_TEXT = ["description", "image_url", "link_url", "cta_text", "ad_type"]
_OPTIONAL_INT = ["max_impressions", "max_clicks", "custom_width", "custom_height"]


def ad_type_label(ad_type: Optional[str]) -> str:
    return AD_TYPE_LABELS.get(ad_type or "", ad_type or "-")


# --- reads -------------------------------------------------------------------


def list_advertisements(cfg: AppConfig, use_mock: bool, page: int = 1, per_page: Optional[int] = None) -> PageResult:
    per_page = per_page or cfg.ads_per_page

    def _live(client: Client, start: int, end: int) -> tuple[pd.DataFrame, int]:
        resp = queries.q_ads_page(client, start, end).execute()
        df = rows_to_frame(resp.data, queries.AD_VIEW_COLUMNS)
        return df, int(resp.count if resp.count is not None else len(df))

    return _fallback_page(
        cfg, use_mock, page, per_page, _live, mock_data.advertisements_mock, queries.AD_VIEW_COLUMNS, "advertisements"
    )


def list_formats(cfg: AppConfig, use_mock: bool) -> DataResult:
    def _live(client: Client) -> pd.DataFrame:
        return rows_to_frame(queries.q_active_formats(client).execute().data, queries.AD_FORMAT_COLUMNS)

    return _fallback(cfg, use_mock, _live, mock_data.ad_formats_mock, queries.AD_FORMAT_COLUMNS, "ad formats")


def get_advertisement(cfg: AppConfig, use_mock: bool, ad_id: str) -> Optional[dict]:
    if use_mock:
        df = mock_data.advertisements_mock()
        match = df[df["id"] == ad_id]
        return missing_to_none(match.head(1)).iloc[0].to_dict() if not match.empty else None

    try:
        resp = connection.get_admin_client(cfg).table("advertisements").select("*").eq("id", ad_id).maybe_single().execute()
    except BackendConfigError as e:
        logger.warning("Loading advertisement skipped: %s", e)
        return None
    except Exception:
        logger.exception("Error fetching advertisement %s", ad_id)
        return None
    return resp.data if resp is not None else None


def filter_advertisements(df: pd.DataFrame, search: str = "", active_filter: str = "all") -> pd.DataFrame:
    """Search matches title or description; active_filter is all | active | inactive."""
    if df.empty:
        return df
    out = df
    needle = (search or "").strip().lower()
    if needle:
        title = out["title"].fillna("").astype(str).str.lower()
        desc = out["description"].fillna("").astype(str).str.lower()
        out = out[title.str.contains(needle, regex=False) | desc.str.contains(needle, regex=False)]
    active = out["is_active"].fillna(False).astype(bool)
    if active_filter == "active":
        out = out[active]
    elif active_filter == "inactive":
        out = out[~active]
    return out.reset_index(drop=True)


def _parse_ts(value: Any) -> Optional[pd.Timestamp]:
    if value is None or (not isinstance(value, (list, dict)) and pd.isna(value)) or value == "":
        return None
    ts = pd.Timestamp(value)
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts


def ad_status(ad: dict, now: Optional[datetime] = None) -> str:
    """inactive | scheduled | expired | active"""
    if not ad.get("is_active"):
        return "inactive"
    now_ts = _parse_ts(now or utc_now())
    start = _parse_ts(ad.get("start_date"))
    end = _parse_ts(ad.get("end_date"))
    if start is not None and now_ts < start:
        return "scheduled"
    if end is not None and now_ts > end:
        return "expired"
    return "active"


# --- form helpers --------------------------------------------------------------


def new_ad_form() -> dict:
    return {
        "title": "",
        "description": "",
        "image_url": "",
        "link_url": "",
        "cta_text": "Mehr erfahren",
        "ad_type": "",
        "format_id": None,
        "target_pet_types": [],
        "target_locations": [],
        "target_subscription_types": ["free"],
        "start_date": None,
        "end_date": None,
        "is_active": True,
        "priority": 0,
        "max_impressions": None,
        "max_clicks": None,
        "custom_width": None,
        "custom_height": None,
    }


def _none_if_missing(value: Any) -> Any:
    # Rows read out of a DataFrame carry NaN/NaT for SQL NULL.
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    return value


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if hasattr(value, "tolist"):
        return list(value.tolist())
    return [value]


def _find_format(formats: pd.DataFrame, format_id: Any) -> Optional[dict]:
    if not format_id or formats is None or formats.empty:
        return None
    match = formats[formats["id"] == format_id]
    return match.iloc[0].to_dict() if not match.empty else None


def edit_ad_form(ad: dict, formats: pd.DataFrame) -> dict:
    """Form state for an existing ad; missing custom size comes from its format."""
    form = {**new_ad_form(), **{k: _none_if_missing(ad[k]) for k in queries.AD_TABLE_COLUMNS if k in ad}}
    for f in _LIST_FIELDS:
        form[f] = _as_list(form.get(f))
    if not form["target_subscription_types"]:
        form["target_subscription_types"] = ["free"]
    for f in _OPTIONAL_INT:
        form[f] = _to_int(form.get(f))
    form["priority"] = _to_int(form.get("priority")) or 0

    fmt = _find_format(formats, form.get("format_id"))
    if fmt and (not form.get("custom_width") or not form.get("custom_height")):
        form["custom_width"] = _to_int(fmt.get("width"))
        form["custom_height"] = _to_int(fmt.get("height"))
    return form


def apply_format(form: dict, fmt: Optional[dict]) -> dict:
    """Choosing a format copies its type and size; clearing it clears them."""
    if fmt:
        return {
            **form,
            "format_id": fmt["id"],
            "ad_type": fmt.get("ad_type") or "",
            "custom_width": fmt.get("width") or None,
            "custom_height": fmt.get("height") or None,
        }
    return {**form, "format_id": None, "ad_type": "", "custom_width": None, "custom_height": None}


def _to_iso(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return int(value)


def clean_ad_payload(form: dict) -> dict:
    """
    Writable `advertisements` columns only, normalized for PostgREST.
    Raises ValueError when the title or the format is missing.
    """
    if not (form.get("title") or "").strip():
        raise ValueError("Title is required.")
    if not form.get("format_id"):
        raise ValueError("Please choose an ad format.")

    payload = {k: form.get(k) for k in queries.AD_TABLE_COLUMNS}
    payload["title"] = payload["title"].strip()
    for f in _OPTIONAL_TEXT:
        v = payload.get(f)
        payload[f] = v.strip() if isinstance(v, str) and v.strip() else None
    for f in _LIST_FIELDS:
        payload[f] = _as_list(payload.get(f))
    if not payload["target_subscription_types"]:
        payload["target_subscription_types"] = ["free"]
    for f in _OPTIONAL_INT:
        payload[f] = _to_int(payload.get(f))
    payload["priority"] = _to_int(payload.get("priority")) or 0
    payload["is_active"] = bool(payload.get("is_active"))
    payload["start_date"] = _to_iso(payload.get("start_date"))
    payload["end_date"] = _to_iso(payload.get("end_date"))
    return payload


# --- writes ------------------------------------------------------------------


def _format_ad_type(client: Client, format_id: str) -> Optional[str]:
    resp = client.table("advertisement_formats").select("ad_type").eq("id", format_id).maybe_single().execute()
    if resp is None or not resp.data:
        return None
    return resp.data.get("ad_type")


def _first(rows: Any) -> Any:
    if isinstance(rows, list):
        return rows[0] if rows else None
    return rows


def create_advertisement(cfg: AppConfig, use_mock: bool, form: dict, actor_id: Optional[str] = None) -> ActionResult:
    try:
        payload = clean_ad_payload(form)
    except ValueError as e:
        return ActionResult(ok=False, message=str(e))

    def _live(client: Client):
        payload["ad_type"] = _format_ad_type(client, payload["format_id"]) or payload["ad_type"]
        now = iso()
        row = {**payload, "created_by": actor_id, "created_at": now, "updated_at": now}
        return _first(client.table("advertisements").insert(row).execute().data)

    return run_action(cfg, use_mock, _live, "create advertisement", "Advertisement created")


def update_advertisement(cfg: AppConfig, use_mock: bool, ad_id: str, form: dict) -> ActionResult:
    try:
        payload = clean_ad_payload(form)
    except ValueError as e:
        return ActionResult(ok=False, message=str(e))

    def _live(client: Client):
        payload["ad_type"] = _format_ad_type(client, payload["format_id"]) or payload["ad_type"]
        row = {**payload, "updated_at": iso()}
        return _first(client.table("advertisements").update(row).eq("id", ad_id).execute().data)

    return run_action(cfg, use_mock, _live, "update advertisement", "Advertisement updated")


def delete_advertisement(cfg: AppConfig, use_mock: bool, ad_id: str) -> ActionResult:
    def _live(client: Client):
        return client.table("advertisements").delete().eq("id", ad_id).execute().data

    return run_action(cfg, use_mock, _live, "delete advertisement", "Advertisement deleted")


def duplicate_row(original: dict, actor_id: Optional[str]) -> dict:
    """Copy of an ad row: new title, inactive, counters reset, fresh timestamps."""
    now = iso()
    row = {k: original.get(k) for k in queries.AD_TABLE_COLUMNS if k in original}
    row.update(
        {
            "title": f"{original.get('title') or 'New advertisement'} (Copy)",
            "is_active": False,
            "current_impressions": 0,
            "current_clicks": 0,
            "created_by": actor_id,
            "created_at": now,
            "updated_at": now,
        }
    )
    return row


def duplicate_advertisement(cfg: AppConfig, use_mock: bool, ad_id: str, actor_id: Optional[str] = None) -> ActionResult:
    def _live(client: Client):
        resp = client.table("advertisements").select("*").eq("id", ad_id).maybe_single().execute()
        if resp is None or not resp.data:
            raise LookupError("Advertisement not found")
        return _first(client.table("advertisements").insert(duplicate_row(resp.data, actor_id)).execute().data)

    return run_action(cfg, use_mock, _live, "duplicate advertisement", "Advertisement duplicated")
