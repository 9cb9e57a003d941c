from __future__ import annotations

import logging
import re
import unicodedata
from typing import Any, Optional

import pandas as pd
from supabase import Client

from config import AppConfig
from data import mock_data, queries
from data.service import ActionResult, PageResult, _fallback_page, iso, rows_to_frame, run_action


logger = logging.getLogger(__name__)

POST_TYPES = ["blog", "news"]
POST_STATUSES = ["draft", "published"]

_UMLAUTS = str.maketrans({"ä": "ae", "ö": "oe", "ü": "ue", "ß": "ss", "Ä": "ae", "Ö": "oe", "Ü": "ue"})


def slugify(title: str) -> str:
    """URL slug: lowercase ascii words joined by '-' (German umlauts transliterated)."""
    text = (title or "").translate(_UMLAUTS)
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^a-zA-Z0-9]+", "-", text).strip("-").lower()
    return text or "post"


def list_posts(
    cfg: AppConfig,
    use_mock: bool,
    page: int = 1,
    per_page: Optional[int] = None,
    post_type: Optional[str] = None,
    status: Optional[str] = None,
) -> PageResult:
    per_page = per_page or cfg.posts_per_page

    def _live(client: Client, start: int, end: int) -> tuple[pd.DataFrame, int]:
        resp = queries.q_posts_page(client, start, end, post_type, status).execute()
        df = rows_to_frame(resp.data, queries.POST_COLUMNS)
        return df, int(resp.count if resp.count is not None else len(df))

    def _mock() -> pd.DataFrame:
        df = mock_data.posts_mock()
        if post_type:
            df = df[df["type"] == post_type]
        if status:
            df = df[df["status"] == status]
        return df.reset_index(drop=True)

    return _fallback_page(cfg, use_mock, page, per_page, _live, _mock, queries.POST_COLUMNS, "posts")


def filter_posts(df: pd.DataFrame, search: str = "") -> pd.DataFrame:
    needle = (search or "").strip().lower()
    if df.empty or not needle:
        return df
    mask = pd.Series(False, index=df.index)
    for col in ("title", "excerpt", "slug"):
        mask |= df[col].fillna("").astype(str).str.lower().str.contains(needle, regex=False)
    tags = df["tags"].apply(lambda t: " ".join(t) if isinstance(t, (list, tuple)) else "")
    mask |= tags.str.lower().str.contains(needle, regex=False)
    return df[mask].reset_index(drop=True)


def _tags(value: Any) -> list[str]:
    if isinstance(value, str):
        value = value.split(",")
    return [t.strip().lower() for t in (value or []) if t and t.strip()]


def clean_post_payload(form: dict) -> dict:
    """Raises ValueError when the title is missing; slug defaults to slugify(title)."""
    title = (form.get("title") or "").strip()
    if not title:
        raise ValueError("Title is required.")
    post_type = form.get("type") or "blog"
    status = form.get("status") or "draft"
    if post_type not in POST_TYPES:
        raise ValueError(f"Unknown post type: {post_type}")
    if status not in POST_STATUSES:
        raise ValueError(f"Unknown post status: {status}")
    return {
        "title": title,
        "slug": slugify(form.get("slug") or title),
        "excerpt": (form.get("excerpt") or "").strip() or None,
        "content": form.get("content") or "",
        "cover_image_url": (form.get("cover_image_url") or "").strip() or None,
        "type": post_type,
        "status": status,
        "tags": _tags(form.get("tags")),
    }


def create_post(cfg: AppConfig, use_mock: bool, form: dict, author_id: Optional[str] = None) -> ActionResult:
    try:
        payload = clean_post_payload(form)
    except ValueError as e:
        return ActionResult(ok=False, message=str(e))
    now = iso()
    row = {
        **payload,
        "author_id": author_id,
        "published_at": now if payload["status"] == "published" else None,
        "created_at": now,
        "updated_at": now,
    }

    def _live(client: Client):
        return client.table("blog_posts").insert(row).execute().data

    return run_action(cfg, use_mock, _live, "create post", "Post created")


def update_post(
    cfg: AppConfig, use_mock: bool, post_id: str, form: dict, published_at: Optional[str] = None
) -> ActionResult:
    """`published_at` is the stored value; it is stamped on first publish and kept afterwards."""
    try:
        payload = clean_post_payload(form)
    except ValueError as e:
        return ActionResult(ok=False, message=str(e))
    row = {**payload, "updated_at": iso()}
    if payload["status"] == "published" and not published_at:
        row["published_at"] = iso()

    def _live(client: Client):
        return client.table("blog_posts").update(row).eq("id", post_id).execute().data

    return run_action(cfg, use_mock, _live, "update post", "Post updated")


def delete_post(cfg: AppConfig, use_mock: bool, post_id: str) -> ActionResult:
    def _live(client: Client):
        return client.table("blog_posts").delete().eq("id", post_id).execute().data

    return run_action(cfg, use_mock, _live, "delete post", "Post deleted")


def set_published(
    cfg: AppConfig, use_mock: bool, post_id: str, published: bool, published_at: Optional[str] = None
) -> ActionResult:
    row = {"status": "published" if published else "draft", "updated_at": iso()}
    if published and not published_at:
        row["published_at"] = iso()

    def _live(client: Client):
        return client.table("blog_posts").update(row).eq("id", post_id).execute().data

    return run_action(
        cfg, use_mock, _live, "publish post" if published else "unpublish post", "Post published" if published else "Post moved to drafts"
    )
