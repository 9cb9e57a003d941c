from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

import pandas as pd
from supabase import Client

from config import AppConfig
from data import connection
from data.connection import BackendConfigError


logger = logging.getLogger(__name__)

READ_ONLY_MESSAGE = "Demo data is read-only. Turn off demo data in Settings to make changes."


@dataclass(frozen=True)
class DataResult:
    df: pd.DataFrame
    source: str  # "mock" | "supabase" | "unavailable"
    warning: str | None = None


@dataclass(frozen=True)
class PageResult:
    df: pd.DataFrame
    total: int
    page: int
    per_page: int
    source: str
    warning: str | None = None

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 1
        return max(1, math.ceil(self.total / self.per_page))


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    message: str = ""
    data: Any = None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso(dt: Optional[datetime] = None) -> str:
    return (dt or utc_now()).isoformat()


def describe_error(e: BaseException) -> str:
    # PostgREST / storage errors carry a human message; everything else gets its type name.
    msg = getattr(e, "message", None)
    if isinstance(msg, str) and msg:
        return msg
    return str(e) or type(e).__name__


def empty_frame(columns: Sequence[str]) -> pd.DataFrame:
    return pd.DataFrame(columns=list(columns))


def missing_to_none(df: pd.DataFrame) -> pd.DataFrame:
    """Object-typed copy with every missing cell (NaN, NaT, NA) as None."""
    return df.astype(object).where(df.notna(), None)


def rows_to_frame(rows: Optional[list[dict]], columns: Sequence[str]) -> pd.DataFrame:
    if not rows:
        return empty_frame(columns)
    df = pd.DataFrame(rows)
    for c in columns:
        if c not in df.columns:
            df[c] = None
    return missing_to_none(df)


# PostgREST caps a single response at the server's max-rows (1000 by default).
FETCH_PAGE_SIZE = 1000


def fetch_all(build: Callable[[], Any], page_size: Optional[int] = None) -> list[dict]:
    """Read every row of a query in `.range()` pages until a short page comes back.

    `build` returns a fresh query builder for each page.
    """
    size = page_size or FETCH_PAGE_SIZE
    rows: list[dict] = []
    start = 0
    while True:
        page = build().range(start, start + size - 1).execute().data or []
        rows.extend(page)
        if len(page) < size:
            return rows
        start += size


def page_bounds(page: int, per_page: int) -> tuple[int, int]:
    """Inclusive (start, end) row range for PostgREST `.range()`."""
    page = max(1, int(page))
    start = (page - 1) * per_page
    return start, start + per_page - 1


def _fallback(
    cfg: AppConfig,
    use_mock: bool,
    fn_live: Callable[[Client], pd.DataFrame],
    fn_mock: Callable[[], pd.DataFrame],
    columns: Sequence[str],
    what: str,
) -> DataResult:
    if use_mock:
        return DataResult(df=fn_mock(), source="mock")
    try:
        return DataResult(df=fn_live(connection.get_admin_client(cfg)), source="supabase")
    except BackendConfigError as e:
        logger.warning("Loading %s skipped: %s", what, e)
        return DataResult(df=empty_frame(columns), source="unavailable", warning=str(e))
    except Exception as e:
        logger.exception("Error loading %s", what)
        return DataResult(
            df=empty_frame(columns),
            source="unavailable",
            warning=f"Could not load {what}: {describe_error(e)}",
        )


def _fallback_page(
    cfg: AppConfig,
    use_mock: bool,
    page: int,
    per_page: int,
    fn_live: Callable[[Client, int, int], tuple[pd.DataFrame, int]],
    fn_mock: Callable[[], pd.DataFrame],
    columns: Sequence[str],
    what: str,
) -> PageResult:
    page = max(1, int(page))
    start, end = page_bounds(page, per_page)
    if use_mock:
        full = fn_mock()
        return PageResult(
            df=full.iloc[start : end + 1].reset_index(drop=True),
            total=len(full),
            page=page,
            per_page=per_page,
            source="mock",
        )
    try:
        df, total = fn_live(connection.get_admin_client(cfg), start, end)
        return PageResult(df=df, total=total, page=page, per_page=per_page, source="supabase")
    except BackendConfigError as e:
        logger.warning("Loading %s skipped: %s", what, e)
        warning = str(e)
    except Exception as e:
        logger.exception("Error loading %s", what)
        warning = f"Could not load {what}: {describe_error(e)}"
    return PageResult(
        df=empty_frame(columns), total=0, page=page, per_page=per_page, source="unavailable", warning=warning
    )


def run_action(
    cfg: AppConfig,
    use_mock: bool,
    fn_live: Callable[[Client], Any],
    what: str,
    success: str,
) -> ActionResult:
    """Run one write against the admin client; failures become an inline message, never an exception."""
    if use_mock:
        return ActionResult(ok=False, message=READ_ONLY_MESSAGE)
    try:
        data = fn_live(connection.get_admin_client(cfg))
    except BackendConfigError as e:
        logger.warning("Cannot %s: %s", what, e)
        return ActionResult(ok=False, message=str(e))
    except Exception as e:
        logger.exception("Error trying to %s", what)
        return ActionResult(ok=False, message=f"Could not {what}: {describe_error(e)}")
    logger.info("%s", success)
    return ActionResult(ok=True, message=success, data=data)
