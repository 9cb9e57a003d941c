from __future__ import annotations

import csv
from datetime import date
from typing import Optional

import pandas as pd

from data.users import user_type_label


EXPORT_COLUMNS = ["Name", "Email", "Type", "Status", "Verified", "Registered", "City", "Postcode"]


def _text(value) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value)


def _flag(value) -> bool:
    return _text(value) != "" and bool(value)


def _registered(value) -> str:
    ts = pd.to_datetime(value, utc=True, errors="coerce")
    return "" if pd.isna(ts) else ts.strftime("%Y-%m-%d")


def export_frame(df: pd.DataFrame) -> pd.DataFrame:
    rows = []
    for u in df.to_dict("records"):
        name = " ".join(p for p in (_text(u.get("first_name")), _text(u.get("last_name"))) if p)
        rows.append(
            {
                "Name": name,
                "Email": _text(u.get("email")),
                "Type": user_type_label(u.get("user_type")),
                "Status": "Suspended" if _flag(u.get("is_suspended")) else "Active",
                "Verified": "Yes" if u.get("verification_status") == "approved" else "No",
                "Registered": _registered(u.get("created_at")),
                "City": _text(u.get("city")),
                "Postcode": _text(u.get("plz")),
            }
        )
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def users_csv(df: pd.DataFrame) -> bytes:
    """UTF-8 CSV (with BOM for Excel), every field quoted."""
    return export_frame(df).to_csv(index=False, quoting=csv.QUOTE_ALL).encode("utf-8-sig")


def export_filename(prefix: str = "users-export", today: Optional[date] = None) -> str:
    return f"{prefix}-{(today or date.today()).isoformat()}.csv"
