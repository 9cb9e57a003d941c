from __future__ import annotations

import csv
import io
from datetime import date

import numpy as np
import pandas as pd

from data import export


def _frame():
    return pd.DataFrame(
        [
            {"first_name": "Jürgen", "last_name": "Groß", "email": "j@example.com", "user_type": "tierarzt",
             "is_suspended": np.bool_(True), "verification_status": "approved",
             "created_at": "2024-11-03T10:15:00+00:00", "city": "Köln", "plz": "50667"},
            {"first_name": None, "last_name": "Meyer", "email": "m@example.com", "user_type": "owner",
             "is_suspended": None, "verification_status": "pending", "created_at": None, "city": None, "plz": None},
        ]
    )


def test_export_frame():
    out = export.export_frame(_frame())
    assert list(out.columns) == export.EXPORT_COLUMNS
    first, second = out.to_dict("records")
    assert first == {"Name": "Jürgen Groß", "Email": "j@example.com", "Type": "Veterinarian", "Status": "Suspended",
                     "Verified": "Yes", "Registered": "2024-11-03", "City": "Köln", "Postcode": "50667"}
    assert second["Name"] == "Meyer"
    assert second["Status"] == "Active"
    assert second["Verified"] == "No"
    assert second["Registered"] == ""
    assert second["City"] == ""


def test_users_csv_is_bom_prefixed_and_fully_quoted():
    data = export.users_csv(_frame())
    assert data.startswith(b"\xef\xbb\xbf")
    text = data.decode("utf-8-sig")
    assert text.splitlines()[0] == ",".join(f'"{c}"' for c in export.EXPORT_COLUMNS)
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[1][0] == "Jürgen Groß"
    assert len(rows) == 3


def test_users_csv_empty_frame_has_header():
    text = export.users_csv(pd.DataFrame()).decode("utf-8-sig")
    assert text.strip() == ",".join(f'"{c}"' for c in export.EXPORT_COLUMNS)


def test_export_filename():
    assert export.export_filename(today=date(2025, 2, 1)) == "users-export-2025-02-01.csv"
    assert export.export_filename("approvals", date(2025, 2, 1)) == "approvals-2025-02-01.csv"
