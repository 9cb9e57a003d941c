from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd
import pytest

from conftest import FakeResponse
from data import advertisements as ads


NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)

FORMATS = pd.DataFrame(
    [
        {"id": "fmt-1", "name": "Profile banner", "width": 728, "height": 90, "ad_type": "profile_banner"},
        {"id": "fmt-2", "name": "Search card", "width": 300, "height": 250, "ad_type": "search_card"},
    ]
)


def _form(**overrides):
    form = ads.new_ad_form()
    form.update({"title": "  Premium Futter  ", "format_id": "fmt-2", "ad_type": "search_card"})
    form.update(overrides)
    return form


@pytest.mark.parametrize(
    "ad, status",
    [
        ({"is_active": False}, "inactive"),
        ({"is_active": True, "start_date": "2025-07-01T00:00:00+00:00"}, "scheduled"),
        ({"is_active": True, "end_date": "2025-06-01"}, "expired"),
        ({"is_active": True, "start_date": "2025-06-01", "end_date": "2025-06-30"}, "active"),
        ({"is_active": True, "start_date": None, "end_date": None}, "active"),
    ],
)
def test_ad_status(ad, status):
    assert ads.ad_status(ad, NOW) == status


def test_filter_advertisements():
    df = pd.DataFrame(
        [
            {"id": "a", "title": "Hundefutter Sale", "description": None, "is_active": True},
            {"id": "b", "title": "Katzenhotel", "description": "Urlaub für Katzen", "is_active": False},
            {"id": "c", "title": "Tierarzt", "description": "Notdienst", "is_active": None},
        ]
    )
    assert list(ads.filter_advertisements(df, search="katzen")["id"]) == ["b"]
    assert list(ads.filter_advertisements(df, active_filter="active")["id"]) == ["a"]
    assert list(ads.filter_advertisements(df, active_filter="inactive")["id"]) == ["b", "c"]


def test_apply_format_copies_type_and_size():
    form = ads.apply_format(ads.new_ad_form(), FORMATS.iloc[0].to_dict())
    assert form["format_id"] == "fmt-1"
    assert form["ad_type"] == "profile_banner"
    assert (form["custom_width"], form["custom_height"]) == (728, 90)

    cleared = ads.apply_format(form, None)
    assert cleared["format_id"] is None
    assert cleared["ad_type"] == ""
    assert cleared["custom_width"] is None


def test_edit_form_fills_size_from_format():
    ad = {"id": "ad-1", "title": "X", "format_id": "fmt-2", "custom_width": None, "target_pet_types": None,
          "target_subscription_types": [], "current_clicks": 9}
    form = ads.edit_ad_form(ad, FORMATS)
    assert (form["custom_width"], form["custom_height"]) == (300, 250)
    assert form["target_pet_types"] == []
    assert form["target_subscription_types"] == ["free"]
    assert "current_clicks" not in form


def test_edit_form_from_table_row_with_null_limits():
    listed = pd.DataFrame(
        [
            {"id": "ad-1", "title": "X", "format_id": "fmt-1", "priority": 3, "max_impressions": 5000.0,
             "max_clicks": 40, "custom_width": 728, "custom_height": 90, "description": "Sale"},
            {"id": "ad-2", "title": "Y", "format_id": "fmt-2", "priority": None, "max_impressions": None,
             "max_clicks": None, "custom_width": None, "custom_height": None, "description": None},
        ]
    )
    form = ads.edit_ad_form(listed.iloc[1].to_dict(), FORMATS)

    assert form["max_impressions"] is None
    assert form["max_clicks"] is None
    assert form["priority"] == 0
    assert form["description"] is None
    assert (form["custom_width"], form["custom_height"]) == (300, 250)
    assert int(form["max_impressions"] or 0) == 0

    first = ads.edit_ad_form(listed.iloc[0].to_dict(), FORMATS)
    assert first["max_impressions"] == 5000 and isinstance(first["max_impressions"], int)
    assert (first["custom_width"], first["priority"]) == (728, 3)


def test_mock_advertisement_has_no_nan(cfg):
    ad_id = ads.list_advertisements(cfg, True, per_page=100).df.iloc[0]["id"]
    ad = ads.get_advertisement(cfg, True, ad_id)
    assert not any(isinstance(v, float) and v != v for v in ad.values())


def test_clean_payload_requires_title_and_format():
    with pytest.raises(ValueError, match="Title is required."):
        ads.clean_ad_payload(_form(title="   "))
    with pytest.raises(ValueError, match="Please choose an ad format."):
        ads.clean_ad_payload(_form(format_id=None))


def test_clean_payload_normalizes():
    payload = ads.clean_ad_payload(
        _form(description="  ", link_url=" https://shop.example ", priority="", max_clicks="250",
              target_subscription_types=[], start_date=datetime(2025, 6, 1, tzinfo=timezone.utc))
    )
    assert payload["title"] == "Premium Futter"
    assert payload["description"] is None
    assert payload["link_url"] == "https://shop.example"
    assert payload["priority"] == 0
    assert payload["max_clicks"] == 250
    assert payload["target_subscription_types"] == ["free"]
    assert payload["start_date"] == "2025-06-01T00:00:00+00:00"
    assert set(payload) == set(ads.queries.AD_TABLE_COLUMNS)


def test_create_takes_ad_type_from_format(cfg, fake_client):
    fake_client.queue("advertisement_formats", "select", FakeResponse([{"ad_type": "search_card_filter"}]))
    fake_client.queue("advertisements", "insert", FakeResponse([{"id": "ad-9"}]))
    res = ads.create_advertisement(cfg, False, _form(), actor_id="admin-1")
    assert res.ok
    assert res.data == {"id": "ad-9"}
    row = fake_client.calls_for("advertisements", "insert")[0].payload
    assert row["ad_type"] == "search_card_filter"
    assert row["created_by"] == "admin-1"
    assert row["created_at"] == row["updated_at"]


def test_create_validation_error_skips_backend(cfg, fake_client):
    res = ads.create_advertisement(cfg, False, _form(title=""))
    assert res.ok is False
    assert res.message == "Title is required."
    assert fake_client.calls == []


def test_update_keeps_form_ad_type_when_format_lookup_is_empty(cfg, fake_client):
    res = ads.update_advertisement(cfg, False, "ad-1", _form())
    assert res.ok
    q = fake_client.calls_for("advertisements", "update")[0]
    assert q.payload["ad_type"] == "search_card"
    assert q.filter_value("eq", "id") == "ad-1"


def test_delete(cfg, fake_client):
    assert ads.delete_advertisement(cfg, False, "ad-1").message == "Advertisement deleted"
    assert fake_client.calls_for("advertisements", "delete")[0].filter_value("eq", "id") == "ad-1"


def test_duplicate_row():
    original = {"id": "ad-1", "title": "Sommer", "is_active": True, "current_impressions": 500,
                "current_clicks": 20, "priority": 5, "created_by": "someone"}
    row = ads.duplicate_row(original, "admin-2")
    assert row["title"] == "Sommer (Copy)"
    assert row["is_active"] is False
    assert (row["current_impressions"], row["current_clicks"]) == (0, 0)
    assert row["created_by"] == "admin-2"
    assert row["priority"] == 5
    assert "id" not in row


def test_duplicate_missing_ad(cfg, fake_client):
    res = ads.duplicate_advertisement(cfg, False, "gone")
    assert res.ok is False
    assert "Advertisement not found" in res.message
    assert fake_client.calls_for("advertisements", "insert") == []


def test_list_advertisements_uses_view(cfg, fake_client):
    fake_client.queue("advertisements_with_formats", "select", FakeResponse([{"id": "ad-1", "title": "T"}], count=41))
    res = ads.list_advertisements(cfg, False, page=3)
    assert res.total == 41
    assert res.total_pages == 3
    assert ("range", 40, 59) in fake_client.calls[0].filters


def test_list_formats_only_active(cfg, fake_client):
    ads.list_formats(cfg, False)
    assert ("eq", "is_active", True) in fake_client.calls_for("advertisement_formats")[0].filters


def test_get_advertisement(cfg, fake_client):
    fake_client.queue("advertisements", "select", FakeResponse([{"id": "ad-1"}]))
    assert ads.get_advertisement(cfg, False, "ad-1") == {"id": "ad-1"}
    assert ads.get_advertisement(cfg, False, "missing") is None


def test_mock_advertisements_reference_formats(cfg):
    formats = ads.list_formats(cfg, True).df
    listed = ads.list_advertisements(cfg, True, per_page=100).df
    assert set(listed["format_id"]) <= set(formats["id"])
