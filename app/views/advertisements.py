from __future__ import annotations

from datetime import datetime, time, timezone
from typing import Optional

import pandas as pd
import streamlit as st

from components.narrative import badge, render_badges, render_result_warning, render_tab_intro
from components.tables import done, refresh_button, render_pager, select_row
from config import AppConfig
from data import advertisements as ads
from data import storage
from views.context import ViewContext


PAGE_KEY = "ads_page"
FORM_KEY = "ad_form"


def _date_input(label: str, value, key: str) -> Optional[str]:
    ts = pd.to_datetime(value, utc=True, errors="coerce") if value else None
    picked = st.date_input(label, value=None if ts is None or pd.isna(ts) else ts.date(), key=key)
    if not picked:
        return None
    return datetime.combine(picked, time.min, tzinfo=timezone.utc).isoformat()


def _format_picker(form: dict, formats: pd.DataFrame, key: str) -> dict:
    options = [None, *formats["id"].tolist()] if not formats.empty else [None]
    names = dict(zip(formats["id"], formats["name"])) if not formats.empty else {}
    current = form.get("format_id") if form.get("format_id") in options else None
    chosen = st.selectbox(
        "Ad format *",
        options,
        index=options.index(current),
        format_func=lambda fid: "-- choose a format --" if fid is None else names.get(fid, fid),
        key=f"{key}_format",
    )
    if chosen != form.get("format_id"):
        match = formats[formats["id"] == chosen] if chosen else formats.iloc[0:0]
        form = ads.apply_format(form, match.iloc[0].to_dict() if not match.empty else None)
    if form.get("format_id"):
        st.caption(
            f"Type: {ads.ad_type_label(form.get('ad_type'))} · size {form.get('custom_width') or '-'} x "
            f"{form.get('custom_height') or '-'} px"
        )
    else:
        st.warning("Choose a format before saving.")
    return form


def _image_input(cfg: AppConfig, ctx: ViewContext, form: dict, key: str) -> dict:
    mode = st.radio("Image", ["URL", "Upload"], horizontal=True, key=f"{key}_img_mode")
    if mode == "URL":
        form["image_url"] = st.text_input("Image URL", value=form.get("image_url") or "", key=f"{key}_img_url")
    else:
        file = st.file_uploader(
            f"Image (max {cfg.max_upload_bytes // (1024 * 1024)} MB)",
            type=["png", "jpg", "jpeg", "gif", "webp", "svg"],
            key=f"{key}_img_file",
        )
        if file is not None:

            def _upload():
                with st.spinner("Uploading…"):
                    return storage.upload_image(
                        cfg, ctx.use_mock, cfg.ad_image_bucket, "ads", file.name, file.getvalue(), file.type
                    )

            res = storage.upload_once(st.session_state, f"{key}_img_uploaded", file.file_id, _upload)
            if res is not None and res.ok:
                form["image_url"] = res.data
            elif res is not None:
                st.error(res.message)
    if form.get("image_url"):
        st.image(form["image_url"], width=240)
    return form


def _ad_editor(cfg: AppConfig, ctx: ViewContext, formats: pd.DataFrame, ad_id: Optional[str]) -> None:
    """Form state lives in session_state so picking a format can update width/height before saving."""
    key = f"{FORM_KEY}_{ad_id or 'new'}"
    form = dict(st.session_state[key])

    form["title"] = st.text_input("Title *", value=form.get("title") or "", key=f"{key}_title")
    form = _format_picker(form, formats, key)
    form["description"] = st.text_area("Description", value=form.get("description") or "", key=f"{key}_desc")
    form = _image_input(cfg, ctx, form, key)

    c1, c2, c3 = st.columns(3)
    with c1:
        form["link_url"] = st.text_input("Link URL", value=form.get("link_url") or "", key=f"{key}_link")
        form["cta_text"] = st.text_input("Button text", value=form.get("cta_text") or "Mehr erfahren", key=f"{key}_cta")
    with c2:
        form["priority"] = st.number_input("Priority", min_value=0, value=int(form.get("priority") or 0), key=f"{key}_prio")
        form["is_active"] = st.toggle("Active", value=bool(form.get("is_active", True)), key=f"{key}_active")
    with c3:
        form["start_date"] = _date_input("Start date", form.get("start_date"), f"{key}_start")
        form["end_date"] = _date_input("End date", form.get("end_date"), f"{key}_end")

    c1, c2 = st.columns(2)
    with c1:
        max_impr = st.number_input("Max impressions (0 = unlimited)", min_value=0, value=int(form.get("max_impressions") or 0), key=f"{key}_maxi")
        form["max_impressions"] = max_impr or None
    with c2:
        max_clicks = st.number_input("Max clicks (0 = unlimited)", min_value=0, value=int(form.get("max_clicks") or 0), key=f"{key}_maxc")
        form["max_clicks"] = max_clicks or None

    form["target_pet_types"] = st.multiselect(
        "Target pet types", ads.PET_TYPES, default=[p for p in form.get("target_pet_types") or [] if p in ads.PET_TYPES], key=f"{key}_pets"
    )
    locations = st.text_input("Target locations (comma separated)", value=", ".join(form.get("target_locations") or []), key=f"{key}_locs")
    form["target_locations"] = [l.strip() for l in locations.split(",") if l.strip()]
    form["target_subscription_types"] = st.multiselect(
        "Target subscriptions",
        ads.SUBSCRIPTION_TYPES,
        default=[s for s in form.get("target_subscription_types") or [] if s in ads.SUBSCRIPTION_TYPES],
        key=f"{key}_subs",
    )
    st.session_state[key] = form

    c1, c2, _ = st.columns([1, 1, 3])
    with c1:
        if st.button("Save", type="primary", key=f"{key}_save", use_container_width=True):
            res = (
                ads.update_advertisement(cfg, ctx.use_mock, ad_id, form)
                if ad_id
                else ads.create_advertisement(cfg, ctx.use_mock, form, actor_id=ctx.actor_id)
            )
            if res.ok:
                st.session_state.pop(key, None)
            done(res)
    with c2:
        if st.button("Cancel", key=f"{key}_cancel", use_container_width=True):
            st.session_state.pop(key, None)
            st.rerun()


def render(cfg: AppConfig, ctx: ViewContext) -> None:
    st.title("Advertisements")
    render_tab_intro(title="Advertisement management", context="Create, schedule and target ads shown across the platform.")

    formats_res = ads.list_formats(cfg, ctx.use_mock)
    render_result_warning(formats_res.warning)
    formats = formats_res.df

    c1, c2, c3, c4 = st.columns([3, 1, 1, 1])
    with c1:
        search = st.text_input("Search", placeholder="Title or description", key="ads_search")
    with c2:
        active_filter = st.selectbox("Show", ads.ACTIVE_FILTERS, key="ads_filter")
    with c3:
        st.write("")
        if st.button("➕ New ad", use_container_width=True):
            st.session_state[f"{FORM_KEY}_new"] = ads.new_ad_form()
    with c4:
        st.write("")
        refresh_button("ads_refresh")

    if f"{FORM_KEY}_new" in st.session_state:
        with st.container(border=True):
            st.subheader("New advertisement")
            _ad_editor(cfg, ctx, formats, None)

    page = int(st.session_state.get(PAGE_KEY, 1))
    res = ads.list_advertisements(cfg, ctx.use_mock, page=page)
    render_result_warning(res.warning)
    shown = ads.filter_advertisements(res.df, search, active_filter)
    if shown.empty:
        st.info("No advertisements match the current filters.")
        render_pager(PAGE_KEY, res)
        return

    now = datetime.now(timezone.utc)
    shown = shown.assign(
        status=[ads.ad_status(r, now) for r in shown.to_dict("records")],
        type=shown["ad_type"].map(ads.ad_type_label),
    )
    st.caption(f"{len(shown)} ads on this page · {res.total} in total · source: **{res.source}**")
    ad = select_row(
        shown,
        "ads_table",
        ["title", "format_name", "type", "status", "priority", "start_date", "end_date", "current_impressions", "current_clicks"],
    )
    render_pager(PAGE_KEY, res)
    if ad is None:
        return

    st.divider()
    st.markdown(f"#### {ad.get('title')}")
    render_badges(badge(ad["status"]), badge(None, ad.get("format_name") or ads.ad_type_label(ad.get("ad_type"))))
    st.caption(f"Impressions {ad.get('current_impressions') or 0} · clicks {ad.get('current_clicks') or 0}")

    edit_key = f"{FORM_KEY}_{ad['id']}"
    c1, c2, c3, _ = st.columns([1, 1, 1, 2])
    with c1:
        if st.button("Edit", key=f"ad_edit_{ad['id']}", use_container_width=True):
            st.session_state[edit_key] = ads.edit_ad_form(ad, formats)
    with c2:
        if st.button("Duplicate", key=f"ad_dup_{ad['id']}", use_container_width=True):
            done(ads.duplicate_advertisement(cfg, ctx.use_mock, ad["id"], actor_id=ctx.actor_id))
    with c3:
        confirm = st.checkbox("Confirm delete", key=f"ad_del_ok_{ad['id']}")
        if st.button("Delete", key=f"ad_del_{ad['id']}", disabled=not confirm, use_container_width=True):
            done(ads.delete_advertisement(cfg, ctx.use_mock, ad["id"]), success_icon="🗑️")

    if edit_key in st.session_state:
        with st.container(border=True):
            st.subheader("Edit advertisement")
            _ad_editor(cfg, ctx, formats, ad["id"])
