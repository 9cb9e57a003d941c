from __future__ import annotations

from typing import Optional

import streamlit as st

from components.narrative import badge, render_badges, render_result_warning, render_tab_intro
from components.tables import done, refresh_button, render_pager, select_row
from config import AppConfig
from data import blog, storage
from views.context import ViewContext


PAGE_KEY = "posts_page"


def _cover_upload(cfg: AppConfig, ctx: ViewContext, key: str) -> Optional[str]:
    file = st.file_uploader("Upload cover image", type=["png", "jpg", "jpeg", "gif", "webp"], key=key)
    if file is None:
        return None
    res = storage.upload_once(
        st.session_state,
        f"{key}_uploaded",
        file.file_id,
        lambda: storage.upload_image(cfg, ctx.use_mock, cfg.blog_image_bucket, "posts", file.name, file.getvalue(), file.type),
    )
    if res is None:
        return None
    if not res.ok:
        st.error(res.message)
        return None
    return res.data


def _post_form(cfg: AppConfig, ctx: ViewContext, post: Optional[dict]) -> None:
    post = post or {}
    key = post.get("id") or "new"
    with st.form(f"post_form_{key}"):
        title = st.text_input("Title *", value=post.get("title") or "")
        slug = st.text_input("Slug", value=post.get("slug") or "", help="Leave empty to derive it from the title.")
        c1, c2 = st.columns(2)
        with c1:
            post_type = st.selectbox(
                "Type", blog.POST_TYPES, index=blog.POST_TYPES.index(post["type"]) if post.get("type") in blog.POST_TYPES else 0
            )
        with c2:
            status = st.selectbox(
                "Status",
                blog.POST_STATUSES,
                index=blog.POST_STATUSES.index(post["status"]) if post.get("status") in blog.POST_STATUSES else 0,
            )
        excerpt = st.text_area("Excerpt", value=post.get("excerpt") or "", height=80)
        content = st.text_area("Content (Markdown)", value=post.get("content") or "", height=260)
        tags = st.text_input("Tags (comma separated)", value=", ".join(post.get("tags") or []))
        cover_url = st.text_input("Cover image URL", value=post.get("cover_image_url") or "")
        submitted = st.form_submit_button("Save post", type="primary")

    uploaded = _cover_upload(cfg, ctx, f"post_cover_{key}")
    if uploaded:
        st.session_state[f"post_cover_url_{key}"] = uploaded
        st.success("Cover uploaded. Save the post to use it.")
    cover_url = st.session_state.get(f"post_cover_url_{key}") or cover_url

    if not submitted:
        return
    form = {
        "title": title,
        "slug": slug,
        "type": post_type,
        "status": status,
        "excerpt": excerpt,
        "content": content,
        "tags": tags,
        "cover_image_url": cover_url,
    }
    if post.get("id"):
        done(blog.update_post(cfg, ctx.use_mock, post["id"], form, published_at=post.get("published_at")))
    else:
        done(blog.create_post(cfg, ctx.use_mock, form, author_id=ctx.actor_id))


def render(cfg: AppConfig, ctx: ViewContext) -> None:
    st.title("Content")
    render_tab_intro(title="Blog & news", context="Write, publish and retire blog posts and news items.")

    c1, c2, c3, c4 = st.columns([3, 1, 1, 1])
    with c1:
        search = st.text_input("Search", placeholder="Title, excerpt, slug or tag", key="posts_search")
    with c2:
        post_type = st.selectbox("Type", ["all", *blog.POST_TYPES], key="posts_type")
    with c3:
        status = st.selectbox("Status", ["all", *blog.POST_STATUSES], key="posts_status")
    with c4:
        st.write("")
        refresh_button("posts_refresh")

    with st.expander("➕ New post"):
        _post_form(cfg, ctx, None)

    page = int(st.session_state.get(PAGE_KEY, 1))
    res = blog.list_posts(
        cfg,
        ctx.use_mock,
        page=page,
        post_type=None if post_type == "all" else post_type,
        status=None if status == "all" else status,
    )
    render_result_warning(res.warning)
    shown = blog.filter_posts(res.df, search)
    if shown.empty:
        st.info("No posts match the current filters.")
        render_pager(PAGE_KEY, res)
        return

    st.caption(f"{len(shown)} posts on this page · {res.total} in total · source: **{res.source}**")
    post = select_row(shown, "posts_table", ["title", "type", "status", "published_at", "updated_at", "slug"])
    render_pager(PAGE_KEY, res)
    if post is None:
        return

    st.divider()
    st.markdown(f"#### {post.get('title')}")
    render_badges(badge(post.get("status")), badge(post.get("type"), post.get("type")))
    published = post.get("status") == "published"
    c1, c2, _ = st.columns([1, 1, 3])
    with c1:
        if st.button("Unpublish" if published else "Publish", key=f"post_pub_{post['id']}", use_container_width=True):
            done(blog.set_published(cfg, ctx.use_mock, post["id"], not published, post.get("published_at")))
    with c2:
        confirm = st.checkbox("Confirm delete", key=f"post_del_ok_{post['id']}")
        if st.button("Delete", key=f"post_del_{post['id']}", disabled=not confirm, use_container_width=True):
            done(blog.delete_post(cfg, ctx.use_mock, post["id"]), success_icon="🗑️")

    with st.expander("Edit post", expanded=False):
        _post_form(cfg, ctx, post)
