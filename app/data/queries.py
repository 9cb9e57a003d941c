from __future__ import annotations

from supabase import Client


# --- users -------------------------------------------------------------------

USER_COLUMNS = [
    "id",
    "email",
    "first_name",
    "last_name",
    "user_type",
    "created_at",
    "updated_at",
    "is_suspended",
    "verification_status",
    "subscription_status",
    "profile_completed",
    "is_admin",
    "admin_role",
    "city",
    "plz",
    "street",
    "phone_number",
    "profile_photo_url",
    "show_ads",
    "premium_badge",
    "last_admin_login",
    "plan_type",
    "plan_expires_at",
    "max_contact_requests",
    "max_bookings",
    "search_priority",
    "stripe_customer_id",
    "stripe_subscription_id",
    "public_profile_visible",
    "date_of_birth",
    "gender",
    "suspension_reason",
    "suspended_at",
    "suspended_by",
]

# Flattened out of the embedded caretaker profile
APPROVAL_COLUMNS = ["approval_status", "approval_notes"]

CARETAKER_EMBED = "caretaker_profiles!caretaker_profiles_id_fkey(approval_status, approval_notes)"

SERVICE_PROVIDER_TYPES = [
    "tierfotograf",
    "hundetrainer",
    "tierarzt",
    "tierfriseur",
    "physiotherapeut",
    "ernaehrungsberater",
    "sonstige",
]

# Everyone whose profile needs staff approval before it is listed
APPROVAL_USER_TYPES = ["caretaker", "dienstleister", *SERVICE_PROVIDER_TYPES]

PENDING_APPROVAL_COLUMNS = ["id", "email", "first_name", "last_name", "user_type", "created_at", "city", "plz"]

SUBSCRIPTION_COLUMNS = [
    "id",
    "email",
    "first_name",
    "last_name",
    "user_type",
    "subscription_status",
    "plan_type",
    "plan_expires_at",
    "show_ads",
    "premium_badge",
    "max_contact_requests",
    "max_bookings",
    "search_priority",
    "stripe_customer_id",
    "stripe_subscription_id",
]

ADMIN_PROFILE_COLUMNS = ["id", "email", "first_name", "last_name", "admin_role", "created_at"]


def q_users_page(client: Client, start: int, end: int):
    return (
        client.table("users")
        .select(", ".join(USER_COLUMNS) + ", " + CARETAKER_EMBED, count="exact")
        .order("created_at", desc=True)
        .range(start, end)
    )


def q_pending_approval_users(client: Client, limit: int):
    return (
        client.table("users")
        .select(", ".join(PENDING_APPROVAL_COLUMNS) + ", " + CARETAKER_EMBED)
        .in_("user_type", APPROVAL_USER_TYPES)
        .order("created_at", desc=True)
        .limit(limit)
    )


def q_count(client: Client, table: str):
    # Exact count travels in the Content-Range header; one row is enough.
    return client.table(table).select("id", count="exact").limit(1)


def q_subscriptions(client: Client):
    # id breaks ties so `.range()` pages do not overlap.
    return (
        client.table("users")
        .select(", ".join(SUBSCRIPTION_COLUMNS))
        .order("plan_expires_at", desc=False)
        .order("id", desc=False)
    )


def q_admin_profile(client: Client, user_id: str):
    return (
        client.table("users")
        .select(", ".join(ADMIN_PROFILE_COLUMNS))
        .eq("id", user_id)
        .eq("is_admin", True)
        .maybe_single()
    )


def q_created_since(client: Client, table: str, since_iso: str):
    return (
        client.table(table)
        .select("created_at")
        .gte("created_at", since_iso)
        .order("created_at", desc=False)
        .order("id", desc=False)
    )


# --- advertisements ----------------------------------------------------------

# Columns that really exist on `advertisements` (the *_with_formats view adds more)
AD_TABLE_COLUMNS = [
    "title",
    "description",
    "image_url",
    "link_url",
    "cta_text",
    "ad_type",
    "format_id",
    "target_pet_types",
    "target_locations",
    "target_subscription_types",
    "start_date",
    "end_date",
    "is_active",
    "priority",
    "max_impressions",
    "max_clicks",
    "custom_width",
    "custom_height",
]

AD_VIEW_COLUMNS = [
    "id",
    *AD_TABLE_COLUMNS,
    "current_impressions",
    "current_clicks",
    "created_by",
    "created_at",
    "updated_at",
    "format_name",
    "format_description",
    "display_width",
    "display_height",
    "placement",
    "function_description",
]

AD_FORMAT_COLUMNS = [
    "id",
    "name",
    "description",
    "width",
    "height",
    "ad_type",
    "placement",
    "function_description",
    "is_active",
]


def q_ads_page(client: Client, start: int, end: int):
    return (
        client.table("advertisements_with_formats")
        .select("*", count="exact")
        .order("created_at", desc=True)
        .range(start, end)
    )


def q_active_formats(client: Client):
    return client.table("advertisement_formats").select("*").eq("is_active", True).order("name", desc=False)


# --- moderation --------------------------------------------------------------

REVIEW_COLUMNS = [
    "id",
    "caretaker_id",
    "user_id",
    "rating",
    "comment",
    "moderation_status",
    "moderated_at",
    "moderated_by",
    "created_at",
]

TICKET_COLUMNS = [
    "id",
    "user_id",
    "email",
    "subject",
    "message",
    "status",
    "priority",
    "admin_response",
    "created_at",
    "updated_at",
]


def q_reviews(client: Client, status: str | None):
    q = client.table("reviews").select(", ".join(REVIEW_COLUMNS)).order("created_at", desc=True)
    return q.eq("moderation_status", status) if status else q


def q_tickets(client: Client, status: str | None):
    q = client.table("support_tickets").select(", ".join(TICKET_COLUMNS)).order("created_at", desc=True)
    return q.eq("status", status) if status else q


# --- blog --------------------------------------------------------------------

POST_COLUMNS = [
    "id",
    "title",
    "slug",
    "excerpt",
    "content",
    "cover_image_url",
    "type",
    "status",
    "tags",
    "published_at",
    "author_id",
    "created_at",
    "updated_at",
]

POST_WRITE_COLUMNS = ["title", "slug", "excerpt", "content", "cover_image_url", "type", "status", "tags"]


def q_posts_page(client: Client, start: int, end: int, post_type: str | None, status: str | None):
    q = client.table("blog_posts").select(", ".join(POST_COLUMNS), count="exact")
    if post_type:
        q = q.eq("type", post_type)
    if status:
        q = q.eq("status", status)
    return q.order("created_at", desc=True).range(start, end)


# --- verification ------------------------------------------------------------

VERIFICATION_COLUMNS = [
    "id",
    "user_id",
    "status",
    "documents",
    "admin_comment",
    "reviewed_by",
    "reviewed_at",
    "created_at",
]


def q_verification_requests(client: Client, status: str | None):
    q = (
        client.table("verification_requests")
        .select(", ".join(VERIFICATION_COLUMNS) + ", users(email, first_name, last_name, user_type)")
        .order("created_at", desc=False)
    )
    return q.eq("status", status) if status else q
