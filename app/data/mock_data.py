from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pandas as pd
from faker import Faker

from data import queries


fake = Faker("de_DE")


USER_TYPES = ["owner"] * 6 + ["caretaker"] * 3 + queries.SERVICE_PROVIDER_TYPES
PET_TYPES = ["Hund", "Katze", "Vogel", "Kaninchen", "Fisch", "Kleintier", "Andere"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _ts(days_ago: float) -> str:
    return (_now() - timedelta(days=days_ago)).isoformat()


def users_mock(n_rows: int = 240) -> pd.DataFrame:
    random.seed(7)
    Faker.seed(7)
    rows = []
    for _ in range(n_rows):
        user_type = random.choice(USER_TYPES)
        premium = random.random() < 0.22
        expires_in = random.randint(-40, 200)
        suspended = random.random() < 0.04
        needs_approval = user_type in queries.APPROVAL_USER_TYPES
        rows.append(
            {
                "id": fake.uuid4(),
                "email": fake.unique.email(),
                "first_name": fake.first_name(),
                "last_name": fake.last_name(),
                "user_type": user_type,
                "created_at": _ts(random.uniform(0, 400)),
                "updated_at": _ts(random.uniform(0, 30)),
                "is_suspended": suspended,
                "suspended_at": _ts(random.uniform(0, 30)) if suspended else None,
                "suspended_by": None,
                "suspension_reason": "Spam reports" if suspended else None,
                "verification_status": random.choice(["not_submitted", "pending", "approved", "approved", "rejected"]),
                "subscription_status": "premium" if premium else "free",
                "profile_completed": random.random() < 0.8,
                "is_admin": random.random() < 0.02,
                "admin_role": None,
                "city": fake.city(),
                "plz": fake.postcode(),
                "street": fake.street_address(),
                "phone_number": fake.phone_number(),
                "profile_photo_url": None,
                "show_ads": not premium,
                "premium_badge": premium,
                "last_admin_login": None,
                "plan_type": "premium" if premium else "free",
                "plan_expires_at": (_now() + timedelta(days=expires_in)).isoformat() if premium else None,
                "max_contact_requests": None if premium else 3,
                "max_bookings": None if premium else 3,
                "search_priority": 10 if premium else 0,
                "stripe_customer_id": f"cus_{fake.bothify('??##??##??##')}" if premium else None,
                "stripe_subscription_id": f"sub_{fake.bothify('??##??##??##')}" if premium else None,
                "public_profile_visible": True,
                "date_of_birth": fake.date_of_birth(minimum_age=18, maximum_age=80).isoformat(),
                "gender": random.choice(["female", "male", "diverse", None]),
                "approval_status": (
                    random.choice(["not_requested", "pending", "pending", "approved", "rejected"])
                    if needs_approval
                    else "not_requested"
                ),
                "approval_notes": None,
            }
        )
    fake.unique.clear()
    df = pd.DataFrame(rows)
    return df.sort_values("created_at", ascending=False).reset_index(drop=True)


def ad_formats_mock() -> pd.DataFrame:
    rows = [
        ("Search card", 300, 250, "search_card", "search_results"),
        ("Search filter tile", 300, 120, "search_filter", "search_sidebar"),
        ("Search card + filter", 300, 250, "search_card_filter", "search_results"),
        ("Profile banner", 728, 90, "profile_banner", "profile_page"),
        ("Dashboard banner", 970, 250, "dashboard_banner", "owner_dashboard"),
    ]
    return pd.DataFrame(
        [
            {
                "id": f"fmt-{i + 1}",
                "name": name,
                "description": f"{w}x{h} {placement.replace('_', ' ')}",
                "width": w,
                "height": h,
                "ad_type": ad_type,
                "placement": placement,
                "function_description": None,
                "is_active": True,
            }
            for i, (name, w, h, ad_type, placement) in enumerate(rows)
        ]
    ).sort_values("name").reset_index(drop=True)


def advertisements_mock(n_rows: int = 36) -> pd.DataFrame:
    random.seed(9)
    Faker.seed(9)
    formats = ad_formats_mock()
    rows = []
    for _ in range(n_rows):
        fmt = formats.iloc[random.randrange(len(formats))]
        start_offset = random.randint(-60, 20)
        impressions = random.randint(0, 40000)
        rows.append(
            {
                "id": fake.uuid4(),
                "title": fake.sentence(nb_words=4).rstrip("."),
                "description": fake.sentence(nb_words=12),
                "image_url": None,
                "link_url": fake.url(),
                "cta_text": "Mehr erfahren",
                "ad_type": fmt["ad_type"],
                "format_id": fmt["id"],
                "target_pet_types": random.sample(PET_TYPES, k=random.randint(0, 3)),
                "target_locations": [],
                "target_subscription_types": random.choice([["free"], ["free", "premium"]]),
                "start_date": (_now() + timedelta(days=start_offset)).isoformat(),
                "end_date": (_now() + timedelta(days=start_offset + random.randint(14, 90))).isoformat(),
                "is_active": random.random() < 0.75,
                "priority": random.randint(0, 10),
                "max_impressions": random.choice([None, 50000, 100000]),
                "current_impressions": impressions,
                "max_clicks": random.choice([None, 2000]),
                "current_clicks": int(impressions * random.uniform(0.002, 0.03)),
                "custom_width": int(fmt["width"]),
                "custom_height": int(fmt["height"]),
                "created_by": None,
                "created_at": _ts(random.uniform(0, 120)),
                "updated_at": _ts(random.uniform(0, 10)),
                "format_name": fmt["name"],
                "format_description": fmt["description"],
                "display_width": int(fmt["width"]),
                "display_height": int(fmt["height"]),
                "placement": fmt["placement"],
                "function_description": None,
            }
        )
    return pd.DataFrame(rows).sort_values("created_at", ascending=False).reset_index(drop=True)


def reviews_mock(n_rows: int = 60) -> pd.DataFrame:
    random.seed(11)
    Faker.seed(11)
    rows = [
        {
            "id": fake.uuid4(),
            "caretaker_id": fake.uuid4(),
            "user_id": fake.uuid4(),
            "rating": random.randint(1, 5),
            "comment": fake.paragraph(nb_sentences=2),
            "moderation_status": random.choice(["pending", "pending", "approved", "rejected", "flagged"]),
            "moderated_at": None,
            "moderated_by": None,
            "created_at": _ts(random.uniform(0, 90)),
        }
        for _ in range(n_rows)
    ]
    return pd.DataFrame(rows).sort_values("created_at", ascending=False).reset_index(drop=True)


def tickets_mock(n_rows: int = 25) -> pd.DataFrame:
    random.seed(13)
    Faker.seed(13)
    rows = [
        {
            "id": fake.uuid4(),
            "user_id": fake.uuid4(),
            "email": fake.email(),
            "subject": fake.sentence(nb_words=6).rstrip("."),
            "message": fake.paragraph(nb_sentences=3),
            "status": random.choice(["open", "open", "in_progress", "resolved", "closed"]),
            "priority": random.choice(["low", "normal", "normal", "high"]),
            "admin_response": None,
            "created_at": _ts(random.uniform(0, 45)),
            "updated_at": _ts(random.uniform(0, 5)),
        }
        for _ in range(n_rows)
    ]
    return pd.DataFrame(rows).sort_values("created_at", ascending=False).reset_index(drop=True)


def posts_mock(n_rows: int = 30) -> pd.DataFrame:
    random.seed(17)
    Faker.seed(17)
    rows = []
    for _ in range(n_rows):
        title = fake.sentence(nb_words=5).rstrip(".")
        published = random.random() < 0.6
        rows.append(
            {
                "id": fake.uuid4(),
                "title": title,
                "slug": "-".join(title.lower().split()),
                "excerpt": fake.sentence(nb_words=16),
                "content": "\n\n".join(fake.paragraphs(nb=3)),
                "cover_image_url": None,
                "type": random.choice(["blog", "blog", "news"]),
                "status": "published" if published else "draft",
                "tags": random.sample(["hund", "katze", "gesundheit", "urlaub", "training", "news"], k=2),
                "published_at": _ts(random.uniform(0, 200)) if published else None,
                "author_id": None,
                "created_at": _ts(random.uniform(0, 220)),
                "updated_at": _ts(random.uniform(0, 20)),
            }
        )
    return pd.DataFrame(rows).sort_values("created_at", ascending=False).reset_index(drop=True)


def verification_requests_mock(n_rows: int = 20) -> pd.DataFrame:
    random.seed(19)
    Faker.seed(19)
    rows = [
        {
            "id": fake.uuid4(),
            "user_id": fake.uuid4(),
            "status": random.choice(["pending", "pending", "in_review", "approved", "rejected"]),
            "documents": [f"https://example.invalid/docs/{fake.uuid4()}.pdf"],
            "admin_comment": None,
            "reviewed_by": None,
            "reviewed_at": None,
            "created_at": _ts(random.uniform(0, 30)),
            "email": fake.email(),
            "first_name": fake.first_name(),
            "last_name": fake.last_name(),
            "user_type": random.choice(["caretaker", *queries.SERVICE_PROVIDER_TYPES]),
        }
        for _ in range(n_rows)
    ]
    return pd.DataFrame(rows).sort_values("created_at").reset_index(drop=True)


def daily_activity_mock(days: int) -> pd.DataFrame:
    random.seed(23 + days)
    today = _now().date()
    rows = []
    for i in range(days - 1, -1, -1):
        d = today - timedelta(days=i)
        rows.append({"date": d.isoformat(), "users": max(0, int(random.gauss(14, 5))), "messages": max(0, int(random.gauss(220, 60)))})
    return pd.DataFrame(rows)
