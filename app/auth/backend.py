from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from postgrest.exceptions import APIError
from supabase import Client


logger = logging.getLogger(__name__)

# PostgREST: `.single()` matched no row
NO_ROWS = "PGRST116"
# Postgres: relation does not exist
UNDEFINED_TABLE = "42P01"


@dataclass(frozen=True)
class SessionUser:
    id: str
    email: Optional[str] = None

    @classmethod
    def from_auth_user(cls, user: Any) -> Optional["SessionUser"]:
        if user is None or not getattr(user, "id", None):
            return None
        return cls(id=str(user.id), email=getattr(user, "email", None))

    @classmethod
    def from_session(cls, session: Any) -> Optional["SessionUser"]:
        if session is None:
            return None
        return cls.from_auth_user(getattr(session, "user", None))


AuthCallback = Callable[[str, Optional[SessionUser]], None]


class AuthBackend(Protocol):
    def get_session(self) -> Optional[SessionUser]: ...

    def fetch_admin_flags(self, user_id: str) -> Optional[dict]: ...

    def sign_in(self, email: str, password: str) -> Optional[SessionUser]: ...

    def sign_out(self) -> None: ...

    def subscribe(self, callback: AuthCallback) -> Callable[[], None]: ...


class SupabaseAuthBackend:
    """
    Supabase GoTrue + PostgREST behind the AuthBackend protocol.

    The admin lookup goes through the same client as the session, so it runs
    with the signed-in user's JWT and the `users` RLS policies apply.
    """

    def __init__(self, client: Client, allow_demo_admin: bool = False):
        self._client = client
        self._allow_demo_admin = allow_demo_admin

    def get_session(self) -> Optional[SessionUser]:
        return SessionUser.from_session(self._client.auth.get_session())

    def fetch_admin_flags(self, user_id: str) -> Optional[dict]:
        """
        Returns the `is_admin, admin_role` row, or None when the user has no row.
        Anything else (network, 5xx, timeouts) propagates so the caller can retry.
        """
        try:
            resp = (
                self._client.table("users")
                .select("is_admin, admin_role")
                .eq("id", user_id)
                .single()
                .execute()
            )
        except APIError as e:
            if e.code == NO_ROWS:
                logger.info("No users row for %s; not an admin", user_id)
                return None
            if e.code == UNDEFINED_TABLE:
                if self._allow_demo_admin:
                    logger.warning("users table missing; ALLOW_DEMO_ADMIN grants admin to %s", user_id)
                    return {"is_admin": True, "admin_role": "demo"}
                logger.error("users table missing; nobody can be resolved as admin")
                return None
            raise
        return resp.data or None

    def sign_in(self, email: str, password: str) -> Optional[SessionUser]:
        resp = self._client.auth.sign_in_with_password({"email": email, "password": password})
        return SessionUser.from_auth_user(getattr(resp, "user", None))

    def sign_out(self) -> None:
        self._client.auth.sign_out()

    def subscribe(self, callback: AuthCallback) -> Callable[[], None]:
        def _on_change(event: Any, session: Any) -> None:
            callback(str(getattr(event, "value", event)), SessionUser.from_session(session))

        subscription = self._client.auth.on_auth_state_change(_on_change)
        return subscription.unsubscribe
