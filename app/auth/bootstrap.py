from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from auth.backend import AuthBackend, SessionUser
from config import AppConfig


logger = logging.getLogger(__name__)

# GoTrue auth events
INITIAL_SESSION = "INITIAL_SESSION"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"
USER_UPDATED = "USER_UPDATED"
PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


class AuthStatus(str, Enum):
    INITIALIZING = "initializing"
    SIGNED_OUT = "signed_out"
    ADMIN_PENDING = "admin_pending"
    RESOLVED = "resolved"
    STALE = "stale"  # lookup exhausted its retries; is_admin is the last known value


@dataclass(frozen=True)
class AuthState:
    status: AuthStatus = AuthStatus.INITIALIZING
    user: Optional[SessionUser] = None
    is_admin: bool = False
    admin_role: Optional[str] = None
    loading: bool = True
    error: Optional[str] = None


class AuthBootstrap:
    """
    Session bootstrap + admin status resolution for one browser session.

    Flow:
    - start(): session fetch raced against `session_timeout`; never blocks longer.
    - a found session moves to ADMIN_PENDING and resolves admin status in the background
      (bounded retries, exponential backoff, each attempt raced against `admin_timeout`).
    - exhausted retries keep the previously known privilege (STALE), never downgrade it.
    - auth events from the client (sign-in elsewhere, user updates, sign-out) go through handle_event().

    Timed-out backend calls are not cancelled; whatever answers last for the current user wins.
    State is an immutable AuthState swapped under a lock because auth callbacks can come from
    the client's refresh thread.
    """

    def __init__(
        self,
        backend: AuthBackend,
        *,
        session_timeout: float = 3.0,
        admin_timeout: float = 3.0,
        admin_retries: int = 3,
        backoff_base: float = 0.5,
        backoff_max: float = 4.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._backend = backend
        self._session_timeout = session_timeout
        self._admin_timeout = admin_timeout
        self._admin_retries = max(1, int(admin_retries))
        self._backoff_base = backoff_base
        self._backoff_max = backoff_max
        self._sleep = sleep

        self._lock = threading.RLock()
        self._state = AuthState()
        self._initial_load_completed = False
        self._pending_session: Optional[Future] = None
        self._admin_future: Optional[Future] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

        # Separate pools: a hung backend call must not occupy a resolver worker.
        # A lookup for a user who is no longer current stops at its next attempt.
        self._calls = ThreadPoolExecutor(max_workers=4, thread_name_prefix="auth-call")
        self._resolver = ThreadPoolExecutor(max_workers=2, thread_name_prefix="auth-admin")

    @classmethod
    def from_config(cls, backend: AuthBackend, cfg: AppConfig) -> "AuthBootstrap":
        return cls(
            backend,
            session_timeout=cfg.session_timeout_s,
            admin_timeout=cfg.admin_check_timeout_s,
            admin_retries=cfg.admin_check_retries,
            backoff_base=cfg.admin_check_backoff_s,
        )

    @property
    def state(self) -> AuthState:
        with self._lock:
            return self._state

    # --- bootstrap -----------------------------------------------------------

    def start(self) -> AuthState:
        with self._lock:
            if self._initial_load_completed:
                return self._state

        future = self._calls.submit(self._backend.get_session)
        try:
            user = future.result(timeout=self._session_timeout)
        except FutureTimeout:
            logger.warning("Session check timed out after %.1fs; continuing signed out", self._session_timeout)
            self._pending_session = future
            self._finish_initial_load(None, error="Session check timed out. Please sign in.")
        except Exception as e:
            logger.error("Error getting session: %s", e)
            self._finish_initial_load(None, error=f"Could not read the session: {e}")
        else:
            self._finish_initial_load(user)

        self._subscribe()
        return self.state

    def _finish_initial_load(self, user: Optional[SessionUser], error: Optional[str] = None) -> None:
        with self._lock:
            self._initial_load_completed = True
            if user is None:
                self._state = AuthState(status=AuthStatus.SIGNED_OUT, loading=False, error=error)
                return
            self._state = AuthState(status=AuthStatus.ADMIN_PENDING, user=user, loading=False)
        logger.info("Session found for %s; resolving admin status", user.email or user.id)
        self._start_admin_lookup(user)

    def _subscribe(self) -> None:
        if self._unsubscribe is not None:
            return
        try:
            self._unsubscribe = self._backend.subscribe(self.handle_event)
        except Exception:
            logger.exception("Could not subscribe to auth events")

    def poll(self) -> AuthState:
        """Adopt a session fetch that finished after start() gave up on it."""
        future = self._pending_session
        if future is None or not future.done():
            return self.state
        self._pending_session = None
        try:
            user = future.result()
        except Exception as e:
            logger.warning("Late session check failed: %s", e)
            return self.state
        if user is None:
            return self.state

        with self._lock:
            if self._state.user is not None:
                return self._state
            self._state = replace(self._state, status=AuthStatus.ADMIN_PENDING, user=user, error=None)
        logger.info("Adopted late session for %s", user.email or user.id)
        self._start_admin_lookup(user)
        return self.state

    # --- admin status ----------------------------------------------------------

    def _start_admin_lookup(self, user: SessionUser) -> None:
        self._admin_future = self._resolver.submit(self.resolve_admin, user.id)

    def resolve_admin(self, user_id: str) -> AuthState:
        delay = self._backoff_base
        for attempt in range(1, self._admin_retries + 1):
            with self._lock:
                if not self._is_current(user_id):
                    logger.info("Dropping admin lookup for %s; no longer the signed-in user", user_id)
                    return self._state
            future = self._calls.submit(self._backend.fetch_admin_flags, user_id)
            try:
                flags = future.result(timeout=self._admin_timeout)
            except FutureTimeout:
                logger.warning("Admin status check timed out (attempt %d/%d)", attempt, self._admin_retries)
            except Exception as e:
                logger.warning("Admin status check failed (attempt %d/%d): %s", attempt, self._admin_retries, e)
            else:
                return self._apply_admin(user_id, flags)

            if attempt < self._admin_retries:
                self._sleep(min(delay, self._backoff_max))
                delay *= 2

        return self._retain_admin(user_id)

    def _is_current(self, user_id: str) -> bool:
        return self._state.user is not None and self._state.user.id == user_id

    def _apply_admin(self, user_id: str, flags: Optional[dict]) -> AuthState:
        with self._lock:
            if not self._is_current(user_id):
                return self._state
            is_admin = bool(flags and flags.get("is_admin"))
            self._state = replace(
                self._state,
                status=AuthStatus.RESOLVED,
                is_admin=is_admin,
                admin_role=(flags or {}).get("admin_role") if is_admin else None,
                error=None,
            )
            state = self._state
        logger.info("Admin status for %s: is_admin=%s", user_id, state.is_admin)
        return state

    def _retain_admin(self, user_id: str) -> AuthState:
        with self._lock:
            if not self._is_current(user_id):
                return self._state
            self._state = replace(
                self._state,
                status=AuthStatus.STALE,
                error="Could not verify admin permissions. Showing the last known status.",
            )
            state = self._state
        logger.warning("Admin status check gave up for %s; keeping is_admin=%s", user_id, state.is_admin)
        return state

    def wait_for_admin(self, timeout: Optional[float] = None) -> AuthState:
        future = self._admin_future
        if future is not None:
            try:
                future.result(timeout=timeout)
            except FutureTimeout:
                logger.warning("Still waiting for admin status after %.1fs", timeout or 0.0)
        return self.state

    def recheck_admin(self) -> AuthState:
        with self._lock:
            user = self._state.user
            if user is None:
                return self._state
            self._state = replace(self._state, status=AuthStatus.ADMIN_PENDING, error=None)
        self._start_admin_lookup(user)
        return self.state

    # --- events ---------------------------------------------------------------

    def handle_event(self, event: str, user: Optional[SessionUser]) -> None:
        with self._lock:
            initial_done = self._initial_load_completed

        if event == INITIAL_SESSION and initial_done:
            return
        if event == TOKEN_REFRESHED:
            logger.debug("Token refreshed")
            return
        if event == SIGNED_OUT:
            logger.info("Signed out")
            self._clear()
            return
        if user is None:
            logger.info("Auth event %s without a session; state unchanged", event)
            return
        logger.info("Auth event %s for %s", event, user.email or user.id)
        self._adopt_user(user)

    def _adopt_user(self, user: SessionUser) -> None:
        with self._lock:
            current = self._state
            same = current.user is not None and current.user.id == user.id
            lookup_running = self._admin_future is not None and not self._admin_future.done()
            # Privilege only resets when a different user signs in.
            self._state = replace(
                current,
                status=AuthStatus.ADMIN_PENDING,
                user=user,
                is_admin=current.is_admin if same else False,
                admin_role=current.admin_role if same else None,
                loading=False,
                error=None,
            )
            if same and lookup_running:
                return
        self._start_admin_lookup(user)

    def _clear(self) -> None:
        with self._lock:
            self._pending_session = None
            self._state = AuthState(status=AuthStatus.SIGNED_OUT, loading=False)

    # --- user actions ---------------------------------------------------------

    def sign_in(self, email: str, password: str) -> Optional[str]:
        """Returns None on success, otherwise a message for the sign-in form."""
        try:
            user = self._backend.sign_in(email, password)
        except Exception as e:
            logger.warning("Sign-in failed for %s: %s", email, e)
            return f"Sign-in failed: {getattr(e, 'message', None) or e}"
        if user is None:
            return "Sign-in failed: no user returned."
        self._adopt_user(user)
        return None

    def sign_out(self) -> None:
        try:
            self._backend.sign_out()
        except Exception as e:
            logger.error("Error signing out: %s", e)
        finally:
            self._clear()

    def close(self) -> None:
        if self._unsubscribe is not None:
            try:
                self._unsubscribe()
            except Exception:
                logger.exception("Could not unsubscribe from auth events")
            self._unsubscribe = None
        self._calls.shutdown(wait=False)
        self._resolver.shutdown(wait=False)
