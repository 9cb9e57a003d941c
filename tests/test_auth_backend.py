from __future__ import annotations

from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

from auth.backend import SessionUser, SupabaseAuthBackend
from conftest import FakeClient, FakeResponse


def api_error(code: str, message: str = "error") -> APIError:
    return APIError({"code": code, "message": message, "details": None, "hint": None})


class FakeAuth:
    def __init__(self):
        self.session = None
        self.signed_out = False
        self.callback = None
        self.unsubscribed = False

    def get_session(self):
        return self.session

    def sign_in_with_password(self, credentials):
        self.credentials = credentials
        return SimpleNamespace(user=SimpleNamespace(id="u1", email=credentials["email"]), session=None)

    def sign_out(self):
        self.signed_out = True

    def on_auth_state_change(self, callback):
        self.callback = callback
        return SimpleNamespace(unsubscribe=lambda: setattr(self, "unsubscribed", True))


@pytest.fixture
def client():
    c = FakeClient()
    c.auth = FakeAuth()
    return c


def test_admin_flags_row(client):
    client.queue("users", "select", FakeResponse([{"is_admin": True, "admin_role": "super_admin"}]))
    flags = SupabaseAuthBackend(client).fetch_admin_flags("u1")
    assert flags == {"is_admin": True, "admin_role": "super_admin"}
    q = client.calls_for("users")[0]
    assert q.columns == "is_admin, admin_role"
    assert q.filter_value("eq", "id") == "u1"
    assert q.single_mode == "single"


def test_no_row_means_not_admin(client):
    client.queue("users", "select", api_error("PGRST116", "JSON object requested, multiple (or no) rows returned"))
    assert SupabaseAuthBackend(client).fetch_admin_flags("u1") is None


def test_missing_table_is_not_admin_by_default(client):
    client.queue("users", "select", api_error("42P01", 'relation "users" does not exist'))
    assert SupabaseAuthBackend(client).fetch_admin_flags("u1") is None


def test_missing_table_grants_demo_admin_when_allowed(client):
    client.queue("users", "select", api_error("42P01"))
    flags = SupabaseAuthBackend(client, allow_demo_admin=True).fetch_admin_flags("u1")
    assert flags["is_admin"] is True


def test_other_errors_propagate_for_retry(client):
    client.queue("users", "select", api_error("PGRST301", "JWT expired"))
    with pytest.raises(APIError):
        SupabaseAuthBackend(client).fetch_admin_flags("u1")


def test_get_session_maps_user(client):
    client.auth.session = SimpleNamespace(user=SimpleNamespace(id="u1", email="a@example.com"))
    assert SupabaseAuthBackend(client).get_session() == SessionUser(id="u1", email="a@example.com")


def test_get_session_none(client):
    assert SupabaseAuthBackend(client).get_session() is None


def test_sign_in_and_out(client):
    backend = SupabaseAuthBackend(client)
    user = backend.sign_in("a@example.com", "pw")
    assert user == SessionUser(id="u1", email="a@example.com")
    assert client.auth.credentials == {"email": "a@example.com", "password": "pw"}
    backend.sign_out()
    assert client.auth.signed_out is True


def test_subscribe_translates_events(client):
    seen = []
    unsubscribe = SupabaseAuthBackend(client).subscribe(lambda event, user: seen.append((event, user)))
    client.auth.callback("SIGNED_IN", SimpleNamespace(user=SimpleNamespace(id="u2", email="b@example.com")))
    client.auth.callback("SIGNED_OUT", None)
    assert seen == [("SIGNED_IN", SessionUser(id="u2", email="b@example.com")), ("SIGNED_OUT", None)]
    unsubscribe()
    assert client.auth.unsubscribed is True
