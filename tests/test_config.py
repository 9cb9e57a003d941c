from __future__ import annotations

import logging

import pytest

import config
from config import AppConfig, get_config


ENV_VARS = [
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_SERVICE_ROLE",
    "USE_MOCK_DATA",
    "ALLOW_DEMO_ADMIN",
    "AUTH_SESSION_TIMEOUT",
    "ADMIN_CHECK_TIMEOUT",
    "ADMIN_CHECK_RETRIES",
    "ADMIN_CHECK_BACKOFF",
    "DASHBOARD_TIMEOUT",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda override=False: False)


def test_defaults():
    cfg = get_config()
    assert cfg.supabase_url == ""
    assert cfg.backend_configured is False
    assert cfg.supabase_service_role_key is None
    assert cfg.default_use_mock is False
    assert cfg.allow_demo_admin is False
    assert cfg.session_timeout_s == 3.0
    assert cfg.admin_check_timeout_s == 3.0
    assert cfg.admin_check_retries == 3
    assert cfg.dashboard_timeout_s == 10.0
    assert cfg.users_per_page == 50
    assert cfg.ads_per_page == 20
    assert cfg.log_level == "INFO"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", " https://p.supabase.co ")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE", "svc")
    monkeypatch.setenv("USE_MOCK_DATA", "yes")
    monkeypatch.setenv("ALLOW_DEMO_ADMIN", "1")
    monkeypatch.setenv("ADMIN_CHECK_RETRIES", "0")
    monkeypatch.setenv("AUTH_SESSION_TIMEOUT", "not-a-number")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    cfg = get_config()
    assert cfg.supabase_url == "https://p.supabase.co"
    assert cfg.backend_configured is True
    assert cfg.supabase_service_role_key == "svc"
    assert cfg.default_use_mock is True
    assert cfg.allow_demo_admin is True
    assert cfg.admin_check_retries == 1
    assert cfg.session_timeout_s == 3.0
    assert cfg.log_level == "DEBUG"


def test_long_service_role_name_wins(monkeypatch):
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "long")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE", "short")
    assert get_config().supabase_service_role_key == "long"


def test_admin_check_budget_covers_timeouts_and_backoff():
    cfg = AppConfig(
        supabase_url="u",
        supabase_anon_key="k",
        supabase_service_role_key=None,
        default_use_mock=False,
        allow_demo_admin=False,
        admin_check_timeout_s=2.0,
        admin_check_retries=3,
        admin_check_backoff_s=0.5,
    )
    assert cfg.admin_check_budget_s == pytest.approx(3 * 2.0 + 0.5 + 1.0)


def test_configure_logging_sets_root_level():
    cfg = AppConfig(
        supabase_url="",
        supabase_anon_key="",
        supabase_service_role_key=None,
        default_use_mock=False,
        allow_demo_admin=False,
        log_level="WARNING",
    )
    root = logging.getLogger()
    previous = root.level
    try:
        config.configure_logging(cfg)
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)
