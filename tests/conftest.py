from __future__ import annotations

from collections import defaultdict, deque
from types import SimpleNamespace
from typing import Any, Optional

import pytest

from config import AppConfig


class FakeResponse:
    def __init__(self, data: Any = None, count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Records one PostgREST builder chain; execute() pops the next queued response."""

    def __init__(self, client: "FakeClient", table: str):
        self.client = client
        self.table = table
        self.op: Optional[str] = None
        self.columns: Optional[str] = None
        self.count: Optional[str] = None
        self.payload: Any = None
        self.filters: list[tuple] = []
        self.single_mode: Optional[str] = None

    # operations
    def select(self, columns: str = "*", count: Optional[str] = None):
        self.op = self.op or "select"
        self.columns = columns
        self.count = count
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    # filters / modifiers
    def _f(self, name, *args, **kwargs):
        self.filters.append((name, *args, *sorted(kwargs.items())))
        return self

    def eq(self, col, value):
        return self._f("eq", col, value)

    def in_(self, col, values):
        return self._f("in", col, list(values))

    def gte(self, col, value):
        return self._f("gte", col, value)

    def order(self, col, desc=False):
        return self._f("order", col, desc)

    def range(self, start, end):
        return self._f("range", start, end)

    def limit(self, n):
        return self._f("limit", n)

    def single(self):
        self.single_mode = "single"
        return self

    def maybe_single(self):
        self.single_mode = "maybe_single"
        return self

    def filter_value(self, name: str, col: str):
        for f in self.filters:
            if f[0] == name and f[1] == col:
                return f[2]
        return None

    def execute(self):
        self.client.calls.append(self)
        queue = self.client.responses[(self.table, self.op)]
        item = queue.popleft() if queue else FakeResponse([], 0)
        if isinstance(item, BaseException):
            raise item
        if self.single_mode and isinstance(item.data, list):
            if not item.data and self.single_mode == "maybe_single":
                return None
            return FakeResponse(item.data[0] if item.data else None, item.count)
        return item


class FakeBucket:
    def __init__(self, client: "FakeClient", name: str):
        self.client = client
        self.name = name

    def upload(self, path, content, file_options=None):
        if self.client.upload_error is not None:
            raise self.client.upload_error
        self.client.uploads.append((self.name, path, content, file_options))
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://cdn.test/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self, client: "FakeClient"):
        self.client = client

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self.client, bucket)


class FakeClient:
    def __init__(self):
        self.responses: dict[tuple[str, Optional[str]], deque] = defaultdict(deque)
        self.calls: list[FakeQuery] = []
        self.uploads: list[tuple] = []
        self.upload_error: Optional[BaseException] = None
        self.storage = FakeStorage(self)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def queue(self, table: str, op: str, *items) -> "FakeClient":
        for item in items:
            self.responses[(table, op)].append(item)
        return self

    def calls_for(self, table: str, op: Optional[str] = None) -> list[FakeQuery]:
        return [c for c in self.calls if c.table == table and (op is None or c.op == op)]


@pytest.fixture
def cfg() -> AppConfig:
    return AppConfig(
        supabase_url="https://project.supabase.co",
        supabase_anon_key="anon-key",
        supabase_service_role_key="service-key",
        default_use_mock=False,
        allow_demo_admin=False,
        dashboard_timeout_s=2.0,
    )


@pytest.fixture
def unconfigured_cfg() -> AppConfig:
    return AppConfig(
        supabase_url="",
        supabase_anon_key="",
        supabase_service_role_key=None,
        default_use_mock=False,
        allow_demo_admin=False,
    )


@pytest.fixture
def fake_client(monkeypatch) -> FakeClient:
    from data import connection

    client = FakeClient()
    monkeypatch.setattr(connection, "get_admin_client", lambda cfg: client)
    return client
