# tests/test_store.py
from types import SimpleNamespace

import pytest

from backend.database.store import SupabaseStore, eq, icontains, like_escape, not_null
from backend.errors import FetchError, WriteError


class FakeQuery:
    """Records the PostgREST builder chain instead of sending it."""

    def __init__(self, log, data=None, error=None):
        self.log = log
        self.data = data if data is not None else []
        self.error = error

    def __getattr__(self, name):
        def call(*args, **kwargs):
            self.log.append((name, args, kwargs))
            return self

        return call

    @property
    def not_(self):
        self.log.append(("not_", (), {}))
        return self

    def execute(self):
        if self.error:
            raise self.error
        return SimpleNamespace(data=self.data)


class FakeClient:
    def __init__(self, data=None, error=None):
        self.calls = []
        self.data = data
        self.error = error

    def table(self, name):
        self.calls.append(("table", (name,), {}))
        return FakeQuery(self.calls, self.data, self.error)


def test_select_builds_query():
    client = FakeClient(data=[{"id": 1}])
    rows = SupabaseStore(client).select(
        "tussles",
        filters=[eq("company_id", "c1"), icontains("name", "50%_off"), not_null("due_date")],
        relations=["companies(*)"],
        order="created_at",
        desc=True,
        limit=3,
    )
    assert rows == [{"id": 1}]
    assert client.calls == [
        ("table", ("tussles",), {}),
        ("select", ("*, companies(*)",), {}),
        ("eq", ("company_id", "c1"), {}),
        ("ilike", ("name", "%50\\%\\_off%"), {}),
        ("not_", (), {}),
        ("is_", ("due_date", "null"), {}),
        ("order", ("created_at",), {"desc": True}),
        ("limit", (3,), {}),
    ]


def test_like_escape():
    assert like_escape("a%b_c\\") == "a\\%b\\_c\\\\"


def test_select_failure_is_fetch_error():
    with pytest.raises(FetchError) as exc:
        SupabaseStore(FakeClient(error=RuntimeError("down"))).select("companies")
    assert exc.value.collection == "companies"


def test_insert_returns_first_row():
    client = FakeClient(data=[{"id": "c9", "name": "Acme"}])
    assert SupabaseStore(client).insert("companies", {"name": "Acme"}) == {"id": "c9", "name": "Acme"}


def test_insert_without_rows_is_write_error():
    with pytest.raises(WriteError):
        SupabaseStore(FakeClient(data=[])).insert("companies", {"name": "Acme"})
    with pytest.raises(WriteError):
        SupabaseStore(FakeClient(error=RuntimeError("rls"))).insert("companies", {"name": "Acme"})


def test_update_filters_by_id():
    client = FakeClient(data=[{"id": "t1", "status": "completed"}])
    SupabaseStore(client).update("tussles", "t1", {"status": "completed"})
    assert ("eq", ("id", "t1"), {}) in client.calls
    with pytest.raises(WriteError):
        SupabaseStore(FakeClient(data=[])).update("tussles", "t1", {"status": "completed"})


def test_delete_filters_by_id():
    client = FakeClient(data=[])
    SupabaseStore(client).delete("receipts", "r1")
    assert client.calls == [
        ("table", ("receipts",), {}),
        ("delete", (), {}),
        ("eq", ("id", "r1"), {}),
    ]
    with pytest.raises(WriteError) as exc:
        SupabaseStore(FakeClient(error=RuntimeError("rls"))).delete("receipts", "r1")
    assert exc.value.collection == "receipts"
