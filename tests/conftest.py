# tests/conftest.py
import itertools
import re
from types import SimpleNamespace

import pytest

from backend.errors import FetchError, WriteError
from backend.models import Profile, Role
from backend.session import Identity, SessionContext

# collection -> the column other collections use to point at it
FOREIGN_KEYS = {
    "companies": "company_id",
    "tussles": "tussle_id",
    "receipts": "receipt_id",
    "workers": "worker_id",
    "profiles": "profile_id",
}

_RELATION = re.compile(r"^\s*(\w+)\s*\((.*)\)\s*$")


class FakeStore:
    """In-memory RecordStore with PostgREST-like embedding."""

    def __init__(self, **tables):
        self.tables = {name: [dict(r) for r in rows] for name, rows in tables.items()}
        self.inserts = []
        self.updates = []
        self.selects = []
        self.deletes = []
        self.fail_select = set()
        self.fail_insert = set()
        self.fail_delete = set()
        self._ids = itertools.count(1000)

    def rows(self, collection):
        return self.tables.setdefault(collection, [])

    def _embed(self, collection, row, relation):
        m = _RELATION.match(relation)
        name = m.group(1) if m else relation
        related = self.rows(name)
        parent_fk = FOREIGN_KEYS.get(name)
        if parent_fk and parent_fk in row:
            match = next((r for r in related if r.get("id") == row[parent_fk]), None)
            return name, dict(match) if match else None
        child_fk = FOREIGN_KEYS[collection]
        return name, [dict(r) for r in related if r.get(child_fk) == row.get("id")]

    def select(self, collection, filters=(), relations=(), columns="*", order=None, desc=False, limit=None):
        self.selects.append((collection, tuple(filters)))
        if collection in self.fail_select:
            raise FetchError(f"Unable to load {collection}.", collection=collection)

        out = []
        for row in self.rows(collection):
            if all(_matches(row, f) for f in filters):
                r = dict(row)
                for rel in relations:
                    key, value = self._embed(collection, row, rel)
                    r[key] = value
                out.append(r)
        if order:
            present = [r for r in out if r.get(order) is not None]
            missing = [r for r in out if r.get(order) is None]
            out = sorted(present, key=lambda r: r[order], reverse=desc) + missing
        if limit is not None:
            out = out[:limit]
        return out

    def insert(self, collection, record):
        if collection in self.fail_insert:
            raise WriteError("Create failed: boom", collection=collection)
        row = dict(record)
        row.setdefault("id", f"{collection[:3]}-{next(self._ids)}")
        self.rows(collection).append(row)
        self.inserts.append((collection, dict(row)))
        return dict(row)

    def update(self, collection, id, patch):
        for row in self.rows(collection):
            if row.get("id") == id:
                row.update(patch)
                self.updates.append((collection, id, dict(patch)))
                return dict(row)
        raise WriteError("Update matched no rows.", collection=collection, id=id)

    def delete(self, collection, id):
        if collection in self.fail_delete:
            raise WriteError("Delete failed: boom", collection=collection)
        self.tables[collection] = [r for r in self.rows(collection) if r.get("id") != id]
        self.deletes.append((collection, id))


def _matches(row, f):
    v = row.get(f.column)
    if f.op == "eq":
        return v == f.value
    if f.op == "icontains":
        return v is not None and str(f.value).lower() in str(v).lower()
    if f.op == "not_null":
        return v is not None
    raise ValueError(f.op)


class FakeBucket:
    def __init__(self, owner, name):
        self.owner = owner
        self.name = name

    def upload(self, path, data, options=None):
        if self.owner.fail_upload:
            raise RuntimeError("storage unavailable")
        self.owner.uploaded.append((self.name, path, data, options))
        return {"Key": f"{self.name}/{path}"}

    def get_public_url(self, path):
        return f"https://proj.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths):
        if self.owner.fail_remove:
            raise RuntimeError("storage unavailable")
        self.owner.removed.append((self.name, list(paths)))
        return []


class FakeStorageClient:
    """Stands in for ``client.storage.from_(bucket)``."""

    def __init__(self):
        self.uploaded = []
        self.removed = []
        self.fail_upload = False
        self.fail_remove = False
        self.storage = SimpleNamespace(from_=lambda bucket: FakeBucket(self, bucket))


class FakeAuth:
    def __init__(self, users=None):
        # email -> (password, user_id)
        self.users = dict(users or {})
        self.signed_up = []
        self.signed_out = False

    def sign_in_with_password(self, creds):
        known = self.users.get(creds["email"])
        if not known or known[0] != creds["password"]:
            raise RuntimeError("Invalid login credentials")
        return SimpleNamespace(
            user=SimpleNamespace(id=known[1], email=creds["email"]),
            session=SimpleNamespace(access_token="access", refresh_token="refresh"),
        )

    def sign_up(self, payload):
        user_id = f"user-{len(self.signed_up) + 1}"
        self.signed_up.append(payload)
        self.users[payload["email"]] = (payload["password"], user_id)
        return SimpleNamespace(user=SimpleNamespace(id=user_id, email=payload["email"]), session=None)

    def sign_out(self):
        self.signed_out = True


class FakeAuthClient:
    def __init__(self, users=None):
        self.auth = FakeAuth(users)


# -----------------------------
# Fixtures
# -----------------------------
@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def storage_client():
    return FakeStorageClient()


def make_session(role=None, loading=False, with_identity=True):
    s = SessionContext()
    if with_identity:
        s.identity = Identity(user_id="u-1", email="sam@bashir.inc")
    if role is not None:
        s.profile = Profile(id="u-1", username="sam", full_name="Sam", role=role)
    s.loading = loading
    return s


@pytest.fixture
def owner_session():
    return make_session(Role.OWNER)


@pytest.fixture
def employee_session():
    return make_session(Role.EMPLOYEE)
