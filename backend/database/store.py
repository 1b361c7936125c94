# ------------------------------------------------------------------------------
# Tussle Tracker
# Module: Record store
# File: backend/database/store.py
# ------------------------------------------------------------------------------
"""
The generic record store the screens query through.

``RecordStore`` names the only operations the app depends on: select with
filters / embedded relations / ordering, insert, update by id, and delete
by id (used only to roll back a half-finished write).
``SupabaseStore`` implements it over a supabase-py client (PostgREST).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

import structlog
from supabase import Client

from backend.errors import FetchError, WriteError

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Filter:
    column: str
    op: str  # eq | icontains | not_null
    value: Any = None


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def icontains(column: str, value: str) -> Filter:
    return Filter(column, "icontains", value)


def not_null(column: str) -> Filter:
    return Filter(column, "not_null")


def like_escape(value: str) -> str:
    # substring match must treat LIKE wildcards literally
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class RecordStore(Protocol):
    def select(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        relations: Sequence[str] = (),
        columns: str = "*",
        order: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]: ...

    def insert(self, collection: str, record: Dict[str, Any]) -> Dict[str, Any]: ...

    def update(self, collection: str, id: Any, patch: Dict[str, Any]) -> Dict[str, Any]: ...

    def delete(self, collection: str, id: Any) -> None: ...


class SupabaseStore:
    def __init__(self, client: Client):
        self.client = client

    def select(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        relations: Sequence[str] = (),
        columns: str = "*",
        order: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        clause = ", ".join([columns, *relations])
        try:
            q = self.client.table(collection).select(clause)
            for f in filters:
                q = _apply_filter(q, f)
            if order:
                q = q.order(order, desc=desc)
            if limit is not None:
                q = q.limit(limit)
            resp = q.execute()
        except Exception as e:
            log.error("select_failed", collection=collection, error=f"{type(e).__name__}: {e}")
            raise FetchError(f"Unable to load {collection}. {type(e).__name__}: {e}", collection=collection) from e
        return resp.data or []

    def insert(self, collection: str, record: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self.client.table(collection).insert(record).execute()
        except Exception as e:
            log.error("insert_failed", collection=collection, error=f"{type(e).__name__}: {e}")
            raise WriteError(f"Create failed: {type(e).__name__}: {e}", collection=collection) from e
        data = resp.data or []
        if not data:
            raise WriteError("Insert returned no rows.", collection=collection)
        log.info("inserted", collection=collection, id=data[0].get("id"))
        return data[0]

    def update(self, collection: str, id: Any, patch: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self.client.table(collection).update(patch).eq("id", id).execute()
        except Exception as e:
            log.error("update_failed", collection=collection, id=id, error=f"{type(e).__name__}: {e}")
            raise WriteError(f"Update failed: {type(e).__name__}: {e}", collection=collection) from e
        data = resp.data or []
        if not data:
            raise WriteError("Update matched no rows.", collection=collection, id=id)
        log.info("updated", collection=collection, id=id, fields=sorted(patch))
        return data[0]

    def delete(self, collection: str, id: Any) -> None:
        try:
            self.client.table(collection).delete().eq("id", id).execute()
        except Exception as e:
            log.error("delete_failed", collection=collection, id=id, error=f"{type(e).__name__}: {e}")
            raise WriteError(f"Delete failed: {type(e).__name__}: {e}", collection=collection) from e
        log.info("deleted", collection=collection, id=id)


def _apply_filter(q, f: Filter):
    if f.op == "eq":
        return q.eq(f.column, f.value)
    if f.op == "icontains":
        return q.ilike(f.column, f"%{like_escape(str(f.value))}%")
    if f.op == "not_null":
        return q.not_.is_(f.column, "null")
    raise ValueError(f"Unsupported filter op: {f.op!r}")
