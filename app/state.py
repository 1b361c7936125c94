# app/state.py
"""
Per-browser-session state. Everything the screens share lives in
``st.session_state`` under the keys below and is only reached through these
helpers.
"""
from __future__ import annotations

from typing import Callable, Optional, TypeVar

import streamlit as st
import structlog

from app.error_ui import show_fetch_error
from backend.config import Settings, load_settings
from backend.database.client import get_supabase, supabase_for_user
from backend.database.store import SupabaseStore
from backend.errors import FetchError
from backend.logic.access import normalize_path
from backend.session import ScopeGuard, SessionContext
from backend.storage import ImageStorage

log = structlog.get_logger(__name__)

T = TypeVar("T")

SESSION_KEY = "tt_session"
GUARD_KEY = "tt_scope_guard"
CLIENT_KEY = "tt_client"
PATH_PARAM = "path"


def get_settings() -> Settings:
    if "tt_settings" not in st.session_state:
        st.session_state["tt_settings"] = load_settings()
    return st.session_state["tt_settings"]


def get_session() -> SessionContext:
    if SESSION_KEY not in st.session_state:
        st.session_state[SESSION_KEY] = SessionContext()
    return st.session_state[SESSION_KEY]


def get_guard() -> ScopeGuard:
    if GUARD_KEY not in st.session_state:
        st.session_state[GUARD_KEY] = ScopeGuard()
    return st.session_state[GUARD_KEY]


def get_client():
    """Supabase client for this browser session, authenticated when signed in."""
    client = st.session_state.get(CLIENT_KEY)
    if client is not None:
        return client
    session = get_session()
    ident = session.identity
    if ident is not None:
        client = supabase_for_user(ident.access_token, ident.refresh_token, get_settings())
    else:
        client = get_supabase(get_settings())
    st.session_state[CLIENT_KEY] = client
    return client


def set_client(client) -> None:
    st.session_state[CLIENT_KEY] = client


def drop_client() -> None:
    st.session_state.pop(CLIENT_KEY, None)


def get_store() -> SupabaseStore:
    return SupabaseStore(get_client())


def get_storage() -> ImageStorage:
    s = get_settings()
    return ImageStorage(get_client(), image_bucket=s.image_bucket, receipt_bucket=s.receipt_bucket)


# -----------------------------
# Navigation
# -----------------------------
def current_path() -> str:
    return normalize_path(st.query_params.get(PATH_PARAM, "/"))


def query_flag(name: str) -> bool:
    return st.query_params.get(name) in ("1", "true")


def set_path(path: str) -> None:
    """Point the URL at ``path`` (and any ``?a=b`` it carries) without rerunning."""
    base, _, query = path.partition("?")
    st.query_params.clear()
    st.query_params[PATH_PARAM] = normalize_path(base)
    for pair in filter(None, query.split("&")):
        k, _, v = pair.partition("=")
        st.query_params[k] = v


def navigate(path: str) -> None:
    set_path(path)
    st.rerun()


# -----------------------------
# Scoped fetches
# -----------------------------
def fetch_scoped(screen: str, scope_id: Optional[str], loader: Callable[[], T]) -> Optional[T]:
    """
    Run ``loader`` tagged with the scope it was issued for. A failed fetch is
    logged and yields None (screen renders empty); a result whose scope is no
    longer current is discarded.
    """
    guard = get_guard()
    ticket = guard.issue(screen, scope_id)
    try:
        result = loader()
    except FetchError as e:
        log.error("fetch_failed", screen=screen, scope_id=scope_id, collection=e.collection, error=e.message)
        show_fetch_error(e)
        return None
    if not guard.accept(ticket):
        log.info("stale_fetch_discarded", screen=screen, scope_id=scope_id)
        return None
    return result
