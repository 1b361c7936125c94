# app/auth_supabase.py
from __future__ import annotations

import streamlit as st
import structlog

from app.state import CLIENT_KEY, drop_client, get_session, get_settings, navigate, set_client
from backend.auth import sign_in, sign_out
from backend.database.client import get_supabase
from backend.database.store import SupabaseStore
from backend.errors import AuthenticationError, FetchError
from backend.logging import bind_user
from backend.logic.access import home_for

__all__ = [
    "render_login",
    "supabase_logout",
]

log = structlog.get_logger(__name__)


def render_login() -> None:
    """Username / password sign-in. Failures stay on this form with one generic message."""
    st.title("Tussle Tracker")
    st.caption("Sign in with your username.")

    with st.form("login_form"):
        username = st.text_input("Username", key="auth_login_username")
        password = st.text_input("Password", type="password", key="auth_login_password")
        submitted = st.form_submit_button("Sign In", type="primary")

    if not submitted:
        return

    settings = get_settings()
    session = get_session()
    client = get_supabase(settings)
    try:
        sign_in(client, SupabaseStore(client), session, username, password, domain=settings.email_domain)
    except AuthenticationError as e:
        st.error(e.message)
        return
    except FetchError as e:
        log.error("profile_load_failed", error=e.message)
        st.error("Signed in, but your profile could not be loaded. Try again.")
        return

    set_client(client)
    bind_user(session.identity.user_id, session.role.value if session.role else None)
    navigate(home_for(session.role))


def supabase_logout() -> None:
    session = get_session()
    client = st.session_state.get(CLIENT_KEY)
    sign_out(client, session)
    drop_client()
    bind_user(None)
    navigate("/login")
