# backend/database/client.py
from typing import Optional

from supabase import Client, create_client

from backend.config import Settings, require_settings


def get_supabase(settings: Optional[Settings] = None) -> Client:
    s = settings or require_settings()
    return create_client(s.supabase_url, s.supabase_anon_key)


def supabase_for_user(
    access_token: Optional[str],
    refresh_token: Optional[str],
    settings: Optional[Settings] = None,
) -> Client:
    """
    Return a Supabase client authenticated as the signed-in user so PostgREST
    calls respect RLS with the user's JWT.
    """
    sb = get_supabase(settings)
    if access_token and refresh_token:
        sb.auth.set_session(access_token, refresh_token)
    return sb
