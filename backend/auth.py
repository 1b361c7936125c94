# backend/auth.py
"""
Sign-in, sign-out and owner-only employee creation on Supabase Auth.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import structlog
from supabase import Client

from backend.config import DEFAULT_EMAIL_DOMAIN
from backend.database.store import RecordStore, eq
from backend.errors import AuthenticationError, PermissionDeniedError, RecordError, WriteError
from backend.logic.validation import optional_text, parse_money, require_text
from backend.models import Profile, Role
from backend.session import Identity, SessionContext

log = structlog.get_logger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


def username_to_email(username: str, domain: str = DEFAULT_EMAIL_DOMAIN) -> str:
    u = (username or "").strip()
    if "@" in u:
        return u
    return f"{u}@{domain}"


def _attr(obj: Any, name: str) -> Any:
    # gotrue responses are objects; some client versions hand back dicts
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def load_profile(store: RecordStore, user_id: str) -> Optional[Profile]:
    rows = store.select("profiles", filters=[eq("id", user_id)], limit=1)
    if not rows:
        return None
    try:
        return Profile.from_row(rows[0])
    except RecordError:
        log.warning("profile_unreadable", user_id=user_id)
        return None


def sign_in(
    client: Client,
    store: RecordStore,
    session: SessionContext,
    username: str,
    password: str,
    domain: str = DEFAULT_EMAIL_DOMAIN,
) -> SessionContext:
    if not (username or "").strip() or not password:
        raise AuthenticationError(INVALID_CREDENTIALS)

    email = username_to_email(username, domain)
    try:
        resp = client.auth.sign_in_with_password({"email": email, "password": password})
    except Exception as e:
        log.info("sign_in_rejected", email=email, error=type(e).__name__)
        raise AuthenticationError(INVALID_CREDENTIALS) from e

    user = _attr(resp, "user")
    auth_session = _attr(resp, "session")
    if not user or not auth_session:
        raise AuthenticationError(INVALID_CREDENTIALS)

    session.begin(
        Identity(
            user_id=str(_attr(user, "id")),
            email=_attr(user, "email"),
            access_token=_attr(auth_session, "access_token"),
            refresh_token=_attr(auth_session, "refresh_token"),
        )
    )
    try:
        session.resolve(load_profile(store, session.identity.user_id))
    except Exception:
        session.resolve(None)
        raise
    log.info("signed_in", user_id=session.identity.user_id, role=session.role.value if session.role else None)
    return session


def sign_out(client: Optional[Client], session: SessionContext) -> None:
    if client is not None:
        try:
            client.auth.sign_out()
        except Exception as e:
            # the local session is cleared regardless
            log.warning("sign_out_failed", error=f"{type(e).__name__}: {e}")
    session.clear()


@dataclass(frozen=True)
class EmployeeForm:
    full_name: str
    username: str
    password: str
    salary: str
    id_card: Optional[str] = None


def create_employee(
    auth_client: Client,
    store: RecordStore,
    session: SessionContext,
    form: EmployeeForm,
    domain: str = DEFAULT_EMAIL_DOMAIN,
) -> Profile:
    """
    Owner-only. Signs the new user up, then fills in their profile row.
    ``auth_client`` must be a separate anonymous client: signing up on the
    owner's client would replace the owner's session.
    """
    if not session.is_owner:
        raise PermissionDeniedError("Only owners can create employees.")

    full_name = require_text(form.full_name, "full_name", "Full name")
    username = require_text(form.username, "username", "Username")
    password = require_text(form.password, "password", "Password")
    salary = parse_money(form.salary, "salary", "Salary")

    try:
        resp = auth_client.auth.sign_up(
            {
                "email": username_to_email(username, domain),
                "password": password,
                "options": {"data": {"full_name": full_name, "username": username}},
            }
        )
    except Exception as e:
        log.error("employee_signup_failed", username=username, error=f"{type(e).__name__}: {e}")
        raise WriteError(f"Failed to create employee: {e}", collection="profiles") from e

    user = _attr(resp, "user")
    if not user or not _attr(user, "id"):
        raise WriteError("Failed to create employee: no user returned.", collection="profiles")

    row = store.update(
        "profiles",
        str(_attr(user, "id")),
        {
            "full_name": full_name,
            "username": username,
            "role": Role.EMPLOYEE.value,
            "salary": int(salary),
            "id_card": optional_text(form.id_card),
        },
    )
    return Profile.from_row(row)
