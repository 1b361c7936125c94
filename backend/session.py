# backend/session.py
"""
Explicit session context and stale-fetch protection.

``SessionContext`` replaces ambient "current user" globals: it is populated on
sign-in, resolved once the profile row loads, and cleared on sign-out. The
Streamlit shell keeps exactly one instance in ``st.session_state``; backend
code only ever receives it as an argument.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from backend.models import Profile, Role


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


@dataclass
class SessionContext:
    identity: Optional[Identity] = None
    profile: Optional[Profile] = None
    loading: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def role(self) -> Optional[Role]:
        return self.profile.role if self.profile else None

    @property
    def is_owner(self) -> bool:
        return self.role is Role.OWNER

    def begin(self, identity: Identity) -> None:
        # identity known, profile lookup in flight
        self.identity = identity
        self.profile = None
        self.loading = True

    def resolve(self, profile: Optional[Profile]) -> None:
        self.profile = profile
        self.loading = False

    def clear(self) -> None:
        self.identity = None
        self.profile = None
        self.loading = False


@dataclass(frozen=True)
class FetchTicket:
    screen: str
    scope_id: Optional[str]
    serial: int


@dataclass
class ScopeGuard:
    """
    Tags each fetch with the scope it was issued for.

    ``issue`` records the current scope of a screen and returns a ticket;
    ``accept`` is true only when the ticket is still the latest one for that
    screen and scope. Results carrying a stale ticket must be dropped.
    """

    _current: Dict[str, FetchTicket] = field(default_factory=dict)
    _serials: Any = field(default_factory=lambda: itertools.count(1))

    def issue(self, screen: str, scope_id: Optional[str] = None) -> FetchTicket:
        ticket = FetchTicket(screen=screen, scope_id=scope_id, serial=next(self._serials))
        self._current[screen] = ticket
        return ticket

    def accept(self, ticket: FetchTicket) -> bool:
        return self._current.get(ticket.screen) == ticket
