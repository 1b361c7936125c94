# backend/logic/access.py
"""
Route admission by identity and role.

A navigation is decided once into a tagged value: ``Allow``, ``RedirectTo`` or
``Wait``. Unauthorized visits are never shown an "access denied" page; they
are moved to where the user belongs.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from backend.errors import RedirectLoopError
from backend.models import Role
from backend.session import SessionContext

LOGIN_PATH = "/login"
ROOT_PATH = "/"
MAX_REDIRECTS = 5


class Requirement(str, Enum):
    NONE = "none"
    AUTH = "requires-auth"
    ROLE = "requires-role"


@dataclass(frozen=True)
class Route:
    name: str
    pattern: str
    requirement: Requirement
    role: Optional[Role] = None

    def match(self, path: str) -> Optional[Dict[str, str]]:
        m = _compile(self.pattern).fullmatch(path)
        return m.groupdict() if m else None


_PATTERN_CACHE: Dict[str, "re.Pattern[str]"] = {}


def _compile(pattern: str) -> "re.Pattern[str]":
    rx = _PATTERN_CACHE.get(pattern)
    if rx is None:
        rx = re.compile(re.sub(r"<(\w+)>", r"(?P<\1>[^/]+)", pattern))
        _PATTERN_CACHE[pattern] = rx
    return rx


ROUTES: Tuple[Route, ...] = (
    Route("login", "/login", Requirement.NONE),
    Route("home", "/home", Requirement.ROLE, Role.EMPLOYEE),
    Route("dashboard", "/dashboard", Requirement.ROLE, Role.OWNER),
    Route("companies", "/companies", Requirement.AUTH),
    Route("company_detail", "/companies/<company_id>", Requirement.AUTH),
    Route("tussle_detail", "/tussles/<tussle_id>", Requirement.AUTH),
    Route("calendar", "/calendar", Requirement.AUTH),
    Route("workers", "/workers", Requirement.AUTH),
    Route("profile", "/profile", Requirement.AUTH),
)


@dataclass(frozen=True)
class Allow:
    route: str
    params: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RedirectTo:
    path: str


@dataclass(frozen=True)
class Wait:
    pass


Decision = Union[Allow, RedirectTo, Wait]


def normalize_path(path: Optional[str]) -> str:
    p = (path or ROOT_PATH).split("?", 1)[0].strip()
    if not p.startswith("/"):
        p = "/" + p
    if len(p) > 1:
        p = p.rstrip("/") or ROOT_PATH
    return p


def match_route(path: str) -> Optional[Tuple[Route, Dict[str, str]]]:
    for r in ROUTES:
        params = r.match(path)
        if params is not None:
            return r, params
    return None


def home_for(role: Optional[Role]) -> str:
    return "/dashboard" if role is Role.OWNER else "/home"


def decide(session: SessionContext, path: Optional[str]) -> Decision:
    if session.loading:
        return Wait()

    p = normalize_path(path)
    profile = session.profile if session.is_authenticated else None

    if p == ROOT_PATH:
        return RedirectTo(home_for(profile.role)) if profile else RedirectTo(LOGIN_PATH)

    matched = match_route(p)
    if matched is None:
        return RedirectTo(ROOT_PATH)
    route, params = matched

    if route.requirement is Requirement.NONE:
        if route.name == "login" and profile is not None:
            return RedirectTo(home_for(profile.role))
        return Allow(route.name, params)

    # An identity with no profile row has no role and so no role home.
    # /login is the one page it can land on without a redirect loop, and
    # signing in again there replaces the identity and reloads the profile.
    if profile is None:
        return RedirectTo(LOGIN_PATH)

    if route.requirement is Requirement.ROLE and profile.role is not route.role:
        return RedirectTo(home_for(profile.role))

    return Allow(route.name, params)


def resolve(session: SessionContext, path: Optional[str]) -> Tuple[str, Decision]:
    """
    Follow redirects until a terminal decision. Returns (final_path, decision).
    """
    current = normalize_path(path)
    seen: List[str] = [current]
    for _ in range(MAX_REDIRECTS + 1):
        d = decide(session, current)
        if not isinstance(d, RedirectTo):
            return current, d
        current = normalize_path(d.path)
        if current in seen:
            raise RedirectLoopError(f"Redirect loop: {' -> '.join(seen + [current])}", chain=seen + [current])
        seen.append(current)
    raise RedirectLoopError(f"Too many redirects: {' -> '.join(seen)}", chain=seen)


# -----------------------------
# Navigation
# -----------------------------
@dataclass(frozen=True)
class NavItem:
    path: str
    label: str
    icon: str
    role: Optional[Role] = None


NAV_ITEMS: Tuple[NavItem, ...] = (
    NavItem("/home", "Home", "🏠", Role.EMPLOYEE),
    NavItem("/dashboard", "Dashboard", "📊", Role.OWNER),
    NavItem("/companies", "Companies", "🏢"),
    NavItem("/calendar", "Calendar", "📅"),
    NavItem("/workers", "Workers", "👷"),
    NavItem("/profile", "Profile", "👤"),
)


def nav_items(role: Optional[Role]) -> List[NavItem]:
    return [n for n in NAV_ITEMS if n.role is None or n.role is role]
