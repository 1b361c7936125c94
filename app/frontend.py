# app/frontend.py
from __future__ import annotations

from typing import Callable, Dict

import streamlit as st
import structlog

from app.auth_supabase import render_login
from app.calendar_ui import render_calendar
from app.companies_ui import render_companies
from app.company_detail_ui import render_company_detail
from app.dashboard import render_dashboard
from app.home_ui import render_home
from app.order_intake_ui import render_order_intake
from app.profile_ui import render_profile
from app.state import current_path, get_session, get_settings, navigate, set_path
from app.tussle_detail_ui import render_tussle_detail
from app.workers_ui import render_workers
from backend.errors import RedirectLoopError
from backend.logging import setup_logging
from backend.logic.access import Allow, Wait, nav_items, resolve

__all__ = ["main"]

log = structlog.get_logger(__name__)

# route name -> screen; path parameters are passed as keyword arguments
SCREENS: Dict[str, Callable[..., None]] = {
    "login": render_login,
    "home": render_home,
    "dashboard": render_dashboard,
    "companies": render_companies,
    "company_detail": render_company_detail,
    "tussle_detail": render_tussle_detail,
    "calendar": render_calendar,
    "workers": render_workers,
    "profile": render_profile,
}


def _render_sidebar(active: str) -> None:
    session = get_session()
    with st.sidebar:
        st.markdown("### Tussle Tracker")
        if session.profile:
            st.caption(f"{session.profile.display_name} · {session.profile.role.value}")

        for item in nav_items(session.role):
            selected = active == item.path or active.startswith(item.path + "/")
            if st.button(
                f"{item.icon} {item.label}",
                key=f"nav_{item.path}",
                use_container_width=True,
                type="primary" if selected else "secondary",
            ):
                navigate(item.path)

        st.markdown("---")
        render_order_intake()


def main() -> None:
    st.set_page_config(page_title="Tussle Tracker", page_icon="🧵", layout="wide")
    setup_logging(get_settings().log_level)

    session = get_session()
    requested = current_path()
    try:
        final_path, decision = resolve(session, requested)
    except RedirectLoopError as e:
        log.error("redirect_loop", **e.to_dict())
        st.error("Navigation failed. Please sign in again.")
        st.stop()

    if final_path != requested:
        log.info("redirected", requested=requested, to=final_path)
        set_path(final_path)

    if isinstance(decision, Wait):
        with st.spinner("Loading your profile..."):
            st.stop()

    if not isinstance(decision, Allow):
        st.stop()

    if decision.route != "login":
        _render_sidebar(final_path)

    SCREENS[decision.route](**decision.params)
