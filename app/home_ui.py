# app/home_ui.py
import streamlit as st

from app.state import fetch_scoped, get_session, get_store, navigate
from backend.logic.aggregation import home_stats
from backend.logic.calendar import upcoming_deadlines
from backend.logic.money import fmt_money
from backend.orders import load_home

RECENT_LIMIT = 5


def render_home() -> None:
    session = get_session()
    st.title("🏠 Home")
    if session.profile:
        st.caption(f"Welcome back, {session.profile.display_name}.")

    tussles = fetch_scoped("home", None, lambda: load_home(get_store()))
    if tussles is None:
        return

    stats = home_stats(tussles)
    c1, c2, c3 = st.columns(3)
    c1.metric("Pending Orders", stats["pending"])
    c2.metric("Completed", stats["completed"])
    c3.metric("Order Value", fmt_money(stats["revenue"]))

    st.markdown("---")
    left, right = st.columns(2)

    with left:
        st.markdown("#### Upcoming Deadlines")
        due = upcoming_deadlines(tussles)
        if not due:
            st.info("No upcoming deadlines.")
        for t in due:
            _order_row(t, t.due_date.strftime("%b %d, %Y"), "due")

    with right:
        st.markdown("#### Recent Orders")
        recent = sorted((t for t in tussles if t.created_at), key=lambda t: t.created_at, reverse=True)[:RECENT_LIMIT]
        if not recent:
            st.info("No orders yet.")
        for t in recent:
            _order_row(t, t.status.value.title(), "recent")


def _order_row(t, detail: str, prefix: str) -> None:
    col_a, col_b, col_c = st.columns([4, 2, 1])
    company = t.company.name if t.company else "Unknown company"
    col_a.markdown(f"**{t.name}**  \n{company}")
    col_b.write(detail)
    if col_c.button("Open", key=f"home_{prefix}_{t.id}"):
        navigate(f"/tussles/{t.id}")
