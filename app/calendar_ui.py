# app/calendar_ui.py
from datetime import date

import streamlit as st

from app.error_ui import show_error_ui
from app.state import fetch_scoped, get_store, navigate
from backend.calendar_events import create_event, load_calendar
from backend.errors import TussleError
from backend.logic.calendar import day_agenda, days_with_activity, month_grid, shift_month

WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
EVENT_TYPES = ["meeting", "delivery", "reminder", "other"]


def _month_state() -> tuple:
    today = date.today()
    st.session_state.setdefault("cal_month", (today.year, today.month))
    st.session_state.setdefault("cal_day", today)
    return st.session_state["cal_month"]


def render_calendar() -> None:
    st.title("📅 Calendar")

    loaded = fetch_scoped("calendar", None, lambda: load_calendar(get_store()))
    if loaded is None:
        return
    events, deadlines = loaded

    year, month = _month_state()
    prev_col, title_col, next_col = st.columns([1, 4, 1])
    if prev_col.button("‹ Prev", key="cal_prev"):
        st.session_state["cal_month"] = shift_month(year, month, -1)
        st.rerun()
    title_col.markdown(f"### {date(year, month, 1):%B %Y}")
    if next_col.button("Next ›", key="cal_next"):
        st.session_state["cal_month"] = shift_month(year, month, 1)
        st.rerun()

    busy = days_with_activity(events, deadlines)
    header = st.columns(7)
    for col, name in zip(header, WEEKDAYS):
        col.markdown(f"**{name}**")
    for week in month_grid(year, month):
        cols = st.columns(7)
        for col, day in zip(cols, week):
            if day is None:
                col.write("")
                continue
            label = f"{day.day}{' •' if day in busy else ''}"
            selected = st.session_state["cal_day"] == day
            if col.button(label, key=f"cal_{day.isoformat()}", type="primary" if selected else "secondary"):
                st.session_state["cal_day"] = day
                st.rerun()

    st.markdown("---")
    selected_day = st.session_state["cal_day"]
    agenda = day_agenda(selected_day, events, deadlines)
    st.markdown(f"#### {selected_day:%A, %B} {selected_day.day}")
    if agenda.is_empty:
        st.caption("Nothing scheduled.")
    for e in agenda.events:
        st.markdown(f"📌 **{e.title}**" + (f" · {e.type}" if e.type else ""))
    for t in agenda.deadlines:
        company = t.company.name if t.company else ""
        col_a, col_b = st.columns([5, 1])
        col_a.markdown(f"⏰ **{t.name}** due · {company} · {t.status.value}")
        if col_b.button("Open", key=f"cal_open_{t.id}"):
            navigate(f"/tussles/{t.id}")

    with st.expander("➕ Add event"):
        with st.form("create_event_form"):
            title = st.text_input("Title")
            day = st.date_input("Date", value=selected_day)
            kind = st.selectbox("Type", options=EVENT_TYPES)
            submitted = st.form_submit_button("Add event", type="primary")
        if submitted:
            try:
                create_event(get_store(), day, title, kind)
            except TussleError as e:
                show_error_ui(e, context="create_event")
                return
            st.rerun()
