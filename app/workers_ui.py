# app/workers_ui.py
import streamlit as st

from app.error_ui import show_error_ui
from app.state import fetch_scoped, get_store
from backend.errors import TussleError
from backend.labor import WorkerForm, create_worker, load_roster
from backend.logic.aggregation import worker_summaries
from backend.logic.money import fmt_money


def render_workers() -> None:
    st.title("👷 Workers")
    st.caption("Piecework workers. Earnings count completed assignments only.")

    loaded = fetch_scoped("workers", None, lambda: load_roster(get_store()))
    if loaded is None:
        return
    workers, assignments = loaded

    with st.expander("➕ Add worker"):
        with st.form("create_worker_form"):
            name = st.text_input("Name")
            specialty = st.text_input("Specialty")
            phone = st.text_input("Phone")
            submitted = st.form_submit_button("Add worker", type="primary")
        if submitted:
            try:
                create_worker(get_store(), WorkerForm(name=name, specialty=specialty, phone=phone))
            except TussleError as e:
                show_error_ui(e, context="create_worker")
            else:
                st.rerun()

    if not workers:
        st.info("No workers yet.")
        return

    for s in worker_summaries(workers, assignments):
        with st.container(border=True):
            col_a, col_b, col_c, col_d = st.columns([4, 2, 2, 2])
            details = " · ".join(x for x in (s.worker.specialty, s.worker.phone) if x)
            col_a.markdown(f"**{s.worker.name}**" + (f"  \n{details}" if details else ""))
            col_b.metric("Earned", fmt_money(s.total_earnings))
            col_c.metric("Active", s.active_jobs)
            col_d.metric("Total Jobs", s.total_jobs)
