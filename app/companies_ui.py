# app/companies_ui.py
import streamlit as st

from app.state import fetch_scoped, get_store, navigate
from backend.logic.aggregation import company_summaries, filter_companies
from backend.logic.money import fmt_money
from backend.orders import load_companies


def render_companies() -> None:
    st.title("🏢 Companies")
    st.caption("Every client company with its order count and total order value.")

    loaded = fetch_scoped("companies", None, lambda: load_companies(get_store()))
    if loaded is None:
        return
    companies, tussles = loaded

    term = st.text_input("Search companies", placeholder="Type to filter by name", key="companies_search")
    summaries = filter_companies(company_summaries(companies, tussles), term)

    if not summaries:
        st.info("No companies match." if term else "No companies yet. Use ➕ Add Order to create one.")
        return

    for s in summaries:
        with st.container(border=True):
            col_a, col_b, col_c, col_d = st.columns([4, 2, 2, 1])
            if s.company.logo_url:
                col_a.image(s.company.logo_url, width=40)
            col_a.markdown(f"**{s.company.name}**")
            col_b.metric("Orders", s.tussle_count)
            col_c.metric("Revenue", fmt_money(s.revenue))
            if col_d.button("Open", key=f"company_open_{s.company.id}"):
                navigate(f"/companies/{s.company.id}")
