# app/dashboard.py
from datetime import date

import matplotlib.pyplot as plt
import streamlit as st

from app.state import fetch_scoped, get_store, navigate
from backend.logic.aggregation import business_financials, profit_trend, status_tally
from backend.logic.money import fmt_money
from backend.orders import load_dashboard
from backend.visualizer import status_pie, trend_frame


def render_dashboard() -> None:
    """Owner overview: business-wide money, profit trend and order status."""
    st.title("📊 Dashboard")

    loaded = fetch_scoped("dashboard", None, lambda: load_dashboard(get_store()))
    if loaded is None:
        return
    costed, employees = loaded

    biz = business_financials(costed.tussles, costed.allocations, costed.assignments, employees)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total Revenue", fmt_money(biz.revenue))
    c2.metric("Material Costs", fmt_money(biz.material_cost))
    c3.metric("Labor & Salaries", fmt_money(biz.labor_and_salaries))
    c4.metric("Net Profit", fmt_money(biz.profit))

    st.markdown("---")
    left, right = st.columns([2, 1])

    with left:
        head, toggle = st.columns([3, 2])
        head.markdown("#### Profit Trend")
        granularity = toggle.radio(
            "Period",
            options=["weekly", "monthly"],
            format_func=str.title,
            horizontal=True,
            label_visibility="collapsed",
            key="dashboard_granularity",
        )
        points = profit_trend(costed.tussles, costed.allocations, costed.assignments, granularity, date.today())
        st.area_chart(trend_frame(points), use_container_width=True)

    with right:
        st.markdown("#### Order Status")
        fig = status_pie(status_tally(costed.tussles))
        st.pyplot(fig)
        plt.close(fig)

    st.markdown("---")
    st.markdown("#### Quick Actions")
    a1, a2, a3 = st.columns(3)
    if a1.button("🏢 Companies", use_container_width=True):
        navigate("/companies")
    if a2.button("👷 Workers", use_container_width=True):
        navigate("/workers")
    if a3.button("📅 Calendar", use_container_width=True):
        navigate("/calendar")
