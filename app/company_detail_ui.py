# app/company_detail_ui.py
from __future__ import annotations

import streamlit as st

from app.error_ui import show_error_ui
from app.state import fetch_scoped, get_storage, get_store, navigate, query_flag
from backend.errors import TussleError
from backend.logic.aggregation import company_financials, financials_by_tussle
from backend.logic.money import fmt_money
from backend.orders import TussleForm, create_tussle, load_company
from backend.storage import Upload

STATUS_BADGE = {"pending": "🟡 Pending", "completed": "🟢 Completed"}


def _render_create_form(company_id: str) -> None:
    with st.expander("➕ New order", expanded=query_flag("open_tussle")):
        with st.form(f"create_tussle_{company_id}"):
            name = st.text_input("Order name", key=f"tussle_name_{company_id}")
            sell_price = st.text_input("Sell price", placeholder="0.00", key=f"tussle_price_{company_id}")
            due_date = st.date_input("Due date", value=None, key=f"tussle_due_{company_id}")
            notes = st.text_area("Notes", key=f"tussle_notes_{company_id}")
            image = st.file_uploader(
                "Image (optional)", type=["png", "jpg", "jpeg", "gif", "webp"], key=f"tussle_image_{company_id}"
            )
            submitted = st.form_submit_button("Create order", type="primary")

    if not submitted:
        return

    upload = Upload(image.getvalue(), image.name, image.type) if image is not None else None
    try:
        tussle = create_tussle(
            get_store(),
            company_id,
            TussleForm(name=name, sell_price=sell_price, due_date=due_date, notes=notes),
            image=upload,
            storage=get_storage() if upload is not None else None,
        )
    except TussleError as e:
        show_error_ui(e, context="create_tussle")
        return

    st.toast(f"Created {tussle.name}.")
    navigate(f"/companies/{company_id}")


def render_company_detail(company_id: str) -> None:
    loaded = fetch_scoped("company_detail", company_id, lambda: load_company(get_store(), company_id))
    if loaded is None:
        if st.button("← Back to companies"):
            navigate("/companies")
        return
    company, costed = loaded

    if st.button("← Companies"):
        navigate("/companies")
    title_col, logo_col = st.columns([5, 1])
    title_col.title(company.name)
    if company.logo_url:
        logo_col.image(company.logo_url, width=64)

    fin = company_financials(company.id, costed.tussles, costed.allocations, costed.assignments)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Revenue", fmt_money(fin.revenue))
    c2.metric("Material Costs", fmt_money(fin.material_cost))
    c3.metric("Labor Costs", fmt_money(fin.labor_cost))
    c4.metric("Profit", fmt_money(fin.profit), f"{fin.profit_margin}%")

    _render_create_form(company.id)

    st.markdown("#### Orders")
    if not costed.tussles:
        st.info("No orders for this company yet.")
        return

    per_tussle = financials_by_tussle(costed.tussles, costed.allocations, costed.assignments)
    for t in costed.tussles:
        f = per_tussle[t.id]
        with st.container(border=True):
            col_a, col_b, col_c, col_d = st.columns([4, 2, 2, 1])
            col_a.markdown(f"**{t.name}**  \n{STATUS_BADGE[t.status.value]}")
            col_b.write(f"Price {fmt_money(t.sell_price)}")
            col_c.write(f"Profit {fmt_money(f.profit)}")
            if col_d.button("Open", key=f"tussle_open_{t.id}"):
                navigate(f"/tussles/{t.id}")
