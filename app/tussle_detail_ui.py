# app/tussle_detail_ui.py
from __future__ import annotations

from typing import List

import streamlit as st

from app.error_ui import show_error_ui
from app.state import fetch_scoped, get_storage, get_store, navigate
from backend.errors import TussleError
from backend.expenses import add_receipt, allocate_existing, load_allocations, load_receipts
from backend.labor import AssignmentForm, assign_worker, load_assignments, load_workers
from backend.logic.aggregation import remaining_by_receipt, tussle_financials
from backend.logic.money import ZERO, fmt_money
from backend.models import ExpenseAllocation, Status, Tussle, WorkAssignment
from backend.orders import load_tussle, toggle_status
from backend.storage import Upload


def _load(tussle_id: str):
    store = get_store()
    return (
        load_tussle(store, tussle_id),
        load_allocations(store, tussle_id),
        load_assignments(store, tussle_id),
    )


def _overview_tab(tussle: Tussle, allocations: List[ExpenseAllocation], assignments: List[WorkAssignment]) -> None:
    fin = tussle_financials(tussle, allocations, assignments)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Sell Price", fmt_money(fin.revenue))
    c2.metric("Materials", fmt_money(fin.material_cost))
    c3.metric("Labor", fmt_money(fin.labor_cost))
    c4.metric("Profit", fmt_money(fin.profit), f"{fin.profit_margin}%")

    left, right = st.columns([1, 2])
    with left:
        if tussle.image_url:
            st.image(tussle.image_url, use_container_width=True)
        else:
            st.caption("No image.")
    with right:
        st.markdown(f"**Due:** {tussle.due_date.strftime('%b %d, %Y') if tussle.due_date else '—'}")
        st.markdown(f"**Status:** {tussle.status.value.title()}")
        if tussle.notes:
            st.markdown("**Notes**")
            st.write(tussle.notes)

        label = "Mark completed" if tussle.status is Status.PENDING else "Mark pending"
        if st.button(label, type="primary", key=f"toggle_{tussle.id}"):
            try:
                toggle_status(get_store(), tussle)
            except TussleError as e:
                show_error_ui(e, context="toggle_status")
                return
            st.rerun()


def _existing_receipt_form(tussle: Tussle) -> None:
    loaded = fetch_scoped("receipts", None, lambda: load_receipts(get_store()))
    if loaded is None:
        return
    receipts, all_allocations = loaded
    remaining = remaining_by_receipt(receipts, all_allocations)
    usable = [r for r in receipts if remaining[r.id] > ZERO]
    if not usable:
        st.info("No receipts with a remaining balance. Upload a new receipt instead.")
        return

    def _label(r) -> str:
        when = r.uploaded_at.strftime("%b %d, %Y") if r.uploaded_at else "undated"
        return f"{when} · total {fmt_money(r.total_amount)} · left {fmt_money(remaining[r.id])}"

    with st.form(f"allocate_existing_{tussle.id}"):
        receipt = st.selectbox("Receipt", options=usable, format_func=_label)
        amount = st.text_input("Amount to allocate", placeholder="0.00")
        submitted = st.form_submit_button("Allocate", type="primary")

    if submitted:
        try:
            allocate_existing(get_store(), tussle.id, receipt, amount)
        except TussleError as e:
            show_error_ui(e, context="allocate_existing")
            return
        st.rerun()


def _new_receipt_form(tussle: Tussle) -> None:
    with st.form(f"new_receipt_{tussle.id}"):
        image = st.file_uploader("Receipt image", type=["png", "jpg", "jpeg", "gif", "webp"])
        total = st.text_input("Receipt total", placeholder="0.00")
        submitted = st.form_submit_button("Upload and allocate", type="primary")

    if submitted:
        upload = Upload(image.getvalue(), image.name, image.type) if image is not None else None
        try:
            add_receipt(get_store(), get_storage(), tussle.id, upload, total)
        except TussleError as e:
            show_error_ui(e, context="add_receipt")
            return
        st.rerun()


def _materials_tab(tussle: Tussle, allocations: List[ExpenseAllocation]) -> None:
    if allocations:
        for a in allocations:
            col_a, col_b = st.columns([1, 3])
            if a.receipt and a.receipt.image_url:
                col_a.image(a.receipt.image_url, width=80)
            col_b.markdown(
                f"**{fmt_money(a.allocated_amount)}**"
                + (f" of receipt total {fmt_money(a.receipt.total_amount)}" if a.receipt else "")
            )
    else:
        st.info("No material costs recorded.")

    st.markdown("#### Add expense")
    source = st.radio(
        "Source",
        options=["existing", "new"],
        format_func=lambda s: "Existing receipt" if s == "existing" else "Upload new receipt",
        horizontal=True,
        key=f"expense_source_{tussle.id}",
    )
    if source == "existing":
        _existing_receipt_form(tussle)
    else:
        _new_receipt_form(tussle)


def _labor_tab(tussle: Tussle, assignments: List[WorkAssignment]) -> None:
    if assignments:
        for w in assignments:
            name = w.worker.name if w.worker else "Unknown worker"
            st.markdown(
                f"**{name}** · {w.quantity} × {fmt_money(w.rate)} = **{fmt_money(w.total_pay)}** · {w.status.value}"
            )
    else:
        st.info("No workers assigned.")

    st.markdown("#### Assign worker")
    workers = fetch_scoped("workers_picklist", None, lambda: load_workers(get_store()))
    if not workers:
        st.caption("Add workers on the Workers page first.")
        return

    with st.form(f"assign_worker_{tussle.id}"):
        worker = st.selectbox("Worker", options=workers, format_func=lambda w: w.name)
        quantity = st.text_input("Quantity (pieces)", placeholder="0")
        rate = st.text_input("Rate per piece", placeholder="0.00")
        due_date = st.date_input("Due date", value=None)
        submitted = st.form_submit_button("Assign", type="primary")

    if submitted:
        form = AssignmentForm(worker_id=worker.id if worker else None, quantity=quantity, rate=rate, due_date=due_date)
        try:
            assign_worker(get_store(), tussle.id, form)
        except TussleError as e:
            show_error_ui(e, context="assign_worker")
            return
        st.rerun()


def render_tussle_detail(tussle_id: str) -> None:
    loaded = fetch_scoped("tussle_detail", tussle_id, lambda: _load(tussle_id))
    if loaded is None:
        return
    tussle, allocations, assignments = loaded

    if tussle.company_id and st.button(f"← {tussle.company.name if tussle.company else 'Company'}"):
        navigate(f"/companies/{tussle.company_id}")
    st.title(tussle.name)

    overview, materials, labor = st.tabs(["Overview", "Materials", "Labor"])
    with overview:
        _overview_tab(tussle, allocations, assignments)
    with materials:
        _materials_tab(tussle, allocations)
    with labor:
        _labor_tab(tussle, assignments)
