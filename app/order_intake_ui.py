# app/order_intake_ui.py
import streamlit as st

from app.error_ui import show_error_ui
from app.state import get_store, navigate
from backend.errors import TussleError
from backend.logic.intake import order_path, resolve_company


def render_order_intake() -> None:
    """
    Sidebar "Add Order": type a client name, land on that company's page with
    the new-order form open. An existing company is reused when its name
    contains what was typed (case-insensitive); otherwise one is created.
    """
    st.markdown("#### ➕ Add Order")
    with st.form("order_intake_form"):
        client_name = st.text_input("Client name", placeholder="e.g., Acme", key="intake_client_name")
        submitted = st.form_submit_button("Continue", type="primary", use_container_width=True)

    if not submitted:
        return

    try:
        company = resolve_company(get_store(), client_name)
    except TussleError as e:
        show_error_ui(e, context="order_intake")
        return

    st.session_state.pop("intake_client_name", None)
    navigate(order_path(company))
