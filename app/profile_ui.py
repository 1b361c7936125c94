# app/profile_ui.py
import streamlit as st

from app.auth_supabase import supabase_logout
from app.error_ui import show_error_ui
from app.state import fetch_scoped, get_session, get_settings, get_store
from backend.auth import EmployeeForm, create_employee
from backend.database.client import get_supabase
from backend.errors import TussleError
from backend.logic.money import fmt_money
from backend.people import load_employees


def _render_employees() -> None:
    session = get_session()
    st.markdown("#### Employees")

    employees = fetch_scoped("employees", None, lambda: load_employees(get_store(), session))
    if employees:
        for p in employees:
            col_a, col_b, col_c = st.columns([3, 2, 2])
            col_a.markdown(f"**{p.display_name}**  \n@{p.username or '—'}")
            col_b.write(fmt_money(p.salary) if p.salary is not None else "—")
            col_c.write(p.id_card or "")
    elif employees is not None:
        st.info("No employees yet.")

    with st.expander("➕ Create employee"):
        with st.form("create_employee_form"):
            full_name = st.text_input("Full name")
            username = st.text_input("Username")
            password = st.text_input("Password", type="password")
            salary = st.text_input("Monthly salary", placeholder="0")
            id_card = st.text_input("ID card")
            submitted = st.form_submit_button("Create employee", type="primary")
        if submitted:
            form = EmployeeForm(full_name=full_name, username=username, password=password, salary=salary, id_card=id_card)
            settings = get_settings()
            try:
                # separate anonymous client so the owner's session is left alone
                create_employee(get_supabase(settings), get_store(), session, form, domain=settings.email_domain)
            except TussleError as e:
                show_error_ui(e, context="create_employee")
            else:
                st.rerun()


def render_profile() -> None:
    session = get_session()
    profile = session.profile
    st.title("👤 Profile")

    st.markdown(f"**Name:** {profile.display_name}")
    st.markdown(f"**Username:** {profile.username or '—'}")
    st.markdown(f"**Role:** {profile.role.value.title()}")
    if profile.id_card:
        st.markdown(f"**ID card:** {profile.id_card}")

    if st.button("Sign out", key="profile_sign_out"):
        supabase_logout()

    if session.is_owner:
        st.markdown("---")
        _render_employees()
