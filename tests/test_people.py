# tests/test_people.py
from datetime import date

import pytest

from backend.calendar_events import create_event, load_calendar
from backend.errors import PermissionDeniedError, ValidationError
from backend.people import load_employees
from tests.conftest import FakeStore


def test_employees_owner_only(owner_session, employee_session):
    store = FakeStore(
        profiles=[
            {"id": "e2", "role": "employee", "full_name": "Zoe"},
            {"id": "e1", "role": "employee", "full_name": "Adam"},
            {"id": "o1", "role": "owner", "full_name": "Olga"},
        ]
    )
    assert [p.full_name for p in load_employees(store, owner_session)] == ["Adam", "Zoe"]
    with pytest.raises(PermissionDeniedError):
        load_employees(store, employee_session)


def test_calendar_loads_events_and_dated_tussles():
    store = FakeStore(
        calendar_events=[{"id": "e1", "date": "2026-10-20", "title": "Fitting", "type": "meeting"}],
        companies=[{"id": "c1", "name": "Acme"}],
        tussles=[
            {"id": "t1", "company_id": "c1", "name": "Sofa", "due_date": "2026-10-22", "status": "pending"},
            {"id": "t2", "company_id": "c1", "name": "Rug", "due_date": None, "status": "pending"},
        ],
    )
    events, deadlines = load_calendar(store)
    assert events[0].title == "Fitting"
    assert [t.id for t in deadlines] == ["t1"]
    assert deadlines[0].company.name == "Acme"


def test_create_event():
    store = FakeStore()
    e = create_event(store, date(2026, 10, 30), " Delivery ", "delivery")
    assert e.title == "Delivery"
    assert e.date == date(2026, 10, 30)
    with pytest.raises(ValidationError):
        create_event(store, None, "x")
    with pytest.raises(ValidationError):
        create_event(store, date(2026, 10, 30), "")
