# tests/test_orders.py
from datetime import date
from decimal import Decimal

import pytest

from backend.errors import FetchError, ValidationError, WriteError
from backend.models import Status
from backend.orders import (
    TussleForm,
    create_tussle,
    load_companies,
    load_company,
    load_dashboard,
    load_home,
    load_tussle,
    toggle_status,
)
from backend.storage import ImageStorage, Upload
from tests.conftest import FakeStore


@pytest.fixture
def shop():
    return FakeStore(
        companies=[{"id": "c1", "name": "Acme"}, {"id": "c2", "name": "Beta"}],
        tussles=[
            {"id": "t1", "company_id": "c1", "name": "Curtains", "sell_price": 100000, "status": "pending",
             "due_date": "2026-11-01", "created_at": "2026-10-01T00:00:00Z"},
            {"id": "t2", "company_id": "c1", "name": "Sofa", "sell_price": 500, "status": "completed",
             "due_date": None, "created_at": "2026-10-05T00:00:00Z"},
            {"id": "t3", "company_id": "c2", "name": "Rug", "sell_price": None, "status": "pending",
             "due_date": "2026-10-25", "created_at": "2026-09-01T00:00:00Z"},
        ],
        expense_allocations=[{"id": "a1", "tussle_id": "t1", "receipt_id": "r1", "allocated_amount": 20000}],
        work_assignments=[
            {"id": "w1", "tussle_id": "t1", "worker_id": "k1", "quantity": 50, "rate": 200, "total_pay": 10000,
             "status": "pending"},
        ],
        profiles=[
            {"id": "o1", "role": "owner", "salary": 1},
            {"id": "e1", "role": "employee", "salary": 5000},
        ],
    )


def test_load_home_embeds_companies_in_due_order(shop):
    tussles = load_home(shop)
    assert [t.id for t in tussles] == ["t3", "t1", "t2"]
    assert tussles[0].company.name == "Beta"


def test_load_dashboard(shop):
    costed, employees = load_dashboard(shop)
    assert len(costed.tussles) == 3
    assert [a.tussle_id for a in costed.allocations] == ["t1"]
    assert costed.assignments[0].total_pay == Decimal("10000.00")
    assert [p.id for p in employees] == ["e1"]


def test_load_companies(shop):
    companies, tussles = load_companies(shop)
    assert [c.name for c in companies] == ["Acme", "Beta"]
    assert sorted(t.company_id for t in tussles) == ["c1", "c1", "c2"]


def test_load_company_newest_first(shop):
    company, costed = load_company(shop, "c1")
    assert company.name == "Acme"
    assert [t.id for t in costed.tussles] == ["t2", "t1"]


def test_missing_company_and_tussle(shop):
    with pytest.raises(FetchError):
        load_company(shop, "nope")
    with pytest.raises(FetchError):
        load_tussle(shop, "nope")


def test_load_tussle(shop):
    t = load_tussle(shop, "t1")
    assert t.company.id == "c1"
    assert t.due_date == date(2026, 11, 1)


def test_create_tussle_pending(shop):
    t = create_tussle(shop, "c2", TussleForm(name=" Blinds ", sell_price="$1,500", due_date=date(2026, 12, 1)))
    collection, row = shop.inserts[-1]
    assert collection == "tussles"
    assert row["status"] == "pending"
    assert row["sell_price"] == 1500.0
    assert row["due_date"] == "2026-12-01"
    assert t.name == "Blinds" and t.status is Status.PENDING


def test_create_tussle_validates_before_writing(shop):
    with pytest.raises(ValidationError):
        create_tussle(shop, "c2", TussleForm(name="", sell_price="10"))
    with pytest.raises(ValidationError):
        create_tussle(shop, "c2", TussleForm(name="x", sell_price="-1"))
    assert shop.inserts == []


def test_create_tussle_with_image(shop, storage_client):
    storage = ImageStorage(storage_client)
    t = create_tussle(shop, "c1", TussleForm(name="x", sell_price="1"), Upload(b"img", "a.png", "image/png"), storage)
    assert t.image_url and "/tussle-images/" in t.image_url


def test_failed_insert_discards_uploaded_image(shop, storage_client):
    shop.fail_insert.add("tussles")
    storage = ImageStorage(storage_client)
    with pytest.raises(WriteError):
        create_tussle(shop, "c1", TussleForm(name="x", sell_price="1"), Upload(b"img", "a.png", "image/png"), storage)
    assert len(storage_client.removed) == 1


def test_toggle_status_round_trip(shop):
    t = load_tussle(shop, "t1")
    done = toggle_status(shop, t)
    assert done.status is Status.COMPLETED
    assert done.company == t.company
    again = toggle_status(shop, done)
    assert again.status is Status.PENDING
    assert shop.updates == [("tussles", "t1", {"status": "completed"}), ("tussles", "t1", {"status": "pending"})]
