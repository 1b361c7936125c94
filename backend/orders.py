# backend/orders.py
"""
Companies and tussles: the queries behind Home, Dashboard, Companies,
Company detail and Tussle detail, plus the create / toggle writes.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import List, Optional, Tuple

import structlog

from backend.database.store import RecordStore, eq
from backend.errors import FetchError, StorageError, WriteError
from backend.logic.validation import optional_text, parse_money, require_text
from backend.models import (
    Company,
    ExpenseAllocation,
    Profile,
    Role,
    Status,
    Tussle,
    WorkAssignment,
    split_tussle_rows,
)
from backend.storage import ImageStorage, Upload

log = structlog.get_logger(__name__)

COST_RELATIONS = (
    "expense_allocations(id, receipt_id, allocated_amount)",
    "work_assignments(id, worker_id, quantity, rate, total_pay, status)",
)


@dataclass(frozen=True)
class CostedTussles:
    tussles: List[Tussle]
    allocations: List[ExpenseAllocation]
    assignments: List[WorkAssignment]


# -----------------------------
# Reads
# -----------------------------
def load_home(store: RecordStore) -> List[Tussle]:
    rows = store.select("tussles", relations=["companies(id, name, logo_url)"], order="due_date")
    return [Tussle.from_row(r) for r in rows]


def load_dashboard(store: RecordStore) -> Tuple[CostedTussles, List[Profile]]:
    rows = store.select("tussles", relations=COST_RELATIONS)
    employees = store.select("profiles", filters=[eq("role", Role.EMPLOYEE.value)])
    return CostedTussles(*split_tussle_rows(rows)), [Profile.from_row(r) for r in employees]


def load_companies(store: RecordStore) -> Tuple[List[Company], List[Tussle]]:
    rows = store.select("companies", relations=["tussles(id, sell_price, status)"], order="name")
    companies: List[Company] = []
    tussles: List[Tussle] = []
    for r in rows:
        c = Company.from_row(r)
        companies.append(c)
        for t in r.get("tussles") or []:
            tussles.append(Tussle.from_row({**t, "company_id": c.id}))
    return companies, tussles


def load_company(store: RecordStore, company_id: str) -> Tuple[Company, CostedTussles]:
    rows = store.select("companies", filters=[eq("id", company_id)], limit=1)
    if not rows:
        raise FetchError(f"Company {company_id} not found.", collection="companies")
    tussle_rows = store.select(
        "tussles",
        filters=[eq("company_id", company_id)],
        relations=COST_RELATIONS,
        order="created_at",
        desc=True,
    )
    return Company.from_row(rows[0]), CostedTussles(*split_tussle_rows(tussle_rows))


def load_tussle(store: RecordStore, tussle_id: str) -> Tussle:
    rows = store.select("tussles", filters=[eq("id", tussle_id)], relations=["companies(*)"], limit=1)
    if not rows:
        raise FetchError(f"Tussle {tussle_id} not found.", collection="tussles")
    return Tussle.from_row(rows[0])


# -----------------------------
# Writes
# -----------------------------
@dataclass(frozen=True)
class TussleForm:
    name: str
    sell_price: str
    due_date: Optional[date] = None
    notes: Optional[str] = None


def create_tussle(
    store: RecordStore,
    company_id: str,
    form: TussleForm,
    image: Optional[Upload] = None,
    storage: Optional[ImageStorage] = None,
) -> Tussle:
    name = require_text(form.name, "name", "Order name")
    sell_price = parse_money(form.sell_price, "sell_price", "Sell price")

    image_url = None
    if image is not None:
        if storage is None:
            raise ValueError("storage is required to upload an image")
        image_url = storage.upload_image(image.data, image.filename, image.content_type)

    payload = {
        "company_id": company_id,
        "name": name,
        "sell_price": float(sell_price),
        "due_date": form.due_date.isoformat() if form.due_date else None,
        "image_url": image_url,
        "notes": optional_text(form.notes),
        "status": Status.PENDING.value,
    }
    try:
        row = store.insert("tussles", payload)
    except WriteError:
        if image_url and storage is not None:
            _discard_upload(storage, image_url)
        raise
    return Tussle.from_row(row)


def _discard_upload(storage: ImageStorage, url: str) -> None:
    try:
        storage.delete_image(url)
    except StorageError as e:
        log.warning("orphan_image", url=url, error=e.message)


def toggle_status(store: RecordStore, tussle: Tussle) -> Tussle:
    # last write wins; no conflict detection
    new_status = tussle.status.toggled()
    row = store.update("tussles", tussle.id, {"status": new_status.value})
    log.info("tussle_status_toggled", tussle_id=tussle.id, status=new_status.value)
    return replace(Tussle.from_row(row), company=tussle.company)
