# backend/labor.py
"""
Workers and their piecework assignments.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

import structlog

from backend.database.store import RecordStore, eq
from backend.logic.validation import optional_text, parse_money, parse_quantity, require_text, total_pay
from backend.models import Status, WorkAssignment, Worker

log = structlog.get_logger(__name__)


def load_workers(store: RecordStore) -> List[Worker]:
    return [Worker.from_row(r) for r in store.select("workers", order="name")]


def load_roster(store: RecordStore) -> Tuple[List[Worker], List[WorkAssignment]]:
    rows = store.select("workers", relations=["work_assignments(id, tussle_id, total_pay, status)"], order="name")
    workers: List[Worker] = []
    assignments: List[WorkAssignment] = []
    for r in rows:
        w = Worker.from_row(r)
        workers.append(w)
        for a in r.get("work_assignments") or []:
            assignments.append(WorkAssignment.from_row({**a, "worker_id": w.id}))
    return workers, assignments


def load_assignments(store: RecordStore, tussle_id: str) -> List[WorkAssignment]:
    rows = store.select("work_assignments", filters=[eq("tussle_id", tussle_id)], relations=["workers(*)"])
    return [WorkAssignment.from_row(r) for r in rows]


@dataclass(frozen=True)
class WorkerForm:
    name: str
    specialty: Optional[str] = None
    phone: Optional[str] = None


def create_worker(store: RecordStore, form: WorkerForm) -> Worker:
    row = store.insert(
        "workers",
        {
            "name": require_text(form.name, "name", "Worker name"),
            "specialty": optional_text(form.specialty),
            "phone": optional_text(form.phone),
        },
    )
    return Worker.from_row(row)


@dataclass(frozen=True)
class AssignmentForm:
    worker_id: Optional[str]
    quantity: str
    rate: str
    due_date: Optional[date] = None


def assign_worker(store: RecordStore, tussle_id: str, form: AssignmentForm) -> WorkAssignment:
    """
    Total pay is fixed here as quantity x rate and never re-derived.
    """
    worker_id = require_text(form.worker_id, "worker_id", "Worker")
    quantity = parse_quantity(form.quantity)
    rate = parse_money(form.rate, "rate", "Rate per piece")
    pay = total_pay(quantity, rate)

    row = store.insert(
        "work_assignments",
        {
            "tussle_id": tussle_id,
            "worker_id": worker_id,
            "quantity": quantity,
            "rate": float(rate),
            "total_pay": float(pay),
            "due_date": form.due_date.isoformat() if form.due_date else None,
            "status": Status.PENDING.value,
        },
    )
    log.info("worker_assigned", tussle_id=tussle_id, worker_id=worker_id, total_pay=str(pay))
    return WorkAssignment.from_row(row)
